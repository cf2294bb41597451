import math
from fractions import Fraction

import pytest

from chartscript import values
from chartscript.errors import ArgumentError


@pytest.mark.parametrize("name", sorted(values.COLORS))
def test_named_colors(name: str) -> None:
    assert values.color(name) == values.COLORS[name]


def test_color_formats() -> None:
    assert values.color("#a1B2c3") == "#a1B2c3"
    assert values.color("#abc") == "#aabbcc"
    assert values.color("rgb(1, 2, 255)") == "#0102ff"
    assert values.color(0x521108) == "#521108"
    assert values.color(0x1000001) == "#000001"


@pytest.mark.parametrize("bad", ["invalid", "#12345", "rgb(1,2)", "rgb(256,0,0)", 1.5, None, True])
def test_color_rejects_unknown_formats(bad) -> None:
    with pytest.raises(ArgumentError):
        values.color(bad)


def test_direction_names_and_aliases() -> None:
    assert values.direction("right") == 0.0
    assert values.direction("ld") == pytest.approx(-3 * math.pi / 4)
    assert values.direction("u") == pytest.approx(math.pi / 2)
    assert values.direction("ru") == values.direction("up_right")
    assert values.direction(1.25) == 1.25


def test_direction_rejects_unknown() -> None:
    with pytest.raises(ArgumentError):
        values.direction("north")
    with pytest.raises(ArgumentError):
        values.direction([1, 0])


def test_degree_looking_angle_warns(caplog) -> None:
    with caplog.at_level("WARNING"):
        assert values.angle(90) == 90.0
    assert "degrees" in caplog.text


def test_to_beat() -> None:
    assert values.to_beat(3) == Fraction(3)
    assert values.to_beat(Fraction(1, 3)) == Fraction(1, 3)
    assert values.to_beat(0.5, warn_float=False) == Fraction(1, 2)
    with pytest.raises(ArgumentError):
        values.to_beat("1")
    with pytest.raises(ArgumentError):
        values.to_beat(True)


def test_duration_ranges() -> None:
    assert values.duration(0) == 0
    with pytest.raises(ArgumentError):
        values.duration(-1)
    with pytest.raises(ArgumentError):
        values.duration(0, positive=True)
    with pytest.raises(ArgumentError):
        values.duration("2")


def test_coordinates() -> None:
    assert values.coordinates(1, Fraction(1, 2)) == (1.0, 0.5)
    with pytest.raises(ArgumentError):
        values.coordinates("1", 2)
    with pytest.raises(ArgumentError):
        values.coordinates(1, False)

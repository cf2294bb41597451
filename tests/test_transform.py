import math
from fractions import Fraction

import numpy as np
import pytest

from chartscript.errors import ArgumentError
from chartscript.session import ChartSession
from chartscript.transform import Transform


def _setup():
    s = ChartSession("tf")
    s.offset(0.0)
    s.bpm(120)
    with s.group() as g:
        tap = s.t(30, 20)
        s.b(1)
        flick = s.f(-40, 10, 0.3)
        s.b(2)
    return s, g, tap, flick


def _angle_diff(a: float, b: float) -> float:
    return (a - b + math.pi) % (2 * math.pi) - math.pi


def test_horizontal_flip() -> None:
    s, g, tap, flick = _setup()
    with s.transform(g) as tf:
        tf.horizontal_flip()
    assert (tap["x"], tap["y"]) == (-30.0, 20.0)
    assert flick["x"] == 40.0
    assert _angle_diff(flick["angle"], math.pi - 0.3) == pytest.approx(0.0, abs=1e-9)


def test_vertical_flip() -> None:
    s, g, tap, flick = _setup()
    with s.transform(g) as tf:
        tf.vertical_flip()
    assert tap["y"] == -20.0
    assert _angle_diff(flick["angle"], -0.3) == pytest.approx(0.0, abs=1e-9)


def test_horizontal_flip_twice_is_identity() -> None:
    s, g, tap, flick = _setup()
    with s.transform(g) as tf:
        tf.horizontal_flip().horizontal_flip()
    assert (tap["x"], tap["y"]) == (30.0, 20.0)
    assert flick["angle"] == pytest.approx(0.3)


def test_rotate_and_inverse() -> None:
    s, g, tap, flick = _setup()
    a = 0.7
    with s.transform(g) as tf:
        tf.rotate(a)
    assert tap["x"] == pytest.approx(30 * math.cos(a) - 20 * math.sin(a))
    assert tap["y"] == pytest.approx(30 * math.sin(a) + 20 * math.cos(a))
    assert _angle_diff(flick["angle"], 0.3 + a) == pytest.approx(0.0, abs=1e-9)
    with s.transform(g) as tf:
        tf.rotate(-a)
    assert tap["x"] == pytest.approx(30.0)
    assert tap["y"] == pytest.approx(20.0)
    assert flick["x"] == pytest.approx(-40.0)
    assert flick["angle"] == pytest.approx(0.3)


def test_scale_and_inverse() -> None:
    s, g, tap, flick = _setup()
    with s.transform(g) as tf:
        tf.scale(2, 0.5)
    assert (tap["x"], tap["y"]) == (60.0, 10.0)
    assert math.tan(flick["angle"]) / math.tan(0.3) == pytest.approx(0.25)
    with s.transform(g) as tf:
        tf.scale(3)
    with s.transform(g) as tf:
        tf.scale(1 / 3)
    assert tap["x"] == pytest.approx(60.0)
    assert tap["y"] == pytest.approx(10.0)


def test_operation_order_matters() -> None:
    a = Transform().translate(10, 0).rotate(math.pi / 2)
    b = Transform().rotate(math.pi / 2).translate(10, 0)
    assert not np.allclose(a.matrix, b.matrix)


def test_translate_and_beat_translate() -> None:
    s, g, tap, flick = _setup()
    with s.transform(g) as tf:
        tf.translate(5, -5)
        tf.beat_translate(Fraction(3, 2))
    assert (tap["x"], tap["y"]) == (35.0, 15.0)
    assert flick["angle"] == pytest.approx(0.3)
    assert tap.beat == Fraction(3, 2)
    assert flick.beat == Fraction(5, 2)
    assert tap.time() == pytest.approx(0.75)


def test_transform_single_event_and_events_without_position() -> None:
    s, g, tap, flick = _setup()
    text = s.big_text("hello")
    with s.transform(tap) as tf:
        tf.translate(1, 1)
    assert tap["x"] == 31.0
    with s.transform([text]) as tf:
        tf.translate(1, 1).beat_translate(2)
    assert text["x"] is None
    assert text.beat == 5


def test_projective_homography_moves_direction_by_jacobian() -> None:
    tf = Transform().homography([[1, 0, 0], [0, 1, 0], [0.01, 0, 1]])
    s, g, tap, flick = _setup()
    x, y, a = flick["x"], flick["y"], flick["angle"]
    tf.apply(flick)
    d = 0.01 * x + 1
    assert flick["x"] == pytest.approx(x / d)
    assert flick["y"] == pytest.approx(y / d)
    # numerische Ableitung entlang der ursprünglichen Richtung
    eps = 1e-6
    x2, y2 = x + eps * math.cos(a), y + eps * math.sin(a)
    d2 = 0.01 * x2 + 1
    expected = math.atan2(y2 / d2 - y / d, x2 / d2 - x / d)
    assert _angle_diff(flick["angle"], expected) == pytest.approx(0.0, abs=1e-5)


def test_degenerate_division_follows_float_semantics() -> None:
    tf = Transform().homography([[1, 0, 0], [0, 1, 0], [0, 0, 0]])
    s, g, tap, flick = _setup()
    with np.errstate(divide="ignore", invalid="ignore"):
        tf.apply(tap)
    assert math.isinf(tap["x"]) or math.isnan(tap["x"])


def test_invalid_arguments() -> None:
    tf = Transform()
    with pytest.raises(ArgumentError):
        tf.translate("1", 0)
    with pytest.raises(ArgumentError):
        tf.rotate(None)
    with pytest.raises(ArgumentError):
        tf.scale(1, "2")
    with pytest.raises(ArgumentError):
        tf.homography([[1, 0], [0, 1]])
    with pytest.raises(ArgumentError):
        tf.beat_translate("1")

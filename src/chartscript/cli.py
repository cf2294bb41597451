from __future__ import annotations
import argparse, logging, pathlib, runpy, sys, traceback
from . import write
from .config import get_section, load_config
from .project import Project

def main(argv=None):
    p = argparse.ArgumentParser(description="chart script -> chart JSON")
    p.add_argument("--in", dest="infile", required=True, help="Chart script (.py), bekommt 'project' als globale Variable")
    p.add_argument("--out-dir", dest="out_dir", default=None, help="Output directory (default: <script dir>/build)")
    p.add_argument("--config", dest="config", default=None, help="YAML config (defaults applied if omitted)")
    p.add_argument("--production", action="store_true", help="Omit live-reload integration metadata")
    p.add_argument("--check", action="store_true", help="Report notes outside the playfield")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(name)s] %(message)s")

    in_path = pathlib.Path(args.infile).expanduser().resolve()
    if not in_path.exists():
        print(f"[cli] ERROR: Input not found: {in_path}", file=sys.stderr)
        sys.exit(1)

    cfg = load_config(args.config)
    print(f"[cli] infile = {in_path}")

    project = Project(cfg)
    try:
        table = project.build(
            lambda pr: runpy.run_path(str(in_path), init_globals={"project": pr}),
            production=args.production or None,
        )
    except Exception:
        traceback.print_exc()
        sys.exit(2)

    if args.check:
        for session in project.charts.values():
            session.check()

    out_dir = pathlib.Path(args.out_dir).expanduser().resolve() if args.out_dir else in_path.parent / "build"
    indent = get_section(cfg, "output").get("indent")
    written = write.write_charts(table, str(out_dir), indent=indent)
    for name, path in written.items():
        print(f"[cli] {name:<12} -> {path}")

    if not written:
        print("[cli] WARNING: no charts defined (use project.open(name) in the script).")

    total_events = sum(len(s.events) for s in project.charts.values())
    print(f"[cli] Done. charts={len(project.charts)} events={total_events}")

if __name__ == "__main__":
    main()

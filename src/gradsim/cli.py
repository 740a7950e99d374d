from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from . import config
from .catalog import Catalog, load_catalog
from .classify import suggest_strategy
from .errors import CourseNotFoundError, RequirementDataError
from .evaluate import AreaResult, Report
from .models import Bucket, TrackType
from .requirements import RequirementSpec, load_requirements
from .state import (
    PlannerState,
    add_course,
    change_cohort,
    change_track,
    change_track_type,
    evaluate_state,
    export_snapshot,
    import_pasted_text,
    load_state,
    parse_snapshot,
    reclassify_course,
    remove_course,
    reset,
    save_state,
)

logger = logging.getLogger(__name__)


def _fmt(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else f"{n:g}"


def _badge(ok: bool) -> str:
    return "OK" if ok else "missing"


def _line(title: str, have: float, need: float, ok: bool) -> str:
    return f"  {title}: {_fmt(have)} / {_fmt(need)} [{_badge(ok)}]"


def _area_lines(title: str, area: AreaResult) -> list[str]:
    out = [_line(title, area.credits, area.need, area.ok)]
    if area.missing:
        out.append(f"      required, not taken: {', '.join(area.missing)}")
    if area.any_of is not None:
        out.append(f"      one of {' / '.join(area.any_of)} [{_badge(bool(area.any_ok))}]")
    return out


def format_report(report: Report, spec: RequirementSpec) -> str:
    cohort = spec.cohort(report.cohort_id)
    track = spec.track(report.track_id)
    t = report.totals
    lines = [
        f"Cohort {cohort.label} / track {track.label} ({report.track_type})",
        _line("Total", t.total, t.total_min, t.total_ok),
        _line("Basic", t.basic, t.basic_min, t.basic_ok),
        _line("Advanced", t.advanced, t.advanced_min, t.advanced_ok),
        "Basic",
    ]
    m = report.math
    lines.append(_line("Math", m.credits, m.need, m.ok))
    if m.missing:
        lines.append(f"      required, not taken: {', '.join(m.missing)}")
    lines.append(
        f"      elective group: {_fmt(m.group_credits)} / {_fmt(m.group_need)} [{_badge(m.group_ok)}]"
    )
    s = report.science
    lines.append(_line("Science", s.total, s.need, s.ok))
    for label, sub in (("physics", s.physics), ("chemistry", s.chem), ("biology", s.bio)):
        lines.append(f"      {label}: {_fmt(sub.credits)} credits, theory+lab [{_badge(sub.ok)}]")
    if s.adds:
        lines.append(f"      track additions {', '.join(s.adds)} [{_badge(s.adds_ok)}]")
    lines += _area_lines("Engineering core", report.eng_core)
    lines += _area_lines("Engineering elective", report.eng_select)
    lines += _area_lines("Writing / HSS", report.hss)
    lines += _area_lines("English", report.english)
    if report.arts_pe is not None:
        lines += _area_lines("Arts / PE", report.arts_pe)
    lines.append("Advanced")
    lines.append(_line("Track", report.track.credits, report.track.need, report.track.ok))
    lines.append(_line("Non-track", report.non_track.credits, report.non_track.need, report.non_track.ok))
    lines.append(_line("UGRP", report.ugrp.credits, report.ugrp.need, report.ugrp.ok))
    lines.append(_line("Internship", report.intern.credits, report.intern.need, report.intern.ok))
    x = report.extra_track
    if x is not None:
        lines.append(f"  Track checklist [{_badge(x.ok)}]")
        lines.append(f"      all of {', '.join(x.must_all)} [{_badge(x.must_all_ok)}]")
        if x.must_one:
            lines.append(f"      one of {' / '.join(x.must_one)} [{_badge(x.must_one_ok)}]")
    if report.satisfied:
        lines.append("All graduation requirements are met.")
    else:
        lines.append(f"Not yet met: {', '.join(report.unmet())}")
    return "\n".join(lines)


def _load_context(args: argparse.Namespace) -> tuple[RequirementSpec, Catalog, PlannerState]:
    spec = load_requirements(Path(args.requirements) if args.requirements else config.requirements_path())
    catalog = load_catalog(Path(args.catalog) if args.catalog else config.catalog_path())
    state, notice = load_state(args.state_path, spec)
    if notice:
        print(f"note: {notice}", file=sys.stderr)
    return spec, catalog, state


def _read_text(src: str) -> str:
    if src == "-":
        return sys.stdin.read()
    return Path(src).read_text(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gradsim", description="Check completed courses against graduation requirements"
    )
    ap.add_argument("--state", default=None, help="State file (default: $GRADSIM_HOME/gradsim_state_v1.json)")
    ap.add_argument("--requirements", default=None, help="Requirement specification JSON")
    ap.add_argument("--catalog", default=None, help="Course catalog JSON")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="One-line progress summary")
    p = sub.add_parser("report", help="Full requirement breakdown")
    p.add_argument("--json", action="store_true", help="Print the report as JSON")
    sub.add_parser("list", help="List held courses")
    sub.add_parser("buckets", help="List bucket ids")

    p = sub.add_parser("add", help="Add a course")
    p.add_argument("code")
    p.add_argument("--name", default="")
    p.add_argument("--credits", type=float, default=None)
    p.add_argument("--bucket", choices=[b.value for b in Bucket], default=None)

    p = sub.add_parser("remove", help="Remove a course by id")
    p.add_argument("id")

    p = sub.add_parser("reclassify", help="Move a course to another bucket")
    p.add_argument("id")
    p.add_argument("bucket", choices=[b.value for b in Bucket])

    p = sub.add_parser("cohort", help="Select the cohort")
    p.add_argument("id")
    p = sub.add_parser("track", help="Select the track")
    p.add_argument("id")
    p = sub.add_parser("track-type", help="Declare the track as major or minor")
    p.add_argument("type", choices=[t.value for t in TrackType])

    p = sub.add_parser("paste", help="Import rows of a pasted transcript table")
    p.add_argument("file", nargs="?", default="-", help="Text file, or - for stdin")
    p = sub.add_parser("import-pdf", help="Import rows of a transcript PDF")
    p.add_argument("pdf")

    p = sub.add_parser("classify", help="Show the suggested bucket for a code")
    p.add_argument("code")
    p.add_argument("name", nargs="?", default="")
    p = sub.add_parser("search", help="Search the course catalog")
    p.add_argument("query")

    p = sub.add_parser("export", help="Write a snapshot")
    p.add_argument("file", nargs="?", default=None)
    p = sub.add_parser("import", help="Replace the state with a snapshot")
    p.add_argument("file")
    sub.add_parser("reset", help="Forget all stored state")
    return ap


def run(args: argparse.Namespace) -> int:
    spec, catalog, state = _load_context(args)
    cmd = args.command
    dirty = False

    if cmd == "status":
        r = evaluate_state(state, spec)
        print(
            f"{len(state.courses)} courses, {_fmt(r.totals.total)} / {_fmt(r.totals.total_min)} credits, "
            f"{'requirements met' if r.satisfied else f'{len(r.unmet())} requirement(s) open'}"
        )
    elif cmd == "report":
        r = evaluate_state(state, spec)
        if args.json:
            print(json.dumps(r.to_dict(), ensure_ascii=False, indent=2))
        else:
            print(format_report(r, spec))
    elif cmd == "list":
        if not state.courses:
            print(" [no courses]")
        for c in state.courses:
            print(f"  {c.id}  {c.code} — {c.name} — {_fmt(c.credits)} — {c.bucket.label}")
    elif cmd == "buckets":
        for b in Bucket:
            print(f"  {b.value:<24} {b.label}")
    elif cmd == "add":
        c = add_course(state, spec, args.code, args.name, args.credits, args.bucket, catalog=catalog)
        print(f"Added {c.code} ({_fmt(c.credits)} credits) to {c.bucket.value} [{c.id}]")
        dirty = True
    elif cmd == "remove":
        c = remove_course(state, args.id)
        print(f"Removed {c.code}")
        dirty = True
    elif cmd == "reclassify":
        c = reclassify_course(state, args.id, Bucket(args.bucket))
        print(f"{c.code} -> {c.bucket.value}")
        dirty = True
    elif cmd == "cohort":
        if not spec.has_cohort(args.id):
            print(f"Unknown cohort {args.id!r}; choose one of: {', '.join(c.id for c in spec.cohorts)}")
            return 1
        change_cohort(state, args.id)
        dirty = True
    elif cmd == "track":
        if not spec.has_track(args.id):
            print(f"Unknown track {args.id!r}; choose one of: {', '.join(t.id for t in spec.tracks)}")
            return 1
        for c in change_track(state, spec, args.id):
            print(f"  {c.code} -> {c.bucket.value}")
        dirty = True
    elif cmd == "track-type":
        change_track_type(state, TrackType(args.type))
        dirty = True
    elif cmd in ("paste", "import-pdf"):
        if cmd == "paste":
            try:
                text = _read_text(args.file)
            except (OSError, UnicodeDecodeError) as exc:
                print(f"Import failed: {exc}")
                return 1
        else:
            from .pdf_rows import pdf_to_text

            text = pdf_to_text(Path(args.pdf))
        res = import_pasted_text(state, spec, text)
        print(f"Recognized {res.parsed} lines / added {res.added} courses / skipped {res.skipped}")
        for c in res.courses:
            print(f"  {c.code} — {c.name} — {_fmt(c.credits)} — {c.bucket.value}")
        dirty = res.added > 0
    elif cmd == "classify":
        bucket, strategy = suggest_strategy(args.code, args.name, spec.track(state.track_id))
        print(f"{args.code}: {bucket.value} ({bucket.label}) via {strategy}")
    elif cmd == "search":
        found = catalog.search(args.query)
        if not found:
            print(" [no matches]")
        for e in found:
            print(f"  {e.code:<10} {e.name} ({_fmt(e.credits)})")
    elif cmd == "export":
        doc = json.dumps(export_snapshot(state), ensure_ascii=False, indent=2)
        if args.file:
            Path(args.file).write_text(doc + "\n", encoding="utf-8")
            print(f"Exported {len(state.courses)} courses to {args.file}")
        else:
            print(doc)
    elif cmd == "import":
        try:
            raw = Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Import failed: {exc}")
            return 1
        imported, error = parse_snapshot(raw, spec, base=state)
        if imported is None:
            print(f"Import failed: {error}. Choose a file written by 'gradsim export'.")
            return 1
        state = imported
        print(f"Imported {len(state.courses)} courses")
        dirty = True
    elif cmd == "reset":
        reset(state)
        print("State reset")
        dirty = True

    if dirty:
        save_state(state, args.state_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.state_path = Path(args.state) if args.state else config.state_path()
    try:
        return run(args)
    except RequirementDataError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except CourseNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

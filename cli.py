import argparse
import datetime
import json
import sys
from typing import Optional

from config import configure_logging, load_settings
from cycling_service import UnknownPatternError, list_patterns
from db import HistoryRepository
from engine_service import WellnessEngine
from history_service import NO_DATA


def _date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError("dates must be in YYYY-MM-DD format")


def _override(value: str) -> tuple[int, str]:
    index, sep, day_type = value.partition("=")
    if not sep or not index.strip().isdigit():
        raise argparse.ArgumentTypeError("overrides look like 3=refeed")
    return int(index), day_type.strip()


def _emit(data) -> None:
    print(json.dumps(data, indent=2))


def build_engine(db_path: Optional[str], yaml_path: Optional[str]) -> WellnessEngine:
    settings = load_settings(yaml_path)
    configure_logging(settings.log_level)
    db_path = db_path or settings.db_path
    return WellnessEngine(
        settings, store_factory=lambda kind: HistoryRepository(db_path, kind)
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wellness scoring and planning engine")
    parser.add_argument("--db", help="SQLite file; defaults to the db_path setting")
    parser.add_argument("--yaml", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    dl = sub.add_parser("deload", help="assess training fatigue")
    dl.add_argument("--weeks", type=int, dest="weeks_since_deload")
    dl.add_argument("--sleep", type=float, dest="sleep_quality")
    dl.add_argument("--trend", dest="performance_trend")
    dl.add_argument("--mood", type=float)
    dl.add_argument("--soreness", type=float)
    dl.add_argument("--motivation", type=float)

    plan = sub.add_parser("plan", help="generate a periodized training plan")
    plan.add_argument("--goal", default="general")
    plan.add_argument("--level", type=int, default=3)
    plan.add_argument("--days", type=int, default=4)
    plan.add_argument("--weeks", type=int, default=12)
    plan.add_argument("--equipment", nargs="*", default=[])
    plan.add_argument("--injuries", default="")

    cyc = sub.add_parser("cycle", help="build a calorie-cycling week")
    cyc.add_argument("--pattern", default="standard")
    cyc.add_argument("--baseline", type=int, required=True)
    cyc.add_argument("--override", type=_override, action="append", default=[])
    cyc.add_argument("--maintenance", type=int)
    cyc.add_argument("--week-start", type=_date)

    sub.add_parser("patterns", help="list calorie-cycling patterns")

    ref = sub.add_parser("refeed", help="recommend a refeed cadence")
    ref.add_argument("--deficit", type=float, required=True)
    ref.add_argument("--maintenance", type=int)

    hist = sub.add_parser("history", help="query or record daily history")
    hist.add_argument("action", choices=["put", "delete", "list", "average", "trend", "weekly"])
    hist.add_argument("--kind", default="fitness")
    hist.add_argument("--date", type=_date)
    hist.add_argument("--record", help="JSON object to store with put")
    hist.add_argument("--days", type=int)
    hist.add_argument("--field", default="score")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    engine = build_engine(args.db, args.yaml)

    if args.cmd == "deload":
        fields = (
            "weeks_since_deload",
            "sleep_quality",
            "performance_trend",
            "mood",
            "soreness",
            "motivation",
        )
        data = {f: getattr(args, f) for f in fields if getattr(args, f) is not None}
        _emit(engine.deload(data).to_dict())
    elif args.cmd == "plan":
        request = {
            "goal": args.goal,
            "experience_level": args.level,
            "days_per_week": args.days,
            "weeks_duration": args.weeks,
            "equipment": args.equipment,
            "injuries": args.injuries,
        }
        try:
            _emit(engine.training_plan(request).to_dict())
        except ValueError as e:
            parser.error(str(e))
    elif args.cmd == "cycle":
        try:
            schedule = engine.cycling_schedule(
                args.pattern,
                args.baseline,
                dict(args.override),
                args.maintenance,
                args.week_start,
            )
        except UnknownPatternError as e:
            parser.error(str(e.args[0]))
        except ValueError as e:
            parser.error(str(e))
        _emit(schedule.to_dict())
    elif args.cmd == "patterns":
        _emit(list_patterns())
    elif args.cmd == "refeed":
        try:
            _emit(engine.refeed(args.deficit, args.maintenance).to_dict())
        except ValueError as e:
            parser.error(str(e))
    elif args.cmd == "history":
        run_history(parser, engine, args)


def run_history(parser: argparse.ArgumentParser, engine: WellnessEngine, args) -> None:
    history = engine.history(args.kind)
    day = args.date or datetime.date.today()
    if args.action == "put":
        if not args.record:
            parser.error("--record is required for put")
        try:
            record = json.loads(args.record)
            saved = history.save(day, record)
        except ValueError as e:
            parser.error(str(e))
        _emit({"kind": args.kind, "date": saved})
    elif args.action == "delete":
        if args.date is None:
            parser.error("--date is required for delete")
        try:
            deleted = history.delete(args.date)
        except ValueError as e:
            parser.error(str(e))
        _emit({"kind": args.kind, "date": deleted, "status": "deleted"})
    elif args.action == "list":
        _emit([e.to_dict() for e in history.window(day, args.days)])
    elif args.action == "average":
        value = history.average(day, args.days, args.field)
        if value is NO_DATA:
            _emit({"has_data": False, "average": None})
        else:
            _emit({"has_data": True, "average": value})
    elif args.action == "trend":
        trend = history.trend(day, args.days, args.field)
        if trend is NO_DATA:
            _emit({"has_data": False})
        else:
            _emit({"has_data": True, **trend.to_dict()})
    else:
        _emit(history.weekly_series(day, args.field))


if __name__ == "__main__":
    main(sys.argv[1:])

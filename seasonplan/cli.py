#!/usr/bin/env python3
"""
SEASON PLAN - CLI Interface
===========================
Command-line tool for inspecting and updating seasonal work plans.

Usage:
    seasonplan import season.json
    seasonplan list
    seasonplan show ss24
    seasonplan timeline ss24 --on-unresolved error
    seasonplan can-edit ss24 B --role user --department Sourcing
    seasonplan complete ss24 B 2024-01-09 --role user --department Sourcing
    seasonplan remark ss24 B "fabric delayed" --role planner
    seasonplan set-status ss24 On-Hold --role admin
"""

import argparse
import json
import sys
from datetime import datetime

from .errors import DependencyUnresolvedError, PersistenceError
from .manager import EditOutcome, SeasonSession
from .schema import Actor, Role, SeasonStatus
from .store import FileSeasonStore
from .timeline import UnresolvedPolicy, format_span

DATE_FORMATS = ("%Y-%m-%d", "%d-%b-%y")


def parse_date(value: str) -> datetime:
    """YYYY-MM-DD or DD-Mon-YY"""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise argparse.ArgumentTypeError(f"Invalid date: {value} (use YYYY-MM-DD or DD-Mon-YY)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seasonplan",
        description="Season Plan - seasonal task timeline and permissions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  seasonplan import season.json                  Import a season + tasks document
  seasonplan list                                List stored seasons
  seasonplan show ss24                           Show tasks, states and timeline
  seasonplan can-edit ss24 B --role user --department Sourcing
  seasonplan complete ss24 B 2024-01-09 --role planner
  seasonplan set-status ss24 Closed --role admin
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_dir(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--dir", default=".seasons", help="Seasons directory")

    def add_actor(sub: argparse.ArgumentParser, department: bool = True) -> None:
        sub.add_argument("--role", type=Role.parse, default=Role.USER, help="admin, planner or user")
        if department:
            sub.add_argument("--department", help="Actor department")
        sub.add_argument("--name", default="cli", help="Actor name")

    def add_policy(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--on-unresolved",
            choices=[p.value for p in UnresolvedPolicy],
            default=UnresolvedPolicy.WARN.value,
            help="Handling of tasks whose timeline cannot be resolved"
        )

    # IMPORT command
    import_parser = subparsers.add_parser("import", help="Import season JSON document")
    import_parser.add_argument("file", help="JSON file with season and tasks")
    add_dir(import_parser)

    # LIST command
    list_parser = subparsers.add_parser("list", help="List stored seasons")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    add_dir(list_parser)

    # SHOW command
    show_parser = subparsers.add_parser("show", help="Show season status report")
    show_parser.add_argument("season_id", help="Season ID")
    show_parser.add_argument("--json", action="store_true", help="Output as JSON")
    add_dir(show_parser)
    add_policy(show_parser)

    # TIMELINE command
    timeline_parser = subparsers.add_parser("timeline", help="Show reference timeline")
    timeline_parser.add_argument("season_id", help="Season ID")
    add_dir(timeline_parser)
    add_policy(timeline_parser)

    # CAN-EDIT command
    can_edit_parser = subparsers.add_parser("can-edit", help="Check edit permission")
    can_edit_parser.add_argument("season_id", help="Season ID")
    can_edit_parser.add_argument("task", help="Task order code or ID")
    add_dir(can_edit_parser)
    add_actor(can_edit_parser)

    # COMPLETE command
    complete_parser = subparsers.add_parser("complete", help="Set actual completion date")
    complete_parser.add_argument("season_id", help="Season ID")
    complete_parser.add_argument("task", help="Task order code or ID")
    complete_parser.add_argument("date", type=parse_date, help="Completion date")
    add_dir(complete_parser)
    add_actor(complete_parser)

    # REMARK command
    remark_parser = subparsers.add_parser("remark", help="Set task remarks")
    remark_parser.add_argument("season_id", help="Season ID")
    remark_parser.add_argument("task", help="Task order code or ID")
    remark_parser.add_argument("text", help="Remarks text")
    add_dir(remark_parser)
    add_actor(remark_parser)

    # SET-STATUS command
    status_parser = subparsers.add_parser("set-status", help="Change season status")
    status_parser.add_argument("season_id", help="Season ID")
    status_parser.add_argument("status", choices=[s.value for s in SeasonStatus], help="New status")
    add_dir(status_parser)
    add_actor(status_parser, department=False)

    return parser


def _actor(args: argparse.Namespace) -> Actor:
    return Actor(name=args.name, role=args.role, department=getattr(args, "department", None))


def _print_outcome(outcome: EditOutcome) -> int:
    icons = {"applied": "✅", "unchanged": "➖", "rejected": "⛔", "failed": "❌"}
    code = f" ({outcome.code})" if outcome.code else ""
    print(f"{icons[outcome.kind.value]} {outcome.kind.value}{code}: {outcome.message or 'No changes.'}")
    if outcome.warning:
        print(f"⚠️ {outcome.warning}")
    return 0 if outcome.ok else 1


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    store = FileSeasonStore(data_dir=args.dir)

    if args.command == "import":
        try:
            with open(args.file, 'r') as f:
                data = json.load(f)
            snapshot = store.import_snapshot(data)
        except (OSError, ValueError) as e:
            print(f"❌ Could not read {args.file}: {e}")
            return 1
        except PersistenceError as e:
            print(f"❌ {e.message}")
            return 1
        print(f"✅ Imported: {snapshot.season.id}")
        print(f"   Name: {snapshot.season.name}")
        print(f"   Tasks: {len(snapshot.tasks)}")
        return 0

    if args.command == "list":
        seasons = store.list_seasons()
        if args.json:
            print(json.dumps(seasons, indent=2))
            return 0
        if not seasons:
            print("No seasons found")
            return 0
        print("📋 Seasons:")
        print("-" * 60)
        for s in seasons:
            print(f"  [{s['id']}] {s['name']} ({s['status']})")
            print(f"      Tasks: {s['completed']}/{s['tasks']} completed | Updated: {s['updated_at']}")
        print("-" * 60)
        return 0

    session = SeasonSession(store, on_unresolved=getattr(args, "on_unresolved", UnresolvedPolicy.WARN))
    try:
        session.load(args.season_id)
    except PersistenceError as e:
        print(f"❌ {e.message}")
        return 1
    except DependencyUnresolvedError as e:
        print(f"❌ {e.message}")
        return 1

    if args.command == "show":
        if args.json:
            print(json.dumps(session.snapshot.to_wire(), indent=2, default=str))
        else:
            print(session.get_status_report())
        return 0

    if args.command == "timeline":
        timeline = session.reference_timeline
        for task in session.ordered_tasks:
            print(f"  [{task.order}] {format_span(timeline.get(task.id))}  {task.name}")
        if not timeline.is_complete:
            print(f"⚠️ {len(timeline.unresolved)} task(s) without a reference timeline")
        return 0

    if args.command == "set-status":
        return _print_outcome(session.change_status(_actor(args), args.status))

    task = session.get_task(args.task)
    if task is None:
        print(f"❌ Task not found: {args.task}")
        return 1

    if args.command == "can-edit":
        decision = session.can_edit(_actor(args), task)
        if decision.allowed:
            print(f"✅ [{task.order}] {task.name} is editable")
            return 0
        print(f"⛔ [{task.order}] {task.name}: {decision.reason.value} - {decision.message}")
        return 1

    if args.command == "complete":
        return _print_outcome(session.propose_edit(_actor(args), task.id, actual_completion=args.date))

    if args.command == "remark":
        return _print_outcome(session.propose_edit(_actor(args), task.id, remarks=args.text))

    return 1


if __name__ == "__main__":
    sys.exit(main())

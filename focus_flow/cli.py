"""Command line entry point: the tray app plus a few maintenance commands."""
from __future__ import annotations

import argparse
import datetime
import os
from typing import Optional

from . import __version__
from .custom import add_custom_exercise, custom_exercises, delete_custom_exercise
from .errors import ScheduleError, TransferError, ValidationError
from .exercises import (
    EXTRA_EXERCISES,
    ZONE_LABELS,
    ZONES,
    disable_extra_exercises,
    enable_extra_exercises,
    enabled_extra_ids,
    extra_ids_by_zone,
)
from .ledger import CompletionLedger
from .schedule import (
    NotificationScheduleConfig,
    WorkScheduleConfig,
    active_work_schedule,
    format_interval,
    format_schedule_range,
    format_time_until,
    is_active_session,
    next_session,
    save_notification_schedule,
    save_work_schedule,
    scheduled_sessions,
    time_until_next,
)
from .stats import (
    format_seconds_to_minutes,
    least_worked_zones,
    load_history,
    week_date_range_label,
    weekly_daily_counts,
    weekly_session_count,
    weekly_total_seconds,
    weekly_zone_distribution,
)
from .storage import JsonFileStore, Store, load_advanced_settings, update_advanced_settings
from .transfer import export_csv, export_json, import_json


def _hhmm(value: str) -> tuple[int, int]:
    try:
        h, m = value.strip().split(":")
        h, m = int(h), int(m)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected HH:MM, got {value!r}")
    if not (0 <= h < 24 and 0 <= m < 60):
        raise argparse.ArgumentTypeError(f"time out of range: {value!r}")
    return h, m


def _ids(value: str) -> list[int]:
    try:
        return [int(v) for v in value.split(",") if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated ids, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="focus-flow", description="Focus Flow active-pause reminder")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--data-dir", help="Where settings and history are kept")
    p.add_argument("--test", action="store_true", help="Use short intervals for testing")
    sub = p.add_subparsers(dest="command")

    sub.add_parser("run", help="Start the tray app (default)")

    sp = sub.add_parser("schedule", help="Show or change the work schedule")
    sp.add_argument("--set", nargs=3, metavar=("START", "END", "COUNT"),
                    help="e.g. --set 09:00 17:00 8")
    sp.add_argument("--quiet-hours", nargs=3, metavar=("START", "END", "MAX"),
                    help="Only remind between START and END, at most MAX a day")
    sp.add_argument("--no-quiet-hours", action="store_true")
    group = sp.add_mutually_exclusive_group()
    group.add_argument("--enable", action="store_true", help="Use the custom schedule")
    group.add_argument("--disable", action="store_true", help="Back to the default schedule")

    sub.add_parser("next", help="When is the next session?")
    sub.add_parser("summary", help="This week's summary")

    ep = sub.add_parser("export", help="Export history")
    ep.add_argument("format", choices=["json", "csv"])
    ep.add_argument("--out", default=".", help="Target directory")

    ip = sub.add_parser("import", help="Import a JSON export")
    ip.add_argument("file")

    xp = sub.add_parser("extras", help="Manage the extra exercise pack")
    xp.add_argument("--enable", type=_ids, metavar="IDS")
    xp.add_argument("--disable", type=_ids, metavar="IDS")
    xp.add_argument("--zone", choices=ZONES, help="Apply --enable/--disable to a whole zone")

    cp = sub.add_parser("custom", help="Manage your own exercises")
    cp.add_argument("--add", action="store_true")
    cp.add_argument("--name")
    cp.add_argument("--zone", choices=ZONES)
    cp.add_argument("--posture", choices=["sitting", "standing"])
    cp.add_argument("--duration", type=int)
    cp.add_argument("--movement")
    cp.add_argument("--objective")
    cp.add_argument("--delete", metavar="ID")

    ic = sub.add_parser("icon", help="Write icon.ico and icon.png")
    ic.add_argument("--out", default=".")
    return p


# ─── Commands ────────────────────────────────────────────────
def cmd_run(store: Store, args: argparse.Namespace) -> int:
    from .app import FocusFlowApp

    if args.test:
        print("\n  [!] TEST MODE: Using short intervals")
        print("      Poll: 5 s, exercises: 10 s\n")
    FocusFlowApp(store, test_mode=args.test).run()
    return 0


def cmd_schedule(store: Store, args: argparse.Namespace) -> int:
    try:
        if args.set:
            (sh, sm), (eh, em) = _hhmm(args.set[0]), _hhmm(args.set[1])
            save_work_schedule(store, WorkScheduleConfig(sh, sm, eh, em, int(args.set[2])))
            print("  [OK] Work schedule saved.")
        if args.quiet_hours:
            (sh, sm), (eh, em) = _hhmm(args.quiet_hours[0]), _hhmm(args.quiet_hours[1])
            save_notification_schedule(store, NotificationScheduleConfig(
                True, sh, sm, eh, em, int(args.quiet_hours[2])))
            print("  [OK] Notification hours saved.")
        if args.no_quiet_hours:
            current = load_advanced_settings(store)["notificationSchedule"]
            save_notification_schedule(store, NotificationScheduleConfig.from_dict(
                dict(current, enabled=False)))
    except (ScheduleError, argparse.ArgumentTypeError) as e:
        for msg in getattr(e, "errors", [str(e)]):
            print(f"  [!] {msg}")
        return 1
    except ValueError as e:
        print(f"  [!] {e}")
        return 1

    if args.enable:
        update_advanced_settings(store, enabled=True)
    elif args.disable:
        update_advanced_settings(store, enabled=False)

    advanced = load_advanced_settings(store)
    sessions = scheduled_sessions(advanced)
    mode = "custom" if advanced.get("enabled") else "default"
    print(f"  Schedule ({mode}): {format_schedule_range(sessions)}, "
          f"{len(sessions)} sessions, {format_interval(active_work_schedule(advanced))}")
    for s in sessions:
        print(f"    {s.id:>2d}  {s.label}")
    return 0


def cmd_next(store: Store, args: argparse.Namespace) -> int:
    now = datetime.datetime.now()
    sessions = scheduled_sessions(load_advanced_settings(store))
    ledger = CompletionLedger(store, now.date())
    if is_active_session(sessions, ledger, now):
        print("  Session time now!")
    upcoming = next_session(sessions, now)
    until = time_until_next(sessions, now)
    if upcoming is None or until is None:
        print("  No sessions scheduled.")
        return 0
    print(f"  Next session: {upcoming.label} (in {format_time_until(until)})")
    print(f"  Completed today: {ledger.completed_count()}/{len(sessions)}")
    return 0


def cmd_summary(store: Store, args: argparse.Namespace) -> int:
    today = datetime.date.today()
    history = load_history(store)
    print(f"  Week {week_date_range_label(today)}")
    print(f"  Sessions: {weekly_session_count(history, today)}   "
          f"Active time: {format_seconds_to_minutes(weekly_total_seconds(history, today))}")
    print("  " + "  ".join(f"{d['day']}:{d['count']}{'*' if d['isToday'] else ''}"
                           for d in weekly_daily_counts(history, today)))
    dist = weekly_zone_distribution(history, today)
    for zone in ZONES:
        print(f"    {ZONE_LABELS[zone]:<8s} {dist[zone]['count']:>3d}  "
              f"{format_seconds_to_minutes(dist[zone]['totalSeconds'])}")
    least = least_worked_zones(dist)
    print(f"  Least worked: {ZONE_LABELS[least[0]]}")
    return 0


def cmd_export(store: Store, args: argparse.Namespace) -> int:
    try:
        path = export_json(store, args.out) if args.format == "json" else export_csv(store, args.out)
    except TransferError as e:
        print(f"  [!] {e}")
        return 1
    print(f"  [OK] Exported to {path}")
    return 0


def cmd_import(store: Store, args: argparse.Namespace) -> int:
    result = import_json(store, args.file)
    if not result.success:
        print(f"  [!] {result.message}")
        return 1
    print(f"  [OK] {result.message}")
    print(f"      Exercises: {result.exercises_imported}   "
          f"Extra: {result.extra_exercises_imported}   "
          f"Settings: {'yes' if result.settings_imported else 'no'}")
    return 0


def cmd_extras(store: Store, args: argparse.Namespace) -> int:
    if args.zone and not (args.enable or args.disable):
        args.enable = extra_ids_by_zone(args.zone)
    if args.enable:
        enable_extra_exercises(store, args.enable)
    if args.disable:
        disable_extra_exercises(store, args.disable)
    enabled = set(enabled_extra_ids(store))
    print(f"  {len(enabled)} extra exercises active, {len(EXTRA_EXERCISES)} available")
    for e in EXTRA_EXERCISES:
        if args.zone and e.zone != args.zone:
            continue
        mark = "x" if e.id in enabled else " "
        print(f"    [{mark}] {e.id:>3d}  {e.name} ({ZONE_LABELS[e.zone]}, {e.duration_seconds}s)")
    return 0


def cmd_custom(store: Store, args: argparse.Namespace) -> int:
    if args.add:
        fields = {
            "name": args.name or "",
            "zone": args.zone,
            "posture": args.posture,
            "durationSeconds": args.duration,
            "movement": args.movement or "",
            "objective": args.objective or "",
        }
        try:
            record = add_custom_exercise(store, fields)
        except ValidationError as e:
            for msg in e.errors:
                print(f"  [!] {msg}")
            return 1
        print(f"  [OK] Added {record['name']} ({record['id']})")
    if args.delete:
        if not delete_custom_exercise(store, args.delete):
            print(f"  [!] No custom exercise with id {args.delete}")
            return 1
        print(f"  [OK] Deleted {args.delete}")
    for c in custom_exercises(store):
        print(f"    {c['id']}  {c['name']} ({ZONE_LABELS.get(c['zone'], c['zone'])}, "
              f"{c['durationSeconds']}s)")
    return 0


def cmd_icon(store: Store, args: argparse.Namespace) -> int:
    from .icon import generate_icon

    for path in generate_icon(args.out):
        print(f"  [OK] Wrote {path}")
    return 0


COMMANDS = {
    "run": cmd_run,
    "schedule": cmd_schedule,
    "next": cmd_next,
    "summary": cmd_summary,
    "export": cmd_export,
    "import": cmd_import,
    "extras": cmd_extras,
    "custom": cmd_custom,
    "icon": cmd_icon,
}


def main(argv: Optional[list[str]] = None, store: Optional[Store] = None) -> int:
    args = build_parser().parse_args(argv)
    if store is None:
        store = JsonFileStore(os.path.expanduser(args.data_dir) if args.data_dir else None)
    return COMMANDS[args.command or "run"](store, args)

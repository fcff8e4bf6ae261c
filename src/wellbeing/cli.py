from __future__ import annotations

import argparse
import logging
import stat
import sys
from pathlib import Path

from ._util import _fmt_when, configure_logging
from .aggregate import category_average_intensity, category_counts, history_view
from .entries import STORAGE_KEY, EntryStore, MoodEntry
from .export import EXPORT_FILENAME, EXPORT_MIME, NothingToExport, write_csv
from .moods import INTENSITY_MAX, MOODS, parse_intensity, parse_mood
from .paths import data_path_reason, resolve_data_path
from .safety import UnsafeDataPath, assert_safe_data_path
from .storage import JsonFileSlots, load_json, save_json

logger = logging.getLogger("wellbeing.cli")


# -------------------------
# Helpers
# -------------------------


def _store(args: argparse.Namespace) -> EntryStore:
    return EntryStore(JsonFileSlots(args.data_path))


def _bar(value: float, vmax: float, width: int = 20) -> str:
    if vmax <= 0 or value <= 0:
        return ""
    n = int(round(width * min(value, vmax) / vmax))
    return "▇" * max(1, n)


def _print_entry_line(e: MoodEntry) -> None:
    print(f"{_fmt_when(e.time)} — {e.mood} {e.intensity}/{INTENSITY_MAX}  [{e.id}]")


# -------------------------
# MOOD commands
# -------------------------


def cmd_mood_add(args: argparse.Namespace) -> None:
    try:
        mood = parse_mood(args.mood)
        intensity = parse_intensity(args.intensity)
    except ValueError as e:
        raise SystemExit(str(e)) from e

    entry = _store(args).append(mood, intensity)
    print(f"🙂 Mood saved: {entry.mood} {entry.intensity}/{INTENSITY_MAX} @ {entry.time}")


def cmd_mood_list(args: argparse.Namespace) -> None:
    entries = _store(args).read_all()
    if not entries:
        print("No mood entries yet.")
        return

    print("=== Mood History (newest first) ===")
    for e in history_view(entries)[: args.limit]:
        _print_entry_line(e)


def cmd_mood_delete(args: argparse.Namespace) -> None:
    store = _store(args)
    before = len(store.read_all())
    store.delete_by_id(args.id)
    removed = before - len(store.read_all())
    if removed:
        print(f"🗑️ Deleted {removed} entry(ies) with id {args.id}.")
    else:
        print(f"No entry with id {args.id}.")


def cmd_mood_clear(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("Refusing to clear without --yes (this deletes all mood history).")

    store = _store(args)
    before = len(store.read_all())
    store.clear_all()
    print(f"🧹 Cleared all mood entries: deleted {before}.")


def cmd_mood_stats(args: argparse.Namespace) -> None:
    entries = _store(args).read_all()
    if not entries:
        print("No mood entries yet.")
        return

    counts = category_counts(entries)
    avgs = category_average_intensity(entries)
    top = max(counts.values())

    print(f"=== Mood Stats ({len(entries)} entries) ===")
    width = max(len(m) for m in MOODS)
    for m in MOODS:
        print(f"{m:<{width}}  count={counts[m]:>3}  avg={avgs[m]:>4.1f}  {_bar(counts[m], top)}")


def cmd_mood_export(args: argparse.Namespace) -> None:
    entries = _store(args).read_all()
    out_path = Path(args.csv).expanduser().resolve()
    try:
        write_csv(entries, out_path)
    except NothingToExport as e:
        raise SystemExit(str(e)) from e

    print(f"📄 Exported {len(entries)} mood rows ({EXPORT_MIME}) → {out_path}")


# -------------------------
# Core commands
# -------------------------


def cmd_init(args: argparse.Namespace) -> None:
    data = load_json(args.data_path)
    save_json(args.data_path, data)
    print(f"✅ Initialized data file: {args.data_path}")


def cmd_where(args: argparse.Namespace) -> None:
    print(args.data_path)
    print(f"↳ using {data_path_reason(args.data_arg, args.profile)}")


def cmd_doctor(args: argparse.Namespace) -> None:
    print("=== Wellbeing Doctor ===")
    print("✅ Data path safety guard: OK")

    if not args.data_path.exists():
        print("⚠️ Data file missing (run `wellbeing init`)")
        print("=== Done ===")
        return

    data = load_json(args.data_path)
    print("✅ JSON readable: OK")

    perms = stat.S_IMODE(args.data_path.stat().st_mode)
    print(f"🔐 File permissions: {oct(perms)} (target 0o600)")

    if STORAGE_KEY in data:
        n = len(_store(args).read_all())
        print(f"📒 Mood entries: {n}")
    else:
        print("📒 Mood entries: none saved yet")

    print("=== Done ===")


def cmd_gui(args: argparse.Namespace) -> None:
    from .gui import run_gui

    run_gui(args.data_path, allow_repo_data_path=True)


def main(argv=None) -> None:
    p = argparse.ArgumentParser(prog="wellbeing", description="Wellbeing mood tracker")
    p.add_argument("--data", default=None, help="Path to data JSON (overrides env/default)")
    p.add_argument("--profile", default=None, help="Profile name (e.g. dev/test)")
    p.add_argument("--allow-repo-data-path", action="store_true", help="Override safety guard (not recommended)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")

    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("init", help="Initialize data store safely").set_defaults(func=cmd_init)
    sub.add_parser("where", help="Show which data file is active and why").set_defaults(func=cmd_where)
    sub.add_parser("doctor", help="Run safety + health checks").set_defaults(func=cmd_doctor)
    sub.add_parser("gui", help="Open the desktop window").set_defaults(func=cmd_gui)

    # ---- mood ----
    mood = sub.add_parser("mood", help="Mood tracking")
    mood_sub = mood.add_subparsers(dest="mood_cmd", required=True)

    mood_add = mood_sub.add_parser("add", help="Record a mood")
    mood_add.add_argument("--mood", required=True, help=f"One of: {', '.join(MOODS)}")
    mood_add.add_argument("--intensity", required=True, help="Intensity 1–10")
    mood_add.set_defaults(func=cmd_mood_add)

    mood_list = mood_sub.add_parser("list", help="List mood entries (newest first)")
    mood_list.add_argument("--limit", type=int, default=50)
    mood_list.set_defaults(func=cmd_mood_list)

    mood_delete = mood_sub.add_parser("delete", help="Delete the entry with the given id")
    mood_delete.add_argument("id", help="Entry id as shown by `mood list`")
    mood_delete.set_defaults(func=cmd_mood_delete)

    mood_clear = mood_sub.add_parser("clear", help="Delete ALL mood entries (requires --yes)")
    mood_clear.add_argument("--yes", action="store_true", help="Confirm destructive clear")
    mood_clear.set_defaults(func=cmd_mood_clear)

    mood_sub.add_parser("stats", help="Count and average intensity per mood").set_defaults(func=cmd_mood_stats)

    mood_export = mood_sub.add_parser("export", help="Export mood history to CSV")
    mood_export.add_argument("--csv", default=EXPORT_FILENAME, help=f"Output CSV path (default ./{EXPORT_FILENAME})")
    mood_export.set_defaults(func=cmd_mood_export)

    args = p.parse_args(argv)
    configure_logging(args.verbose)

    args.data_arg = args.data
    args.data_path = resolve_data_path(args.data, args.profile)

    try:
        assert_safe_data_path(args.data_path, args.allow_repo_data_path)
    except UnsafeDataPath as e:
        print(f"🚫 {e}", file=sys.stderr)
        raise SystemExit(2) from e

    logger.debug("Using data file %s", args.data_path)
    args.func(args)


if __name__ == "__main__":
    main()

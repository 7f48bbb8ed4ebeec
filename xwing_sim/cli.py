from __future__ import annotations
import argparse, logging, sys
from typing import Any, Dict

from .actions import ACTIONS, get_action
from .config import ENV_PREFIX, LOG_LEVELS, load_settings
from .errors import RosterError
from .main import simulate
from .rosters import get_registry, get_roster


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m xwing_sim",
        description="Monte-Carlo X-Wing squadron battle simulator"
    )
    sub = p.add_subparsers(dest="cmd")

    # simulate
    sm = sub.add_parser("simulate", help="Play many matches and report win/loss/draw tallies")
    sm.add_argument("--trials", type=int, default=None, help="Number of matches to play (default 1000)")
    sm.add_argument("--seed", type=int, default=None, help="Master seed; same seed, same tallies")
    sm.add_argument("--action", choices=sorted(ACTIONS), default=None, help="Action every ship takes before attacking")
    sm.add_argument("--roster", type=str, default=None, help="Built-in roster name or path to a YAML/JSON roster")
    sm.add_argument("--workers", type=int, default=None, help="Concurrent trial workers (1 = serial)")
    sm.add_argument("--processes", dest="use_processes", action="store_const", const=True, default=None,
                    help="Use a process pool instead of threads")
    sm.add_argument("--round-cap", dest="round_cap", type=int, default=None,
                    help="Rounds before a stalled match is scored as a draw")
    sm.add_argument("--config", type=str, action="append", default=[], help="YAML/JSON config files (merged)")
    sm.add_argument("--env-prefix", type=str, default=ENV_PREFIX, help="Env prefix for overrides")
    sm.add_argument("--report", type=str, default=None, help="Path to save report (.json or .md)")
    sm.add_argument("--print-md", action="store_true", help="Print Markdown report to stdout")
    sm.add_argument("--log-level", dest="log_level", choices=LOG_LEVELS, default=None)

    # rosters
    sub.add_parser("rosters", help="List built-in rosters")

    args = p.parse_args(argv)
    if getattr(args, "cmd", None) is None:
        p.print_help()
        sys.exit(2)
    return args


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    keys = ("trials", "seed", "action", "roster", "workers", "use_processes", "round_cap", "log_level")
    return {k: getattr(args, k) for k in keys}


REPORT_SUFFIXES = (".json", ".md")


def _simulate(args: argparse.Namespace) -> int:
    if args.report and not args.report.endswith(REPORT_SUFFIXES):
        print("Report path must end with .json or .md", file=sys.stderr)
        return 2
    settings = load_settings(args.config, _cli_overrides(args), env_prefix=args.env_prefix)
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        roster = get_roster(settings.roster)
        action = get_action(settings.action)
    except KeyError as exc:
        print(f"error: {exc.args[0] if exc.args else exc}", file=sys.stderr)
        return 2
    run = simulate(settings, roster=roster, action=action)
    print(run.aggregate.describe(run.roster.labels))

    if args.report:
        text = run.summary.to_json() if args.report.endswith(".json") else run.summary.to_markdown()
        with open(args.report, "w", encoding="utf-8") as f:
            f.write(text)
    if args.print_md:
        print(run.summary.to_markdown())
    return 0


def _list_rosters() -> int:
    for name, roster in sorted(get_registry().all_rosters().items()):
        print(f"{name}: {roster.description}")
        for faction_ships in (roster.side_a, roster.side_b):
            for t in faction_ships:
                flag = " [squad reroll]" if t.grants_squad_reroll else ""
                print(f"  {roster.label(t.faction):<8} {t.name} (PS {t.skill}, {t.attack}/{t.defense}/{t.hull}/{t.shields}){flag}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        if args.cmd == "simulate":
            return _simulate(args)
        if args.cmd == "rosters":
            return _list_rosters()
    except (RosterError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

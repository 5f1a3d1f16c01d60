"""
gmrank — Command Line Entry Point

Decodes a game master file, ranks every creature moveset and writes the
text reports.

Usage:
    python -m gmrank.combat.main GAME_MASTER                  # reports/ + summary
    python -m gmrank.combat.main GAME_MASTER --inspect        # what's in the file
    python -m gmrank.combat.main GAME_MASTER --dump V0150_POKEMON_MEWTWO
    python -m gmrank.combat.main GAME_MASTER --legacy legacy.txt --exclude-legendaries
    python -m gmrank.combat.main GAME_MASTER --highlight DRAGONITE -v
    python -m gmrank.combat.main GAME_MASTER --tui            # browse in the dashboard
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gmrank.combat.matchup import IncompleteTypeChart
from gmrank.combat.pipeline import AnalysisConfig, run_analysis
from gmrank.combat.simulator import SimConfig
from gmrank.data.lists import (
    LEGENDARY_NAMES,
    load_legacy_pairs,
    load_name_list,
    read_game_master,
)
from gmrank.protocol.inspector import RecordInspector
from gmrank.protocol.wire import ProtoDecodeError
from gmrank.reports.console import print_summary
from gmrank.reports.export import export_analysis
from gmrank.reports.writers import write_reports

log = logging.getLogger("gmrank")

EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gmrank",
        description="Rank creature movesets from a game master file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("game_master", type=Path,
                        help="Binary game master file")
    parser.add_argument("--round-length", type=float, default=2.5,
                        help="Defender attack interval in seconds (default: 2.5)")
    parser.add_argument("--life-time", type=float, default=100.0,
                        help="Expected survival time in seconds (default: 100)")
    parser.add_argument("--battle-time", type=float, default=100.0,
                        help="Simulated time per moveset in seconds (default: 100)")
    parser.add_argument("--reference-rating", type=float, default=1500.0,
                        help="Rating cap for the prestige ranking (default: 1500)")
    parser.add_argument("--no-dodge", action="store_true",
                        help="Simulate without dodging")
    parser.add_argument("--exclude", type=Path, default=None,
                        help="File of creature names to leave out")
    parser.add_argument("--exclude-legendaries", action="store_true",
                        help="Leave out the built-in legendary list")
    parser.add_argument("--legacy", type=Path, default=None,
                        help="File of 'CREATURE ATTACK' legacy pairs")
    parser.add_argument("--highlight", type=str, default=None,
                        help="Trace every simulation step of this creature")
    parser.add_argument("--output-dir", type=Path, default=Path("reports"),
                        help="Directory for the text reports (default: reports)")
    parser.add_argument("--json", type=Path, default=None,
                        help="Also export the rankings to this JSON file")
    parser.add_argument("--top", type=int, default=10,
                        help="Rows in the console summary (default: 10)")
    parser.add_argument("--inspect", action="store_true",
                        help="Print a summary of the file's records and exit")
    parser.add_argument("--dump", type=str, default=None, metavar="NAME",
                        help="Print the fields of one record and exit")
    parser.add_argument("--tui", action="store_true",
                        help="Browse the rankings in the terminal dashboard")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    """Turn parsed arguments into an AnalysisConfig.

    Raises ValueError for bad battle parameters and OSError for list files
    that can't be read.
    """
    sim = SimConfig(
        round_length=args.round_length,
        life_time=args.life_time,
        battle_time=args.battle_time,
        reference_rating=args.reference_rating,
        dodge=not args.no_dodge,
    )
    excluded: set[str] = set()
    if args.exclude:
        excluded |= load_name_list(args.exclude)
    if args.exclude_legendaries:
        excluded |= LEGENDARY_NAMES
    legacy_pairs = load_legacy_pairs(args.legacy) if args.legacy else []
    return AnalysisConfig(
        sim=sim,
        excluded=excluded,
        legacy_pairs=legacy_pairs,
        highlight=args.highlight,
        output_dir=args.output_dir,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = build_config(args)
    except ValueError as e:
        log.error("Bad configuration: %s", e)
        return EXIT_CONFIG_ERROR
    except OSError as e:
        log.error("Can't read list file: %s", e)
        return EXIT_FAILURE

    try:
        data = read_game_master(args.game_master)
    except OSError as e:
        log.error("Can't read %s: %s", args.game_master, e)
        return EXIT_FAILURE

    if args.inspect or args.dump:
        try:
            inspector = RecordInspector(data)
        except ProtoDecodeError as e:
            log.error("Decode failed: %s", e)
            return EXIT_FAILURE
        print(inspector.dump(args.dump) if args.dump else inspector.report())
        return 0

    print(f"[*] Ranking movesets in {args.game_master}")
    try:
        analysis = run_analysis(data, config)
    except ProtoDecodeError as e:
        log.error("Decode failed: %s", e)
        return EXIT_FAILURE
    except IncompleteTypeChart as e:
        log.error("%s", e)
        return EXIT_FAILURE

    for failure in analysis.failures:
        print(f"[!] Legacy lookup failed: {failure}")

    # Reports only after a complete, successful analysis
    written = write_reports(analysis.game_master, analysis.results, config.output_dir)
    print(f"[*] Wrote {len(written)} reports to {config.output_dir}")

    if args.json:
        out_path = export_analysis(analysis, args.json)
        print(f"[*] Rankings exported: {out_path}")

    if args.tui:
        from gmrank.dashboard.app import RankDashboard
        RankDashboard(analysis).run()
    else:
        print_summary(analysis, top=args.top)

    return 0


if __name__ == "__main__":
    sys.exit(main())

# fitts_engine/cli.py
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config_builder import ConfigBuilder
from .errors import FittsEngineError
from .evaluation.summary import fitts_regression, summarize_blocks, summarize_sets
from .io.observers import ConsoleReporter, TrialCsvLogger
from .io.pose_stream import read_pose_stream
from .processing.fitts import index_of_difficulty, precision_level, throughput
from .session import run_session

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    """
    CLI parser for the trial engine.

    Parsing and option descriptions only; every command delegates to the
    package modules.
    """
    parser = argparse.ArgumentParser(
        prog="fitts-engine",
        description=(
            "Replay recorded controller pose streams through the Fitts' law trial "
            "engine and summarise the resulting trial logs."
        ),
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Run a pose stream through a session and write the trial CSV.")
    replay.add_argument("poses", help="Pose stream (TSV or CSV) with timestamp, pos_*, rot_*, trigger, ready.")
    replay.add_argument("output", help="Trial CSV to write (rows are appended if it exists).")
    replay.add_argument("--config", default=None, help="JSON session file.")
    replay.add_argument("--participant", type=int, default=None, help="Override the participant number.")
    replay.add_argument("--block", type=int, default=None, help="Override the block number.")
    replay.add_argument("--seed", type=int, default=None, help="Seed for the testing-pair shuffle.")
    replay.add_argument("--skip-training", action="store_true", help="Start directly with the testing phase.")
    replay.add_argument("--skip-testing", action="store_true", help="End the session after training.")
    replay.add_argument(
        "--input-delay",
        type=float,
        default=None,
        help="Minimum seconds between accepted trigger presses.",
    )
    replay.add_argument("--verbose", action="store_true", help="Log every trial.")

    summarize = sub.add_parser("summarize", help="Per-set and per-block summaries of a trial CSV.")
    summarize.add_argument("trials", help="Trial CSV written by 'replay'.")
    summarize.add_argument(
        "--output",
        default=None,
        help="Write the set summary here; the block summary goes next to it with a _blocks suffix.",
    )

    plot = sub.add_parser("plot", help="Plot throughput per set (needs matplotlib).")
    plot.add_argument("trials", help="Trial CSV written by 'replay'.")
    plot.add_argument("output", help="Image file to write.")
    plot.add_argument("--title", default=None, help="Figure title.")

    id_cmd = sub.add_parser("id", help="Index of difficulty for an amplitude and width.")
    id_cmd.add_argument("amplitude", type=float, help="Distance between target centres (m).")
    id_cmd.add_argument("width", type=float, help="Target width along the movement axis (m).")
    id_cmd.add_argument("--mt-ms", type=float, default=None, help="Movement time (ms) for a throughput.")

    return parser


def _cmd_replay(args: argparse.Namespace) -> int:
    config = ConfigBuilder.from_args(args)
    samples = read_pose_stream(args.poses)
    logger.info("Read %d pose sample(s) from %s", len(samples), args.poses)
    observers = [ConsoleReporter(verbose=args.verbose), TrialCsvLogger(args.output)]
    trials = run_session(samples, config, observers)
    print(f"{len(trials)} trial(s) written to {args.output}")
    return 0


def _cmd_summarize(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.trials)
    sets = summarize_sets(df)
    blocks = summarize_blocks(df)

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        sets.to_csv(out, index=False)
        blocks.to_csv(out.with_name(f"{out.stem}_blocks{out.suffix or '.csv'}"), index=False)
        print(f"Summaries written to {out}")
    else:
        print(sets.to_string(index=False))
        print()
        print(blocks.to_string(index=False))

    try:
        fit = fitts_regression(df)
    except ValueError as e:
        logger.info("No Fitts regression: %s", e)
    else:
        print(
            f"\nMT = {fit['intercept_ms']:.1f} + {fit['slope_ms_per_bit']:.1f} * ID "
            f"(r={fit['r']:.3f}, n={fit['n']})"
        )
    return 0


def _cmd_plot(args: argparse.Namespace) -> int:
    from .evaluation.plotting import PlotConfig, ThroughputPlotter

    df = pd.read_csv(args.trials)
    path = ThroughputPlotter(PlotConfig(title=args.title)).save(df, args.output)
    print(f"Plot saved to {path}")
    return 0


def _cmd_id(args: argparse.Namespace) -> int:
    id_bits = index_of_difficulty(args.amplitude, args.width)
    print(f"ID = {id_bits:.3f} bits (precision level {precision_level(id_bits)})")
    if args.mt_ms is not None:
        print(f"TP = {throughput(id_bits, args.mt_ms):.3f} bits/s")
    return 0


_COMMANDS = {
    "replay": _cmd_replay,
    "summarize": _cmd_summarize,
    "plot": _cmd_plot,
    "id": _cmd_id,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return _COMMANDS[args.command](args)
    except FittsEngineError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

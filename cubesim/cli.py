"""
Headless runner: load a configuration, tick the simulation, report condensation.

Examples:
    python -m cubesim --config config/presets/random_soup.yaml --ticks 2000
    python -m cubesim --random-atoms 40 --seed 3 --report-every 100 --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import pathlib
from typing import Optional, Sequence

from .config_loader import SimulationBundle, build_simulation, load_simulation_from_yaml
from .controllers import SimulationController
from .logging_config import setup_logging
from .particle_group import PopulationSnapshot


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the cube condensation simulation without a display.")
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        default=None,
        help="YAML simulation config. Built-in defaults are used when omitted.",
    )
    parser.add_argument("--ticks", type=int, default=1000, help="Number of ticks to simulate.")
    parser.add_argument(
        "--random-atoms",
        type=int,
        default=None,
        help="Spawn this many random atoms in addition to those in the config.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for spawning and molecule orientation.")
    parser.add_argument(
        "--report-every",
        type=int,
        default=0,
        help="Print a population summary every N ticks (0 prints only the final summary).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    parser.add_argument("--log-file", default=None, help="Optional file to copy log records to.")
    args = parser.parse_args(argv)
    if args.ticks < 0:
        parser.error("--ticks must be non-negative")
    if args.random_atoms is not None and args.random_atoms < 0:
        parser.error("--random-atoms must be non-negative")
    if args.report_every < 0:
        parser.error("--report-every must be non-negative")
    return args


def summarize(snapshot: PopulationSnapshot) -> str:
    free_atoms = len(snapshot.bodies) - snapshot.molecule_count
    largest = max((state.atom_count for state in snapshot.bodies), default=0)
    return (
        f"tick {snapshot.tick}: {len(snapshot.bodies)} bodies "
        f"({free_atoms} free atoms, {snapshot.molecule_count} molecules, "
        f"{snapshot.atom_count} atoms total, largest body {largest})"
    )


def _load(args: argparse.Namespace) -> SimulationBundle:
    if args.config is not None:
        return load_simulation_from_yaml(args.config, seed=args.seed)
    data = {"simulation": {"seed": args.seed}} if args.seed is not None else {}
    return build_simulation(data)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(getattr(logging, args.log_level), log_file=args.log_file)

    bundle = _load(args)
    group = bundle.group
    if args.random_atoms:
        group.spawn_random_atoms(args.random_atoms)
    if bundle.metadata.get("name"):
        logger.info("Loaded scenario %s", bundle.metadata["name"])

    # Atoms may already overlap when they are placed.
    initial_merges = group.condense()
    if initial_merges:
        logger.info("Condensed %d pair(s) before the first tick", initial_merges)

    controller = SimulationController(group)
    for tick in range(1, args.ticks + 1):
        controller.step()
        if args.report_every and tick % args.report_every == 0:
            print(summarize(controller.snapshot()))  # noqa: T201 (informational)

    print(summarize(controller.snapshot()))  # noqa: T201 (informational)


if __name__ == "__main__":
    main()

"""Run the plasma torus simulation headless and log its progress."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from iotorus.config import load_config
from iotorus.simulation import Simulation

logger = logging.getLogger('iotorus')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run the Io plasma torus simulation without a renderer')
    parser.add_argument('--config', type=str, help='Path to a config.json file')
    parser.add_argument('--ticks', type=int, default=2000, help='Number of frames to simulate.')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the random generator.')
    parser.add_argument('--log-every', type=int, default=250, help='Log a summary every N frames (0 disables).')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging (eruption start/end).')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.config and not Path(args.config).is_file():
        logger.error('Config file not found: %s', args.config)
        return 1
    if args.ticks < 0:
        logger.error('--ticks must be >= 0')
        return 1

    sim = Simulation(load_config(args.config), seed=args.seed)
    for _ in range(args.ticks):
        result = sim.tick()
        if args.log_every > 0 and (result.frame + 1) % args.log_every == 0:
            logger.info(
                'frame %d: %d/%d active, %s, mean radius %.2f, mean speed %.4f',
                result.frame + 1, result.active_count, sim.pool.capacity,
                sim.eruption.phase, sim.mean_radius(), sim.mean_speed(),
            )

    logger.info(
        'Finished %d frames: %d eruptions, %d particles active',
        sim.frame, sim.get_eruption_count(), sim.pool.active_count,
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())

# main.py — headless entry point: load a roster, wire floors, run the loop

import argparse
import json
import logging
import os
from pathlib import Path

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from agents.roster import load_roster
from core.simulation import Simulation
from settings import FPS, SPEED_STEPS

DATA_DIR = Path(__file__).parent / "data"

DEMO_TASKS = [
    (15, "Patch auth vulnerability", "Firewall rules leak tokens", "normal"),
    (15, "Launch campaign", "Deploy the new landing page build", "normal"),
    (15, "Company-wide compliance audit", "Review license terms and security posture", "high"),
]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the highrise agent simulation.")
    parser.add_argument("--roster", type=Path, default=DATA_DIR / "roster.json")
    parser.add_argument("--floors", type=Path, default=DATA_DIR / "floors.json")
    parser.add_argument("--seconds", type=float, default=60.0, help="real seconds to run")
    parser.add_argument("--fps", type=int, default=FPS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--speed", type=int, default=1, choices=range(len(SPEED_STEPS)),
        help="index into SPEED_STEPS",
    )
    parser.add_argument("--no-demo", action="store_true", help="don't submit the demo tasks")
    parser.add_argument("--fast", action="store_true", help="skip real-time pacing")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    sim = Simulation(seed=args.seed, speed_index=args.speed)
    sim.load_roster(load_roster(args.roster))
    with open(args.floors, encoding="utf-8") as fh:
        for project in json.load(fh):
            sim.add_floor(project["floor"], project)

    if not args.no_demo:
        for floor, title, description, priority in DEMO_TASKS:
            sim.submit_task(floor, title, description, priority)

    if args.fast:
        sim.advance(args.seconds)
    else:
        sim.run(args.seconds, args.fps)

    print(json.dumps(sim.summary(), indent=2))


if __name__ == "__main__":
    main()

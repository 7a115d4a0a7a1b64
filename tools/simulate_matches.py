from __future__ import annotations

import argparse
import random
import sys
from collections import Counter
from pathlib import Path

from unoengine.engine.ai import make_ai
from unoengine.engine.match import MatchError, new_match, run_match
from unoengine.paths import get_paths
from unoengine.services.content import ContentError, ContentService
from unoengine.services.telemetry import TelemetryService


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run headless AI-vs-AI matches and tally the winners.")
    p.add_argument("--matches", type=int, default=100)
    p.add_argument(
        "--tiers",
        default="easy,medium,hard,hard",
        help="comma-separated difficulty per seat, in turn order",
    )
    p.add_argument("--seed", type=int, default=None, help="seed for reproducible runs")
    p.add_argument("--rules", type=Path, default=None, help="alternative rules.json")
    p.add_argument("--telemetry", type=Path, default=None, help="append match events as JSON lines")
    p.add_argument("--max-turns", type=int, default=5000)
    return p.parse_args(argv)


def simulate(
    matches: int,
    tiers: list[str],
    seed: int | None = None,
    rules_path: Path | None = None,
    telemetry: TelemetryService | None = None,
    max_turns: int = 5000,
) -> Counter[str]:
    paths = get_paths()
    rules = ContentService(paths.data_dir, paths.schema_dir).load_rules(rules_path)
    rng = random.Random(seed)
    tally: Counter[str] = Counter()
    for match_id in range(matches):
        players = []
        for seat, tier in enumerate(tiers):
            # Seat-qualified names keep the tally readable across matches.
            players.append(
                make_ai(tier, name=f"{tier}-{seat}", rng=random.Random(rng.getrandbits(64)), spec=rules.ai_spec(tier))
            )
        listeners = [telemetry.listener(match_id=match_id)] if telemetry else []
        state = new_match(players, config=rules.match, rng=random.Random(rng.getrandbits(64)), listeners=listeners)
        tally[run_match(state, max_turns=max_turns)] += 1
    return tally


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    tiers = [t.strip() for t in args.tiers.split(",") if t.strip()]
    telemetry = TelemetryService(args.telemetry) if args.telemetry else None
    try:
        tally = simulate(args.matches, tiers, args.seed, args.rules, telemetry, args.max_turns)
    except (ContentError, MatchError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    for name, wins in tally.most_common():
        print(f"{name:>12}: {wins:5d} wins ({wins / args.matches:6.1%})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

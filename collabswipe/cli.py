from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from collabswipe.errors import SessionLoadError
from collabswipe.models import SubscriptionTier, SwipeDecision
from collabswipe.services import (
    DailyQuotaGate,
    DiscoverySession,
    InMemoryMatchStore,
    InMemoryProfileSource,
)
from config import CURRENT_USER_ID, LOG_LEVEL


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Browse a discovery feed of collaborators and apply swipe decisions."
    )
    parser.add_argument("--profiles", type=Path, required=True, help="Path to a JSON list of profiles")
    parser.add_argument(
        "--viewer",
        default=CURRENT_USER_ID,
        help=f"Id of the viewing profile (default: {CURRENT_USER_ID})",
    )
    parser.add_argument(
        "--decisions",
        default="",
        help="Comma-separated decisions to apply in order, e.g. 'pass,like,super_like'",
    )
    parser.add_argument(
        "--tier",
        choices=[t.value for t in SubscriptionTier],
        default=SubscriptionTier.FREE.value,
        help="Subscription tier used for the like quota (default: free)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log service activity")
    return parser.parse_args(argv)


def parse_decisions(raw: str) -> list[SwipeDecision]:
    decisions = []
    for token in raw.split(","):
        token = token.strip().lower().replace("-", "_")
        if not token:
            continue
        try:
            decisions.append(SwipeDecision(token))
        except ValueError:
            raise SystemExit(f"Unknown decision: {token!r} (use pass, like or super_like)")
    return decisions


async def run(args: argparse.Namespace) -> int:
    decisions = parse_decisions(args.decisions)
    discovery = DiscoverySession(
        InMemoryProfileSource.from_json(args.profiles, current_user_id=args.viewer),
        InMemoryMatchStore(),
        DailyQuotaGate(tier=SubscriptionTier(args.tier)),
    )

    try:
        loaded = await discovery.load_session()
    except SessionLoadError as e:
        print(f"Could not start a session: {e}")
        return 1

    print(f"Viewer: {loaded.viewer.name} ({loaded.viewer.role.value})")
    print(f"{len(loaded.feed)} candidates in the feed:")
    for candidate in loaded.feed:
        print(f"   - {candidate.name} [{candidate.role.value}] {discovery.compatibility_of(candidate)}% match")
    print()

    for decision in decisions:
        candidate = discovery.current_candidate()
        if candidate is None:
            print("No more profiles.")
            break
        result = await discovery.on_discrete_action(decision)
        outcome = result.kind if result else "ignored"
        detail = getattr(result, "reason", "") or getattr(result, "error", "")
        print(f"{decision.value:>10} {candidate.name}: {outcome}{f' ({detail})' if detail else ''}")

    remaining = discovery.current_candidate()
    print()
    print(f"Now showing: {remaining.name if remaining else 'nobody, feed exhausted'}")
    discovery.close()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL if args.verbose else logging.WARNING)
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()

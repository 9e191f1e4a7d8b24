"""
TourGuide CLI entrypoint.

This CLI is intended for quick local demos and debugging without the HTTP API.
Every subcommand builds a service from settings (simulated collaborators by default),
runs one operation and shuts the worker pools down.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from tourguide.config.settings import get_settings
from tourguide.core.errors import TourGuideError
from tourguide.core.logging import configure_logging
from tourguide.service import TourGuideService, build_service


def _build(args: argparse.Namespace) -> TourGuideService:
    settings = get_settings()
    if getattr(args, "users", None) is not None:
        settings = settings.model_copy(
            update={"internal_users": settings.internal_users.model_copy(update={"count": int(args.users)})}
        )
    service = build_service(settings)
    if args.reward_radius is not None:
        service.set_reward_radius(float(args.reward_radius))
    return service


def _dump(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_track_all(args: argparse.Namespace, service: TourGuideService) -> int:
    outcomes = service.track_all()
    failed = [o for o in outcomes if o.error is not None]

    if args.json:
        _dump(
            {
                "tracked": len(outcomes),
                "failed": len(failed),
                "rewards_awarded": sum(o.rewards_awarded for o in outcomes),
                "reward_failures": sum(len(o.reward_failures) for o in outcomes),
            }
        )
        return 0 if not failed else 1

    print(f"Tracked {len(outcomes)} travelers ({len(failed)} failed)")
    print(f"Rewards awarded: {sum(o.rewards_awarded for o in outcomes)}")
    for o in failed:
        print(f"  - {o.user_name}: {o.error}")
    return 0 if not failed else 1


def _cmd_nearby(args: argparse.Namespace, service: TourGuideService) -> int:
    nearby = service.nearby_attractions(args.user)
    if args.json:
        _dump([n.model_dump(mode="json") for n in nearby])
        return 0

    for i, n in enumerate(nearby, start=1):
        print(f"{i:>2}. {n.attraction_name}  {n.distance_miles:.1f} mi  {n.reward_points} pts")
    return 0


def _cmd_rewards(args: argparse.Namespace, service: TourGuideService) -> int:
    service.track(args.user)
    rewards = service.get_rewards(args.user)
    if args.json:
        _dump([r.model_dump(mode="json") for r in rewards])
        return 0

    print(f"{args.user}: {len(rewards)} rewards, {sum(r.points for r in rewards)} points")
    for r in rewards:
        print(f"  - {r.attraction.name}: {r.points}")
    return 0


def _cmd_trip_deals(args: argparse.Namespace, service: TourGuideService) -> int:
    offers = service.trip_deals(args.user)
    if args.json:
        _dump([o.model_dump(mode="json") for o in offers])
        return 0

    for o in offers:
        print(f"{o.name:<24} {o.price:>10.2f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the TourGuide CLI."""
    parser = argparse.ArgumentParser(prog="tourguide")
    parser.add_argument("--reward-radius", type=float, default=None, help="Reward radius in statute miles.")
    parser.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    track = sub.add_parser("track-all", help="Run one bulk tracking cycle over the internal travelers.")
    track.add_argument("--users", type=int, default=None, help="Number of internal travelers to seed.")
    track.set_defaults(func=_cmd_track_all)

    for name, func, help_text in [
        ("nearby", _cmd_nearby, "Closest attractions to a traveler's latest location."),
        ("rewards", _cmd_rewards, "Track a traveler once and list their rewards."),
        ("trip-deals", _cmd_trip_deals, "Price trip offers for a traveler."),
    ]:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--user", required=True, help="User name, e.g. internalUser0")
        p.set_defaults(func=func)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m tourguide.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    service = _build(args)
    try:
        return int(func(args, service))
    except TourGuideError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        service.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())

# trip_consensus/batch.py
"""Run a planning pass over a JSON file of survey responses.

    python -m trip_consensus.batch responses.json --count 3 --format markdown

The file holds either a list of responses or an object with ``responses`` and
optional ``members`` / ``member_count`` keys.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from trip_consensus.catalog import ConfigurationError
from trip_consensus.config import load_settings
from trip_consensus.orchestrator import orchestrate_recommendations
from trip_consensus.report import render_report
from trip_consensus.schemas import RecommendationRequest
from trip_consensus.surveys import TRIP_PLANNING_SURVEY, build_response_set
from trip_consensus.tools.providers import NullEventProvider, NullPlaceProvider


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trip_consensus.batch", description=__doc__.splitlines()[0])
    parser.add_argument("responses", type=Path, help="JSON file with survey responses")
    parser.add_argument("--count", type=int, default=None, help="maximum number of recommendations")
    parser.add_argument("--seed", type=int, default=None, help="itinerary selection seed")
    parser.add_argument("--format", choices=("json", "markdown"), default="json")
    parser.add_argument("--offline", action="store_true", help="skip external price and event lookups")
    return parser


def load_request(path: Path) -> RecommendationRequest:
    document: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(document, list):
        document = {"responses": document}
    return RecommendationRequest.model_validate(document)


async def run(args: argparse.Namespace) -> str:
    request = load_request(args.responses)
    settings = load_settings()
    response_set = build_response_set(request.responses, TRIP_PLANNING_SURVEY, request.member_count)
    providers: Dict[str, Any] = {}
    if args.offline:
        providers = {"places": NullPlaceProvider(), "events": NullEventProvider()}

    result = await orchestrate_recommendations(
        response_set,
        members=request.members,
        count=args.count or request.count,
        seed=args.seed if args.seed is not None else request.seed,
        questions=TRIP_PLANNING_SURVEY,
        settings=settings,
        **providers,
    )
    if args.format == "markdown":
        return render_report(result.recommendations, result.analysis)
    return json.dumps(result.model_dump(mode="json"), indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        output = asyncio.run(run(args))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Could not read {args.responses}: {exc}", file=sys.stderr)
        return 2
    except ValidationError as exc:
        print(f"Invalid responses file: {exc}", file=sys.stderr)
        return 2
    except ConfigurationError as exc:
        print(f"Destination catalog misconfigured: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

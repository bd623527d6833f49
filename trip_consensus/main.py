from __future__ import annotations

from typing import Any, Dict, List

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import ValidationError

from trip_consensus.agents.preference_aggregator import analyze_responses
from trip_consensus.catalog import ConfigurationError, default_catalog
from trip_consensus.config import load_settings
from trip_consensus.orchestrator import orchestrate_recommendations
from trip_consensus.report import render_report
from trip_consensus.schemas import RecommendationRequest, RecommendationResponse
from trip_consensus.surveys import TRIP_PLANNING_SURVEY, build_response_set, get_survey

settings = load_settings()

app = FastAPI(title="Trip Consensus API")

# TRIP_CONSENSUS_ALLOWED_ORIGINS narrows this to a comma separated list.
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validate_request(payload: Dict[str, Any]) -> RecommendationRequest:
    try:
        return RecommendationRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()) from exc


async def _recommend_from_payload(payload: Dict[str, Any]) -> RecommendationResponse:
    """Validate the incoming payload and delegate to the orchestrator."""
    request = _validate_request(payload)
    response_set = build_response_set(request.responses, TRIP_PLANNING_SURVEY, request.member_count)
    try:
        result = await orchestrate_recommendations(
            response_set,
            catalog=default_catalog(),
            members=request.members,
            count=request.count,
            seed=request.seed,
            questions=TRIP_PLANNING_SURVEY,
            settings=settings,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=f"Destination catalog misconfigured: {exc}") from exc
    if request.include_report:
        result.report = render_report(result.recommendations, result.analysis)
    return result


@app.get("/api/surveys/{kind}")
async def api_survey(kind: str) -> List[Dict[str, Any]]:
    questions = get_survey(kind)
    if questions is None:
        raise HTTPException(status_code=404, detail=f"Unknown survey kind: {kind}")
    return [question.model_dump(exclude_none=True) for question in questions]


@app.post("/api/analysis")
async def api_analysis(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    request = _validate_request(payload)
    response_set = build_response_set(request.responses, TRIP_PLANNING_SURVEY, request.member_count)
    try:
        analysis = analyze_responses(
            response_set, default_catalog(), TRIP_PLANNING_SURVEY, currency=settings.currency
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=f"Destination catalog misconfigured: {exc}") from exc
    return analysis.model_dump(mode="json")


@app.post("/api/recommendations")
async def api_recommendations(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Primary endpoint: ranked destinations with budgets and itineraries."""
    result = await _recommend_from_payload(payload)
    return result.model_dump(mode="json")


@app.post("/api/report")
async def api_report(payload: Dict[str, Any] = Body(...)) -> Response:
    result = await _recommend_from_payload(payload)
    return Response(
        content=render_report(result.recommendations, result.analysis),
        media_type="text/markdown",
    )

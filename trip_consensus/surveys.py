"""Built-in survey templates and helpers for typing raw submissions."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from trip_consensus.schemas import (
    RawSurveyResponse,
    ResponseSet,
    SurveyQuestion,
    SurveyResponse,
)

USER_PREFERENCES_SURVEY: List[SurveyQuestion] = [
    SurveyQuestion(
        id="travel_style",
        type="single_choice",
        question="What's your preferred travel style?",
        description="This helps us match you with like-minded travelers",
        options=["Adventure", "Relaxation", "Cultural", "Family", "Solo"],
    ),
    SurveyQuestion(
        id="budget_range",
        type="budget",
        question="What's your typical trip budget (excluding flights)?",
        min=300,
        max=2000,
        step=100,
    ),
    SurveyQuestion(
        id="interests",
        type="multiple_choice",
        question="Select your travel interests (choose all that apply)",
        options=[
            "Beach/Water Activities",
            "Hiking/Outdoor Adventures",
            "Food & Dining",
            "Nightlife & Bars",
            "Culture & Museums",
            "Sports & Events",
            "Shopping",
            "Photography",
            "Wellness & Spa",
        ],
    ),
    SurveyQuestion(
        id="accommodation",
        type="single_choice",
        question="What type of accommodation do you prefer?",
        options=[
            "Budget-friendly (hostels, budget hotels)",
            "Mid-range (nice hotels, Airbnb)",
            "Luxury (resorts, premium hotels)",
            "Unique stays (treehouses, glamping)",
        ],
    ),
    SurveyQuestion(
        id="activity_level",
        type="scale",
        question="How active do you like to be on trips?",
        description="1 = Very relaxed, 5 = Non-stop action",
        min=1,
        max=5,
    ),
]

TRIP_PLANNING_SURVEY: List[SurveyQuestion] = [
    SurveyQuestion(
        id="availability",
        type="multiple_choice",
        question="When are you available for this trip?",
        options=[
            "Late June (16-30)",
            "Early July (1-15)",
            "Late July (16-31)",
            "Early August (1-15)",
            "Late August (16-31)",
        ],
    ),
    SurveyQuestion(
        id="duration",
        type="ranking",
        question="Rank your preferred trip duration (1 = most preferred)",
        options=["2 Days (Weekend)", "3-4 Days (Long weekend)", "5-7 Days (Full week)"],
    ),
    SurveyQuestion(
        id="location_preferences",
        type="ranking",
        question="Rank these destinations by preference (1 = most interested)",
        options=["Nashville", "NYC", "Chicago", "LA", "Austin", "Boston", "Charleston"],
    ),
    SurveyQuestion(
        id="other_locations",
        type="text",
        question="Any other destination suggestions?",
        required=False,
    ),
    SurveyQuestion(
        id="activity_preferences",
        type="ranking",
        question="Rank these activities by preference",
        options=["Golf", "Concert", "Sporting Event", "Beach Activities", "Outdoor Adventures", "Casino", "Bars/Nightlife"],
    ),
    SurveyQuestion(
        id="other_activities",
        type="text",
        question="Any other activities you'd like to do?",
        required=False,
    ),
    SurveyQuestion(
        id="trip_budget",
        type="budget",
        question="What's your budget for this trip (excluding flights)?",
        min=300,
        max=2000,
        step=100,
    ),
    SurveyQuestion(
        id="accommodation_type",
        type="single_choice",
        question="What type of accommodation would you prefer?",
        options=[
            "Cool (more expensive) Shared House (Airbnb)",
            "Cheapest Shared House (Airbnb)",
            "Depends on trip/location",
        ],
    ),
    SurveyQuestion(
        id="room_sharing",
        type="single_choice",
        question="Room sharing preference?",
        options=["Private room", "2 people to a room", "Don't care"],
    ),
    SurveyQuestion(
        id="dining_preferences",
        type="multiple_choice",
        question="Which dining experiences interest you? (select all)",
        options=[
            "High-end meal (1 time as whole group)",
            "Sports Bars & casual (as whole group)",
            "Group catered BBQ or similar",
            "Group Cooking Session",
        ],
    ),
    SurveyQuestion(
        id="departure_city",
        type="text",
        question="Where would you be flying out of?",
        description="This helps us calculate individual flight costs",
    ),
]

SURVEYS: Dict[str, List[SurveyQuestion]] = {
    "user_preferences": USER_PREFERENCES_SURVEY,
    "trip_planning": TRIP_PLANNING_SURVEY,
}


def get_survey(kind: str) -> Optional[List[SurveyQuestion]]:
    return SURVEYS.get(kind)


def question_options(questions: Iterable[SurveyQuestion], question_id: str) -> List[str]:
    for question in questions:
        if question.id == question_id:
            return list(question.options)
    return []


def build_response_set(
    raw_responses: Iterable[RawSurveyResponse | Dict[str, Any]],
    questions: List[SurveyQuestion] | None = None,
    member_count: int | None = None,
) -> ResponseSet:
    """Type a batch of raw submissions against the trip-planning schema."""
    schema = questions or TRIP_PLANNING_SURVEY
    typed: List[SurveyResponse] = []
    for raw in raw_responses:
        if not isinstance(raw, RawSurveyResponse):
            raw = RawSurveyResponse.model_validate(raw)
        typed.append(SurveyResponse.from_raw(raw.member_id, raw.answers, schema, name=raw.name))
    return ResponseSet(responses=typed, member_count=member_count)

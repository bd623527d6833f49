from __future__ import annotations

import datetime as dt
import math
import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

AnswerType = Literal["single_choice", "multiple_choice", "ranking", "budget", "scale", "text"]
TimeLabel = Literal["morning", "lunch", "afternoon", "evening"]

# ------- Survey schema -------
class SurveyQuestion(BaseModel):
    id: str
    type: AnswerType
    question: str
    description: Optional[str] = None
    required: bool = True
    options: List[str] = Field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None

# ------- Answer variants -------
class RankingAnswer(BaseModel):
    type: Literal["ranking"] = "ranking"
    value: List[str]

class SingleChoiceAnswer(BaseModel):
    type: Literal["single_choice"] = "single_choice"
    value: str

class MultipleChoiceAnswer(BaseModel):
    type: Literal["multiple_choice"] = "multiple_choice"
    value: List[str] = Field(default_factory=list)

class BudgetRange(BaseModel):
    min: float = Field(..., ge=0, allow_inf_nan=False)
    max: float = Field(..., ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def _ordered(self) -> "BudgetRange":
        if self.min > self.max:
            raise ValueError("budget min must not exceed max")
        return self

class BudgetAnswer(BaseModel):
    type: Literal["budget"] = "budget"
    value: Union[BudgetRange, Annotated[float, Field(ge=0, allow_inf_nan=False)]]

    def midpoint(self) -> float:
        if isinstance(self.value, BudgetRange):
            return self.value.min / 2 + self.value.max / 2
        return float(self.value)

class ScaleAnswer(BaseModel):
    type: Literal["scale"] = "scale"
    value: int

class TextAnswer(BaseModel):
    type: Literal["text"] = "text"
    value: Optional[str] = None

Answer = Annotated[
    Union[RankingAnswer, SingleChoiceAnswer, MultipleChoiceAnswer, BudgetAnswer, ScaleAnswer, TextAnswer],
    Field(discriminator="type"),
]

# ------- Input models -------
class TripMember(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    member_id: str = Field(..., validation_alias=AliasChoices("member_id", "memberId", "user_id"))
    name: Optional[str] = None
    departure_city: Optional[str] = Field(None, validation_alias=AliasChoices("departure_city", "departureCity", "city"))

class SurveyResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    member_id: str = Field(..., validation_alias=AliasChoices("member_id", "memberId", "user_id"))
    name: Optional[str] = None
    answers: Dict[str, Answer] = Field(default_factory=dict)

    @classmethod
    def from_raw(
        cls,
        member_id: str,
        answers: Dict[str, Any],
        questions: List[SurveyQuestion],
        name: Optional[str] = None,
    ) -> "SurveyResponse":
        """Type raw JSON answers against a question schema.

        Answers that do not fit their question are dropped here so the
        aggregation code only ever sees well-formed variants. Ids that are not
        part of the schema are ignored.
        """
        typed: Dict[str, Any] = {}
        for question in questions:
            if question.id not in answers:
                continue
            parsed = parse_answer(question, answers[question.id])
            if parsed is not None:
                typed[question.id] = parsed
        return cls(member_id=member_id, name=name, answers=typed)

    def get(self, question_id: str, kind: type) -> Any:
        answer = self.answers.get(question_id)
        return answer if isinstance(answer, kind) else None

class ResponseSet(BaseModel):
    responses: List[SurveyResponse] = Field(default_factory=list)
    member_count: Optional[int] = Field(None, ge=0)

class RawSurveyResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    member_id: str = Field(..., validation_alias=AliasChoices("member_id", "memberId", "user_id"))
    name: Optional[str] = None
    answers: Dict[str, Any] = Field(default_factory=dict)

class RecommendationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    responses: List[RawSurveyResponse] = Field(default_factory=list)
    members: List[TripMember] = Field(default_factory=list)
    member_count: Optional[int] = Field(None, ge=0)
    count: Optional[int] = Field(None, ge=1, le=20)
    seed: Optional[int] = None
    include_report: bool = False

# ------- Aggregation results -------
class AggregatedPreference(BaseModel):
    option_label: str
    weighted_score: int = Field(0, ge=0)
    top_choice_count: int = Field(0, ge=0)

class DateWindow(BaseModel):
    label: str
    start: dt.date
    end: dt.date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

class WindowSupport(BaseModel):
    window: str
    supporter_count: int = Field(0, ge=0)

class DateAnalysis(BaseModel):
    optimal: DateWindow
    availability_ranked: List[WindowSupport] = Field(default_factory=list)

class DurationAnalysis(BaseModel):
    ranked: List[AggregatedPreference] = Field(default_factory=list)
    optimal_label: str
    optimal_days: int = Field(..., ge=1)

class GroupBudget(BaseModel):
    optimal: float
    min: float
    max: float
    currency: str = "USD"
    sample_size: int = 0

class ChoiceTally(BaseModel):
    option: str
    count: int = 0
    percentage: int = 0

class ChoiceAnalysis(BaseModel):
    ranked: List[ChoiceTally] = Field(default_factory=list)
    top_choice: Optional[str] = None
    preferred: List[str] = Field(default_factory=list)

class SurveyAnalysis(BaseModel):
    total_responses: int = 0
    response_rate: Optional[float] = None
    budget: GroupBudget
    dates: DateAnalysis
    duration: DurationAnalysis
    destinations: List[AggregatedPreference] = Field(default_factory=list)
    activities: List[AggregatedPreference] = Field(default_factory=list)
    accommodation: ChoiceAnalysis = Field(default_factory=ChoiceAnalysis)
    room_sharing: ChoiceAnalysis = Field(default_factory=ChoiceAnalysis)
    dining: ChoiceAnalysis = Field(default_factory=ChoiceAnalysis)
    location_suggestions: List[str] = Field(default_factory=list)
    activity_suggestions: List[str] = Field(default_factory=list)

# ------- Recommendation output -------
class BudgetBreakdown(BaseModel):
    accommodation: int
    food: int
    activities: int
    transport: int

class BudgetEstimate(BaseModel):
    total: int
    currency: str = "USD"
    breakdown: BudgetBreakdown

class ItinerarySlot(BaseModel):
    time_label: TimeLabel
    time_range: str = ""
    title: str

class ItineraryDay(BaseModel):
    day_number: int = Field(..., ge=1)
    date: dt.date
    weekday: str = ""
    slots: List[ItinerarySlot] = Field(default_factory=list)

class MemberCost(BaseModel):
    member_id: str
    name: Optional[str] = None
    departure_city: Optional[str] = None
    flight_cost: int
    local_cost: int
    total_cost: int

class Destination(BaseModel):
    label: str
    city: str
    country: str
    latitude: float
    longitude: float
    timezone: str
    airport_code: str

class Recommendation(BaseModel):
    destination: Destination
    match_score: int = Field(..., ge=0, le=100)
    budget: BudgetEstimate
    date_window: DateWindow
    trip_start: dt.date
    trip_end: dt.date
    duration_days: int = Field(..., ge=1)
    itinerary: List[ItineraryDay] = Field(default_factory=list)
    member_costs: List[MemberCost] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)

class RecommendationResponse(BaseModel):
    recommendations: List[Recommendation] = Field(default_factory=list)
    analysis: SurveyAnalysis
    report: Optional[str] = None

# ------- Boundary parsing -------
_BUDGET_RANGE_RE = re.compile(r"^\$?\s*(\d+(?:\.\d+)?)\s*-\s*\$?\s*(\d+(?:\.\d+)?)$")


def parse_answer(question: SurveyQuestion, raw: Any) -> Optional[Any]:
    """Return the typed answer for ``question`` or ``None`` when ``raw`` does not fit."""
    if raw is None:
        return None
    if isinstance(raw, dict) and "type" in raw:
        if raw.get("type") != question.type:
            return None
        raw = raw.get("value")
        if raw is None:
            return None

    if question.type == "ranking":
        if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
            return None
        labels = [_match_option(item, question.options) for item in raw]
        if len(set(labels)) != len(labels):
            return None
        if question.options and len(labels) > len(question.options):
            return None
        return RankingAnswer(value=labels)

    if question.type == "single_choice":
        if not isinstance(raw, str) or not raw.strip():
            return None
        label = _match_option(raw, question.options)
        if question.options and label not in question.options:
            return None
        return SingleChoiceAnswer(value=label)

    if question.type == "multiple_choice":
        if isinstance(raw, str):
            raw = [part for part in raw.split(",") if part.strip()]
        if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
            return None
        selected: List[str] = []
        for item in raw:
            label = _match_option(item, question.options)
            if question.options and label not in question.options:
                continue
            if label not in selected:
                selected.append(label)
        if raw and not selected:
            return None
        return MultipleChoiceAnswer(value=selected)

    if question.type == "budget":
        return _parse_budget(raw)

    if question.type == "scale":
        if isinstance(raw, bool):
            return None
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        if not isinstance(raw, int):
            return None
        if question.min is not None and raw < question.min:
            return None
        if question.max is not None and raw > question.max:
            return None
        return ScaleAnswer(value=raw)

    if question.type == "text":
        if not isinstance(raw, str) or not raw.strip():
            return None
        return TextAnswer(value=raw.strip())

    return None


def _parse_budget(raw: Any) -> Optional[BudgetAnswer]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = _amount(raw)
        return BudgetAnswer(value=value) if value is not None else None
    if isinstance(raw, dict):
        low, high = raw.get("min"), raw.get("max")
        if isinstance(low, bool) or isinstance(high, bool):
            return None
        if not isinstance(low, (int, float)) or not isinstance(high, (int, float)):
            return None
        return _budget_range(_amount(low), _amount(high))
    if isinstance(raw, str):
        text = raw.strip().replace(",", "")
        match = _BUDGET_RANGE_RE.match(text)
        if match:
            return _budget_range(_amount(match.group(1)), _amount(match.group(2)))
        value = _amount(text.lstrip("$"))
        return BudgetAnswer(value=value) if value is not None else None
    return None


def _budget_range(low: Optional[float], high: Optional[float]) -> Optional[BudgetAnswer]:
    if low is None or high is None or low > high:
        return None
    return BudgetAnswer(value=BudgetRange(min=low, max=high))


def _amount(raw: Any) -> Optional[float]:
    """Non-negative finite float, or ``None`` (covers "inf", "nan" and ints too large for a float)."""
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _match_option(value: str, options: List[str]) -> str:
    cleaned = value.strip()
    lowered = cleaned.lower()
    for option in options:
        if option.lower() == lowered:
            return option
    return cleaned

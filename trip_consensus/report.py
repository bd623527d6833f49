"""Markdown report for a planning run, plus a reader for its budget sections."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from trip_consensus.schemas import (
    BudgetBreakdown,
    BudgetEstimate,
    Recommendation,
    SurveyAnalysis,
)

_BUDGET_HEADING = "### Budget Breakdown"
_BUDGET_LINE_RE = re.compile(r"^- \*\*(?P<field>[A-Za-z ]+):\*\* (?P<amount>-?\d+) (?P<currency>[A-Z]{3})$")
_BUDGET_FIELDS: Dict[str, str] = {
    "Total": "total",
    "Accommodation": "accommodation",
    "Food": "food",
    "Activities": "activities",
    "Local Transportation": "transport",
}


def render_report(
    recommendations: Sequence[Recommendation],
    analysis: Optional[SurveyAnalysis] = None,
) -> str:
    lines: List[str] = ["# Group Trip Recommendations", ""]

    if analysis is not None:
        lines.extend(_preferences_section(analysis))

    if not recommendations:
        lines.append("No destination in the catalog matched the group's rankings.")
        return "\n".join(lines) + "\n"

    for index, rec in enumerate(recommendations, start=1):
        dest = rec.destination
        lines.append(f"## {index}. {dest.label} ({dest.city}, {dest.country})")
        lines.append("")
        lines.append(f"**Match Score:** {rec.match_score}/100")
        lines.append(f"**Dates:** {rec.trip_start.isoformat()} to {rec.trip_end.isoformat()}")
        lines.append(f"**Duration:** {rec.duration_days} days")
        lines.append(f"**Availability Window:** {rec.date_window.label}")
        lines.append("")

        lines.append(_BUDGET_HEADING)
        lines.append("")
        currency = rec.budget.currency
        breakdown = rec.budget.breakdown
        lines.append(f"- **Total:** {rec.budget.total} {currency}")
        lines.append(f"- **Accommodation:** {breakdown.accommodation} {currency}")
        lines.append(f"- **Food:** {breakdown.food} {currency}")
        lines.append(f"- **Activities:** {breakdown.activities} {currency}")
        lines.append(f"- **Local Transportation:** {breakdown.transport} {currency}")
        lines.append("")

        if rec.notes:
            lines.append(f"**Notes:** {' '.join(rec.notes)}")
            lines.append("")

        lines.append("### Itinerary")
        lines.append("")
        for day in rec.itinerary:
            lines.append(f"#### Day {day.day_number}: {day.date.isoformat()} ({day.weekday})")
            for slot in day.slots:
                lines.append(f"- {slot.time_range or slot.time_label}: {slot.title}")
            lines.append("")

        if rec.member_costs:
            lines.append("### Individual Costs")
            lines.append("")
            for cost in rec.member_costs:
                who = cost.name or cost.member_id
                origin = cost.departure_city or "unknown city"
                lines.append(
                    f"- {who} (from {origin}): flight {cost.flight_cost} + local {cost.local_cost}"
                    f" = {cost.total_cost} {currency}"
                )
            lines.append("")

    return "\n".join(lines)


def parse_report_budgets(text: str) -> List[BudgetEstimate]:
    """Read every budget breakdown back out of a rendered report, in order."""
    budgets: List[BudgetEstimate] = []
    collecting = False
    values: Dict[str, int] = {}
    currency = "USD"

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line == _BUDGET_HEADING:
            collecting = True
            values = {}
            continue
        if not collecting:
            continue
        match = _BUDGET_LINE_RE.match(line)
        if match and match.group("field") in _BUDGET_FIELDS:
            values[_BUDGET_FIELDS[match.group("field")]] = int(match.group("amount"))
            currency = match.group("currency")
        elif line.startswith("#"):
            collecting = False
        if len(values) == len(_BUDGET_FIELDS):
            total = values.pop("total")
            budgets.append(BudgetEstimate(total=total, currency=currency, breakdown=BudgetBreakdown(**values)))
            collecting = False
            values = {}
    return budgets


def _preferences_section(analysis: SurveyAnalysis) -> List[str]:
    lines = ["## Group Preferences", ""]
    lines.append(f"**Responses:** {analysis.total_responses}")
    if analysis.response_rate is not None:
        lines.append(f"**Response Rate:** {analysis.response_rate:.0f}%")
    lines.append(
        f"**Group Budget:** {analysis.budget.optimal:.0f} {analysis.budget.currency}"
        f" (range {analysis.budget.min:.0f}-{analysis.budget.max:.0f})"
    )
    if analysis.dates.availability_ranked:
        best = analysis.dates.availability_ranked[0]
        lines.append(f"**Best Window:** {best.window} ({best.supporter_count} available)")
    lines.append("")

    ranked_destinations = [pref for pref in analysis.destinations if pref.weighted_score > 0][:3]
    if ranked_destinations:
        lines.append("**Top Locations:**")
        lines.extend(f"- {pref.option_label} ({pref.weighted_score} pts)" for pref in ranked_destinations)
        lines.append("")

    ranked_activities = [pref for pref in analysis.activities if pref.weighted_score > 0][:5]
    if ranked_activities:
        lines.append("**Top Activities:**")
        lines.extend(f"- {pref.option_label}" for pref in ranked_activities)
        lines.append("")

    if analysis.dining.preferred:
        lines.append("**Preferred Dining:**")
        lines.extend(f"- {option}" for option in analysis.dining.preferred)
        lines.append("")

    if analysis.accommodation.top_choice:
        lines.append(f"**Accommodation:** {analysis.accommodation.top_choice}")
    if analysis.room_sharing.top_choice:
        lines.append(f"**Room Sharing:** {analysis.room_sharing.top_choice}")
    if analysis.location_suggestions:
        lines.append(f"**Other Location Ideas:** {', '.join(analysis.location_suggestions)}")
    if analysis.activity_suggestions:
        lines.append(f"**Other Activity Ideas:** {'; '.join(analysis.activity_suggestions)}")
    lines.append("")
    return lines

"""Prompt assembly and response parsing for travel briefs."""
import json
import re
from typing import Any

from app.exceptions import BriefParseError
from app.models import BriefRequest

BUDGET_GUIDANCE = {
    "budget-friendly": "Favor affordable stays, free attractions, street food and public transport.",
    "standard": "Favor mid-range stays, a mix of local and international dining, and good-value attractions.",
    "luxury": "Favor premium hotels, fine dining, private tours and high-end experiences.",
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# The extended brief covers only these sections
EXTENDED_SECTIONS = ("neighborhoods", "attractions", "culture_and_events", "day_trips", "active_and_sports")


def time_context(req: BriefRequest, prefer_month: bool = False) -> str | None:
    """Describe when the trip happens, or None when neither dates nor a month were given."""
    dates = None
    if req.start_date or req.end_date:
        dates = f"a trip from {req.start_date or 'an open date'} to {req.end_date or 'an open date'}"
    month = f"traveling in {req.travel_month}" if req.travel_month else None
    if prefer_month:
        return month or dates
    return dates or month


def build_prompt(req: BriefRequest, extended: bool = False) -> str:
    """Build the user prompt: destination, timing, budget and the sections to return.

    The standard brief describes timing by dates and falls back to the travel
    month. The extended brief prefers the month, and asks for general
    planning when neither is given.
    """
    sections = req.categories.enabled_sections()
    if extended:
        context = time_context(req, prefer_month=True) or "general travel planning"
        head = f"Create extended travel information for {req.destination} for {context}."
        sections = {name: subs for name, subs in sections.items() if name in EXTENDED_SECTIONS}
    else:
        context = time_context(req)
        head = f"Create a travel brief for {req.destination}{f' for {context}' if context else ''}."
    lines = [
        head,
        "",
        f"BUDGET LEVEL: {req.budget.upper()} - {BUDGET_GUIDANCE[req.budget]}",
        "",
        "Return only a valid JSON object with the keys \"destination\", \"startDate\", \"endDate\"",
        "and one object per section below. Each listed subsection is an array of short strings.",
    ]
    for section, subsections in sections.items():
        subs = ", ".join(_camel(s) for s in subsections) or "tips"
        lines.append(f"- {_camel(section)}: {subs}")
    lines.append("- uniqueSouvenirs: traditional, specialty, whereToBuy")
    return "\n".join(lines)


def parse_brief_text(text: str) -> dict[str, Any]:
    """Parse model output into a dict, tolerating a surrounding Markdown code fence."""
    cleaned = text.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise BriefParseError(f"Invalid JSON in model response: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise BriefParseError("Model response is not a JSON object")
    return data

"""Rule-based itinerary generator.

Splits the trip into at most five sections, spreads the days across them as
evenly as possible and fills each one with templated text for the
destination, the chosen interest tags and the travel style.
"""

from datetime import timedelta
from typing import Dict, List
from globetrotter.core.logger import logger
from globetrotter.schemas.ai.plan import AIPlanRequest
from globetrotter.utils.scheduling import day_span, format_date_range, round_half_up, section_dates

MAX_SECTIONS = 5
MAX_SUGGESTIONS = 12
DEFAULT_DAILY_BUDGET = 150

STYLE_FACTORS = {"budget": 0.4, "balanced": 1.0, "luxury": 1.8}

PACING = {
    "budget": "Efficient and cost-conscious",
    "balanced": "Balanced mix of activities and rest",
    "luxury": "Leisurely with premium experiences",
}

# Extra exploration bullets for the interest tags offered by the trip form
TAG_ACTIVITIES: Dict[str, List[str]] = {
    "Beach Paradise": ["Beach activities and water sports", "Seaside dining experiences"],
    "Mountain Adventure": ["Hiking or mountain activities", "Scenic viewpoint visits"],
    "City Explorer": ["Urban exploration and city tours", "Local neighborhood discovery"],
    "Cultural Journey": ["Museums and cultural sites", "Traditional performances or workshops"],
    "Food Tour": ["Culinary experiences and food tours", "Local market visits"],
    "Nature Trek": ["Nature walks and wildlife observation", "Outdoor photography opportunities"],
}


def section_budget(overall_budget, days: int, style: str) -> int:
    """Per-day base (overall budget spread over the days, or a flat default) scaled by the style."""
    if overall_budget and overall_budget > 0:
        base = round_half_up(overall_budget / days)
    else:
        base = DEFAULT_DAILY_BUDGET
    return round_half_up(base * STYLE_FACTORS[style])


def _day_label(first: int, last: int) -> str:
    return f"Day {first}" if first == last else f"Days {first}-{last}"


def _bullets(lines: List[str]) -> str:
    return "".join(f"• {line}\n" for line in lines)


def _arrival(destination: str, tags: List[str], start_time) -> str:
    text = f"Welcome to {destination}! Start your adventure with:\n\n"
    if tags:
        text += f"🎯 Focus Activities: {' and '.join(tags)}\n"
    lines = ["Check into your accommodation", "Orient yourself with the local area"]
    if "Food Tour" in tags or "Cultural Journey" in tags:
        lines += ["Try local cuisine at a recommended restaurant", "Visit a cultural landmark or museum"]
    else:
        lines += ["Explore the main attractions nearby", "Enjoy dinner at a local restaurant"]
    text += _bullets(lines)
    if start_time:
        text += f"\n⏰ Suggested start time: {start_time}"
    return text


def _exploration(destination: str, tags: List[str]) -> str:
    text = f"Full day of discovery in {destination}:\n\n"
    if tags:
        text += f"🎯 Today's theme: {' and '.join(tags)}\n"
    lines = [line for tag in tags for line in TAG_ACTIVITIES.get(tag, [])]
    lines.append("Rest and relaxation time")
    return text + _bullets(lines)


def _departure(destination: str, tags: List[str], end_time) -> str:
    text = f"Final day in {destination} - make it memorable:\n\n"
    if tags:
        text += f"🎯 Last-minute activities: {' or '.join(tags)}\n"
    text += _bullets([
        "Pack and check out of accommodation",
        "Visit any missed must-see locations",
        "Purchase souvenirs or local products",
        "Departure preparation",
    ])
    if end_time:
        text += f"\n⏰ Suggested departure: {end_time}"
    return text


def generate_plan(request: AIPlanRequest) -> dict:
    start = request.start_date
    if request.days is not None:
        days = request.days
    else:
        days = day_span(start, request.end_date)
    end = start + timedelta(days=days - 1)

    tags = request.suggestions[:MAX_SUGGESTIONS]
    budget = section_budget(request.overall_budget, days, request.style)
    bounds = section_dates(start, days, MAX_SECTIONS)
    count = len(bounds)

    logger.info(f"Generating {days} day itinerary for {request.destination} in {count} sections")

    sections = []
    for i, (section_start, section_end) in enumerate(bounds):
        label = _day_label((section_start - start).days + 1, (section_end - start).days + 1)
        if i == 0:
            title = f"{label}: Arrival in {request.destination}"
            description = _arrival(request.destination, tags, request.start_time)
        elif i == count - 1:
            title = f"{label}: Departure from {request.destination}"
            description = _departure(request.destination, tags, request.end_time)
        else:
            title = f"{label}: {request.destination} Exploration"
            description = _exploration(request.destination, tags)

        description += f"\n💰 Estimated cost: ${budget}\n"
        description += f"🎨 Pacing: {PACING[request.style]}"

        sections.append({
            "id": i + 1,
            "title": title,
            "description": description,
            "date_range": format_date_range(section_start, section_end),
            "budget": budget,
            "all_day": True,
            "start_time": None,
            "end_time": None,
            "start_date": section_start.isoformat(),
            "end_date": section_end.isoformat(),
        })

    summary = {
        "destination": request.destination,
        "days": days,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "activities_sampled": len(tags),
        "style_applied": request.style,
        "total_planned_budget": budget * count,
        "budget_per_day": budget,
        "generated_sections": count,
    }
    logger.info(f"Generated plan: {summary}")
    return {"sections": sections, "summary": summary}

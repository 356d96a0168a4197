import json
import re
from datetime import date
from typing import List, Optional
from globetrotter.core.logger import logger
from globetrotter.schemas.ai.plan import AIGenerateRequest
from globetrotter.utils.scheduling import day_span, format_date_range, section_dates
from globetrotter.utils.trip_status import to_date

SECTION_HEADER = re.compile(r"^(Day \d+|Section \d+|Accommodation|Transportation|Activities|Dining)", re.IGNORECASE)
BUDGET_AMOUNT = re.compile(r"\$(\d+(?:,\d{3})*(?:\.\d{2})?)")
FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
TRAILING_COMMA = re.compile(r",\s*([}\]])")


def build_prompt(request: AIGenerateRequest) -> str:
    trip_meta = {
        "destination": request.destination or "Not specified",
        "start_date": request.start_date.isoformat() if request.start_date else None,
        "end_date": request.end_date.isoformat() if request.end_date else None,
        "overall_budget": request.overall_budget,
        "interests": request.interests,
        "participants": request.participants,
        "current_title": request.current_title,
        "current_description": request.current_description or "",
    }
    current_plan = [
        {
            "id": s.id,
            "title": s.title,
            "start_date": s.start_date.isoformat() if s.start_date else None,
            "end_date": s.end_date.isoformat() if s.end_date else None,
            "date_range": s.date_range,
            "budget": s.budget,
            "description": s.description,
        }
        for s in request.current_sections
    ]

    return (
        f"Create a detailed, researched travel itinerary.\n\n"
        f'USER REQUEST: "{request.prompt}"\n\n'
        f"CURRENT TRIP CONTEXT:\n{json.dumps(trip_meta, indent=2)}\n\n"
        f"CURRENT SECTIONS TO IMPROVE/REPLACE:\n{json.dumps(current_plan, indent=2)}\n\n"
        f"OUTPUT ONLY THIS JSON STRUCTURE (no extra text):\n"
        f"{{\n"
        f'  "tripTitle": "Updated trip title based on user request",\n'
        f'  "description": "2-3 sentence trip overview",\n'
        f'  "estimatedBudget": 1500,\n'
        f'  "sections": [\n'
        f"    {{\n"
        f'      "title": "Day 1: Arrival and City Exploration",\n'
        f'      "description": "Detailed itinerary with specific venues, times, activities and approximate costs.",\n'
        f'      "estimatedCost": 300,\n'
        f'      "startDate": "2024-01-15",\n'
        f'      "endDate": "2024-01-15",\n'
        f'      "places": [{{"name": "Central Park", "url": "https://www.centralparknyc.org"}}],\n'
        f'      "dining": [{{"name": "Local Restaurant Name", "url": "https://restaurant-website.com"}}],\n'
        f'      "sources": [{{"title": "NYC Tourism Board", "url": "https://www.nycgo.com"}}]\n'
        f"    }}\n"
        f"  ]\n"
        f"}}\n\n"
        f"CRITICAL: Return ONLY valid JSON. No markdown, no explanations."
    )


def extract_json(raw: str) -> Optional[dict]:
    """Pull the first JSON object out of a model reply, tolerating fences and trailing commas."""
    if not raw:
        return None
    fence = FENCED_BLOCK.search(raw)
    body = fence.group(1) if fence else raw

    first, last = body.find("{"), body.rfind("}")
    if first != -1 and last > first:
        body = body[first:last + 1]
    body = TRAILING_COMMA.sub(r"\1", body.replace("\r", "")).strip()

    try:
        parsed = json.loads(body)
    except ValueError as e:
        logger.warning(f"Primary JSON parse failed, attempting aggressive cleanup: {e}")
        cleaned = body.replace("```", "")
        cleaned = re.sub(r"^[^{]+", "", cleaned)
        cleaned = re.sub(r"[^}]+$", "", cleaned)
        cleaned = re.sub(r"\s+", " ", cleaned)
        try:
            parsed = json.loads(cleaned)
        except ValueError:
            logger.error("JSON parse failed after cleanup")
            return None
    return parsed if isinstance(parsed, dict) else None


def extract_budget(text: str) -> float:
    """First dollar amount in the text, 0 when there is none."""
    match = BUDGET_AMOUNT.search(text or "")
    if not match:
        return 0
    return float(match.group(1).replace(",", ""))


def parse_text_sections(raw: str) -> List[dict]:
    """Fallback for replies that are not JSON: headed blocks of text become sections."""
    sections = []
    current = None
    for line in (raw or "").splitlines():
        line = line.strip()
        if SECTION_HEADER.match(line):
            if current:
                sections.append(current)
            current = {"title": line, "description": ""}
        elif current and len(line) > 10:
            current["description"] += ("\n" if current["description"] else "") + line
    if current:
        sections.append(current)

    for section in sections:
        section["description"] = section["description"] or "AI-generated content"
        section["budget"] = extract_budget(section["description"])
    return sections


def _link_list(heading: str, items, label_key: str = "name") -> Optional[str]:
    if not isinstance(items, list) or not items:
        return None
    lines = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get(label_key) or item.get("url") or ""
        url = item.get("url")
        if heading == "Sources":
            lines.append(f"• {name}: {url}")
        else:
            lines.append(f"• {name}" + (f" ({url})" if url else ""))
    return f"{heading}:\n" + "\n".join(lines) if lines else None


def structure_json_sections(raw_sections) -> List[dict]:
    """Normalize model-provided sections; places, dining and sources are folded into the description."""
    sections = []
    for index, raw in enumerate(raw_sections if isinstance(raw_sections, list) else []):
        if not isinstance(raw, dict):
            continue
        parts = [str(raw.get("description") or "").strip()]
        parts.append(_link_list("Places to Visit", raw.get("places")))
        parts.append(_link_list("Dining Options", raw.get("dining")))
        parts.append(_link_list("Sources", raw.get("sources"), "title"))
        try:
            budget = max(float(raw.get("estimatedCost") or raw.get("budget") or 0), 0)
        except (TypeError, ValueError):
            budget = 0
        sections.append({
            "title": str(raw.get("title") or f"AI Section {index + 1}"),
            "description": "\n\n".join(p for p in parts if p),
            "budget": budget,
            "start_date": raw.get("startDate") or raw.get("start_date"),
            "end_date": raw.get("endDate") or raw.get("end_date"),
        })
    return sections


def _safe_date(value) -> Optional[date]:
    if not value:
        return None
    try:
        return to_date(value)
    except ValueError:
        return None


def assign_dates(sections: List[dict], start: Optional[date], end: Optional[date]) -> List[dict]:
    """
    Date each section. With a trip window the days are partitioned across the
    sections; otherwise dates the model supplied are kept when they parse.
    """
    bounds = []
    if start and end and end >= start and sections:
        bounds = section_dates(start, day_span(start, end), len(sections))

    dated = []
    for index, section in enumerate(sections):
        if bounds:
            section_start, section_end = bounds[min(index, len(bounds) - 1)]
        else:
            section_start = _safe_date(section.get("start_date"))
            section_end = _safe_date(section.get("end_date")) or section_start
            if section_start and section_end and section_end < section_start:
                section_end = section_start
        dated.append({
            "id": index + 1,
            "title": section["title"],
            "description": section["description"],
            "budget": section.get("budget") or 0,
            "all_day": True,
            "start_time": None,
            "end_time": None,
            "start_date": section_start.isoformat() if section_start else None,
            "end_date": section_end.isoformat() if section_end else None,
            "date_range": format_date_range(section_start, section_end) if section_start else "",
        })
    return dated

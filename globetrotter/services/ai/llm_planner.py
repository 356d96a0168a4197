from fastapi.concurrency import run_in_threadpool
from globetrotter.core.llm_client import get_ai_completion
from globetrotter.core.logger import logger
from globetrotter.schemas.ai.plan import AIGenerateRequest
from globetrotter.utils.ai_itinerary import (
    assign_dates, build_prompt, extract_json, parse_text_sections, structure_json_sections,
)


async def generate_with_llm(request: AIGenerateRequest) -> dict:
    prompt = build_prompt(request)
    raw_text = await run_in_threadpool(get_ai_completion, prompt)

    data = extract_json(raw_text)
    if data is not None and isinstance(data.get("sections"), list) and data["sections"]:
        sections = structure_json_sections(data["sections"])
        parsed_with = "json"
    else:
        logger.warning("AI reply was not usable JSON; falling back to line parsing")
        data = data or {}
        sections = parse_text_sections(raw_text)
        parsed_with = "text"

    estimated = data.get("estimatedBudget")
    try:
        estimated = float(estimated) if estimated is not None else None
    except (TypeError, ValueError):
        estimated = None

    logger.info(f"AI generated {len(sections)} sections ({parsed_with})")
    return {
        "trip_title": str(data["tripTitle"]) if data.get("tripTitle") else None,
        "description": str(data["description"]) if data.get("description") else None,
        "estimated_budget": estimated,
        "sections": assign_dates(sections, request.start_date, request.end_date),
        "parsed_with": parsed_with,
    }

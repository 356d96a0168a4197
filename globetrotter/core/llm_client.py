from openai import OpenAI, OpenAIError
from fastapi import HTTPException, status
from typing import Optional
from globetrotter.core.config import settings
from globetrotter.core.logger import logger

SYSTEM_PROMPT = (
    "You are an expert travel planner. Create detailed, researched day-by-day "
    "travel itineraries and always answer with a single well-structured JSON object."
)

_client: Optional[OpenAI] = None


def get_llm_client() -> OpenAI:
    global _client

    if not settings.OPENROUTER_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI model is not configured."
        )
    if _client is None:
        _client = OpenAI(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.BASE_URL,
        )
    return _client


def get_ai_completion(prompt: str) -> str:
    client = get_llm_client()
    try:
        response = client.chat.completions.create(
            model=settings.LLM_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7
        )
    except OpenAIError as e:
        logger.error(f"LLM backend error: {e}")
        raise HTTPException(status_code=502, detail="AI model is temporarily unavailable.")
    logger.info("LLM connection successful. Response received.")

    if not response.choices:
        logger.error("No choices returned from LLM")
        raise HTTPException(status_code=502, detail="AI returned no text content.")

    return response.choices[0].message.content or ""

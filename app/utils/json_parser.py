import json
from typing import Any, Dict, Optional

from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


def parse_json_safely(text: Any) -> Optional[Dict[str, Any]]:
    """Parse tool-call arguments, handling common LLM formatting issues.

    Handles:
    - Arguments already decoded into a dict by the gateway
    - Markdown code blocks (```json ... ```)
    - Trailing garbage after the first complete object

    Args:
        text: The raw ``function.arguments`` value

    Returns:
        Parsed JSON object or None if parsing fails or the result is not an object
    """
    if isinstance(text, dict):
        return text
    if not text or not isinstance(text, str):
        return None

    cleaned_text = text.strip()
    if cleaned_text.startswith("```json"):
        cleaned_text = cleaned_text[7:]
    elif cleaned_text.startswith("```"):
        cleaned_text = cleaned_text[3:]

    if cleaned_text.endswith("```"):
        cleaned_text = cleaned_text[:-3]

    cleaned_text = cleaned_text.strip()

    try:
        parsed = json.loads(cleaned_text)
    except json.JSONDecodeError as e:
        LOGGER.warning(f"Initial JSON parse failed: {e}, attempting repairs...")

        start = cleaned_text.find("{")
        if start == -1:
            LOGGER.error(f"Failed to parse JSON: {e}")
            return None
        try:
            # First complete object wins; anything after it is discarded
            parsed, _ = json.JSONDecoder().raw_decode(cleaned_text, start)
            LOGGER.info("Parsed first JSON object from malformed arguments")
        except json.JSONDecodeError as inner:
            LOGGER.error(f"Failed to parse JSON: {inner}")
            return None

    if not isinstance(parsed, dict):
        LOGGER.error(f"Expected a JSON object, got {type(parsed).__name__}")
        return None
    return parsed

"""API endpoints for the question catalog and collaborator diagnostics."""

import time

from fastapi import APIRouter, Depends

from gap_engine.api.deps import get_text_generator
from gap_engine.core.logging import get_logger
from gap_engine.core.questions import QUESTIONS, SCORE_OPTIONS
from gap_engine.core.schemas_rooms import TextGeneratorCheck
from gap_engine.core.text_generator import OpenAITextGenerator

logger = get_logger(__name__)

router = APIRouter()


@router.get("/questions")
def list_questions() -> dict:
    """Return the question catalog and answer options."""
    return {
        "questions": [q.model_dump(mode="json") for q in QUESTIONS],
        "score_options": [o.model_dump() for o in SCORE_OPTIONS],
    }


@router.get("/diagnostics/text-generator", response_model=TextGeneratorCheck)
def check_text_generator(
    generator: OpenAITextGenerator = Depends(get_text_generator),
) -> TextGeneratorCheck:
    """Send a tiny prompt to the text generator and report the round trip."""
    start = time.monotonic()
    try:
        response = generator.ping()
    except Exception as e:
        logger.error(f"Text generator check failed: {e}")
        return TextGeneratorCheck(success=False, error=str(e))

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(f"Text generator check succeeded in {duration_ms}ms")
    return TextGeneratorCheck(success=True, response=response, duration_ms=duration_ms)

"""FastAPI dependency providers for collaborators.

Collaborators are built explicitly from settings; tests swap them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import HTTPException

from gap_engine.chains.compose_gap_report import ReportComposer
from gap_engine.core.config import get_settings
from gap_engine.core.errors import ConfigurationError
from gap_engine.core.logging import get_logger
from gap_engine.core.text_generator import OpenAITextGenerator, create_text_generator
from gap_engine.db.answers import AnswerStore
from gap_engine.db.rooms import RoomStore

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def _text_generator() -> OpenAITextGenerator:
    return create_text_generator(get_settings())


def get_text_generator() -> OpenAITextGenerator:
    """Provide the OpenAI text generator, 503 when it is not configured."""
    try:
        return _text_generator()
    except ConfigurationError as e:
        logger.error(f"Text generator unavailable: {e}")
        raise HTTPException(status_code=503, detail="Text generator is not configured") from e


def get_composer() -> ReportComposer:
    """Provide a ReportComposer wired to the OpenAI text generator."""
    return ReportComposer.from_settings(get_text_generator(), get_settings())


def get_room_store() -> RoomStore:
    return RoomStore()


def get_answer_store() -> AnswerStore:
    return AnswerStore()

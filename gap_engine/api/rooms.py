"""API endpoints for rooms and answer submission."""

from fastapi import APIRouter, Depends, HTTPException

from gap_engine.api.deps import get_answer_store, get_composer, get_room_store
from gap_engine.chains.compose_gap_report import ReportComposer
from gap_engine.core.analysis_service import submit_answer
from gap_engine.core.config import get_settings
from gap_engine.core.errors import (
    AnalysisTimeoutError,
    IncompleteSubmissionError,
    InvalidAnswerError,
    PersistenceError,
)
from gap_engine.core.logging import get_logger
from gap_engine.core.schemas_rooms import (
    Answer,
    Room,
    SubmissionOutcome,
    SubmitAnswerRequest,
    UserType,
)
from gap_engine.db.answers import AnswerStore
from gap_engine.db.rooms import RoomStore

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=Room)
def create_room(room_store: RoomStore = Depends(get_room_store)) -> Room:
    """
    Create a new room waiting for both participants.

    Raises:
        HTTPException 502: If the room could not be saved
    """
    try:
        return room_store.create()
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail="Failed to create room") from e


@router.get("/{room_id}", response_model=Room)
def get_room(room_id: str, room_store: RoomStore = Depends(get_room_store)) -> Room:
    """
    Get a room, including its report once analysis completed.

    Raises:
        HTTPException 404: If room not found
        HTTPException 502: If the store failed
    """
    try:
        room = room_store.get(room_id)
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail="Failed to retrieve room") from e

    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


@router.get("/{room_id}/answers", response_model=list[Answer])
def list_answers(
    room_id: str, answer_store: AnswerStore = Depends(get_answer_store)
) -> list[Answer]:
    """List the answer sets stored for a room."""
    try:
        return answer_store.list_by_room(room_id)
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail="Failed to retrieve answers") from e


@router.get("/{room_id}/answers/{user_type}/exists")
def has_answered(
    room_id: str,
    user_type: UserType,
    answer_store: AnswerStore = Depends(get_answer_store),
) -> dict:
    """Check whether a participant already answered."""
    try:
        return {"has_answered": answer_store.has_answered(room_id, user_type)}
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail="Failed to check answers") from e


@router.post("/{room_id}/answers", response_model=SubmissionOutcome)
def submit_room_answer(
    room_id: str,
    request: SubmitAnswerRequest,
    composer: ReportComposer = Depends(get_composer),
    answer_store: AnswerStore = Depends(get_answer_store),
    room_store: RoomStore = Depends(get_room_store),
) -> SubmissionOutcome:
    """
    Submit one participant's answers.

    When both participants have answered, the room is analyzed and the
    report saved on the room.

    Raises:
        HTTPException 400: If answers are missing for some questions
        HTTPException 422: If a score is not an integer 1-5
        HTTPException 502: If the answers could not be saved or read
        HTTPException 504: If the analysis ran out of time
    """
    try:
        return submit_answer(
            room_id,
            request.user_type,
            request.answers,
            composer=composer,
            answer_store=answer_store,
            room_store=room_store,
            timeout=get_settings().ANALYSIS_TIMEOUT_SECONDS,
        )
    except IncompleteSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except InvalidAnswerError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail="Failed to save answers") from e
    except AnalysisTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to submit answers for room {room_id}")
        raise HTTPException(status_code=500, detail="Failed to submit answers") from e

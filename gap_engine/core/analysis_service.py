"""Analysis runs and the room submission flow.

A run moves through Aggregating -> Classifying -> GeneratingCategoryReports
-> GeneratingSummary -> Done. Only a precondition failure while aggregating
ends a run with an error; generation failures fall back inside the composer.
Persistence failures after a run are reported next to the computed result.
"""

import concurrent.futures
import logging
import threading
import uuid
import weakref
from collections.abc import Mapping, Sequence
from typing import Any

from gap_engine.chains.compose_gap_report import ReportComposer
from gap_engine.core.errors import AnalysisTimeoutError, PersistenceError
from gap_engine.core.grade_classifier import classify_overall
from gap_engine.core.logging import get_logger, log_with_context
from gap_engine.core.questions import QUESTIONS
from gap_engine.core.schemas_analysis import AnalysisResult, AnalysisStage, Question
from gap_engine.core.schemas_rooms import SubmissionOutcome
from gap_engine.core.score_aggregator import aggregate, validate_answer_set
from gap_engine.db.answers import AnswerStore
from gap_engine.db.rooms import RoomStore, result_to_room_update

logger = get_logger(__name__)


def _enter(stage: AnalysisStage, run_id: str, **kwargs: Any) -> None:
    log_with_context(logger, logging.INFO, f"Analysis stage: {stage.value}", run_id=run_id, **kwargs)


def _raise_if_cancelled(cancelled: threading.Event | None, stage: AnalysisStage) -> None:
    if cancelled is not None and cancelled.is_set():
        raise AnalysisTimeoutError(f"Analysis abandoned before {stage.value}")


def _run(
    answers_a: Mapping[str, Any],
    answers_b: Mapping[str, Any],
    composer: ReportComposer,
    questions: Sequence[Question],
    roles: tuple[str, str],
    run_id: str,
    cancelled: threading.Event | None = None,
) -> AnalysisResult:
    _enter(AnalysisStage.AGGREGATING, run_id)
    aggregates = aggregate(answers_a, answers_b, questions, roles=roles)

    _enter(AnalysisStage.CLASSIFYING, run_id)
    grade = classify_overall(aggregates.total_score, aggregates.avg_diff)

    def on_stage(stage: AnalysisStage) -> None:
        _raise_if_cancelled(cancelled, stage)
        _enter(stage, run_id, grade=grade.value)

    result = composer.compose(
        grade,
        aggregates.per_category,
        aggregates.total_score,
        questions=questions,
        on_stage=on_stage,
    )
    _raise_if_cancelled(cancelled, AnalysisStage.DONE)
    _enter(
        AnalysisStage.DONE,
        run_id,
        grade=result.grade.value,
        fallback_sections=sum(r.is_fallback for r in result.category_reports)
        + int(result.summary_is_fallback),
    )
    return result


def run_analysis(
    answers_a: Mapping[str, Any],
    answers_b: Mapping[str, Any],
    composer: ReportComposer,
    questions: Sequence[Question] = QUESTIONS,
    roles: tuple[str, str] = ("host", "guest"),
    timeout: float | None = None,
) -> AnalysisResult:
    """
    Run one full analysis over two answer sets.

    Args:
        answers_a: First participant's answers
        answers_b: Second participant's answers
        composer: ReportComposer wired to a text generator
        questions: Question catalog
        roles: Role names of the two participants
        timeout: Wall-clock budget in seconds, None for unbounded

    Returns:
        AnalysisResult (sections may be fallback text)

    Raises:
        AnswerPreconditionError: If either answer set cannot be scored
        AnalysisTimeoutError: If the run exceeds its budget
    """
    run_id = str(uuid.uuid4())

    if timeout is None:
        return _run(answers_a, answers_b, composer, questions, roles, run_id)

    cancelled = threading.Event()
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    future = executor.submit(
        _run, answers_a, answers_b, composer, questions, roles, run_id, cancelled
    )
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError as e:
        # Stops the abandoned run at its next stage boundary
        cancelled.set()
        log_with_context(
            logger, logging.ERROR, "Analysis run exceeded its budget", run_id=run_id, timeout=timeout
        )
        raise AnalysisTimeoutError(f"Analysis did not finish within {timeout}s") from e
    finally:
        # Abandon the run instead of waiting on the generator
        executor.shutdown(wait=False, cancel_futures=True)


# =============================================================================
# Room submission flow
# =============================================================================

# Entries disappear once no submission holds the room's lock
_room_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_room_locks_guard = threading.Lock()


def _room_lock(room_id: str) -> threading.Lock:
    with _room_locks_guard:
        lock = _room_locks.get(room_id)
        if lock is None:
            lock = _room_locks[room_id] = threading.Lock()
        return lock


def submit_answer(
    room_id: str,
    user_type: str,
    answers: Mapping[str, Any],
    composer: ReportComposer,
    answer_store: AnswerStore,
    room_store: RoomStore,
    questions: Sequence[Question] = QUESTIONS,
    timeout: float | None = None,
) -> SubmissionOutcome:
    """
    Save one participant's answers and analyze the room once both exist.

    Args:
        room_id: Room id
        user_type: "host" or "guest"
        answers: Question id -> score
        composer: ReportComposer for the analysis
        answer_store: Answer persistence
        room_store: Room persistence
        questions: Question catalog
        timeout: Wall-clock budget for the analysis run

    Returns:
        SubmissionOutcome

    Raises:
        AnswerPreconditionError: If the answers cannot be scored
        PersistenceError: If saving or listing answers fails
        AnalysisTimeoutError: If the analysis exceeds its budget
    """
    validated = validate_answer_set(answers, questions, role=user_type)

    # Serializes the "both answered" transition so one room is analyzed once
    with _room_lock(room_id):
        room = room_store.get(room_id)
        if room is not None and room.status == "completed":
            logger.info("Room already analyzed, answers not stored", extra={"room_id": room_id})
            return SubmissionOutcome(status="completed", should_show_result=True)

        # A stored answer set is never replaced; a repeat submission only
        # retries the analysis
        if answer_store.has_answered(room_id, user_type):
            logger.info(
                f"{user_type} already answered, keeping stored answers",
                extra={"room_id": room_id},
            )
        else:
            answer_store.insert(room_id, user_type, validated)

        stored = answer_store.list_by_room(room_id)
        by_role: dict[str, Any] = {}
        for answer in stored:
            by_role.setdefault(answer.user_type, answer)
        host, guest = by_role.get("host"), by_role.get("guest")

        if host is None or guest is None:
            logger.info(
                f"Waiting for partner ({len(stored)} answer sets)", extra={"room_id": room_id}
            )
            return SubmissionOutcome(status="waiting")

        logger.info("Both answers present, starting analysis", extra={"room_id": room_id})
        result = run_analysis(
            host.answers,
            guest.answers,
            composer,
            questions=questions,
            roles=("host", "guest"),
            timeout=timeout,
        )

        try:
            room_store.update(room_id, result_to_room_update(result))
        except PersistenceError as e:
            logger.error(f"Analysis computed but room update failed: {e}", extra={"room_id": room_id})
            return SubmissionOutcome(
                status="persistence_failed",
                should_show_result=False,
                result=result,
                error=str(e),
            )

    status = "completed_with_fallback" if result.has_fallback else "completed"
    return SubmissionOutcome(status=status, should_show_result=True, result=result)

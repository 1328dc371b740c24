"""Score aggregation over two participants' answer sets.

Pure functions, no I/O. Totals include every catalog question (the
self-assessment question too); category aggregates leave self-assessment out
so it never reaches a report.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from gap_engine.core.errors import IncompleteSubmissionError, InvalidAnswerError
from gap_engine.core.questions import MAX_SCORE, MIN_SCORE, QUESTIONS
from gap_engine.core.schemas_analysis import (
    AggregateResult,
    Category,
    CategoryAggregate,
    Question,
    ScoreDiff,
)

PARTICIPANTS = 2


def validate_answer_set(
    answers: Mapping[str, Any],
    questions: Sequence[Question] = QUESTIONS,
    role: str = "participant",
) -> dict[str, int]:
    """
    Check that an answer set covers the catalog with integer scores 1-5.

    Args:
        answers: Question id -> score
        questions: Catalog to check against
        role: Participant role, used in error messages

    Returns:
        The answers restricted to catalog ids

    Raises:
        IncompleteSubmissionError: If any catalog id is missing
        InvalidAnswerError: If a score is not an integer in [1, 5]
    """
    ordered = sorted(questions, key=lambda q: q.order)
    missing = [q.id for q in ordered if q.id not in answers]
    if missing:
        raise IncompleteSubmissionError(role, missing)

    validated: dict[str, int] = {}
    for q in ordered:
        value = answers[q.id]
        # bool is an int subclass; True/False are not scores
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAnswerError(role, q.id, value)
        if not MIN_SCORE <= value <= MAX_SCORE:
            raise InvalidAnswerError(role, q.id, value)
        validated[q.id] = value

    return validated


def aggregate(
    answers_a: Mapping[str, Any],
    answers_b: Mapping[str, Any],
    questions: Sequence[Question] = QUESTIONS,
    roles: tuple[str, str] = ("host", "guest"),
) -> AggregateResult:
    """
    Compute per-question diffs, per-category aggregates and overall totals.

    Args:
        answers_a: First participant's answers
        answers_b: Second participant's answers
        questions: Question catalog
        roles: Role names of the two participants, for error messages

    Returns:
        AggregateResult with total_score, avg_diff, diffs and per_category

    Raises:
        IncompleteSubmissionError: If either answer set misses a question
        InvalidAnswerError: If either answer set holds an invalid score
    """
    if not questions:
        raise ValueError("Cannot aggregate over an empty question catalog")

    a = validate_answer_set(answers_a, questions, roles[0])
    b = validate_answer_set(answers_b, questions, roles[1])
    ordered = sorted(questions, key=lambda q: q.order)

    diffs = tuple(
        ScoreDiff(question_id=q.id, category=q.category, diff=abs(a[q.id] - b[q.id]))
        for q in ordered
    )

    total_score = sum(a[q.id] + b[q.id] for q in ordered)
    avg_diff = sum(d.diff for d in diffs) / len(diffs)

    per_category = []
    for category in Category:
        if category == Category.SELF_ASSESSMENT:
            continue
        in_category = [q for q in ordered if q.category == category]
        if not in_category:
            continue
        category_diffs = tuple(d for d in diffs if d.category == category)
        total_diff = sum(d.diff for d in category_diffs)
        count = len(in_category)
        per_category.append(
            CategoryAggregate(
                category=category,
                total_diff=total_diff,
                question_count=count,
                combined_score=sum(a[q.id] + b[q.id] for q in in_category),
                max_score=count * MAX_SCORE * PARTICIPANTS,
                avg_diff=total_diff / count,
                diffs=category_diffs,
            )
        )

    return AggregateResult(
        total_score=total_score,
        avg_diff=avg_diff,
        diffs=diffs,
        per_category=tuple(per_category),
    )

"""Threshold tables mapping aggregates to grades and category status.

Rules are evaluated top to bottom and the first match wins. The diff checks
come before the score bands so a sharp disagreement on a single question can
pull a high-scoring pair down to the lowest level.
"""

from gap_engine.core.questions import GRADE_LABELS
from gap_engine.core.schemas_analysis import CategoryAggregate, CategoryStatus, GapGrade

# Overall thresholds (total score out of 100)
OVERALL_ATTENTION_SCORE = 40
OVERALL_ATTENTION_DIFF = 2.5
OVERALL_EXCELLENT_SCORE = 90
OVERALL_EXCELLENT_DIFF = 1.0
OVERALL_GOOD_SCORE = 80
OVERALL_GOOD_DIFF = 1.5
OVERALL_CAUTION_SCORE = 60

# Category thresholds (percentage of the category maximum)
CATEGORY_ATTENTION_PCT = 40
CATEGORY_ATTENTION_DIFF = 2.0
CATEGORY_CAUTION_DIFF = 1.5
CATEGORY_EXCELLENT_PCT = 90
CATEGORY_GOOD_PCT = 80
CATEGORY_CAUTION_PCT = 60


def classify_overall(total_score: float, avg_diff: float) -> GapGrade:
    """Map the overall total and average diff to a GapGrade."""
    if total_score < OVERALL_ATTENTION_SCORE or avg_diff >= OVERALL_ATTENTION_DIFF:
        return GapGrade.ATTENTION
    if total_score >= OVERALL_EXCELLENT_SCORE and avg_diff <= OVERALL_EXCELLENT_DIFF:
        return GapGrade.EXCELLENT
    if total_score >= OVERALL_GOOD_SCORE and avg_diff <= OVERALL_GOOD_DIFF:
        return GapGrade.GOOD
    if total_score >= OVERALL_CAUTION_SCORE:
        return GapGrade.CAUTION
    return GapGrade.ATTENTION


def classify_category(combined_score: float, max_score: float, avg_diff: float) -> CategoryStatus:
    """
    Map one category's combined score and average diff to a status.

    Args:
        combined_score: Sum of both participants' scores in the category
        max_score: Highest possible combined score for the category
        avg_diff: Mean absolute diff over the category's questions

    Raises:
        ValueError: If max_score is not positive
    """
    if max_score <= 0:
        raise ValueError(f"max_score must be positive, got {max_score}")

    pct = combined_score / max_score * 100

    if pct < CATEGORY_ATTENTION_PCT or avg_diff >= CATEGORY_ATTENTION_DIFF:
        return GapGrade.ATTENTION
    if avg_diff >= CATEGORY_CAUTION_DIFF:
        return GapGrade.CAUTION
    if pct >= CATEGORY_EXCELLENT_PCT:
        return GapGrade.EXCELLENT
    if pct >= CATEGORY_GOOD_PCT:
        return GapGrade.GOOD
    if pct >= CATEGORY_CAUTION_PCT:
        return GapGrade.CAUTION
    return GapGrade.ATTENTION


def classify_aggregate(aggregate: CategoryAggregate) -> CategoryStatus:
    """Shortcut for classify_category on a CategoryAggregate."""
    return classify_category(aggregate.combined_score, aggregate.max_score, aggregate.avg_diff)


def grade_label(grade: GapGrade) -> str:
    """Display label for a grade or category status."""
    return GRADE_LABELS[grade]

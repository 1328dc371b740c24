"""Pydantic schemas for scoring, grading and gap reports."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Thematic grouping of questions, in catalog order."""

    VISION = "vision"
    OPERATION = "operation"
    COMMUNICATION = "communication"
    TRUST = "trust"
    SELF_ASSESSMENT = "self_assessment"


class GapGrade(str, Enum):
    """Four-level ordinal scale used for the overall grade and category status."""

    EXCELLENT = "excellent"
    GOOD = "good"
    CAUTION = "caution"
    ATTENTION = "attention"


# Category status shares the grade scale
CategoryStatus = GapGrade


class AnalysisStage(str, Enum):
    """Stages of one analysis run."""

    AGGREGATING = "aggregating"
    CLASSIFYING = "classifying"
    GENERATING_CATEGORY_REPORTS = "generating_category_reports"
    GENERATING_SUMMARY = "generating_summary"
    DONE = "done"


# =============================================================================
# Catalog
# =============================================================================


class Question(BaseModel):
    """One catalog question."""

    model_config = ConfigDict(frozen=True)

    id: str
    order: int
    text: str
    category: Category


class ScoreOption(BaseModel):
    """A selectable Likert answer."""

    model_config = ConfigDict(frozen=True)

    value: int = Field(..., ge=1, le=5)
    label: str


# =============================================================================
# Aggregates
# =============================================================================


class ScoreDiff(BaseModel):
    """Absolute gap between the two participants on one question."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    category: Category
    diff: int = Field(..., ge=0, le=4)


class CategoryAggregate(BaseModel):
    """Per-category statistics over both participants."""

    model_config = ConfigDict(frozen=True)

    category: Category
    total_diff: int = Field(..., ge=0)
    question_count: int = Field(..., ge=1)
    combined_score: int = Field(..., ge=0)
    max_score: int = Field(..., ge=1)
    avg_diff: float = Field(..., ge=0)
    diffs: tuple[ScoreDiff, ...] = ()

    @property
    def score_percentage(self) -> float:
        return self.combined_score / self.max_score * 100


class AggregateResult(BaseModel):
    """Overall totals plus the reportable category aggregates."""

    model_config = ConfigDict(frozen=True)

    total_score: int
    avg_diff: float
    diffs: tuple[ScoreDiff, ...]
    per_category: tuple[CategoryAggregate, ...]


# =============================================================================
# Reports
# =============================================================================


class CategoryReport(BaseModel):
    """Narrative report for one category, stored on the room as JSON."""

    model_config = ConfigDict(populate_by_name=True)

    category: Category
    category_name: str = Field(..., alias="categoryName")
    status: CategoryStatus
    status_label: str = Field(..., alias="statusLabel")
    report: str
    is_fallback: bool = Field(False, alias="isFallback")


class AnalysisResult(BaseModel):
    """Fully assembled output of one analysis run."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    grade: GapGrade
    category_reports: list[CategoryReport] = Field(
        default_factory=list, alias="categoryReports"
    )
    summary_is_fallback: bool = Field(False, alias="summaryIsFallback")

    @property
    def has_fallback(self) -> bool:
        """True when any section is generic fallback text."""
        return self.summary_is_fallback or any(r.is_fallback for r in self.category_reports)


class GenerationRequest(BaseModel):
    """Pure-data request handed to the text generator."""

    model_config = ConfigDict(frozen=True)

    system_prompt: str
    user_prompt: str
    max_output_tokens: int = Field(..., ge=1)
    temperature: float = Field(..., ge=0, le=2)

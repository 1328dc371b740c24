"""Pydantic schemas for rooms, answers and the HTTP surface."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from gap_engine.core.schemas_analysis import AnalysisResult, CategoryReport, GapGrade

RoomStatus = Literal["waiting", "completed"]
UserType = Literal["host", "guest"]
SubmissionStatus = Literal["waiting", "completed", "completed_with_fallback", "persistence_failed"]


# =============================================================================
# Stored records (match DB shape)
# =============================================================================


class Room(BaseModel):
    """Shared session pairing two participants' submissions."""

    id: str
    status: RoomStatus = "waiting"
    summary_report: str | None = None
    gap_grade: GapGrade | None = None
    category_reports: list[CategoryReport] | None = None
    created_at: str | None = None
    updated_at: str | None = None


class Answer(BaseModel):
    """One participant's stored answer set."""

    id: str | None = None
    room_id: str
    user_type: UserType
    answers: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None


# =============================================================================
# Requests
# =============================================================================


class SubmitAnswerRequest(BaseModel):
    """Answer submission for one participant of a room."""

    user_type: UserType = Field(..., description="Participant role")
    answers: dict[str, Any] = Field(..., description="Question id -> score (1-5)")


class AnalyzeRequest(BaseModel):
    """Stateless analysis of two answer sets."""

    model_config = ConfigDict(populate_by_name=True)

    player1_answers: dict[str, Any] | None = Field(None, alias="player1Answers")
    player2_answers: dict[str, Any] | None = Field(None, alias="player2Answers")


# =============================================================================
# Responses
# =============================================================================


class SubmissionOutcome(BaseModel):
    """
    Result of submitting one answer set.

    status tells the caller which of the outcomes happened:
    - waiting: saved, partner has not answered yet
    - completed: analysis done and saved
    - completed_with_fallback: saved, but some sections are fallback text
    - persistence_failed: analysis done but the room could not be updated
    """

    status: SubmissionStatus
    should_show_result: bool = False
    result: AnalysisResult | None = None
    error: str | None = None


class TextGeneratorCheck(BaseModel):
    """Connectivity check against the text generator."""

    success: bool
    response: str | None = None
    duration_ms: int | None = None
    error: str | None = None

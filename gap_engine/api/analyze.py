"""API endpoint for stateless analysis of two answer sets."""

from fastapi import APIRouter, Depends, HTTPException

from gap_engine.api.deps import get_composer
from gap_engine.chains.compose_gap_report import ReportComposer
from gap_engine.core.analysis_service import run_analysis
from gap_engine.core.config import get_settings
from gap_engine.core.errors import (
    AnalysisTimeoutError,
    IncompleteSubmissionError,
    InvalidAnswerError,
)
from gap_engine.core.logging import get_logger
from gap_engine.core.schemas_analysis import AnalysisResult
from gap_engine.core.schemas_rooms import AnalyzeRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/analyze", response_model=AnalysisResult)
def analyze(
    request: AnalyzeRequest,
    composer: ReportComposer = Depends(get_composer),
) -> AnalysisResult:
    """
    Analyze two answer sets without touching any room.

    Raises:
        HTTPException 400: If either answer set is missing, empty or incomplete
        HTTPException 422: If a score is not an integer 1-5
        HTTPException 504: If the analysis ran out of time
    """
    if request.player1_answers is None or request.player2_answers is None:
        logger.error("Analyze request without both answer sets")
        raise HTTPException(status_code=400, detail="回答データが不足しています")

    if not request.player1_answers or not request.player2_answers:
        logger.error("Analyze request with an empty answer set")
        raise HTTPException(status_code=400, detail="回答データが空です")

    try:
        return run_analysis(
            request.player1_answers,
            request.player2_answers,
            composer,
            roles=("player1", "player2"),
            timeout=get_settings().ANALYSIS_TIMEOUT_SECONDS,
        )
    except IncompleteSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except InvalidAnswerError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except AnalysisTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Analysis failed")
        raise HTTPException(status_code=500, detail="分析処理に失敗しました") from e

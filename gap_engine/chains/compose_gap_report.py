"""Compose the narrative gap report from grades and category aggregates.

One generation request per reportable category plus one for the overall
summary. Prompts carry only derived signals (qualitative gap levels and
status labels); neither participant's score, the diffs nor any total ever
reach the text generator. A failed request never aborts the run: the section
falls back to a fixed template that names only the category and its status,
or the grade for the summary.
"""

import concurrent.futures
from collections.abc import Callable, Sequence

from gap_engine.core.config import Settings
from gap_engine.core.grade_classifier import classify_aggregate, grade_label
from gap_engine.core.logging import get_logger
from gap_engine.core.questions import CATEGORY_DESCRIPTIONS, CATEGORY_NAMES, QUESTIONS
from gap_engine.core.schemas_analysis import (
    AnalysisResult,
    AnalysisStage,
    Category,
    CategoryAggregate,
    CategoryReport,
    CategoryStatus,
    GapGrade,
    GenerationRequest,
    Question,
)
from gap_engine.core.text_generator import TextGenerator

logger = get_logger(__name__)

StageCallback = Callable[[AnalysisStage], None]


# ruff: noqa: E501
SYSTEM_PROMPT = "あなたは夫婦関係の専門カウンセラーです。優しく、前向きなアドバイスを心がけてください。"

CATEGORY_PROMPT = """あなたは夫婦関係のカウンセラーです。以下のカテゴリーについて、お二人の回答の違いを分析し、簡潔なレポートを作成してください。

【カテゴリー】{category_name}
{category_description}

【関連する質問と認識の差】
{question_lines}

【このカテゴリーの状況】{status_label}

【重要なルール】
- お二人それぞれの具体的な回答や点数には絶対に触れないこと
- 断定的な批判は避け、柔らかい表現を使うこと
- このカテゴリーに特化した観点でアドバイスすること
- 二、三行の簡潔な日本語で記述すること

【出力形式】
丁寧な日本語で二、三行のテキストのみを出力してください。"""

SUMMARY_PROMPT = """あなたは夫婦関係のカウンセラーです。以下の分析結果をもとに、全体的なサマリーを作成してください。

【総合評価】{grade_label}

【カテゴリー別の状況】
{category_lines}

【重要なルール】
- お二人の関係性を全体的に評価し、前向きなメッセージを伝えること
- 数値には触れず、温かみのある表現を使うこと
- 三、四行の簡潔な日本語で記述すること

【出力形式】
丁寧な日本語で三、四行のテキストのみを出力してください。"""

CATEGORY_FALLBACK = (
    "「{category_name}」は「{status_label}」という結果でした。"
    "このテーマについて、お二人で気軽に話す時間を作ってみてください。"
)

SUMMARY_FALLBACK = (
    "総合評価は「{grade_label}」でした。"
    "カテゴリーごとの結果を参考に、お二人のペースで話し合ってみてください。"
)

# Qualitative gap levels, indexed by diff; anything larger uses the last level
GAP_LEVELS = (
    "認識はほぼ一致",
    "わずかな差",
    "やや差がある",
    "大きな差がある",
)


def gap_level(diff: int) -> str:
    """Qualitative description of a per-question diff."""
    return GAP_LEVELS[min(max(diff, 0), len(GAP_LEVELS) - 1)]


def category_fallback(category: Category, status: CategoryStatus) -> str:
    return CATEGORY_FALLBACK.format(
        category_name=CATEGORY_NAMES[category], status_label=grade_label(status)
    )


def summary_fallback(grade: GapGrade) -> str:
    return SUMMARY_FALLBACK.format(grade_label=grade_label(grade))


def build_category_request(
    aggregate: CategoryAggregate,
    status: CategoryStatus,
    questions: Sequence[Question],
    max_output_tokens: int,
    temperature: float,
) -> GenerationRequest:
    """
    Build the generation request for one category.

    Raises:
        ValueError: If a diff refers to a question missing from ``questions``
    """
    question_text = {q.id: q.text for q in questions}
    unknown = [d.question_id for d in aggregate.diffs if d.question_id not in question_text]
    if unknown:
        raise ValueError(f"Questions not in catalog: {', '.join(unknown)}")

    question_lines = "\n".join(
        f"・{question_text[d.question_id]}（{gap_level(d.diff)}）" for d in aggregate.diffs
    )

    user_prompt = CATEGORY_PROMPT.format(
        category_name=CATEGORY_NAMES[aggregate.category],
        category_description=CATEGORY_DESCRIPTIONS[aggregate.category],
        question_lines=question_lines,
        status_label=grade_label(status),
    )
    return GenerationRequest(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
        max_output_tokens=max_output_tokens,
        temperature=temperature,
    )


def build_summary_request(
    grade: GapGrade,
    statuses: Sequence[tuple[Category, CategoryStatus]],
    max_output_tokens: int,
    temperature: float,
) -> GenerationRequest:
    """Build the generation request for the overall summary."""
    category_lines = "\n".join(
        f"・{CATEGORY_NAMES[category]}: {grade_label(status)}" for category, status in statuses
    )
    user_prompt = SUMMARY_PROMPT.format(
        grade_label=grade_label(grade),
        category_lines=category_lines,
    )
    return GenerationRequest(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
        max_output_tokens=max_output_tokens,
        temperature=temperature,
    )


class ReportComposer:
    """
    Turns a grade and category aggregates into an AnalysisResult.

    Category requests run concurrently on a thread pool; results are
    reassembled in the order the aggregates were given (catalog order), not
    in completion order.
    """

    def __init__(
        self,
        generator: TextGenerator,
        questions: Sequence[Question] = QUESTIONS,
        category_max_tokens: int = 300,
        summary_max_tokens: int = 500,
        temperature: float = 0.7,
        max_workers: int = 4,
    ):
        self.generator = generator
        self.questions = questions
        self.category_max_tokens = category_max_tokens
        self.summary_max_tokens = summary_max_tokens
        self.temperature = temperature
        self.max_workers = max_workers

    @classmethod
    def from_settings(
        cls,
        generator: TextGenerator,
        settings: Settings,
        questions: Sequence[Question] = QUESTIONS,
    ) -> "ReportComposer":
        return cls(
            generator=generator,
            questions=questions,
            category_max_tokens=settings.CATEGORY_REPORT_MAX_TOKENS,
            summary_max_tokens=settings.SUMMARY_MAX_TOKENS,
            temperature=settings.REPORT_TEMPERATURE,
            max_workers=settings.REPORT_MAX_WORKERS,
        )

    def compose(
        self,
        grade: GapGrade,
        category_aggregates: Sequence[CategoryAggregate],
        total_score: int,
        questions: Sequence[Question] | None = None,
        on_stage: StageCallback | None = None,
    ) -> AnalysisResult:
        """
        Generate category reports and the summary, falling back per section.

        Args:
            grade: Overall grade
            category_aggregates: Aggregates in catalog order
            total_score: Overall total, used for logging only
            questions: Catalog the aggregates were built from, defaults to the
                composer's own
            on_stage: Called before each generation stage; an exception raised
                from it aborts the composition

        Returns:
            Complete AnalysisResult
        """
        logger.info(
            f"Composing gap report for {len(category_aggregates)} categories",
            extra={"extra_data": {"grade": grade.value, "total_score": total_score}},
        )

        if on_stage:
            on_stage(AnalysisStage.GENERATING_CATEGORY_REPORTS)
        category_reports = self.generate_category_reports(category_aggregates, questions)

        if on_stage:
            on_stage(AnalysisStage.GENERATING_SUMMARY)
        summary, summary_is_fallback = self.generate_summary(grade, category_reports)

        return AnalysisResult(
            summary=summary,
            grade=grade,
            category_reports=category_reports,
            summary_is_fallback=summary_is_fallback,
        )

    def generate_category_reports(
        self,
        category_aggregates: Sequence[CategoryAggregate],
        questions: Sequence[Question] | None = None,
    ) -> list[CategoryReport]:
        """
        Generate one report per reportable category, concurrently.

        Self-assessment aggregates are skipped. The returned list follows the
        order of ``category_aggregates``.
        """
        catalog = self.questions if questions is None else questions
        reportable = [
            agg for agg in category_aggregates if agg.category != Category.SELF_ASSESSMENT
        ]
        if not reportable:
            return []

        reports: list[CategoryReport | None] = [None] * len(reportable)
        workers = min(self.max_workers, len(reportable))

        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._generate_category_report, agg, catalog): index
                for index, agg in enumerate(reportable)
            }
            for future in concurrent.futures.as_completed(futures):
                reports[futures[future]] = future.result()

        return [r for r in reports if r is not None]

    def generate_summary(
        self,
        grade: GapGrade,
        category_reports: Sequence[CategoryReport],
    ) -> tuple[str, bool]:
        """
        Generate the overall summary from the grade and category statuses.

        Returns:
            (summary text, whether it is fallback text)
        """
        request = build_summary_request(
            grade,
            [(r.category, r.status) for r in category_reports],
            max_output_tokens=self.summary_max_tokens,
            temperature=self.temperature,
        )
        try:
            return self._run(request), False
        except Exception as e:
            logger.warning(f"Summary generation failed, using fallback: {e}")
            return summary_fallback(grade), True

    def _generate_category_report(
        self, aggregate: CategoryAggregate, questions: Sequence[Question]
    ) -> CategoryReport:
        status = classify_aggregate(aggregate)
        request = build_category_request(
            aggregate,
            status,
            questions,
            max_output_tokens=self.category_max_tokens,
            temperature=self.temperature,
        )

        is_fallback = False
        try:
            report = self._run(request)
        except Exception as e:
            logger.warning(
                f"Category report generation failed for {aggregate.category.value}, using fallback: {e}"
            )
            report = category_fallback(aggregate.category, status)
            is_fallback = True

        return CategoryReport(
            category=aggregate.category,
            category_name=CATEGORY_NAMES[aggregate.category],
            status=status,
            status_label=grade_label(status),
            report=report,
            is_fallback=is_fallback,
        )

    def _run(self, request: GenerationRequest) -> str:
        text = self.generator.generate(
            request.system_prompt,
            request.user_prompt,
            request.max_output_tokens,
            request.temperature,
        )
        text = (text or "").strip()
        if not text:
            raise ValueError("empty response from text generator")
        return text

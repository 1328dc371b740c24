"""Tests for gap report composition with stubbed text generators."""

import re

import pytest

from gap_engine.chains.compose_gap_report import (
    GAP_LEVELS,
    ReportComposer,
    build_category_request,
    build_summary_request,
    category_fallback,
    gap_level,
    summary_fallback,
)
from gap_engine.core.grade_classifier import classify_aggregate, classify_overall
from gap_engine.core.questions import CATEGORY_NAMES, QUESTIONS
from gap_engine.core.schemas_analysis import Category, CategoryAggregate, GapGrade
from gap_engine.core.score_aggregator import aggregate
from tests.fakes.fake_answers import make_answers
from tests.fakes.fake_generator import FailingGenerator, RecordingGenerator

DIGITS = re.compile(r"[0-9０-９]")


@pytest.fixture
def mixed_aggregates():
    host = make_answers(4, q1=1, q3=2, q6=5, q9=3)
    guest = make_answers(3, q2=5, q4=1, q8=2, q10=4)
    return aggregate(host, guest)


def _compose(generator, result, **kwargs):
    composer = ReportComposer(generator, **kwargs)
    grade = classify_overall(result.total_score, result.avg_diff)
    return composer.compose(grade, result.per_category, result.total_score)


class TestCompose:
    def test_happy_path(self, all_fives):
        result = aggregate(all_fives, all_fives)
        generator = RecordingGenerator(reply="とても良い関係です。")

        analysis = _compose(generator, result)

        assert analysis.grade == GapGrade.EXCELLENT
        assert analysis.summary == "とても良い関係です。"
        assert not analysis.has_fallback
        assert [r.category for r in analysis.category_reports] == [
            Category.VISION,
            Category.OPERATION,
            Category.COMMUNICATION,
            Category.TRUST,
        ]
        for report in analysis.category_reports:
            assert report.status == GapGrade.EXCELLENT
            assert report.status_label == "非常に良好"
            assert report.report == "とても良い関係です。"
            assert report.category_name == CATEGORY_NAMES[report.category]
        # four categories plus the summary
        assert len(generator.calls) == 5

    def test_self_assessment_never_reported(self, all_fives):
        result = aggregate(all_fives, all_fives)
        self_agg = CategoryAggregate(
            category=Category.SELF_ASSESSMENT,
            total_diff=0,
            question_count=1,
            combined_score=10,
            max_score=10,
            avg_diff=0,
        )
        generator = RecordingGenerator()

        analysis = ReportComposer(generator).compose(
            GapGrade.EXCELLENT, [*result.per_category, self_agg], result.total_score
        )

        assert Category.SELF_ASSESSMENT not in {r.category for r in analysis.category_reports}
        assert len(generator.calls) == 5

    def test_generation_settings_forwarded(self, all_fives):
        result = aggregate(all_fives, all_fives)
        generator = RecordingGenerator()

        _compose(generator, result, category_max_tokens=123, summary_max_tokens=456, temperature=0.2)

        tokens = sorted(call["max_output_tokens"] for call in generator.calls)
        assert tokens == [123, 123, 123, 123, 456]
        assert all(call["temperature"] == 0.2 for call in generator.calls)


class TestFallbacks:
    def test_always_failing_generator_still_completes(self, mixed_aggregates):
        expected_grade = classify_overall(mixed_aggregates.total_score, mixed_aggregates.avg_diff)
        expected_statuses = [classify_aggregate(a) for a in mixed_aggregates.per_category]

        analysis = _compose(FailingGenerator(), mixed_aggregates)

        assert analysis.grade == expected_grade
        assert [r.status for r in analysis.category_reports] == expected_statuses
        assert len(analysis.category_reports) == 4
        for report in analysis.category_reports:
            assert report.is_fallback
            assert report.report == category_fallback(report.category, report.status)
            assert report.report.strip()
        assert analysis.summary_is_fallback
        assert analysis.summary == summary_fallback(expected_grade)
        assert analysis.has_fallback

    def test_single_category_failure_is_isolated(self, all_fives):
        result = aggregate(all_fives, all_fives)
        trust_name = CATEGORY_NAMES[Category.TRUST]
        generator = RecordingGenerator(
            reply="生成されたレポート",
            fail_when=lambda prompt: f"【カテゴリー】{trust_name}" in prompt,
        )

        analysis = _compose(generator, result)

        by_category = {r.category: r for r in analysis.category_reports}
        assert by_category[Category.TRUST].is_fallback
        assert trust_name in by_category[Category.TRUST].report
        for category in (Category.VISION, Category.OPERATION, Category.COMMUNICATION):
            assert by_category[category].report == "生成されたレポート"
            assert not by_category[category].is_fallback
        assert analysis.summary == "生成されたレポート"

    def test_blank_reply_uses_fallback(self, all_fives):
        result = aggregate(all_fives, all_fives)

        analysis = _compose(RecordingGenerator(reply="   "), result)

        assert all(r.is_fallback for r in analysis.category_reports)
        assert analysis.summary_is_fallback

    def test_unexpected_exception_uses_fallback(self, all_fives):
        result = aggregate(all_fives, all_fives)

        analysis = _compose(FailingGenerator(TimeoutError("timed out")), result)

        assert analysis.summary_is_fallback
        assert all(r.is_fallback for r in analysis.category_reports)

    def test_fallbacks_are_deterministic_and_number_free(self):
        for grade in GapGrade:
            assert summary_fallback(grade) == summary_fallback(grade)
            assert not DIGITS.search(summary_fallback(grade))
        for category in (Category.VISION, Category.TRUST):
            text = category_fallback(category, GapGrade.CAUTION)
            assert CATEGORY_NAMES[category] in text
            assert "すれ違いの可能性あり" in text
            assert not DIGITS.search(text)


class TestOrdering:
    def test_results_follow_catalog_order_not_completion_order(self, all_fives):
        result = aggregate(all_fives, all_fives)
        # Earlier categories answer last
        generator = RecordingGenerator(
            delays={
                f"【カテゴリー】{CATEGORY_NAMES[Category.VISION]}": 0.3,
                f"【カテゴリー】{CATEGORY_NAMES[Category.OPERATION]}": 0.2,
                f"【カテゴリー】{CATEGORY_NAMES[Category.COMMUNICATION]}": 0.1,
            }
        )

        analysis = _compose(generator, result, max_workers=4)

        assert [r.category for r in analysis.category_reports] == [
            Category.VISION,
            Category.OPERATION,
            Category.COMMUNICATION,
            Category.TRUST,
        ]

    def test_single_worker_same_output(self, mixed_aggregates):
        parallel = _compose(RecordingGenerator(), mixed_aggregates, max_workers=4)
        serial = _compose(RecordingGenerator(), mixed_aggregates, max_workers=1)

        assert parallel == serial


class TestPrivacy:
    def test_prompts_carry_no_numbers(self, mixed_aggregates):
        generator = RecordingGenerator()

        _compose(generator, mixed_aggregates)

        for call in generator.calls:
            assert not DIGITS.search(call["system_prompt"])
            assert not DIGITS.search(call["user_prompt"])

    def test_category_prompt_uses_gap_levels(self):
        host = make_answers(5, q1=1)
        guest = make_answers(5)
        vision = aggregate(host, guest).per_category[0]

        request = build_category_request(
            vision, classify_aggregate(vision), QUESTIONS, max_output_tokens=300, temperature=0.7
        )

        assert "大きな差がある" in request.user_prompt
        assert "認識はほぼ一致" in request.user_prompt
        assert "話し合いの必要あり" in request.user_prompt
        assert QUESTIONS[0].text in request.user_prompt

    def test_question_missing_from_catalog_rejected(self):
        vision = aggregate(make_answers(5), make_answers(5)).per_category[0]
        catalog = [q for q in QUESTIONS if q.id != "q2"]

        with pytest.raises(ValueError, match="q2"):
            build_category_request(
                vision, classify_aggregate(vision), catalog, max_output_tokens=300, temperature=0.7
            )

    def test_summary_prompt_has_only_labels(self):
        request = build_summary_request(
            GapGrade.GOOD,
            [(Category.VISION, GapGrade.EXCELLENT), (Category.TRUST, GapGrade.CAUTION)],
            max_output_tokens=500,
            temperature=0.7,
        )

        assert "良好" in request.user_prompt
        assert CATEGORY_NAMES[Category.VISION] in request.user_prompt
        assert "すれ違いの可能性あり" in request.user_prompt
        assert not DIGITS.search(request.user_prompt)


@pytest.mark.parametrize(
    "diff, expected",
    [(0, GAP_LEVELS[0]), (1, GAP_LEVELS[1]), (2, GAP_LEVELS[2]), (3, GAP_LEVELS[3]), (4, GAP_LEVELS[3])],
)
def test_gap_level(diff, expected):
    assert gap_level(diff) == expected

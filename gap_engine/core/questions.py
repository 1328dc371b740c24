"""Static question catalog, answer options and category display metadata.

The catalog is read-only configuration: the scoring core consumes it but
never mutates it.
"""

from gap_engine.core.schemas_analysis import Category, GapGrade, Question, ScoreOption

QUESTIONS: tuple[Question, ...] = (
    # Vision
    Question(id="q1", order=1, text="夫婦のお金の使い方や管理ルールに納得している。", category=Category.VISION),
    Question(id="q2", order=2, text="二人の将来について、必要な時にちゃんと話し合えている。", category=Category.VISION),
    # Operation
    Question(id="q3", order=3, text="自分の家事負担について納得している。", category=Category.OPERATION),
    Question(id="q4", order=4, text="パートナーとの時間以外も大切にできている。", category=Category.OPERATION),
    Question(id="q5", order=5, text="夫婦時間と夫婦以外の時間のバランスは適切か。", category=Category.OPERATION),
    # Communication
    Question(id="q6", order=6, text="パートナーとの会話やコミュニケーションは十分だと感じる。", category=Category.COMMUNICATION),
    Question(id="q7", order=7, text="家では気を遣わず、ありのままの自分でいられる。", category=Category.COMMUNICATION),
    # Trust
    Question(id="q8", order=8, text="お互いを尊重しあえている関係性を築けているか。", category=Category.TRUST),
    Question(id="q9", order=9, text="パートナーとは、今も恋人のような良い関係でいられている。", category=Category.TRUST),
    # Self assessment (scored, never reported)
    Question(id="q10", order=10, text="私は、仕事と家庭を上手く両立できていると思う。", category=Category.SELF_ASSESSMENT),
)

SCORE_OPTIONS: tuple[ScoreOption, ...] = (
    ScoreOption(value=5, label="納得している"),
    ScoreOption(value=4, label="やや納得している"),
    ScoreOption(value=3, label="普通"),
    ScoreOption(value=2, label="やや不満を感じている"),
    ScoreOption(value=1, label="不満を感じている"),
)

MIN_SCORE = 1
MAX_SCORE = 5

# Categories that appear in reports, in catalog order
REPORTED_CATEGORIES: tuple[Category, ...] = (
    Category.VISION,
    Category.OPERATION,
    Category.COMMUNICATION,
    Category.TRUST,
)

CATEGORY_NAMES: dict[Category, str] = {
    Category.VISION: "価値観・ビジョン（方向性の一致）",
    Category.OPERATION: "運営・役割分担",
    Category.COMMUNICATION: "対話・心理的安全性（風通しの良さ）",
    Category.TRUST: "信頼・パートナーシップ（関係の質）",
    Category.SELF_ASSESSMENT: "総合：自己評価",
}

CATEGORY_DESCRIPTIONS: dict[Category, str] = {
    Category.VISION: "金銭感覚、将来設計、教育方針など、夫婦が見ている「未来や目的」が揃っているか",
    Category.OPERATION: "家事、育児、仕事（ワークライフバランス）など、日々の「タスク配分」に不公平感がないか",
    Category.COMMUNICATION: "相談のしやすさ、感謝の言葉、傾聴の姿勢など、「コミュニケーションの質」が保たれているか",
    Category.TRUST: "相手への尊敬、愛情、個人の尊重など、機能面以外での「情緒的な結びつき」が強いか",
    Category.SELF_ASSESSMENT: "仕事と家庭の両立に関する自己評価",
}

GRADE_LABELS: dict[GapGrade, str] = {
    GapGrade.EXCELLENT: "非常に良好",
    GapGrade.GOOD: "良好",
    GapGrade.CAUTION: "すれ違いの可能性あり",
    GapGrade.ATTENTION: "話し合いの必要あり",
}


def question_ids(questions: tuple[Question, ...] | list[Question] = QUESTIONS) -> list[str]:
    """Return question ids in catalog order."""
    return [q.id for q in sorted(questions, key=lambda q: q.order)]


def questions_in_category(
    category: Category,
    questions: tuple[Question, ...] | list[Question] = QUESTIONS,
) -> list[Question]:
    """Return the questions of one category in catalog order."""
    return sorted((q for q in questions if q.category == category), key=lambda q: q.order)

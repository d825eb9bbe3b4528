"""
Maturity scoring engine.

Pure functions only: no database access, no logging side effects. The
assessment service feeds it the answers read back from the database and
persists whatever it returns.

- Answer score:  snapshot of the chosen option's ``score_value`` (0 when absent)
- Global score:  mean(score_awarded) rounded to 2 decimals
- Axis score:    mean(score_awarded) per section, 2 decimals, only for sections
                 that have at least one answer
- Maturity:      step function over the global score
"""

from collections import OrderedDict
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.core.config import settings
from app.core.exceptions import EmptyAssessmentError

TWO_PLACES = Decimal("0.01")

LEVEL_ADVANCED = "Avançado"
LEVEL_INTERMEDIATE = "Intermediário"
LEVEL_BEGINNER = "Iniciante"

RISK_LOW = "Baixo"
RISK_MODERATE = "Moderado"
RISK_CRITICAL = "Crítico"

UNSECTIONED_TITLE = "Geral"


@dataclass(frozen=True)
class ScoredAnswer:
    """An answer as seen by the scoring engine."""
    question_id: int
    score_awarded: int
    section_id: Optional[int] = None
    section_title: Optional[str] = None


@dataclass(frozen=True)
class AxisScore:
    """Average score of one section (axis)."""
    section_id: Optional[int]
    title: str
    score: float
    answer_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MaturityClassification:
    maturity_level: str
    risk_label: str


def _round2(value: Decimal) -> float:
    return float(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _mean(scores: Sequence[int]) -> Decimal:
    return Decimal(sum(scores)) / Decimal(len(scores))


def compute_score_awarded(option: Any) -> int:
    """Score to snapshot on an answer for the chosen option.

    Accepts an ORM ``QuestionOption`` or anything with a ``score_value``
    attribute; a missing option or missing score counts as 0.
    """
    if option is None:
        return 0
    score = getattr(option, "score_value", None)
    if score is None:
        return 0
    return int(score)


def compute_global_score(answers: Sequence[ScoredAnswer]) -> float:
    """Arithmetic mean of ``score_awarded`` over all answers, 2 decimals.

    Raises:
        EmptyAssessmentError: if there is nothing to score. An assessment with
            no answers is not a 0-scored assessment.
    """
    if not answers:
        raise EmptyAssessmentError()
    return _round2(_mean([a.score_awarded for a in answers]))


def axis_title(section_id: Optional[int], section_title: Optional[str]) -> str:
    if section_title:
        return section_title
    if section_id is None:
        return UNSECTIONED_TITLE
    return f"Eixo {section_id}"


def compute_axis_scores(answers: Iterable[ScoredAnswer]) -> List[AxisScore]:
    """Group answers by section and average each group.

    Sections without answers are simply absent from the result. Records are
    ordered by section id (answers without a section come last).
    """
    groups: "OrderedDict[Optional[int], List[ScoredAnswer]]" = OrderedDict()
    for answer in answers:
        groups.setdefault(answer.section_id, []).append(answer)

    ordered_keys = sorted(groups, key=lambda k: (k is None, k if k is not None else 0))

    axis_scores = []
    for section_id in ordered_keys:
        group = groups[section_id]
        title = next((a.section_title for a in group if a.section_title), None)
        axis_scores.append(
            AxisScore(
                section_id=section_id,
                title=axis_title(section_id, title),
                score=_round2(_mean([a.score_awarded for a in group])),
                answer_count=len(group),
            )
        )
    return axis_scores


def classify_maturity(
    global_score: float,
    advanced_threshold: Optional[float] = None,
    intermediate_threshold: Optional[float] = None,
) -> MaturityClassification:
    """Map a global score to (maturity level, risk label).

    >= 70 Avançado/Baixo, >= 40 Intermediário/Moderado, else Iniciante/Crítico.
    """
    advanced = settings.MATURITY_ADVANCED_THRESHOLD if advanced_threshold is None else advanced_threshold
    intermediate = (
        settings.MATURITY_INTERMEDIATE_THRESHOLD
        if intermediate_threshold is None
        else intermediate_threshold
    )

    if global_score >= advanced:
        return MaturityClassification(LEVEL_ADVANCED, RISK_LOW)
    if global_score >= intermediate:
        return MaturityClassification(LEVEL_INTERMEDIATE, RISK_MODERATE)
    return MaturityClassification(LEVEL_BEGINNER, RISK_CRITICAL)


def normalize_to_percentage(raw_score: Any, divisor: Optional[float] = None) -> int:
    """Percentage reported to callers for a stored ``calculated_score``.

    ``round_half_up(raw_score / divisor)``; the divisor comes from
    ``SCORE_NORMALIZATION_DIVISOR`` and defaults to 1 (identity-round).
    Missing or zero scores report 0.
    """
    if not raw_score:
        return 0
    scale = Decimal(str(settings.SCORE_NORMALIZATION_DIVISOR if divisor is None else divisor))
    if scale <= 0:
        raise ValueError("Normalization divisor must be positive")
    value = Decimal(str(raw_score)) / scale
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

"""Critical limit evaluation and deviation severity grading."""
from __future__ import annotations

from dataclasses import dataclass

from foodflow.modules.haccp.domain.models import CriticalLimit, LimitOperator, Severity

# (fraction of expected value, severity), checked from the top
_SEVERITY_THRESHOLDS: tuple[tuple[float, Severity], ...] = (
    (0.20, Severity.CRITICAL),
    (0.10, Severity.HIGH),
    (0.05, Severity.MEDIUM),
)


@dataclass(frozen=True)
class LimitEvaluation:
    within_limit: bool
    expected_value: float
    deviation: float


def evaluate_limit(limit: CriticalLimit, value: float) -> LimitEvaluation:
    """Apply ``limit.operator`` to a measured value.

    A bound the operator needs but the limit does not define leaves the value
    within limit. NOT_EQUALS is accepted but never flags a deviation.
    """
    within_limit = True
    expected = limit.target_value or 0.0
    deviation = 0.0

    op = limit.operator
    if op == LimitOperator.EQUALS:
        if limit.target_value is not None:
            within_limit = abs(value - limit.target_value) <= (limit.tolerance or 0.0)
            deviation = value - limit.target_value
    elif op == LimitOperator.GREATER_THAN:
        if limit.min_value is not None:
            within_limit = value > limit.min_value
            expected = limit.min_value
            deviation = value - limit.min_value
    elif op == LimitOperator.LESS_THAN:
        if limit.max_value is not None:
            within_limit = value < limit.max_value
            expected = limit.max_value
            deviation = value - limit.max_value
    elif op == LimitOperator.BETWEEN:
        if limit.min_value is not None and limit.max_value is not None:
            within_limit = limit.min_value <= value <= limit.max_value
            expected = (limit.min_value + limit.max_value) / 2
            if value < limit.min_value:
                deviation = value - limit.min_value
            elif value > limit.max_value:
                deviation = value - limit.max_value
    # TODO: NOT_EQUALS has no agreed semantics yet (target +/- tolerance excluded?)

    return LimitEvaluation(within_limit=within_limit, expected_value=expected, deviation=deviation)


def classify_severity(deviation: float, expected_value: float) -> Severity:
    """Grade ``|deviation|`` relative to the expected value.

    Thresholds scale with ``expected_value`` as given, not its magnitude. For
    an expected value of zero or below (a freezer limit of LESS_THAN -18, or
    GREATER_THAN 0) every deviation therefore grades CRITICAL.
    """
    magnitude = abs(deviation)
    for fraction, severity in _SEVERITY_THRESHOLDS:
        if magnitude > expected_value * fraction:
            return severity
    return Severity.LOW

"""
Ranking Factors.

Each factor maps one optional signal to a normalized value in [0, 1] and
records why. Every factor supplies an explicit default when its signal is
absent; none of them raise.

| Factor         | Derivation                                               |
|----------------|----------------------------------------------------------|
| denial_risk    | denialRiskScore / 100, 0 if absent                       |
| expiry         | <0 1.0, <=1 0.9, <=2 0.7, else 0.4, absent 0.2           |
| case_value     | >10000 1.0, >1000 0.7, >100 0.4, else 0.1, absent 0      |
| insurance_tier | premium 1.0, standard 0.7, budget 0.4, unknown 0.5       |
| workflow_step  | pre_service 1.0, claims 0.6, post_service 0.3, unknown 0.5|
| recency        | 0.5 ** (hours since event / half-life)                   |
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from ..core.formatters import format_usd, hours_between
from .models import FactorScore, InsuranceTier, PartialSignals, WorkflowStep

EXPIRY_ABSENT = 0.2

INSURANCE_TIER_SCORES = {
    InsuranceTier.PREMIUM: 1.0,
    InsuranceTier.STANDARD: 0.7,
    InsuranceTier.BUDGET: 0.4,
}
INSURANCE_TIER_UNKNOWN = 0.5

WORKFLOW_STEP_SCORES = {
    WorkflowStep.PRE_SERVICE: 1.0,
    WorkflowStep.CLAIMS: 0.6,
    WorkflowStep.POST_SERVICE: 0.3,
}
WORKFLOW_STEP_UNKNOWN = 0.5

# (exclusive lower bound, score), checked in order
CASE_VALUE_STEPS = (
    (10_000, 1.0),
    (1_000, 0.7),
    (100, 0.4),
)
CASE_VALUE_FLOOR = 0.1


def denial_risk(signals: PartialSignals, weight: float) -> FactorScore:
    """Predicted denial probability."""
    risk = signals.denial_risk_score
    if risk is None:
        return FactorScore("denial_risk", 0.0, weight, reason="No denial risk score")
    return FactorScore(
        "denial_risk",
        risk / 100.0,
        weight,
        reason=f"Denial risk {risk:.0f}%",
        raw_value=risk,
    )


def expiry(signals: PartialSignals, weight: float) -> FactorScore:
    """Authorization expiry urgency."""
    days = signals.days_until_expiration
    if days is None:
        return FactorScore("expiry", EXPIRY_ABSENT, weight, reason="No expiration date")

    if days < 0:
        value, reason = 1.0, "Already expired"
    elif days <= 1:
        value, reason = 0.9, "Expires within 1 day"
    elif days <= 2:
        value, reason = 0.7, "Expires within 2 days"
    else:
        value, reason = 0.4, f"Expires in {days:g} days"
    return FactorScore("expiry", value, weight, reason=reason, raw_value=days)


def case_value(signals: PartialSignals, weight: float) -> FactorScore:
    """Dollar value of the case."""
    amount = signals.case_value
    if amount is None:
        return FactorScore("case_value", 0.0, weight, reason="No case value")

    value = CASE_VALUE_FLOOR
    for bound, step_score in CASE_VALUE_STEPS:
        if amount > bound:
            value = step_score
            break
    return FactorScore(
        "case_value", value, weight, reason=f"Case value {format_usd(amount)}", raw_value=amount
    )


def insurance_tier(signals: PartialSignals, weight: float) -> FactorScore:
    """Patient insurance plan tier."""
    tier = signals.patient_insurance_tier
    if tier is None:
        return FactorScore(
            "insurance_tier", INSURANCE_TIER_UNKNOWN, weight, reason="Unknown insurance tier"
        )
    return FactorScore(
        "insurance_tier",
        INSURANCE_TIER_SCORES[tier],
        weight,
        reason=f"{tier.value.capitalize()} tier",
        raw_value=tier.value,
    )


def workflow_step(signals: PartialSignals, weight: float) -> FactorScore:
    """Revenue-cycle stage."""
    step = signals.workflow_step
    if step is None:
        return FactorScore(
            "workflow_step", WORKFLOW_STEP_UNKNOWN, weight, reason="Unknown workflow step"
        )
    return FactorScore(
        "workflow_step",
        WORKFLOW_STEP_SCORES[step],
        weight,
        reason=step.value.replace("_", " ").capitalize(),
        raw_value=step.value,
    )


def recency(
    timestamp: datetime,
    now: datetime,
    weight: float,
    half_life_hours: float = 2.0,
) -> FactorScore:
    """
    Exponential decay since the event.

    Future timestamps count as brand new.
    """
    hours = max(0.0, hours_between(timestamp, now))
    return FactorScore(
        "recency",
        0.5 ** (hours / half_life_hours),
        weight,
        reason=f"{hours:.1f}h old",
        raw_value=round(hours, 3),
    )


# Factors that read the metadata bag, in display order
SIGNAL_FACTORS: dict[str, Callable[[PartialSignals, float], FactorScore]] = {
    "denial_risk": denial_risk,
    "expiry": expiry,
    "case_value": case_value,
    "insurance_tier": insurance_tier,
    "workflow_step": workflow_step,
}

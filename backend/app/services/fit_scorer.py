"""
Fit Scorer - deterministic 0-100 score and route for a job

Score Composition:
    - Domain alignment (40): awarded in full; hard domain enforcement is the
      eligibility gate's job, this component only records the routed domain
    - Ambiguity (0-30): LOW 30, MEDIUM 15, HIGH 0
    - Client quality (5-30): baseline 5, +15 with a budget, +10 for HIGH urgency

Route:
    score >= 70 → PROCEED, 50 <= score < 70 → BORDERLINE, score < 50 → REJECT

One reasoning string is emitted per component, in the order above.
"""

from app.schemas.analysis import (
    DomainRouting,
    FitDecision,
    FitRoute,
    Level,
    Persona,
    RequirementsMatrix,
)

DOMAIN_ALIGNMENT_POINTS = 40
AMBIGUITY_POINTS = {Level.LOW: 30, Level.MEDIUM: 15, Level.HIGH: 0}
CLIENT_BASELINE_POINTS = 5
BUDGET_POINTS = 15
URGENCY_POINTS = 10

PROCEED_THRESHOLD = 70
BORDERLINE_THRESHOLD = 50


def route_for_score(score: int) -> FitRoute:
    if score >= PROCEED_THRESHOLD:
        return FitRoute.PROCEED
    if score >= BORDERLINE_THRESHOLD:
        return FitRoute.BORDERLINE
    return FitRoute.REJECT


def score_fit(matrix: RequirementsMatrix, persona: Persona, routing: DomainRouting) -> FitDecision:
    reasoning = []

    score = DOMAIN_ALIGNMENT_POINTS
    reasoning.append(
        f"Domain alignment: +{DOMAIN_ALIGNMENT_POINTS} "
        f"(routed to {routing.primary_domain.value}, enforced by the eligibility gate)"
    )

    ambiguity = AMBIGUITY_POINTS[persona.ambiguity_level]
    score += ambiguity
    reasoning.append(f"Ambiguity level is {persona.ambiguity_level.value}: +{ambiguity}")

    client = CLIENT_BASELINE_POINTS
    budget = BUDGET_POINTS if persona.has_budget else 0
    urgency = URGENCY_POINTS if persona.urgency == Level.HIGH else 0
    client += budget + urgency
    score += client
    reasoning.append(
        f"Client quality: +{client} (baseline +{CLIENT_BASELINE_POINTS}, "
        f"budget +{budget}, urgency {persona.urgency.value} +{urgency})"
    )

    return FitDecision(score=score, route=route_for_score(score), reasoning=reasoning)

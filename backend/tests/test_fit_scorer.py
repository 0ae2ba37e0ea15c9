"""
Tests for the deterministic fit scorer

Tests cover:
- Component arithmetic (domain 40, ambiguity 0-30, client quality 5-30)
- Route thresholds at 50 and 70
- One reasoning string per component
"""

import pytest

from app.schemas.analysis import (
    Domain,
    DomainRouting,
    FitRoute,
    Level,
    Persona,
    Tone,
    TechnicalLevel,
    empty_matrix,
)
from app.services.fit_scorer import route_for_score, score_fit


ROUTING = DomainRouting(primary_domain=Domain.FULLSTACK, secondary_domains=[], confidence=0.9)


def persona(ambiguity: Level, has_budget: bool, urgency: Level) -> Persona:
    return Persona(
        technical_level=TechnicalLevel.TECHNICAL,
        tone=Tone.PROFESSIONAL,
        urgency=urgency,
        has_budget=has_budget,
        ambiguity_level=ambiguity,
    )


class TestScoreComposition:
    """Test the score components."""

    def test_high_ambiguity_no_budget_low_urgency(self):
        """40 + 0 + 5 = 45, routed REJECT."""
        fit = score_fit(empty_matrix(), persona(Level.HIGH, False, Level.LOW), ROUTING)

        assert fit.score == 45
        assert fit.route == FitRoute.REJECT

    def test_best_case_is_100(self):
        """40 + 30 + (5 + 15 + 10) = 100."""
        fit = score_fit(empty_matrix(), persona(Level.LOW, True, Level.HIGH), ROUTING)

        assert fit.score == 100
        assert fit.route == FitRoute.PROCEED

    def test_medium_ambiguity_with_budget(self):
        """40 + 15 + (5 + 15) = 75."""
        fit = score_fit(empty_matrix(), persona(Level.MEDIUM, True, Level.MEDIUM), ROUTING)

        assert fit.score == 75
        assert fit.route == FitRoute.PROCEED

    def test_borderline(self):
        """40 + 15 + 5 = 60."""
        fit = score_fit(empty_matrix(), persona(Level.MEDIUM, False, Level.LOW), ROUTING)

        assert fit.score == 60
        assert fit.route == FitRoute.BORDERLINE

    @pytest.mark.parametrize("ambiguity", list(Level))
    @pytest.mark.parametrize("has_budget", [True, False])
    @pytest.mark.parametrize("urgency", list(Level))
    def test_score_always_in_range(self, ambiguity, has_budget, urgency):
        """Every persona combination yields an integer in [0, 100] with a consistent route."""
        fit = score_fit(empty_matrix(), persona(ambiguity, has_budget, urgency), ROUTING)

        assert isinstance(fit.score, int)
        assert 0 <= fit.score <= 100
        assert fit.route == route_for_score(fit.score)


class TestReasoning:
    """Test the audit trail."""

    def test_one_reason_per_component(self):
        fit = score_fit(empty_matrix(), persona(Level.HIGH, False, Level.LOW), ROUTING)

        assert len(fit.reasoning) == 3
        assert fit.reasoning[0].startswith("Domain alignment: +40")
        assert "Fullstack" in fit.reasoning[0]
        assert fit.reasoning[1] == "Ambiguity level is HIGH: +0"
        assert fit.reasoning[2].startswith("Client quality: +5")

    def test_client_quality_breakdown(self):
        fit = score_fit(empty_matrix(), persona(Level.LOW, True, Level.HIGH), ROUTING)

        assert fit.reasoning[2] == "Client quality: +30 (baseline +5, budget +15, urgency HIGH +10)"


class TestRouteThresholds:
    """Test the exhaustive, non-overlapping route bands."""

    @pytest.mark.parametrize("score,route", [
        (0, FitRoute.REJECT),
        (49, FitRoute.REJECT),
        (50, FitRoute.BORDERLINE),
        (69, FitRoute.BORDERLINE),
        (70, FitRoute.PROCEED),
        (100, FitRoute.PROCEED),
    ])
    def test_boundaries(self, score, route):
        assert route_for_score(score) == route

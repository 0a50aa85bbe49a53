import math

import pytest

from silver_care_mcp.models import RiskTier
from silver_care_mcp.risk import classify, feels_like, tier_for


@pytest.mark.parametrize(
    "value, tier",
    [
        (38.0, RiskTier.DANGER),
        (37.999, RiskTier.WARNING),
        (35.0, RiskTier.WARNING),
        (34.999, RiskTier.CAUTION),
        (31.0, RiskTier.CAUTION),
        (30.999, RiskTier.CONCERN),
        (-40.0, RiskTier.CONCERN),
        (55.0, RiskTier.DANGER),
    ],
)
def test_tier_boundaries(value, tier):
    assert tier_for(value) is tier


def test_feels_like_formula():
    assert feels_like(30.0, 50.0) == pytest.approx(34.2625)
    assert feels_like(14.5, 90.0) == pytest.approx(14.5)


def test_classify_uses_feels_like():
    risk = classify(30.0, 50.0)
    assert risk.tier is RiskTier.CAUTION
    assert risk.feels_like_c == pytest.approx(34.2625)
    assert risk.label == "Caution"

    assert classify(35.0, 0.0).tier is RiskTier.DANGER
    assert classify(20.0, 80.0).tier is RiskTier.CONCERN


@pytest.mark.parametrize(
    "temperature, humidity",
    [(-10.0, 150.0), (0.0, -20.0), (45.0, 100.0), (14.5, 0.0), (1e6, 1e6)],
)
def test_classify_is_total(temperature, humidity):
    risk = classify(temperature, humidity)
    assert risk.tier in RiskTier
    assert risk.description
    assert math.isfinite(risk.feels_like_c)


def test_each_tier_has_its_own_description():
    descriptions = {classify(t, 0.0).description for t in (10.0, 26.0, 28.5, 32.0)}
    assert len(descriptions) == 4

from silver_care_mcp.models import RiskAssessment, RiskTier

# Lower bound of each tier, highest first. A value on a bound belongs to that tier.
TIER_THRESHOLDS = (
    (38.0, RiskTier.DANGER),
    (35.0, RiskTier.WARNING),
    (31.0, RiskTier.CAUTION),
)

TIER_TEXT = {
    RiskTier.DANGER: ("Danger", "Extremely dangerous. Move somewhere cool immediately."),
    RiskTier.WARNING: ("Warning", "Conditions may be dangerous. Limit time outdoors."),
    RiskTier.CAUTION: ("Caution", "Take care. Drink water and rest in the shade."),
    RiskTier.CONCERN: ("Concern", "Conditions are fine for now."),
}


def feels_like(temperature_c: float, relative_humidity_pct: float) -> float:
    """Linear apparent-temperature approximation from air temperature and humidity"""
    return temperature_c + (0.55 - 0.0055 * relative_humidity_pct) * (temperature_c - 14.5)


def tier_for(feels_like_c: float) -> RiskTier:
    for threshold, tier in TIER_THRESHOLDS:
        if feels_like_c >= threshold:
            return tier
    return RiskTier.CONCERN


def classify(temperature_c: float, relative_humidity_pct: float) -> RiskAssessment:
    """Map temperature and humidity to a heat-risk tier.

    Defined for every finite input. Implausible readings (negative
    temperatures, humidity outside 0-100) are still evaluated.
    """
    value = feels_like(temperature_c, relative_humidity_pct)
    tier = tier_for(value)
    label, description = TIER_TEXT[tier]
    return RiskAssessment(tier=tier, label=label, description=description, feels_like_c=value)

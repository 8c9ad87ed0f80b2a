"""
Tests for Impact Comparisons

Tier order is business logic: driving, phone, bulb, kettle, breath.
"""
from services.impact_comparisons import (
    ComparisonFactors,
    _round_half_up,
    compare,
    compare_savings,
    weekly_impact_message,
)


class TestEmissionComparisons:
    """compare() picks the first matching tier"""

    def test_driving_at_threshold(self):
        """120 g is exactly 1 km of driving"""
        result = compare(120)
        assert result.category == "Transportation"
        assert result.description == "Driving a car for 1.00 km"
        assert result.emoji == "🚗"

    def test_driving_two_decimals(self):
        result = compare(300)
        assert result.description == "Driving a car for 2.50 km"

    def test_phone_charges_just_below_driving(self):
        """0.119 kg is reported as phone charges; the bulb tier never wins over it"""
        result = compare(119)
        assert result.category == "Energy"
        assert result.description == "Charging a phone 7 times"
        assert result.emoji == "🔋"

    def test_phone_single_charge(self):
        result = compare(18)
        assert result.description == "Charging a phone 1 time"

    def test_bulb_hours_not_reached_above_phone_threshold(self):
        """Anything >= 0.036 kg already satisfies the phone tier"""
        result = compare(40)
        assert result.emoji == "🔋"
        assert "bulb" not in result.description

    def test_kettle(self):
        result = compare(10)
        assert result.category == "Daily Life"
        assert result.description == "Boiling a kettle 1 time"
        assert result.emoji == "☕"

    def test_kettle_plural(self):
        result = compare(14)
        assert result.description == "Boiling a kettle 2 times"

    def test_breath_for_tiny_amounts(self):
        result = compare(0.1)
        assert result.category == "Natural"
        assert result.description == "Less than a breath of CO2"
        assert result.emoji == "🌬️"

    def test_five_grams_is_breath(self):
        """0.005 kg is below every threshold"""
        assert compare(5).category == "Natural"

    def test_zero_is_breath(self):
        assert compare(0).category == "Natural"

    def test_custom_factors(self):
        """Reordered thresholds make the bulb tier reachable"""
        factors = ComparisonFactors(car_km=0.12, phone_charge=0.1, bulb_hour=0.036, kettle_boil=0.007)
        result = compare(72, factors)
        assert result.description == "Powering a bulb for 2.0 hours"
        assert result.emoji == "💡"


class TestRoundHalfUp:
    """Counts round like Math.round: halves go up, everything below stays down"""

    def test_halves_round_up(self):
        assert _round_half_up(2.5) == 3
        assert _round_half_up(0.5) == 1
        assert _round_half_up(-2.5) == -2

    def test_just_below_half_rounds_down(self):
        assert _round_half_up(0.49999999999999994) == 0
        assert _round_half_up(6.4999) == 6


class TestSavingsComparisons:
    """compare_savings() for avoided CO2"""

    def test_tree_days(self):
        result = compare_savings(115)
        assert result.description == "A tree's daily CO2 absorption for 2.0 days"
        assert result.emoji == "🌳"

    def test_single_tree_day(self):
        result = compare_savings(57.5)
        assert result.description == "A tree's daily CO2 absorption for 1.0 day"

    def test_seedlings(self):
        result = compare_savings(10)
        assert result.description == "Planting 2 seedlings"
        assert result.emoji == "🌱"

    def test_fallback_kg(self):
        result = compare_savings(1)
        assert result.description == "Saved 0.001 kg of CO2"
        assert result.emoji == "✨"
        assert result.category == "Environmental"


class TestWeeklyImpactMessage:
    def test_message_format(self):
        assert weekly_impact_message(240) == "This week's emissions = 🚗 Driving a car for 2.00 km"

    def test_empty_week(self):
        assert weekly_impact_message(0) == "This week's emissions = 🌬️ Less than a breath of CO2"

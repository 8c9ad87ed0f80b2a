"""
Real-world impact comparisons for CO2 quantities.

Turns grams of CO2 into something people recognise: kilometres driven, phone
charges, kettle boils. Each comparator walks an ordered list of
(predicate, formatter) tiers and returns the first match.

The emission tiers are checked in a fixed business order, not by threshold:
phone charges (>= 0.018 kg) are tested before bulb-hours (>= 0.036 kg), so a
quantity that would qualify for both is always reported as phone charges.
Keep the order as is.
"""
import math
from dataclasses import dataclass
from typing import Callable, List, Tuple


@dataclass(frozen=True)
class ImpactComparison:
    category: str
    description: str
    emoji: str


@dataclass(frozen=True)
class ComparisonFactors:
    """kg of CO2 per unit of each everyday equivalent."""
    car_km: float = 0.12           # average car, per km driven
    phone_charge: float = 0.018    # one full phone charge
    bulb_hour: float = 0.036       # 60W bulb for one hour
    kettle_boil: float = 0.007     # boiling one kettle


@dataclass(frozen=True)
class SavingsFactors:
    tree_day: float = 0.0575       # one tree absorbs ~21 kg/year
    seedling: float = 0.005


DEFAULT_FACTORS = ComparisonFactors()
DEFAULT_SAVINGS_FACTORS = SavingsFactors()

Tier = Tuple[Callable[[float], bool], Callable[[float], ImpactComparison]]


def _round_half_up(value: float) -> int:
    whole = math.floor(value)
    return int(whole) + (1 if value - whole >= 0.5 else 0)


def _plural(count: float) -> str:
    return "s" if count > 1 else ""


def _emission_tiers(f: ComparisonFactors) -> List[Tier]:
    def driving(kg: float) -> ImpactComparison:
        km = f"{kg / f.car_km:.2f}"
        return ImpactComparison("Transportation", f"Driving a car for {km} km", "🚗")

    def phone(kg: float) -> ImpactComparison:
        charges = _round_half_up(kg / f.phone_charge)
        return ImpactComparison("Energy", f"Charging a phone {charges} time{_plural(charges)}", "🔋")

    def bulb(kg: float) -> ImpactComparison:
        hours = f"{kg / f.bulb_hour:.1f}"
        return ImpactComparison("Energy", f"Powering a bulb for {hours} hour{_plural(float(hours))}", "💡")

    def kettle(kg: float) -> ImpactComparison:
        boils = _round_half_up(kg / f.kettle_boil)
        return ImpactComparison("Daily Life", f"Boiling a kettle {boils} time{_plural(boils)}", "☕")

    def breath(kg: float) -> ImpactComparison:
        return ImpactComparison("Natural", "Less than a breath of CO2", "🌬️")

    return [
        (lambda kg: kg >= f.car_km, driving),
        (lambda kg: kg >= f.phone_charge, phone),
        (lambda kg: kg >= f.bulb_hour, bulb),
        (lambda kg: kg >= f.kettle_boil, kettle),
        (lambda kg: True, breath),
    ]


def _savings_tiers(f: SavingsFactors) -> List[Tier]:
    def tree_days(kg: float) -> ImpactComparison:
        days = f"{kg / f.tree_day:.1f}"
        return ImpactComparison(
            "Environmental",
            f"A tree's daily CO2 absorption for {days} day{_plural(float(days))}",
            "🌳",
        )

    def seedlings(kg: float) -> ImpactComparison:
        count = _round_half_up(kg / f.seedling)
        return ImpactComparison("Environmental", f"Planting {count} seedling{_plural(count)}", "🌱")

    def saved(kg: float) -> ImpactComparison:
        return ImpactComparison("Environmental", f"Saved {kg:.3f} kg of CO2", "✨")

    return [
        (lambda kg: kg >= f.tree_day, tree_days),
        (lambda kg: kg >= f.seedling, seedlings),
        (lambda kg: True, saved),
    ]


def _first_match(tiers: List[Tier], kg: float) -> ImpactComparison:
    for matches, render in tiers:
        if matches(kg):
            return render(kg)
    # Every tier list ends with a catch-all
    raise AssertionError("comparison tiers must end with a catch-all")


def compare(co2_grams: float, factors: ComparisonFactors = DEFAULT_FACTORS) -> ImpactComparison:
    """Everyday equivalent of emitting `co2_grams` of CO2."""
    return _first_match(_emission_tiers(factors), co2_grams / 1000)


def compare_savings(
    co2_saved_grams: float,
    factors: SavingsFactors = DEFAULT_SAVINGS_FACTORS,
) -> ImpactComparison:
    """Everyday equivalent of avoiding `co2_saved_grams` of CO2."""
    return _first_match(_savings_tiers(factors), co2_saved_grams / 1000)


def weekly_impact_message(weekly_grams: float) -> str:
    comparison = compare(weekly_grams)
    return f"This week's emissions = {comparison.emoji} {comparison.description}"

# Epley formula for 1RM prediction
# Formula: 1RM = w * (1 + (r / 30))
# A set at RPE < 10 is treated as the longer set it would have been if taken to
# failure: reps in reserve (10 - RPE) are added to the performed reps first.
# For an effective rep count of 1 the lifted weight already is the 1RM.

import math

from periodizer.constants import DEFAULT_TARGET_RPE, EPLEY_DIVISOR, MAX_RPE, PLATE_ROUNDING_KG


def round_to_increment(value: float, increment: float) -> float:
    """Rounds value to the nearest multiple of increment, halves rounding up."""
    if increment <= 0:
        raise ValueError("increment must be positive")
    return math.floor(value / increment + 0.5) * increment


def _effective_reps(reps: float, rpe: float | None) -> float:
    if rpe is None:
        return reps
    reps_in_reserve = max(0.0, MAX_RPE - rpe)
    return reps + reps_in_reserve


def estimate_one_rep_max(weight: float, reps: int, rpe: float | None = None) -> float:
    """
    Estimates a 1RM from a performed set.

    Without an RPE the set is assumed to have been taken to failure (RPE 10).
    100kg x 8 @ RPE 8 therefore estimates the same 1RM as 100kg x 10 to failure.
    """
    total_reps = _effective_reps(reps, rpe)
    if total_reps <= 1:
        return weight
    return round(weight * (1 + total_reps / EPLEY_DIVISOR), 2)


def calculate_weight_for_reps(
    one_rep_max: float,
    target_reps: int,
    target_rpe: float = DEFAULT_TARGET_RPE,
) -> float:
    """
    Inverts estimate_one_rep_max: the load that should allow target_reps at target_rpe.
    Result is rounded to the nearest 2.5kg.

    To recover the weight of a set whose 1RM was estimated without an RPE, pass
    target_rpe=10, since such sets are treated as taken to failure.
    """
    total_reps = _effective_reps(target_reps, target_rpe)
    if total_reps <= 1:
        weight = one_rep_max
    else:
        weight = one_rep_max / (1 + total_reps / EPLEY_DIVISOR)
    return round_to_increment(weight, PLATE_ROUNDING_KG)


__all__ = [
    "round_to_increment",
    "estimate_one_rep_max",
    "calculate_weight_for_reps",
]

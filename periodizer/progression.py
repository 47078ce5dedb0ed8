"""Per-exercise progression, weekly volume landmarks and deload adjustments."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Dict, Iterable, List, Sequence, Tuple

from periodizer.constants import (
    BEGINNER_DELOAD_INTERVAL_WEEKS,
    DEFAULT_DELOAD_LOAD_REDUCTION,
    DEFAULT_DELOAD_VOLUME_REDUCTION,
    DEFAULT_WEEKLY_LOAD_KG,
    DELOAD_LOAD_FACTOR,
    HEAVY_LOAD_INCREMENT_KG,
    HEAVY_LOAD_THRESHOLD_KG,
    LIGHT_LOAD_INCREMENT_KG,
    MIN_CONDITIONING_MINUTES,
    MIN_CONDITIONING_SESSIONS,
    MIN_MINUTES_PER_CONDITIONING_SESSION,
    MIN_WEEKLY_LOAD_KG,
    PRESCRIPTION_ROUNDING_KG,
    PROJECTED_DELOAD_LOAD_FACTOR,
    PROJECTED_PROGRESSIVE_LOAD_FACTOR,
    REGRESSION_LOAD_FACTOR,
    RPE_HEADROOM_FOR_LOAD_INCREASE,
)
from periodizer.models import (
    BlockType,
    ExerciseProgressionTarget,
    LoggedSet,
    PeriodizationBlock,
    PeriodizationFramework,
    ProgressionRecommendation,
    ProgressionType,
    TrainingDay,
    VolumeLandmark,
    WeeklyLogSummary,
    WeeklyProgressionTarget,
)
from periodizer.predictions import round_to_increment

logger = logging.getLogger(__name__)


def parse_rep_range(rep_range: str) -> Tuple[int, int]:
    """'8-12' -> (8, 12). A single number is treated as a range of one."""
    parts = rep_range.split("-")
    low = int(parts[0].strip())
    high = int(parts[1].strip()) if len(parts) > 1 else low
    return low, high


def select_best_set(logged_sets: Sequence[LoggedSet]) -> LoggedSet:
    """Set with the largest weight x reps product. The earliest logged set wins ties."""
    best = logged_sets[0]
    for logged_set in logged_sets[1:]:
        if logged_set.weight_kg * logged_set.reps > best.weight_kg * best.reps:
            best = logged_set
    return best


def load_increment_for(weight_kg: float) -> float:
    """Heavier lifts progress in smaller steps."""
    if weight_kg >= HEAVY_LOAD_THRESHOLD_KG:
        return HEAVY_LOAD_INCREMENT_KG
    return LIGHT_LOAD_INCREMENT_KG


def _progress(best: LoggedSet, block: PeriodizationBlock) -> Tuple[float, int, str]:
    low, high = parse_rep_range(block.rep_ranges.strength)
    target_rpe = block.rpe_targets.strength
    increment = load_increment_for(best.weight_kg)

    if best.reps >= high:
        return (
            best.weight_kg + increment,
            low,
            f"Increase weight by {increment:g}kg - top of the {low}-{high} rep range reached. "
            f"Restart at {low} reps.",
        )
    if best.rpe is not None and best.rpe < target_rpe - RPE_HEADROOM_FOR_LOAD_INCREASE:
        return (
            best.weight_kg + increment,
            best.reps,
            f"Increase weight by {increment:g}kg - RPE {best.rpe:g} is well below the "
            f"target of {target_rpe:g}.",
        )
    next_reps = min(max(best.reps + 1, low), high)
    return (
        best.weight_kg,
        next_reps,
        f"Keep the weight and focus on progressing reps toward {high} ({next_reps} reps next week).",
    )


def calculate_exercise_progression(
    exercise_id: str,
    logged_sets: Sequence[LoggedSet],
    current_block: PeriodizationBlock,
    week_recommendation: ProgressionRecommendation,
) -> ExerciseProgressionTarget:
    """
    Prescribes next week's weight and reps for one exercise.

    The best set of the week (highest weight x reps) is the reference point. The
    week-level decision picks the direction and a deload block always wins.
    """
    target_rpe = current_block.rpe_targets.strength

    if not logged_sets:
        return ExerciseProgressionTarget(
            exercise_id=exercise_id,
            current_weight=0.0,
            current_reps=0,
            current_rpe=None,
            recommended_weight=0.0,
            recommended_reps=current_block.rep_ranges.strength,
            target_rpe=target_rpe,
            progression_type=ProgressionType.MAINTAIN,
            notes="No previous data - start light and find a working weight in the target range.",
        )

    best = select_best_set(logged_sets)
    decision = week_recommendation.decision

    if decision is ProgressionType.DECREASE:
        recommended_weight = round_to_increment(best.weight_kg * REGRESSION_LOAD_FACTOR, PRESCRIPTION_ROUNDING_KG)
        recommended_reps = best.reps
        progression_type = ProgressionType.DECREASE
        notes = "Reduce weight by ~10% to rebuild quality reps."
    elif decision is ProgressionType.MAINTAIN:
        # Logged loads are already plate-aligned; rounding only snaps odd entries
        recommended_weight = round_to_increment(best.weight_kg, PRESCRIPTION_ROUNDING_KG)
        recommended_reps = best.reps
        progression_type = ProgressionType.MAINTAIN
        notes = "Maintain current weights and focus on execution."
    elif decision is ProgressionType.INCREASE:
        recommended_weight, recommended_reps, notes = _progress(best, current_block)
        recommended_weight = round_to_increment(recommended_weight, PRESCRIPTION_ROUNDING_KG)
        progression_type = ProgressionType.INCREASE
    else:
        raise ValueError(f"Unhandled progression decision: {decision}")

    if current_block.block_type is BlockType.DELOAD:
        recommended_weight = round_to_increment(best.weight_kg * DELOAD_LOAD_FACTOR, PRESCRIPTION_ROUNDING_KG)
        progression_type = ProgressionType.DECREASE
        notes = "Deload week - reduce weight by ~15% and keep every set crisp."

    logger.debug(
        "%s: best set %skg x %s -> %skg (%s)",
        exercise_id, best.weight_kg, best.reps, recommended_weight, progression_type.value,
    )

    return ExerciseProgressionTarget(
        exercise_id=exercise_id,
        current_weight=best.weight_kg,
        current_reps=best.reps,
        current_rpe=best.rpe,
        recommended_weight=recommended_weight,
        recommended_reps=recommended_reps,
        target_rpe=target_rpe,
        progression_type=progression_type,
        notes=notes,
    )


def apply_deload_modifications(
    progression: WeeklyProgressionTarget,
    volume_reduction: float = DEFAULT_DELOAD_VOLUME_REDUCTION,
    load_reduction: float = DEFAULT_DELOAD_LOAD_REDUCTION,
) -> WeeklyProgressionTarget:
    """Returns a deload copy of a weekly target; the input is left untouched."""
    volume_pct = round(volume_reduction * 100)
    load_pct = round(load_reduction * 100)
    return replace(
        progression,
        total_load_kg=round(progression.total_load_kg * (1 - load_reduction)),
        zone2_minutes=round(progression.zone2_minutes * (1 - volume_reduction)),
        is_deload=True,
        focus_notes=(
            f"Deload: {volume_pct}% volume reduction, {load_pct}% load reduction. "
            f"{progression.focus_notes}"
        ).strip(),
    )


def _group_sets_by_week(weekly_logs: Iterable[WeeklyLogSummary]) -> Dict[int, List[LoggedSet]]:
    by_week: Dict[int, List[LoggedSet]] = {}
    for log in weekly_logs:
        by_week.setdefault(log.week_index, []).extend(log.sets)
    return by_week


def calculate_weekly_volume_landmarks(
    weekly_logs: Iterable[WeeklyLogSummary],
    total_weeks: int,
) -> List[VolumeLandmark]:
    """
    One landmark per week index in [0, total_weeks), including weeks with no logs.

    volume_landmark is total reps, intensity_landmark the mean set weight and
    avg_rpe the mean over sets that recorded an RPE.
    """
    sets_by_week = _group_sets_by_week(weekly_logs)
    landmarks = []

    for week_index in range(total_weeks):
        sets = sets_by_week.get(week_index, [])
        rpes = [s.rpe for s in sets if s.rpe is not None]
        landmarks.append(VolumeLandmark(
            week_index=week_index,
            volume_landmark=sum(s.reps for s in sets),
            intensity_landmark=round(sum(s.weight_kg for s in sets) / len(sets), 2) if sets else 0.0,
            avg_rpe=round(sum(rpes) / len(rpes), 2) if rpes else 0.0,
        ))

    return landmarks


def _compute_load_kg(sets: Iterable[LoggedSet]) -> int:
    total = 0.0
    for s in sets:
        if math.isnan(s.weight_kg) or math.isnan(s.reps):
            continue
        total += s.weight_kg * s.reps
    return round(total)


def conditioning_minutes_from_pattern(pattern: Sequence[TrainingDay]) -> int:
    """Weekly conditioning minutes from a microcycle pattern, with guardrails applied."""
    minutes = sum(
        block.duration_minutes
        for day in pattern
        for block in day.blocks
        if block.kind == "conditioning"
    )
    sessions = sum(1 for day in pattern if any(b.kind == "conditioning" for b in day.blocks))

    minimum_sessions = max(MIN_CONDITIONING_SESSIONS, sessions)
    targeted_minutes = max(MIN_CONDITIONING_MINUTES, minutes)
    return max(targeted_minutes, minimum_sessions * MIN_MINUTES_PER_CONDITIONING_SESSION)


def _deload_week_indexes(total_weeks: int, framework: PeriodizationFramework | None) -> set[int]:
    if framework is not None:
        return {week - 1 for week in framework.deload_weeks()}
    return {
        week_index for week_index in range(total_weeks)
        if (week_index + 1) % BEGINNER_DELOAD_INTERVAL_WEEKS == 0
    }


def compute_progression_targets(
    total_weeks: int,
    logs: Sequence[WeeklyLogSummary],
    pattern: Sequence[TrainingDay],
    framework: PeriodizationFramework | None = None,
) -> List[WeeklyProgressionTarget]:
    """
    Weekly load targets for the whole program.

    Logged weeks report what was actually lifted. Weeks after the last logged week
    are projected from the rolling load: deload weeks drop it by 18%, other weeks
    add 2.5%.
    """
    load_by_week: Dict[int, int] = {}
    for log in logs:
        load_by_week[log.week_index] = load_by_week.get(log.week_index, 0) + _compute_load_kg(log.sets)

    deload_weeks = _deload_week_indexes(total_weeks, framework)
    zone2_minutes = conditioning_minutes_from_pattern(pattern)

    last_logged_week = max(load_by_week) if load_by_week else -1
    rolling_load = load_by_week[last_logged_week] if load_by_week else DEFAULT_WEEKLY_LOAD_KG

    targets = []
    for week_index in range(total_weeks):
        has_actual = week_index in load_by_week
        is_deload = week_index in deload_weeks

        if has_actual:
            rolling_load = load_by_week[week_index]
        elif week_index > last_logged_week:
            factor = PROJECTED_DELOAD_LOAD_FACTOR if is_deload else PROJECTED_PROGRESSIVE_LOAD_FACTOR
            rolling_load = round(rolling_load * factor)

        if has_actual:
            focus_notes = "Logged week - targets based on recorded sessions."
        elif is_deload:
            focus_notes = "Deload week: reduce loads ~18% and emphasize technique."
        else:
            focus_notes = "Progressive week: hold quality, add ~2% load or 1 rep where smooth."

        targets.append(WeeklyProgressionTarget(
            week_index=week_index,
            total_load_kg=max(rolling_load, MIN_WEEKLY_LOAD_KG),
            zone2_minutes=zone2_minutes,
            focus_notes=focus_notes,
            is_deload=is_deload,
        ))

    return targets


__all__ = [
    "parse_rep_range",
    "select_best_set",
    "load_increment_for",
    "calculate_exercise_progression",
    "apply_deload_modifications",
    "calculate_weekly_volume_landmarks",
    "conditioning_minutes_from_pattern",
    "compute_progression_targets",
]

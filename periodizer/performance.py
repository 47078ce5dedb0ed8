"""Week performance analysis and progression decisions."""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence

from periodizer.config import DEFAULT_MIN_COMPLETION_RATE
from periodizer.constants import (
    HIGH_COMPLETION_RATE,
    MODERATE_COMPLETION_RATE,
    RPE_TOLERANCE,
    TOP_EXERCISES_LIMIT,
    VOLUME_TREND_THRESHOLD_PCT,
)
from periodizer.exceptions import NoScheduledWorkoutsError
from periodizer.models import (
    AdaptivePlannerInput,
    BlockType,
    ExerciseBreakdown,
    LoggedSet,
    PeriodizationBlock,
    ProgressionRecommendation,
    ScheduledWorkout,
    WeekOverWeekChanges,
    WeekPerformanceMetrics,
    WorkoutAdherence,
    WorkoutLog,
)

logger = logging.getLogger(__name__)


def _mean_rpe(sets: Sequence[LoggedSet]) -> float:
    rpes = [s.rpe for s in sets if s.rpe is not None]
    return sum(rpes) / len(rpes) if rpes else 0.0


def _logs_for_week(scheduled_workouts: Sequence[ScheduledWorkout],
                   workout_logs: Sequence[WorkoutLog]) -> List[WorkoutLog]:
    workout_ids = {w.id for w in scheduled_workouts}
    return [log for log in workout_logs if log.workout_id in workout_ids]


def analyze_week_performance(
    scheduled_workouts: Sequence[ScheduledWorkout],
    workout_logs: Sequence[WorkoutLog],
    *,
    plan_id: str | None = None,
    week_number: int | None = None,
) -> WeekPerformanceMetrics:
    """
    Aggregates a week's logged training against what was scheduled.

    Args:
        scheduled_workouts: Workouts planned for the week. Must not be empty.
        workout_logs: Logged sessions; logs for workouts outside this week are ignored.
        plan_id, week_number: Only used to label the error for an empty schedule.

    Returns:
        Completion rate (percent of scheduled workouts with a log), mean RPE over
        sets that recorded one, total reps, total tonnage and a per-exercise breakdown.
    """
    if not scheduled_workouts:
        raise NoScheduledWorkoutsError(plan_id, week_number)

    week_logs = _logs_for_week(scheduled_workouts, workout_logs)
    all_sets = [s for log in week_logs for s in log.sets]

    logged_workout_ids = {log.workout_id for log in week_logs}
    completion_rate = len(logged_workout_ids) / len(scheduled_workouts) * 100

    total_volume = sum(s.reps for s in all_sets)
    total_tonnage = sum(s.weight_kg * s.reps for s in all_sets)

    breakdown: Dict[str, ExerciseBreakdown] = {}
    weight_sums: Dict[str, float] = {}
    for s in all_sets:
        if s.exercise_id is None:
            continue
        entry = breakdown.setdefault(s.exercise_id, ExerciseBreakdown())
        entry.sets += 1
        entry.reps += s.reps
        weight_sums[s.exercise_id] = weight_sums.get(s.exercise_id, 0.0) + s.weight_kg
    for exercise_id, entry in breakdown.items():
        entry.avg_weight = weight_sums[exercise_id] / entry.sets

    return WeekPerformanceMetrics(
        completion_rate=round(completion_rate, 2),
        avg_rpe=round(_mean_rpe(all_sets), 2),
        total_volume=total_volume,
        total_tonnage=round(total_tonnage, 2),
        exercise_breakdown=breakdown,
    )


def _percent_change(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def generate_progression_recommendations(
    current: WeekPerformanceMetrics,
    previous: Optional[WeekPerformanceMetrics],
    current_block: PeriodizationBlock,
) -> ProgressionRecommendation:
    """
    Decides whether next week should progress, maintain or regress.

    Signals are completion rate (high >= 80, moderate 60-80, low < 60), average RPE
    relative to the block's strength target (+/- 1 is on target) and, when the
    previous week is known, the volume trend (+/- 5%). How they combine depends
    on the block type.
    """
    completion_rate = current.completion_rate
    high_completion = completion_rate >= HIGH_COMPLETION_RATE
    moderate_completion = MODERATE_COMPLETION_RATE <= completion_rate < HIGH_COMPLETION_RATE
    low_completion = completion_rate < MODERATE_COMPLETION_RATE

    target_rpe = current_block.rpe_targets.strength
    avg_rpe = current.avg_rpe
    rpe_under_target = 0 < avg_rpe < target_rpe - RPE_TOLERANCE
    rpe_on_target = target_rpe - RPE_TOLERANCE <= avg_rpe <= target_rpe + RPE_TOLERANCE
    rpe_over_target = avg_rpe > target_rpe + RPE_TOLERANCE

    volume_increased = False
    volume_decreased = False
    if previous is not None:
        volume_change = _percent_change(current.total_volume, previous.total_volume)
        volume_increased = volume_change > VOLUME_TREND_THRESHOLD_PCT
        volume_decreased = volume_change < -VOLUME_TREND_THRESHOLD_PCT

    recommendations: List[str] = []
    block_type = current_block.block_type

    if block_type is BlockType.DELOAD:
        decision = "maintain"
        reasoning = "Deload week completed. Focus on recovery and preparation for next training block."
        recommendations.append("Maintain current training loads")
        recommendations.append("Ensure adequate recovery before next block")
        if low_completion:
            recommendations.append("Consider adding an extra rest day before resuming")
        confidence = 0.9

    elif block_type is BlockType.ACCUMULATION:
        if high_completion and rpe_under_target:
            decision = "progress"
            reasoning = ("High completion rate with RPE below target indicates capacity "
                         "for increased volume or load.")
            recommendations.append("Increase working sets by 1-2 sets per exercise")
            recommendations.append("Consider adding 2.5-5kg to primary lifts")
            if volume_increased:
                recommendations.append("Volume is trending up - excellent progress")
            confidence = 0.85
        elif high_completion and rpe_on_target:
            decision = "maintain"
            reasoning = "Hitting targets consistently. Continue current progression."
            recommendations.append("Maintain current volume and intensity")
            recommendations.append("Focus on technique refinement")
            confidence = 0.8
        elif moderate_completion or rpe_over_target:
            decision = "maintain"
            reasoning = "Moderate completion or high RPE suggests current load is appropriate."
            recommendations.append("Maintain current training load")
            recommendations.append("Monitor recovery closely")
            if rpe_over_target:
                recommendations.append("Consider reducing 1-2 sets if RPE remains high")
            confidence = 0.7
        elif low_completion:
            decision = "regress"
            reasoning = "Low completion rate indicates need to reduce training stress."
            recommendations.append("Reduce volume by 10-15%")
            recommendations.append("Assess recovery and stress levels")
            recommendations.append("Consider scheduling an early deload")
            confidence = 0.75
        else:
            decision, reasoning, confidence = _missing_rpe_fallback(recommendations)

    elif block_type is BlockType.INTENSIFICATION:
        if high_completion and rpe_under_target:
            decision = "progress"
            reasoning = "Handling current intensification loads well. Ready for load increase."
            recommendations.append("Increase load by 2.5-5% on primary lifts")
            recommendations.append("Maintain current set/rep scheme")
            if not volume_decreased:
                recommendations.append("Volume holding steady - good indicator for progression")
            confidence = 0.85
        elif high_completion and rpe_on_target:
            decision = "maintain"
            reasoning = "Meeting intensity targets. Continue building strength."
            recommendations.append("Maintain current loads")
            recommendations.append("Focus on bar speed and technique under heavy loads")
            confidence = 0.8
        elif rpe_over_target or moderate_completion:
            decision = "maintain"
            reasoning = "Intensity is challenging. Consolidate current adaptations."
            recommendations.append("Hold loads for one more week")
            recommendations.append("Ensure adequate rest between sessions")
            confidence = 0.7
        elif low_completion:
            decision = "regress"
            reasoning = "Struggling with current intensity. Reduce load to build back up."
            recommendations.append("Reduce loads by 5-10%")
            recommendations.append("May need to extend accumulation phase")
            recommendations.append("Check sleep, nutrition, and stress")
            confidence = 0.8
        else:
            decision, reasoning, confidence = _missing_rpe_fallback(recommendations)

    elif block_type is BlockType.REALIZATION:
        if high_completion and rpe_on_target:
            decision = "progress"
            reasoning = "Peaking successfully. Ready for performance tests."
            recommendations.append("Attempt planned performance tests or PRs")
            recommendations.append("Maintain current approach")
            confidence = 0.9
        elif rpe_over_target:
            decision = "maintain"
            reasoning = "Peak loads are maximal. Focus on recovery between attempts."
            recommendations.append("Ensure 48-72hr rest before peak efforts")
            recommendations.append("Reduce accessory work if needed")
            confidence = 0.75
        else:
            decision = "maintain"
            reasoning = "Peaking phase in progress. Trust the process."
            recommendations.append("Follow planned peak protocol")
            recommendations.append("Prioritize recovery and mental preparation")
            confidence = 0.7

    else:
        raise ValueError(f"Unhandled block type: {block_type}")

    logger.debug(
        "Block %s (%s): completion=%s avg_rpe=%s -> %s",
        current_block.block_number, block_type.value, completion_rate, avg_rpe, decision,
    )

    return ProgressionRecommendation(
        should_progress=decision == "progress",
        should_maintain=decision == "maintain",
        should_regress=decision == "regress",
        reasoning=reasoning,
        recommendations=recommendations,
        confidence_score=confidence,
    )


def _missing_rpe_fallback(recommendations: List[str]):
    # High completion but no RPE was logged, so load tolerance is unknown
    recommendations.append("Maintain current training load")
    recommendations.append("Log RPE for working sets so next week's loads can be adjusted")
    return "maintain", "Sessions completed but no RPE was logged. Hold loads until effort is known.", 0.6


def calculate_week_over_week_changes(
    current: WeekPerformanceMetrics,
    previous: Optional[WeekPerformanceMetrics],
) -> WeekOverWeekChanges:
    """Completion and RPE as point differences, volume and tonnage as percent change."""
    if previous is None:
        return WeekOverWeekChanges()

    return WeekOverWeekChanges(
        completion_rate_change=current.completion_rate - previous.completion_rate,
        rpe_change=current.avg_rpe - previous.avg_rpe,
        volume_change=_percent_change(current.total_volume, previous.total_volume),
        tonnage_change=_percent_change(current.total_tonnage, previous.total_tonnage),
    )


def is_week_ready_for_analysis(
    performance: WeekPerformanceMetrics,
    minimum_completion_rate: float = DEFAULT_MIN_COMPLETION_RATE,
) -> bool:
    return performance.completion_rate >= minimum_completion_rate


def _fixed(value: float, places: int) -> str:
    """Fixed-point text with halves rounded away from zero (87.5 -> '88', 8.25 -> '8.3')."""
    exponent = Decimal(1).scaleb(-places)
    return str(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def summarize_week_for_ai(
    performance: WeekPerformanceMetrics,
    recommendation: ProgressionRecommendation,
    week_number: int,
    block_type: BlockType | str,
) -> str:
    """Compact week summary used as context for the coaching text generator."""
    phase = BlockType(block_type).value
    lines = [
        f"Week {week_number} ({phase} phase):",
        f"- Completion: {_fixed(performance.completion_rate, 0)}%",
        f"- Avg RPE: {_fixed(performance.avg_rpe, 1)}",
        f"- Volume: {performance.total_volume} reps",
        f"- Tonnage: {_fixed(performance.total_tonnage, 0)}kg",
        "",
        f"Analysis: {recommendation.reasoning}",
        "",
        "Key recommendations:",
    ]
    lines.extend(f"- {rec}" for rec in recommendation.recommendations)
    return "\n".join(lines)


def top_exercises(performance: WeekPerformanceMetrics, limit: int = TOP_EXERCISES_LIMIT) -> List[dict]:
    """Exercises with the most logged sets this week."""
    ranked = sorted(
        performance.exercise_breakdown.items(),
        key=lambda item: item[1].sets,
        reverse=True,
    )
    return [
        {"exercise_id": exercise_id, "sets": entry.sets, "avg_weight": round(entry.avg_weight, 2)}
        for exercise_id, entry in ranked[:limit]
    ]


def build_adaptive_planner_input(
    scheduled_workouts: Sequence[ScheduledWorkout],
    workout_logs: Sequence[WorkoutLog],
) -> AdaptivePlannerInput:
    """Per-workout adherence for the week, in the shape the adaptive planner consumes."""
    performance = analyze_week_performance(scheduled_workouts, workout_logs)
    week_logs = _logs_for_week(scheduled_workouts, workout_logs)

    workouts = []
    for workout in scheduled_workouts:
        log = next((entry for entry in week_logs if entry.workout_id == workout.id), None)
        sets = list(log.sets) if log else []
        workouts.append(WorkoutAdherence(
            focus=workout.focus,
            completed_sets=len(sets),
            target_sets=workout.target_sets,
            avg_rpe=round(_mean_rpe(sets), 1),
            notes=log.notes if log and log.notes else None,
        ))

    return AdaptivePlannerInput(
        workouts=tuple(workouts),
        overall_adherence=performance.completion_rate / 100,
        avg_rpe_across_week=performance.avg_rpe,
    )


__all__ = [
    "analyze_week_performance",
    "generate_progression_recommendations",
    "calculate_week_over_week_changes",
    "is_week_ready_for_analysis",
    "summarize_week_for_ai",
    "top_exercises",
    "build_adaptive_planner_input",
]

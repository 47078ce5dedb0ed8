"""Weekly review: framework lookup -> performance analysis -> per-exercise targets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from periodizer.exceptions import WeekOutOfRangeError
from periodizer.mesocycles import get_current_block
from periodizer.models import (
    ExerciseProgressionTarget,
    LoggedSet,
    PeriodizationBlock,
    PeriodizationFramework,
    ProgressionRecommendation,
    ScheduledWorkout,
    WeekOverWeekChanges,
    WeekPerformanceMetrics,
    WorkoutLog,
)
from periodizer.performance import (
    analyze_week_performance,
    calculate_week_over_week_changes,
    generate_progression_recommendations,
    is_week_ready_for_analysis,
    summarize_week_for_ai,
    top_exercises,
)
from periodizer.progression import calculate_exercise_progression

logger = logging.getLogger(__name__)


@dataclass
class WeeklyReview:
    week_number: int
    block: PeriodizationBlock
    performance: WeekPerformanceMetrics
    previous_performance: Optional[WeekPerformanceMetrics]
    ready_for_analysis: bool
    recommendation: ProgressionRecommendation
    changes: WeekOverWeekChanges
    exercise_targets: List[ExerciseProgressionTarget] = field(default_factory=list)
    top_exercises: List[dict] = field(default_factory=list)
    summary: str = ""


def group_sets_by_exercise(
    scheduled_workouts: Sequence[ScheduledWorkout],
    workout_logs: Sequence[WorkoutLog],
) -> Dict[str, List[LoggedSet]]:
    """Sets of the week's logs keyed by exercise, in the order exercises were first logged."""
    workout_ids = {w.id for w in scheduled_workouts}
    sets_by_exercise: Dict[str, List[LoggedSet]] = {}
    for log in workout_logs:
        if log.workout_id not in workout_ids:
            continue
        for s in log.sets:
            if s.exercise_id is not None:
                sets_by_exercise.setdefault(s.exercise_id, []).append(s)
    return sets_by_exercise


def build_weekly_review(
    framework: PeriodizationFramework,
    week_number: int,
    scheduled_workouts: Sequence[ScheduledWorkout],
    workout_logs: Sequence[WorkoutLog],
    previous: Optional[WeekPerformanceMetrics] = None,
) -> WeeklyReview:
    block = get_current_block(framework, week_number)
    if block is None:
        raise WeekOutOfRangeError(week_number, framework.total_weeks)

    performance = analyze_week_performance(scheduled_workouts, workout_logs, week_number=week_number)
    recommendation = generate_progression_recommendations(performance, previous, block)

    exercise_targets = [
        calculate_exercise_progression(exercise_id, sets, block, recommendation)
        for exercise_id, sets in group_sets_by_exercise(scheduled_workouts, workout_logs).items()
    ]

    logger.info(
        "Week %s (%s): completion %s%%, decision %s, %d exercise targets",
        week_number, block.block_type.value, performance.completion_rate,
        recommendation.decision.value, len(exercise_targets),
    )

    return WeeklyReview(
        week_number=week_number,
        block=block,
        performance=performance,
        previous_performance=previous,
        ready_for_analysis=is_week_ready_for_analysis(performance),
        recommendation=recommendation,
        changes=calculate_week_over_week_changes(performance, previous),
        exercise_targets=exercise_targets,
        top_exercises=top_exercises(performance),
        summary=summarize_week_for_ai(performance, recommendation, week_number, block.block_type),
    )

"""
Read-only adapters that turn stored plans and logs into the records the engine consumes.

Every function takes an open cursor created with psycopg2.extras.RealDictCursor,
except review_plan_week, which borrows one from the connection pool.
"""

import json
import logging

import psycopg2
import psycopg2.extras

from periodizer.db import get_db_connection, release_db_connection
from periodizer.exceptions import FrameworkNotFoundError, NoScheduledWorkoutsError
from periodizer.models import (
    LoggedSet,
    PeriodizationFramework,
    ScheduledWorkout,
    WeeklyLogSummary,
    WorkoutLog,
)
from periodizer.performance import analyze_week_performance
from periodizer.review import WeeklyReview, build_weekly_review

logger = logging.getLogger(__name__)


def _target_sets(payload) -> int:
    """Sums prescribed sets across all exercises of a workout payload."""
    if isinstance(payload, str):
        payload = json.loads(payload)
    if not payload:
        return 0
    return sum(
        int(exercise.get('sets', 0))
        for block in payload.get('blocks', [])
        for exercise in block.get('exercises', [])
    )


def _logged_set(row) -> LoggedSet:
    return LoggedSet(
        weight_kg=float(row['weight_kg']),
        reps=int(row['reps']),
        rpe=float(row['rpe']) if row['rpe'] is not None else None,
        exercise_id=row['exercise_id'],
    )


def fetch_week_records(db_cursor: 'psycopg2.extensions.cursor', plan_id: str, week_number: int):
    """
    Loads the scheduled workouts of a plan week and the sessions logged against them.

    Returns:
        (scheduled_workouts, workout_logs)
    """
    db_cursor.execute(
        "SELECT id, focus, payload FROM workouts "
        "WHERE plan_id = %s AND week_number = %s ORDER BY day_index",
        (plan_id, week_number)
    )
    scheduled = [
        ScheduledWorkout(id=str(row['id']), focus=row['focus'] or "", target_sets=_target_sets(row['payload']))
        for row in db_cursor.fetchall()
    ]
    if not scheduled:
        logger.info(f"No scheduled workouts for plan {plan_id}, week {week_number}.")
        return [], []

    db_cursor.execute(
        "SELECT id, workout_id, notes FROM workout_logs "
        "WHERE plan_id = %s AND workout_id = ANY(%s::uuid[]) ORDER BY performed_at",
        (plan_id, [w.id for w in scheduled])
    )
    log_rows = db_cursor.fetchall()
    if not log_rows:
        return scheduled, []

    db_cursor.execute(
        "SELECT log_id, exercise_id, weight_kg, reps, rpe FROM workout_log_sets "
        "WHERE log_id = ANY(%s::uuid[]) ORDER BY log_id, set_index",
        ([str(row['id']) for row in log_rows],)
    )
    sets_by_log = {}
    for row in db_cursor.fetchall():
        sets_by_log.setdefault(str(row['log_id']), []).append(_logged_set(row))

    logs = [
        WorkoutLog(
            id=str(row['id']),
            workout_id=str(row['workout_id']),
            sets=tuple(sets_by_log.get(str(row['id']), [])),
            notes=row['notes'],
        )
        for row in log_rows
    ]
    logger.info(
        f"Loaded {len(scheduled)} scheduled workouts and {len(logs)} logs for plan {plan_id}, week {week_number}."
    )
    return scheduled, logs


def fetch_framework(db_cursor: 'psycopg2.extensions.cursor', plan_id: str) -> PeriodizationFramework | None:
    db_cursor.execute(
        "SELECT framework FROM periodization_frameworks WHERE plan_id = %s LIMIT 1",
        (plan_id,)
    )
    row = db_cursor.fetchone()
    if not row or row['framework'] is None:
        return None
    data = row['framework']
    if isinstance(data, str):
        data = json.loads(data)
    return PeriodizationFramework.from_dict(data)


def fetch_weekly_log_summaries(db_cursor: 'psycopg2.extensions.cursor', plan_id: str) -> list[WeeklyLogSummary]:
    """One summary per logged session, tagged with the 0-based week index of its workout."""
    db_cursor.execute(
        """
        SELECT wl.id AS log_id, w.week_index, s.exercise_id, s.weight_kg, s.reps, s.rpe
        FROM workout_log_sets s
        JOIN workout_logs wl ON wl.id = s.log_id
        JOIN workouts w ON w.id = wl.workout_id
        WHERE wl.plan_id = %s
        ORDER BY w.week_index, wl.performed_at, s.set_index
        """,
        (plan_id,)
    )
    week_by_log = {}
    sets_by_log = {}
    for row in db_cursor.fetchall():
        log_id = str(row['log_id'])
        week_by_log[log_id] = int(row['week_index'])
        sets_by_log.setdefault(log_id, []).append(_logged_set(row))

    return [
        WeeklyLogSummary(week_index=week_by_log[log_id], sets=tuple(sets))
        for log_id, sets in sets_by_log.items()
    ]


def load_weekly_review(db_cursor: 'psycopg2.extensions.cursor', plan_id: str, week_number: int) -> WeeklyReview:
    framework = fetch_framework(db_cursor, plan_id)
    if framework is None:
        raise FrameworkNotFoundError(plan_id)

    scheduled, logs = fetch_week_records(db_cursor, plan_id, week_number)
    if not scheduled:
        raise NoScheduledWorkoutsError(plan_id, week_number)

    previous = None
    if week_number > 1:
        prev_scheduled, prev_logs = fetch_week_records(db_cursor, plan_id, week_number - 1)
        try:
            previous = analyze_week_performance(
                prev_scheduled, prev_logs, plan_id=plan_id, week_number=week_number - 1
            )
        except NoScheduledWorkoutsError:
            logger.info(f"Previous week {week_number - 1} of plan {plan_id} has no workouts; skipping comparison.")

    return build_weekly_review(framework, week_number, scheduled, logs, previous)


def review_plan_week(plan_id: str, week_number: int) -> WeeklyReview:
    """Builds the weekly review for a plan using a pooled connection."""
    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            return load_weekly_review(cur, plan_id, week_number)
    except psycopg2.Error as e:
        logger.error(f"Database error while reviewing plan {plan_id}, week {week_number}: {e}", exc_info=True)
        raise
    finally:
        if conn:
            release_db_connection(conn)

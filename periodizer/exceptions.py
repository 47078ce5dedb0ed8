"""Exceptions raised by the periodization engine."""


class PeriodizerError(Exception):
    """Base class for engine errors."""


class NoScheduledWorkoutsError(PeriodizerError, ValueError):
    """Raised when a week is analysed before any workouts were scheduled for it."""

    def __init__(self, plan_id: str | None = None, week_number: int | None = None) -> None:
        if plan_id is not None or week_number is not None:
            message = f"No workouts found for plan {plan_id}, week {week_number}"
        else:
            message = "No scheduled workouts to analyze"
        super().__init__(message)
        self.plan_id = plan_id
        self.week_number = week_number


class FrameworkNotFoundError(PeriodizerError, LookupError):
    """Raised when a plan has no stored periodization framework."""

    def __init__(self, plan_id: str) -> None:
        super().__init__(f"No periodization framework found for plan {plan_id}")
        self.plan_id = plan_id


class WeekOutOfRangeError(PeriodizerError, ValueError):
    """Raised when a week falls outside the program's framework."""

    def __init__(self, week_number: int, total_weeks: int) -> None:
        super().__init__(f"Week {week_number} is outside the {total_weeks}-week program")
        self.week_number = week_number
        self.total_weeks = total_weeks

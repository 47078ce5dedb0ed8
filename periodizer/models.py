"""Typed records shared by the framework generator, analyzer and progression calculator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class BlockType(Enum):
    ACCUMULATION = "accumulation"
    INTENSIFICATION = "intensification"
    DELOAD = "deload"
    REALIZATION = "realization"


class ExperienceLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"


class GoalBias(Enum):
    STRENGTH = "strength"
    BALANCED = "balanced"
    HYPERTROPHY = "hypertrophy"
    FAT_LOSS = "fat_loss"


class TargetLevel(Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ProgressionType(Enum):
    INCREASE = "increase"
    MAINTAIN = "maintain"
    DECREASE = "decrease"


@dataclass(frozen=True)
class RepRanges:
    strength: str
    accessory: str


@dataclass(frozen=True)
class RpeTargets:
    strength: float
    accessory: float


@dataclass(frozen=True)
class PeriodizationBlock:
    """One contiguous phase of a program. Weeks are 1-based and inclusive."""
    block_number: int
    block_type: BlockType
    start_week: int
    end_week: int
    volume_target: TargetLevel
    intensity_target: TargetLevel
    rep_ranges: RepRanges
    rpe_targets: RpeTargets

    def __post_init__(self):
        if self.start_week > self.end_week:
            raise ValueError(
                f"Block {self.block_number} starts after it ends "
                f"({self.start_week} > {self.end_week})"
            )

    @property
    def weeks(self) -> range:
        return range(self.start_week, self.end_week + 1)

    @property
    def length(self) -> int:
        return self.end_week - self.start_week + 1

    def contains(self, week_number: int) -> bool:
        return self.start_week <= week_number <= self.end_week

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the block into the JSON shape stored alongside a plan."""
        return {
            "blockNumber": self.block_number,
            "blockType": self.block_type.value,
            "startWeek": self.start_week,
            "endWeek": self.end_week,
            "volumeTarget": self.volume_target.value,
            "intensityTarget": self.intensity_target.value,
            "repRanges": {
                "strength": self.rep_ranges.strength,
                "accessory": self.rep_ranges.accessory,
            },
            "rpeTargets": {
                "strength": self.rpe_targets.strength,
                "accessory": self.rpe_targets.accessory,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeriodizationBlock":
        return cls(
            block_number=int(data["blockNumber"]),
            block_type=BlockType(data["blockType"]),
            start_week=int(data["startWeek"]),
            end_week=int(data["endWeek"]),
            volume_target=TargetLevel(data["volumeTarget"]),
            intensity_target=TargetLevel(data["intensityTarget"]),
            rep_ranges=RepRanges(
                strength=data["repRanges"]["strength"],
                accessory=data["repRanges"]["accessory"],
            ),
            rpe_targets=RpeTargets(
                strength=float(data["rpeTargets"]["strength"]),
                accessory=float(data["rpeTargets"]["accessory"]),
            ),
        )


@dataclass(frozen=True)
class PeriodizationFramework:
    total_weeks: int
    blocks: Tuple[PeriodizationBlock, ...]

    def deload_weeks(self) -> List[int]:
        return [
            week
            for block in self.blocks
            if block.block_type is BlockType.DELOAD
            for week in block.weeks
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalWeeks": self.total_weeks,
            "blocks": [block.to_dict() for block in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeriodizationFramework":
        return cls(
            total_weeks=int(data["totalWeeks"]),
            blocks=tuple(PeriodizationBlock.from_dict(b) for b in data["blocks"]),
        )


@dataclass(frozen=True)
class BlockGuidelines:
    volume: str
    intensity: str
    rep_range: str
    rpe: str
    description: str


@dataclass(frozen=True)
class LoggedSet:
    weight_kg: float
    reps: int
    rpe: Optional[float] = None
    exercise_id: Optional[str] = None


@dataclass(frozen=True)
class ScheduledWorkout:
    id: str
    focus: str = ""
    target_sets: int = 0


@dataclass(frozen=True)
class WorkoutLog:
    id: str
    workout_id: str
    sets: Tuple[LoggedSet, ...] = ()
    notes: Optional[str] = None


@dataclass
class ExerciseBreakdown:
    sets: int = 0
    reps: int = 0
    avg_weight: float = 0.0


@dataclass
class WeekPerformanceMetrics:
    completion_rate: float
    avg_rpe: float
    total_volume: int
    total_tonnage: float
    exercise_breakdown: Dict[str, ExerciseBreakdown] = field(default_factory=dict)


@dataclass
class ProgressionRecommendation:
    should_progress: bool
    should_maintain: bool
    should_regress: bool
    reasoning: str
    recommendations: List[str]
    confidence_score: float

    def __post_init__(self):
        flags = (self.should_progress, self.should_maintain, self.should_regress)
        if sum(bool(f) for f in flags) != 1:
            raise ValueError(
                "Exactly one of should_progress, should_maintain and should_regress must be set"
            )
        if not 0.0 < self.confidence_score <= 1.0:
            raise ValueError(f"confidence_score must be in (0, 1], got {self.confidence_score}")

    @property
    def decision(self) -> ProgressionType:
        if self.should_progress:
            return ProgressionType.INCREASE
        if self.should_regress:
            return ProgressionType.DECREASE
        return ProgressionType.MAINTAIN


@dataclass(frozen=True)
class WeekOverWeekChanges:
    completion_rate_change: float = 0.0
    rpe_change: float = 0.0
    volume_change: float = 0.0
    tonnage_change: float = 0.0


@dataclass
class ExerciseProgressionTarget:
    exercise_id: str
    current_weight: float
    current_reps: int
    current_rpe: Optional[float]
    recommended_weight: float
    recommended_reps: Union[int, str]
    target_rpe: float
    progression_type: ProgressionType
    notes: str


@dataclass(frozen=True)
class WeeklyLogSummary:
    week_index: int  # 0-based
    sets: Tuple[LoggedSet, ...] = ()
    zone2_minutes: Optional[float] = None


@dataclass(frozen=True)
class WeeklyProgressionTarget:
    week_index: int
    total_load_kg: int
    zone2_minutes: int
    focus_notes: str
    is_deload: bool


@dataclass(frozen=True)
class VolumeLandmark:
    week_index: int
    volume_landmark: int
    intensity_landmark: float
    avg_rpe: float


@dataclass(frozen=True)
class SessionBlock:
    kind: str  # "strength", "accessory", "conditioning", ...
    duration_minutes: int = 0


@dataclass(frozen=True)
class TrainingDay:
    blocks: Tuple[SessionBlock, ...] = ()


@dataclass(frozen=True)
class WorkoutAdherence:
    focus: str
    completed_sets: int
    target_sets: int
    avg_rpe: float
    notes: Optional[str] = None


@dataclass(frozen=True)
class AdaptivePlannerInput:
    workouts: Tuple[WorkoutAdherence, ...]
    overall_adherence: float  # 0-1
    avg_rpe_across_week: float
    user_feedback: Optional[str] = None

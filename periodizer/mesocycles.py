"""Periodization framework generation and block lookup."""

from __future__ import annotations

import logging

from periodizer.constants import (
    BEGINNER_DELOAD_INTERVAL_WEEKS,
    INTERMEDIATE_LONG_PROGRAM_WEEKS,
    INTERMEDIATE_LONG_CYCLE_WEEKS,
    INTERMEDIATE_SHORT_CYCLE_WEEKS,
)
from periodizer.models import (
    BlockGuidelines,
    BlockType,
    ExperienceLevel,
    GoalBias,
    PeriodizationBlock,
    PeriodizationFramework,
    RepRanges,
    RpeTargets,
    TargetLevel,
)

logger = logging.getLogger(__name__)

BLOCK_GUIDELINES = {
    BlockType.ACCUMULATION: BlockGuidelines(
        volume="High volume to build work capacity and muscle",
        intensity="Moderate intensity to allow for recovery",
        rep_range="Strength: 8-12 reps, Accessory: 12-15 reps",
        rpe="Strength: RPE 7-8, Accessory: RPE 7-8",
        description="Build volume tolerance and movement proficiency",
    ),
    BlockType.INTENSIFICATION: BlockGuidelines(
        volume="Moderate volume with focus on quality",
        intensity="High intensity to build strength",
        rep_range="Strength: 4-8 reps, Accessory: 8-12 reps",
        rpe="Strength: RPE 8-9, Accessory: RPE 8",
        description="Increase load and intensity for strength gains",
    ),
    BlockType.DELOAD: BlockGuidelines(
        volume="Low volume (40% reduction) for recovery",
        intensity="Moderate intensity (15% load reduction)",
        rep_range="Strength: 6-8 reps, Accessory: 8-10 reps",
        rpe="Strength: RPE 6-7, Accessory: RPE 6",
        description="Active recovery to dissipate fatigue and prepare for next block",
    ),
    BlockType.REALIZATION: BlockGuidelines(
        volume="Low volume to maintain freshness",
        intensity="Peak intensity for performance",
        rep_range="Strength: 3-6 reps, Accessory: 6-8 reps",
        rpe="Strength: RPE 9+, Accessory: RPE 8",
        description="Peak performance phase with maximum loads",
    ),
}

DELOAD_REP_RANGES = RepRanges(strength="6-8", accessory="8-10")


def _accumulation_rep_ranges(goal_bias: GoalBias) -> RepRanges:
    strength = "10-12" if goal_bias is GoalBias.HYPERTROPHY else "8-12"
    return RepRanges(strength=strength, accessory="12-15")


def _intensification_rep_ranges(goal_bias: GoalBias) -> RepRanges:
    strength = "8-10" if goal_bias is GoalBias.HYPERTROPHY else "4-8"
    return RepRanges(strength=strength, accessory="8-12")


class _BlockSequence:
    """Appends blocks back to back so week ranges can never overlap or leave gaps."""

    def __init__(self):
        self.blocks: list[PeriodizationBlock] = []
        self.next_week = 1

    def add(self, block_type: BlockType, weeks: int, volume: TargetLevel,
            intensity: TargetLevel, rep_ranges: RepRanges, rpe_targets: RpeTargets) -> None:
        start_week = self.next_week
        end_week = start_week + weeks - 1
        self.blocks.append(PeriodizationBlock(
            block_number=len(self.blocks) + 1,
            block_type=block_type,
            start_week=start_week,
            end_week=end_week,
            volume_target=volume,
            intensity_target=intensity,
            rep_ranges=rep_ranges,
            rpe_targets=rpe_targets,
        ))
        self.next_week = end_week + 1


def get_deload_weeks(total_weeks: int) -> list[int]:
    """Beginner deload weeks: every 4th week of the program."""
    return list(range(BEGINNER_DELOAD_INTERVAL_WEEKS, total_weeks + 1, BEGINNER_DELOAD_INTERVAL_WEEKS))


def _generate_beginner_framework(total_weeks: int, goal_bias: GoalBias) -> list[PeriodizationBlock]:
    sequence = _BlockSequence()
    deload_weeks = get_deload_weeks(total_weeks)

    while sequence.next_week <= total_weeks:
        current_week = sequence.next_week
        if current_week in deload_weeks:
            sequence.add(BlockType.DELOAD, 1, TargetLevel.LOW, TargetLevel.MODERATE,
                         DELOAD_REP_RANGES, RpeTargets(strength=6, accessory=6))
            continue

        next_deload = next((w for w in deload_weeks if w > current_week), None)
        end_week = next_deload - 1 if next_deload else total_weeks
        sequence.add(BlockType.ACCUMULATION, end_week - current_week + 1,
                     TargetLevel.HIGH, TargetLevel.MODERATE,
                     _accumulation_rep_ranges(goal_bias), RpeTargets(strength=7, accessory=7))

    return sequence.blocks


def _generate_intermediate_framework(total_weeks: int, goal_bias: GoalBias) -> list[PeriodizationBlock]:
    sequence = _BlockSequence()
    if total_weeks >= INTERMEDIATE_LONG_PROGRAM_WEEKS:
        cycle_length = INTERMEDIATE_LONG_CYCLE_WEEKS
    else:
        cycle_length = INTERMEDIATE_SHORT_CYCLE_WEEKS

    accumulation_weeks = cycle_length // 2
    intensification_weeks = cycle_length - accumulation_weeks - 1

    def add_accumulation(weeks):
        sequence.add(BlockType.ACCUMULATION, weeks, TargetLevel.HIGH, TargetLevel.MODERATE,
                     _accumulation_rep_ranges(goal_bias), RpeTargets(strength=7.5, accessory=7.5))

    def add_deload():
        sequence.add(BlockType.DELOAD, 1, TargetLevel.LOW, TargetLevel.MODERATE,
                     DELOAD_REP_RANGES, RpeTargets(strength=6.5, accessory=6))

    while sequence.next_week <= total_weeks:
        remaining_weeks = total_weeks - sequence.next_week + 1

        if remaining_weeks >= cycle_length:
            add_accumulation(accumulation_weeks)
            sequence.add(BlockType.INTENSIFICATION, intensification_weeks,
                         TargetLevel.MODERATE, TargetLevel.HIGH,
                         _intensification_rep_ranges(goal_bias), RpeTargets(strength=8.5, accessory=8))
            add_deload()
        elif remaining_weeks >= 2:
            # Not enough room for a full cycle: collapse it to accumulation + deload
            add_accumulation(remaining_weeks - 1)
            add_deload()
        else:
            add_accumulation(1)

    return sequence.blocks


def generate_periodization_framework(
    total_weeks: int,
    experience_level: ExperienceLevel | str,
    goal_bias: GoalBias | str,
) -> PeriodizationFramework:
    """
    Builds the block layout for a program.

    Beginners get linear progression with a deload every fourth week. Intermediates
    get repeating accumulation -> intensification -> deload cycles.

    Args:
        total_weeks: Program length in weeks (>= 1).
        experience_level: "beginner" or "intermediate".
        goal_bias: "strength", "balanced", "hypertrophy" or "fat_loss".

    Returns:
        A framework whose blocks cover weeks 1..total_weeks exactly once.
    """
    if isinstance(total_weeks, bool) or not isinstance(total_weeks, int) or total_weeks < 1:
        raise ValueError(f"total_weeks must be a positive integer, got {total_weeks!r}")
    level = ExperienceLevel(experience_level)
    goal = GoalBias(goal_bias)

    if level is ExperienceLevel.BEGINNER:
        blocks = _generate_beginner_framework(total_weeks, goal)
    elif level is ExperienceLevel.INTERMEDIATE:
        blocks = _generate_intermediate_framework(total_weeks, goal)
    else:
        raise ValueError(f"Unsupported experience level: {level}")

    logger.debug(
        "Generated %s-week %s framework (%s) with %d blocks",
        total_weeks, level.value, goal.value, len(blocks),
    )
    return PeriodizationFramework(total_weeks=total_weeks, blocks=tuple(blocks))


def get_current_block(framework: PeriodizationFramework, week_number: int) -> PeriodizationBlock | None:
    """Returns the block containing week_number, or None when the week is outside the program."""
    if week_number <= 0 or week_number > framework.total_weeks:
        return None
    return next((block for block in framework.blocks if block.contains(week_number)), None)


def get_block_guidelines(block_type: BlockType | str) -> BlockGuidelines:
    return BLOCK_GUIDELINES[BlockType(block_type)]


def get_block_progress(block: PeriodizationBlock, week_number: int) -> float:
    """Fraction of the block completed at week_number, clamped to [0, 1]."""
    weeks_completed = week_number - block.start_week
    return min(max(weeks_completed / block.length, 0.0), 1.0)


def describe_periodization_framework(framework: PeriodizationFramework) -> str:
    lines = [f"{framework.total_weeks}-week program:"]
    for block in framework.blocks:
        if block.start_week == block.end_week:
            week_range = f"Week {block.start_week}"
        else:
            week_range = f"Weeks {block.start_week}-{block.end_week}"
        lines.append(
            f"{week_range}: {block.block_type.value} "
            f"({block.volume_target.value} volume, {block.intensity_target.value} intensity)"
        )
    return "\n".join(lines)


__all__ = [
    "BLOCK_GUIDELINES",
    "generate_periodization_framework",
    "get_current_block",
    "get_block_guidelines",
    "get_block_progress",
    "describe_periodization_framework",
    "get_deload_weeks",
]


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    for level_name in ("beginner", "intermediate"):
        framework = generate_periodization_framework(12, level_name, "balanced")
        print(f"--- {level_name} ---")
        print(describe_periodization_framework(framework))

import pytest
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from periodizer.models import (
    BlockType,
    PeriodizationBlock,
    ProgressionRecommendation,
    RepRanges,
    RpeTargets,
    TargetLevel,
)


def make_block(block_type=BlockType.ACCUMULATION, start_week=1, end_week=3,
               strength_reps="8-12", strength_rpe=7.5, block_number=1):
    return PeriodizationBlock(
        block_number=block_number,
        block_type=block_type,
        start_week=start_week,
        end_week=end_week,
        volume_target=TargetLevel.HIGH,
        intensity_target=TargetLevel.MODERATE,
        rep_ranges=RepRanges(strength=strength_reps, accessory="12-15"),
        rpe_targets=RpeTargets(strength=strength_rpe, accessory=strength_rpe),
    )


def make_recommendation(decision="progress", confidence=0.85):
    return ProgressionRecommendation(
        should_progress=decision == "progress",
        should_maintain=decision == "maintain",
        should_regress=decision == "regress",
        reasoning="test",
        recommendations=[],
        confidence_score=confidence,
    )


@pytest.fixture()
def accumulation_block():
    return make_block()

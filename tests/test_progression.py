import unittest

from conftest import make_block, make_recommendation

from periodizer.mesocycles import generate_periodization_framework
from periodizer.models import (
    BlockType,
    LoggedSet,
    ProgressionType,
    SessionBlock,
    TrainingDay,
    WeeklyLogSummary,
    WeeklyProgressionTarget,
)
from periodizer.progression import (
    apply_deload_modifications,
    calculate_exercise_progression,
    calculate_weekly_volume_landmarks,
    compute_progression_targets,
    conditioning_minutes_from_pattern,
    load_increment_for,
    parse_rep_range,
    select_best_set,
)


class TestProgressionHelpers(unittest.TestCase):
    def test_parse_rep_range(self):
        self.assertEqual(parse_rep_range("8-12"), (8, 12))
        self.assertEqual(parse_rep_range(" 4 - 8 "), (4, 8))
        self.assertEqual(parse_rep_range("5"), (5, 5))

    def test_select_best_set_uses_weight_times_reps(self):
        sets = [
            LoggedSet(80, 12, 7),     # 960
            LoggedSet(100, 10, 8),    # 1000
            LoggedSet(90, 11, 7.5),   # 990
        ]
        self.assertEqual(select_best_set(sets), sets[1])

    def test_select_best_set_tie_keeps_first(self):
        sets = [LoggedSet(100, 10, 8), LoggedSet(125, 8, 9)]
        self.assertIs(select_best_set(sets), sets[0])

    def test_load_increment(self):
        self.assertEqual(load_increment_for(60), 2.5)
        self.assertEqual(load_increment_for(59.5), 5)


class TestCalculateExerciseProgression(unittest.TestCase):
    def setUp(self):
        self.block = make_block(BlockType.ACCUMULATION)

    def test_baseline_without_previous_data(self):
        result = calculate_exercise_progression("squat", [], self.block, make_recommendation("maintain"))
        self.assertEqual(result.exercise_id, "squat")
        self.assertEqual(result.current_weight, 0)
        self.assertEqual(result.current_reps, 0)
        self.assertIsNone(result.current_rpe)
        self.assertEqual(result.recommended_reps, "8-12")
        self.assertEqual(result.target_rpe, 7.5)
        self.assertEqual(result.progression_type, ProgressionType.MAINTAIN)
        self.assertIn("No previous data", result.notes)

    def test_top_of_rep_range_increases_weight_and_resets_reps(self):
        result = calculate_exercise_progression(
            "squat", [LoggedSet(100, 12, 7)], self.block, make_recommendation("progress"))
        self.assertEqual(result.progression_type, ProgressionType.INCREASE)
        self.assertEqual(result.recommended_weight, 102.5)
        self.assertEqual(result.recommended_reps, 8)
        self.assertIn("Increase weight", result.notes)

    def test_lighter_loads_use_larger_increments(self):
        recommendation = make_recommendation("progress")
        heavy = calculate_exercise_progression("squat", [LoggedSet(100, 12, 7)], self.block, recommendation)
        light = calculate_exercise_progression("curl", [LoggedSet(40, 12, 7)], self.block, recommendation)
        self.assertEqual(heavy.recommended_weight - 100, 2.5)
        self.assertEqual(light.recommended_weight - 40, 5)

    def test_low_rpe_increases_weight(self):
        result = calculate_exercise_progression(
            "bench", [LoggedSet(80, 10, 5.5)], self.block, make_recommendation("progress"))
        self.assertEqual(result.progression_type, ProgressionType.INCREASE)
        self.assertEqual(result.recommended_weight, 82.5)
        self.assertEqual(result.recommended_reps, 10)
        self.assertIn("RPE", result.notes)

    def test_mid_range_progresses_reps(self):
        result = calculate_exercise_progression(
            "squat", [LoggedSet(100, 10, 7.5)], self.block, make_recommendation("progress"))
        self.assertEqual(result.progression_type, ProgressionType.INCREASE)
        self.assertEqual(result.recommended_weight, 100)
        self.assertEqual(result.recommended_reps, 11)
        self.assertIn("progressing reps", result.notes)

    def test_maintain_keeps_weight(self):
        result = calculate_exercise_progression(
            "squat", [LoggedSet(100, 10, 7.5)], self.block, make_recommendation("maintain"))
        self.assertEqual(result.progression_type, ProgressionType.MAINTAIN)
        self.assertEqual(result.recommended_weight, 100)
        self.assertEqual(result.recommended_reps, 10)
        self.assertIn("Maintain current weights", result.notes)

    def test_regress_reduces_weight_by_ten_percent(self):
        result = calculate_exercise_progression(
            "squat", [LoggedSet(100, 8, 9)], self.block, make_recommendation("regress"))
        self.assertEqual(result.progression_type, ProgressionType.DECREASE)
        self.assertEqual(result.recommended_weight, 90)
        self.assertIn("Reduce weight by ~10%", result.notes)

    def test_regress_rounds_to_half_kilo(self):
        # 87 * 0.9 = 78.3
        result = calculate_exercise_progression(
            "squat", [LoggedSet(87, 8, 9)], self.block, make_recommendation("regress"))
        self.assertEqual(result.recommended_weight, 78.5)

    def test_deload_block_overrides_decision(self):
        deload = make_block(BlockType.DELOAD, strength_reps="6-8", strength_rpe=6.5)
        for decision in ("progress", "maintain", "regress"):
            with self.subTest(decision=decision):
                result = calculate_exercise_progression(
                    "squat", [LoggedSet(100, 10, 7)], deload, make_recommendation(decision))
                self.assertEqual(result.progression_type, ProgressionType.DECREASE)
                self.assertEqual(result.recommended_weight, 85)
                self.assertIn("Deload week", result.notes)

    def test_recommended_weight_is_half_kilo_aligned(self):
        for weight in (37.3, 61.1, 87, 142.7):
            for decision in ("progress", "maintain", "regress"):
                result = calculate_exercise_progression(
                    "row", [LoggedSet(weight, 9, 7)], self.block, make_recommendation(decision))
                self.assertEqual(result.recommended_weight * 2, round(result.recommended_weight * 2))

    def test_best_set_is_reported(self):
        sets = [LoggedSet(80, 12, 7), LoggedSet(100, 10, 8), LoggedSet(90, 11, 7.5)]
        result = calculate_exercise_progression("squat", sets, self.block, make_recommendation("maintain"))
        self.assertEqual(result.current_weight, 100)
        self.assertEqual(result.current_reps, 10)
        self.assertEqual(result.current_rpe, 8)


class TestDeloadModifications(unittest.TestCase):
    def setUp(self):
        self.base = WeeklyProgressionTarget(
            week_index=3, total_load_kg=10000, zone2_minutes=100,
            focus_notes="Progressive week", is_deload=False,
        )

    def test_default_reductions(self):
        result = apply_deload_modifications(self.base)
        self.assertEqual(result.total_load_kg, 8500)
        self.assertEqual(result.zone2_minutes, 60)
        self.assertTrue(result.is_deload)
        self.assertIn("40% volume reduction", result.focus_notes)
        self.assertIn("15% load reduction", result.focus_notes)
        self.assertIn("Progressive week", result.focus_notes)

    def test_custom_reductions(self):
        result = apply_deload_modifications(self.base, 0.5, 0.2)
        self.assertEqual(result.total_load_kg, 8000)
        self.assertEqual(result.zone2_minutes, 50)
        self.assertIn("50% volume reduction", result.focus_notes)
        self.assertIn("20% load reduction", result.focus_notes)

    def test_results_are_integers_and_input_untouched(self):
        base = WeeklyProgressionTarget(3, 9500, 95, "Progressive week", False)
        result = apply_deload_modifications(base)
        self.assertIsInstance(result.total_load_kg, int)
        self.assertIsInstance(result.zone2_minutes, int)
        self.assertFalse(base.is_deload)
        self.assertEqual(base.total_load_kg, 9500)


class TestVolumeLandmarks(unittest.TestCase):
    def test_landmarks_per_week(self):
        logs = [
            WeeklyLogSummary(0, (LoggedSet(100, 10, 7), LoggedSet(100, 10, 7))),
            WeeklyLogSummary(1, (LoggedSet(102.5, 10, 7.5), LoggedSet(102.5, 10, 7.5))),
        ]
        result = calculate_weekly_volume_landmarks(logs, 2)
        self.assertEqual(len(result), 2)
        self.assertEqual(result[0].week_index, 0)
        self.assertEqual(result[0].volume_landmark, 20)
        self.assertEqual(result[0].intensity_landmark, 100)
        self.assertEqual(result[0].avg_rpe, 7)
        self.assertEqual(result[1].intensity_landmark, 102.5)
        self.assertEqual(result[1].avg_rpe, 7.5)

    def test_missing_weeks_are_zero(self):
        logs = [WeeklyLogSummary(0, (LoggedSet(100, 10, 7),))]
        result = calculate_weekly_volume_landmarks(logs, 3)
        self.assertEqual([landmark.week_index for landmark in result], [0, 1, 2])
        self.assertEqual(result[1].volume_landmark, 0)
        self.assertEqual(result[1].intensity_landmark, 0)
        self.assertEqual(result[1].avg_rpe, 0)

    def test_gap_between_logged_weeks(self):
        logs = [
            WeeklyLogSummary(0, (LoggedSet(100, 10, 7),)),
            WeeklyLogSummary(2, (LoggedSet(105, 8, 8),)),
            WeeklyLogSummary(7, (LoggedSet(110, 5, 9),)),
        ]
        result = calculate_weekly_volume_landmarks(logs, 3)
        self.assertEqual(len(result), 3)
        self.assertEqual((result[1].volume_landmark, result[1].intensity_landmark, result[1].avg_rpe), (0, 0, 0))
        self.assertEqual(result[2].volume_landmark, 8)

    def test_average_rpe_skips_sets_without_rpe(self):
        logs = [WeeklyLogSummary(0, (LoggedSet(100, 10, 6), LoggedSet(100, 10, 8), LoggedSet(100, 10)))]
        self.assertEqual(calculate_weekly_volume_landmarks(logs, 1)[0].avg_rpe, 7)

        no_rpe = [WeeklyLogSummary(0, (LoggedSet(100, 10), LoggedSet(100, 10)))]
        self.assertEqual(calculate_weekly_volume_landmarks(no_rpe, 1)[0].avg_rpe, 0)

    def test_sessions_in_same_week_are_merged(self):
        logs = [
            WeeklyLogSummary(0, (LoggedSet(100, 10, 7),)),
            WeeklyLogSummary(0, (LoggedSet(100, 10, 7),)),
        ]
        self.assertEqual(calculate_weekly_volume_landmarks(logs, 1)[0].volume_landmark, 20)


class TestWeeklyTargets(unittest.TestCase):
    def test_conditioning_minutes_guardrails(self):
        self.assertEqual(conditioning_minutes_from_pattern([]), 90)

        short_sessions = [TrainingDay((SessionBlock("conditioning", 20),)) for _ in range(4)]
        self.assertEqual(conditioning_minutes_from_pattern(short_sessions), 120)

        long_sessions = [
            TrainingDay((SessionBlock("strength", 60), SessionBlock("conditioning", 45))),
            TrainingDay((SessionBlock("conditioning", 45),)),
            TrainingDay((SessionBlock("conditioning", 45),)),
        ]
        self.assertEqual(conditioning_minutes_from_pattern(long_sessions), 135)

    def test_projection_from_last_logged_week(self):
        logs = [WeeklyLogSummary(0, tuple(LoggedSet(100, 10, 7) for _ in range(4)))]
        targets = compute_progression_targets(4, logs, [])

        self.assertEqual([t.week_index for t in targets], [0, 1, 2, 3])
        self.assertEqual(targets[0].total_load_kg, 4000)
        self.assertIn("Logged week", targets[0].focus_notes)
        self.assertEqual(targets[1].total_load_kg, 4100)
        self.assertFalse(targets[1].is_deload)
        self.assertTrue(targets[3].is_deload)
        self.assertLess(targets[3].total_load_kg, targets[2].total_load_kg)
        self.assertIn("Deload week", targets[3].focus_notes)
        self.assertTrue(all(t.zone2_minutes == 90 for t in targets))

    def test_projection_without_logs_starts_from_default(self):
        targets = compute_progression_targets(2, [], [])
        self.assertEqual(targets[0].total_load_kg, 3280)
        self.assertIn("Progressive week", targets[0].focus_notes)

    def test_load_never_drops_below_floor(self):
        logs = [WeeklyLogSummary(0, (LoggedSet(20, 10, 6),))]
        targets = compute_progression_targets(3, logs, [])
        self.assertTrue(all(t.total_load_kg >= 2500 for t in targets))

    def test_deload_weeks_follow_framework(self):
        framework = generate_periodization_framework(6, "intermediate", "balanced")
        targets = compute_progression_targets(6, [], [], framework=framework)
        self.assertEqual([t.week_index for t in targets if t.is_deload], [2, 5])


if __name__ == '__main__':
    unittest.main()

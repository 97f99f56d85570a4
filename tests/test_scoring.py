"""Tests for the practice scoring engine."""

import pytest

from melobuddy.scoring import (
    MAX_STREAK_BONUS,
    NEW_SONG_BONUS,
    PracticeMode,
    clamp_score,
    get_streak_bonus,
    score_practice,
    stars_for_score,
)
from melobuddy.state import GameState

TODAY = "2026-01-05"
YESTERDAY = "2026-01-04"


class TestGetStreakBonus:
    def test_first_day(self):
        assert get_streak_bonus(1) == 5

    def test_scales_per_day(self):
        assert get_streak_bonus(7) == 35

    def test_capped(self):
        assert get_streak_bonus(10) == MAX_STREAK_BONUS
        assert get_streak_bonus(400) == MAX_STREAK_BONUS

    def test_zero(self):
        assert get_streak_bonus(0) == 0


class TestClampScore:
    def test_in_range_untouched(self):
        assert clamp_score(73.5) == 73.5

    def test_above(self):
        assert clamp_score(140) == 100

    def test_below(self):
        assert clamp_score(-20) == 0

    def test_nan(self):
        assert clamp_score(float("nan")) == 0


class TestScorePractice:
    def test_perfect_new_song_first_day(self):
        result = score_practice(GameState(), "twinkle", 100, TODAY)
        assert result.base_xp == 50
        assert result.new_song_bonus == NEW_SONG_BONUS
        assert result.streak_bonus == 5
        assert result.new_streak_days == 1
        assert result.xp_earned == 75
        assert result.is_three_star is True
        assert result.is_new_song is True
        assert result.is_first_practice_today is True

    def test_known_song_later_same_day(self):
        state = GameState(
            xp=200, level=2, streak_days=3, best_streak=3,
            last_practice_date=TODAY, completed_songs=frozenset({"twinkle"}),
        )
        result = score_practice(state, "twinkle", 40, TODAY)
        assert result.base_xp == 20
        assert result.new_song_bonus == 0
        assert result.streak_bonus == 0
        assert result.xp_earned == 20
        assert result.is_three_star is False
        assert result.is_first_practice_today is False
        assert result.new_streak_days == 3

    def test_base_xp_floors(self):
        state = GameState(last_practice_date=TODAY, completed_songs=frozenset({"a"}))
        assert score_practice(state, "a", 99, TODAY).base_xp == 49
        assert score_practice(state, "a", 33.9, TODAY).base_xp == 16

    def test_continuing_streak_bonus(self):
        state = GameState(streak_days=4, best_streak=4, last_practice_date=YESTERDAY)
        result = score_practice(state, "scale", 60, TODAY)
        assert result.new_streak_days == 5
        assert result.streak_bonus == 25
        assert result.xp_earned == 30 + NEW_SONG_BONUS + 25

    def test_long_streak_bonus_capped(self):
        state = GameState(streak_days=30, best_streak=30, last_practice_date=YESTERDAY)
        result = score_practice(state, "scale", 0, TODAY)
        assert result.streak_bonus == MAX_STREAK_BONUS

    def test_broken_streak_restarts(self):
        state = GameState(streak_days=12, best_streak=12, last_practice_date="2025-12-20")
        result = score_practice(state, "scale", 0, TODAY)
        assert result.new_streak_days == 1
        assert result.streak_bonus == 5

    def test_three_star_threshold(self):
        state = GameState(last_practice_date=TODAY)
        assert score_practice(state, "a", 99.9, TODAY).is_three_star is False
        assert score_practice(state, "a", 100, TODAY).is_three_star is True

    def test_score_above_range_is_clamped(self):
        state = GameState(last_practice_date=TODAY, completed_songs=frozenset({"a"}))
        result = score_practice(state, "a", 250, TODAY)
        assert result.score == 100
        assert result.xp_earned == 50

    def test_nan_score_counts_as_zero(self):
        state = GameState(last_practice_date=TODAY, completed_songs=frozenset({"a"}))
        result = score_practice(state, "a", float("nan"), TODAY)
        assert result.score == 0
        assert result.xp_earned == 0
        assert result.is_three_star is False

    def test_negative_score_never_gives_negative_xp(self):
        state = GameState(last_practice_date=TODAY, completed_songs=frozenset({"a"}))
        result = score_practice(state, "a", -80, TODAY)
        assert result.score == 0
        assert result.xp_earned == 0

    def test_does_not_mutate_state(self):
        state = GameState()
        score_practice(state, "a", 100, TODAY)
        assert state == GameState()


class TestStarsForScore:
    @pytest.mark.parametrize(
        ("mode", "score", "stars"),
        [
            (PracticeMode.LEARN, 100, 3),
            (PracticeMode.LEARN, 99, 2),
            (PracticeMode.LEARN, 60, 1),
            (PracticeMode.LEARN, 59, 0),
            (PracticeMode.FOLLOW, 90, 3),
            (PracticeMode.FOLLOW, 70, 2),
            (PracticeMode.FOLLOW, 50, 1),
            (PracticeMode.FOLLOW, 49, 0),
            (PracticeMode.ASSESS, 95, 3),
            (PracticeMode.ASSESS, 94, 2),
            (PracticeMode.ASSESS, 60, 1),
        ],
    )
    def test_thresholds(self, mode, score, stars):
        assert stars_for_score(score, mode) == stars

    def test_accepts_mode_string(self):
        assert stars_for_score(92, "follow") == 3

    def test_default_mode_is_learn(self):
        assert stars_for_score(92) == 2

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            stars_for_score(50, "karaoke")

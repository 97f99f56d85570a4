"""Tests for the game state model and snapshot serialization."""

import pytest

from melobuddy.state import (
    DEFAULT_AVATAR_EMOJI,
    DEFAULT_NICKNAME,
    RECENT_PRACTICE_LIMIT,
    SNAPSHOT_FIELDS,
    SNAPSHOT_VERSION,
    GameState,
    PracticeRecord,
    from_snapshot,
    push_recent_practice,
    to_snapshot,
)


def _record(song_id: str, timestamp: int = 1_000, score: float = 80, xp: int = 40) -> PracticeRecord:
    return PracticeRecord(song_id=song_id, timestamp=timestamp, score=score, xp_earned=xp)


@pytest.fixture
def busy_state() -> GameState:
    return GameState(
        xp=930,
        level=5,
        streak_days=3,
        best_streak=6,
        last_practice_date="2026-01-05",
        completed_songs=frozenset({"twinkle", "ode-to-joy", "minuet"}),
        three_star_songs=frozenset({"twinkle"}),
        today_practice_count=2,
        today_xp=95,
        recent_practice=(_record("minuet", 3_000), _record("twinkle", 2_000, 100, 75)),
        total_practice_time=1_800,
        nickname="Ana",
        avatar_emoji="\U0001f3bb",
    )


class TestDefaults:
    def test_default_state(self):
        state = GameState()
        assert state.xp == 0
        assert state.level == 1
        assert state.streak_days == 0
        assert state.best_streak == 0
        assert state.last_practice_date is None
        assert state.completed_songs == frozenset()
        assert state.three_star_songs == frozenset()
        assert state.recent_practice == ()
        assert state.nickname == DEFAULT_NICKNAME
        assert state.avatar_emoji == DEFAULT_AVATAR_EMOJI

    def test_state_is_immutable(self):
        with pytest.raises(AttributeError):
            GameState().xp = 5


class TestPushRecentPractice:
    def test_newest_first(self):
        records = push_recent_practice((_record("a", 1),), _record("b", 2))
        assert [r.song_id for r in records] == ["b", "a"]

    def test_repeat_song_replaces_entry(self):
        records = (_record("b", 2), _record("a", 1))
        records = push_recent_practice(records, _record("a", 3))
        assert [r.song_id for r in records] == ["a", "b"]
        assert records[0].timestamp == 3

    def test_capped_at_limit(self):
        records: tuple[PracticeRecord, ...] = ()
        for i in range(RECENT_PRACTICE_LIMIT + 1):
            records = push_recent_practice(records, _record(f"song-{i}", i))
        assert len(records) == RECENT_PRACTICE_LIMIT
        assert records[0].song_id == "song-10"
        assert records[-1].song_id == "song-1"


class TestToSnapshot:
    def test_envelope(self, busy_state):
        snapshot = to_snapshot(busy_state)
        assert snapshot["version"] == SNAPSHOT_VERSION
        assert set(snapshot["state"]) == set(SNAPSHOT_FIELDS)

    def test_sets_become_sorted_lists(self, busy_state):
        data = to_snapshot(busy_state)["state"]
        assert data["completedSongs"] == ["minuet", "ode-to-joy", "twinkle"]
        assert data["threeStarSongs"] == ["twinkle"]

    def test_practice_records(self, busy_state):
        data = to_snapshot(busy_state)["state"]
        assert data["recentPractice"][0] == {
            "songId": "minuet", "timestamp": 3_000, "score": 80, "xpEarned": 40,
        }

    def test_is_json_compatible(self, busy_state):
        import json
        assert json.loads(json.dumps(to_snapshot(busy_state))) == to_snapshot(busy_state)


class TestFromSnapshot:
    def test_round_trip(self, busy_state):
        assert from_snapshot(to_snapshot(busy_state)) == busy_state

    def test_round_trip_default(self):
        assert from_snapshot(to_snapshot(GameState())) == GameState()

    def test_none_gives_defaults(self):
        assert from_snapshot(None) == GameState()

    def test_not_a_dict_gives_defaults(self):
        assert from_snapshot(["xp", 5]) == GameState()

    def test_wrong_version_gives_defaults(self, busy_state):
        snapshot = to_snapshot(busy_state)
        snapshot["version"] = 99
        assert from_snapshot(snapshot) == GameState()

    def test_flat_unversioned_gives_defaults(self):
        assert from_snapshot({"xp": 500, "level": 4}) == GameState()

    def test_unknown_fields_dropped(self, busy_state):
        snapshot = to_snapshot(busy_state)
        snapshot["state"]["isPlaying"] = True
        snapshot["state"]["currentSong"] = "twinkle"
        restored = from_snapshot(snapshot)
        assert restored == busy_state
        assert "isPlaying" not in to_snapshot(restored)["state"]

    def test_missing_fields_take_defaults(self):
        state = from_snapshot({"version": SNAPSHOT_VERSION, "state": {"xp": 260}})
        assert state.xp == 260
        assert state.level == 3
        assert state.nickname == DEFAULT_NICKNAME
        assert state.completed_songs == frozenset()

    def test_invalid_field_types_take_defaults(self):
        state = from_snapshot({
            "version": SNAPSHOT_VERSION,
            "state": {
                "xp": "lots",
                "streakDays": -4,
                "completedSongs": "twinkle",
                "lastPracticeDate": "yesterday",
                "nickname": 42,
            },
        })
        assert state.xp == 0
        assert state.streak_days == 0
        assert state.completed_songs == frozenset()
        assert state.last_practice_date is None
        assert state.nickname == DEFAULT_NICKNAME

    def test_level_recomputed_from_xp(self):
        state = from_snapshot({"version": SNAPSHOT_VERSION, "state": {"xp": 900, "level": 17}})
        assert state.level == 5

    def test_best_streak_at_least_current(self):
        state = from_snapshot({"version": SNAPSHOT_VERSION, "state": {"streakDays": 8, "bestStreak": 2}})
        assert state.best_streak == 8

    def test_bad_practice_records_skipped(self):
        state = from_snapshot({
            "version": SNAPSHOT_VERSION,
            "state": {
                "recentPractice": [
                    {"songId": "a", "timestamp": 5, "score": 90, "xpEarned": 45},
                    {"songId": "b"},
                    "garbage",
                ],
            },
        })
        assert [r.song_id for r in state.recent_practice] == ["a"]

    def test_recent_practice_deduplicated_and_capped(self):
        raw = [
            {"songId": f"s{i}", "timestamp": 100 - i, "score": 50, "xpEarned": 25}
            for i in range(12)
        ]
        raw.insert(1, {"songId": "s0", "timestamp": 1, "score": 10, "xpEarned": 5})
        state = from_snapshot({"version": SNAPSHOT_VERSION, "state": {"recentPractice": raw}})
        assert len(state.recent_practice) == RECENT_PRACTICE_LIMIT
        assert state.recent_practice[0].song_id == "s0"
        assert state.recent_practice[0].timestamp == 100
        assert [r.song_id for r in state.recent_practice].count("s0") == 1

"""Level progression from cumulative XP. Pure functions, no side effects."""

# Index i holds the minimum cumulative XP for level i + 1.
# Each band needs 100 XP more than the previous one.
LEVEL_XP_TABLE: list[int] = [
    0,
    100,
    250,
    500,
    850,
    1300,
    1850,
    2500,
    3250,
    4100,
    5050,
    6100,
    7250,
    8500,
    9850,
    11300,
    12850,
    14500,
    16250,
    18100,
]

MAX_LEVEL = len(LEVEL_XP_TABLE)

# Width of the open-ended band above the last threshold.
FINAL_BAND_XP = 1000


def level_from_xp(xp: int) -> int:
    """Given total XP, return current level (1 to MAX_LEVEL).

    XP below every threshold, negative XP included, maps to level 1.
    """
    for index in range(MAX_LEVEL - 1, -1, -1):
        if xp >= LEVEL_XP_TABLE[index]:
            return index + 1
    return 1


def xp_range_for_level(level: int) -> tuple[int, int]:
    """Return (min_xp, max_xp) for a level band.

    The final level has no upper threshold, so its ceiling is the last
    threshold plus FINAL_BAND_XP. Levels below 1 are treated as level 1;
    levels past MAX_LEVEL get a floor of 0 and the final ceiling.
    """
    level = max(level, 1)
    min_xp = LEVEL_XP_TABLE[level - 1] if level <= MAX_LEVEL else 0
    if level < MAX_LEVEL:
        max_xp = LEVEL_XP_TABLE[level]
    else:
        max_xp = LEVEL_XP_TABLE[-1] + FINAL_BAND_XP
    return (min_xp, max_xp)


def progress_percent(xp: int, level: int) -> float:
    """Percent of the way through the given level's band, clamped to [0, 100]."""
    min_xp, max_xp = xp_range_for_level(level)
    span = max_xp - min_xp
    if span <= 0:
        return 100.0
    progress = (xp - min_xp) / span * 100
    return min(max(progress, 0.0), 100.0)


def xp_to_next_level(xp: int, level: int) -> int:
    """XP still needed to reach the top of the current band (never negative)."""
    _, max_xp = xp_range_for_level(level)
    return max(max_xp - xp, 0)

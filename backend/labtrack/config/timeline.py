"""Timeline view defaults and window normalization."""
from labtrack.config import as_int

DEFAULT_DAY_START_HOUR = 7
DEFAULT_DAYS_BEFORE = 7
DEFAULT_DAYS_AFTER = 21
MAX_WINDOW_DAYS = 120

# Rendering geometry for one asset row.
DAY_WIDTH_PX = 120
MIN_ROW_HEIGHT_PX = 40
ITEM_BAR_HEIGHT_PX = 24
ITEM_BAR_VERTICAL_MARGIN_PX = 4
ITEM_BAR_TOTAL_HEIGHT_PX = ITEM_BAR_HEIGHT_PX + ITEM_BAR_VERTICAL_MARGIN_PX


def normalize_day_start_hour(raw, default: int = DEFAULT_DAY_START_HOUR) -> int:
    hour = as_int(raw, default, 'day_start_hour')
    if not 0 <= hour <= 23:
        raise ValueError('day_start_hour must be between 0 and 23')
    return hour


def normalize_window(before_raw, after_raw, max_days: int = MAX_WINDOW_DAYS,
                     default_before: int = DEFAULT_DAYS_BEFORE, default_after: int = DEFAULT_DAYS_AFTER):
    """Return (days_before, days_after), both non-negative and together at most max_days."""
    before = as_int(before_raw, default_before, 'days_before')
    after = as_int(after_raw, default_after, 'days_after')
    if before < 0 or after < 0:
        raise ValueError('days_before/days_after must be >= 0')
    if before + after > max_days:
        raise ValueError(f'window larger than {max_days} days')
    return before, after

# src/habits.py
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple, Union

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
HISTORY_DAYS = 7

DateLike = Union[str, date]


class ValidationError(ValueError):
    """Raised when a completion is not a canonical YYYY-MM-DD calendar date."""

    def __init__(self, value, reason: str = "not a valid YYYY-MM-DD date"):
        self.value = value
        super().__init__(f"Invalid completion date {value!r}: {reason}")


# -------------------------------
# DATE VALUES
# -------------------------------
def current_date() -> str:
    """Today's date in the local timezone as YYYY-MM-DD."""
    return date.today().strftime(DATE_FORMAT)


def parse_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise ValidationError(value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(value, "no such calendar day") from None


def parse_completions(values: Iterable[DateLike]) -> frozenset:
    return frozenset(parse_date(v) for v in values)


def resolve_today(today: Optional[DateLike] = None) -> date:
    """Explicit day if given, otherwise the local calendar date."""
    return date.today() if today is None else parse_date(today)


# -------------------------------
# ANALYZER
# -------------------------------
@dataclass(frozen=True)
class HistoryDay:
    date: str
    day: str
    completed: int

    def to_dict(self) -> dict:
        return {"date": self.date, "day": self.day, "completed": self.completed}


def compute_streak(completions: Iterable[DateLike], today: Optional[DateLike] = None) -> int:
    """Count consecutive days ending at the most recent completion.

    The streak is alive only while the most recent completion is today or
    yesterday. Input may be unordered and contain duplicates.
    """
    dates = sorted(parse_completions(completions), reverse=True)
    if not dates:
        return 0

    most_recent = dates[0]
    if (resolve_today(today) - most_recent).days > 1:
        return 0

    streak = 1
    last_counted = most_recent
    for day in dates[1:]:
        gap = (last_counted - day).days
        if gap == 1:
            streak += 1
            last_counted = day
        elif gap > 1:
            break
    return streak


def last_7_day_history(completions: Iterable[DateLike], today: Optional[DateLike] = None) -> List[HistoryDay]:
    """One entry per day from today-6 through today, oldest first."""
    done = parse_completions(completions)
    end = resolve_today(today)
    history = []
    for offset in range(HISTORY_DAYS - 1, -1, -1):
        day = end - timedelta(days=offset)
        history.append(HistoryDay(
            date=day.strftime(DATE_FORMAT),
            day=WEEKDAY_LABELS[day.weekday()],
            completed=1 if day in done else 0,
        ))
    return history


# -------------------------------
# HABIT SNAPSHOT
# -------------------------------
@dataclass(frozen=True)
class Habit:
    id: str
    name: str
    completions: Tuple[date, ...] = field(default_factory=tuple)

    @classmethod
    def from_row(cls, row: dict) -> "Habit":
        """Build a snapshot from a stored habit row, validating every date."""
        dates = parse_completions(row.get("completions") or [])
        return cls(id=str(row["habit_id"]), name=row["name"], completions=tuple(sorted(dates)))

    def completion_strings(self) -> List[str]:
        return [d.strftime(DATE_FORMAT) for d in self.completions]

    def is_completed_on(self, day: DateLike) -> bool:
        return parse_date(day) in self.completions

    def streak(self, today: Optional[DateLike] = None) -> int:
        return compute_streak(self.completions, today)

    def history(self, today: Optional[DateLike] = None) -> List[HistoryDay]:
        return last_7_day_history(self.completions, today)

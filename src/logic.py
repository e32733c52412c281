# src/logic.py
import logging
from datetime import timedelta

import db
from habits import DATE_FORMAT, Habit, ValidationError, parse_date, resolve_today

logger = logging.getLogger(__name__)

# Minimum completion percentage for each star, highest first
STAR_THRESHOLDS = [(95, 5), (85, 4), (70, 3), (50, 2), (25, 1)]
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
HABIT_NOT_FOUND = "Habit not found."


class CorruptHabitError(RuntimeError):
    """A stored habit row holds a completion that is not a valid date."""

    def __init__(self, habit_id, error: ValidationError):
        self.habit_id = habit_id
        self.value = error.value
        super().__init__(f"Stored habit {habit_id} is corrupt: {error}")


# -------------------------------
# SNAPSHOTS
# -------------------------------
def snapshot_from_row(row: dict) -> Habit:
    try:
        return Habit.from_row(row)
    except ValidationError as e:
        raise CorruptHabitError(row.get("habit_id"), e) from e


def get_habit_snapshot(habit_id: str, user_id: str):
    """Load one habit as an immutable snapshot, or None if it does not exist."""
    row = db.get_habit(habit_id, user_id)
    return snapshot_from_row(row) if row else None


def load_user_snapshots(user_id: str):
    return [snapshot_from_row(row) for row in db.get_habits(user_id)]


def describe_habit(habit: Habit, today=None) -> dict:
    """Habit plus the values derived from its completions."""
    today = resolve_today(today)
    return {
        "habit_id": habit.id,
        "name": habit.name,
        "completions": habit.completion_strings(),
        "streak": habit.streak(today),
        "history": [day.to_dict() for day in habit.history(today)],
        "completed_today": habit.is_completed_on(today),
    }

# -------------------------------
# HABIT OPERATIONS
# -------------------------------
def add_new_habit(user_id: str, name: str = ""):
    """Add a new habit for a user."""
    if not name or not name.strip():
        return {"error": "Habit name cannot be empty."}

    row = db.create_habit(user_id, name.strip())
    if row:
        logger.info("Habit %s created for user %s", row["habit_id"], user_id)
        return {
            "success": True,
            "habit_id": row["habit_id"],
            "message": f"Habit '{name.strip()}' added successfully."
        }
    return {"error": "Failed to create habit."}


def list_user_habits(user_id: str, today=None):
    """List all habits for a user with streak and 7-day history."""
    return [describe_habit(h, today) for h in load_user_snapshots(user_id)]


def set_completion(habit_id: str, user_id: str, day, completed: bool):
    """Mark or unmark one calendar day for a habit."""
    day = parse_date(day)
    habit = get_habit_snapshot(habit_id, user_id)
    if habit is None:
        return {"error": HABIT_NOT_FOUND}

    dates = set(habit.completions)
    if completed:
        dates.add(day)
    else:
        dates.discard(day)
    completions = [d.strftime(DATE_FORMAT) for d in sorted(dates)]

    if db.update_completions(habit_id, user_id, completions) is None:
        return {"error": "Failed to update habit."}
    return {
        "success": True,
        "habit_id": habit_id,
        "date": day.strftime(DATE_FORMAT),
        "completed": completed,
        "completions": completions
    }


def complete_habit(habit_id: str, user_id: str, today=None):
    """Mark a habit as completed for today."""
    if not habit_id:
        return {"error": "Habit ID is required."}
    return set_completion(habit_id, user_id, resolve_today(today), True)


def remove_habit(habit_id: str, user_id: str):
    """Delete a habit and its history."""
    if not habit_id:
        return {"error": "Habit ID is required."}
    if db.delete_habit(habit_id, user_id):
        logger.info("Habit %s deleted for user %s", habit_id, user_id)
        return {"deleted": True, "habit_id": habit_id}
    return {"error": HABIT_NOT_FOUND}

# -------------------------------
# SUMMARIES
# -------------------------------
def get_today_status(user_id: str, today=None):
    """Return today's status of all habits for a user."""
    today = resolve_today(today)
    status = [
        {"habit_id": h.id, "habit_name": h.name, "completed": h.is_completed_on(today)}
        for h in load_user_snapshots(user_id)
    ]
    completed = sum(1 for s in status if s["completed"])
    return {
        "date": today.strftime(DATE_FORMAT),
        "status": status,
        "summary": {"completed": completed, "total": len(status)}
    }


def stars_for(completion_pct: float) -> int:
    for threshold, stars in STAR_THRESHOLDS:
        if completion_pct >= threshold:
            return stars
    return 0


def get_weekly_overview(user_id: str, today=None):
    """Completion rate per day over the last 7 days across all habits."""
    today = resolve_today(today)
    snapshots = load_user_snapshots(user_id)
    total = len(snapshots)

    daily_breakdown = []
    completed_total = 0
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        completed = sum(1 for h in snapshots if day in h.completions)
        completed_total += completed
        daily_breakdown.append({
            "date": day.strftime(DATE_FORMAT),
            "day_name": DAY_NAMES[day.weekday()],
            "total_habits": total,
            "completed_habits": completed,
            "completion_rate": round(completed / total * 100, 1) if total else 0
        })

    possible = total * 7
    completion_pct = round(completed_total / possible * 100, 1) if possible else 0
    return {
        "week_start": daily_breakdown[0]["date"],
        "week_end": daily_breakdown[-1]["date"],
        "total_habits": total,
        "completed_habits": completed_total,
        "completion_pct": completion_pct,
        "stars": stars_for(completion_pct),
        "daily_breakdown": daily_breakdown
    }

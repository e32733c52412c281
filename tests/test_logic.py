import pytest
from datetime import date

import db
import logic
from habits import ValidationError

TODAY = date(2024, 6, 10)
USER = "user-a"


def add(name, completions=()):
    result = logic.add_new_habit(USER, name)
    if completions:
        db.update_completions(result["habit_id"], USER, list(completions))
    return result["habit_id"]


def test_add_habit_trims_name(store):
    result = logic.add_new_habit(USER, "  Drink water  ")

    assert result["success"] is True
    row = store.tables["habits"][0]
    assert row["name"] == "Drink water"
    assert row["completions"] == []
    assert row["habit_id"] == result["habit_id"]


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_habit_rejects_empty_name(store, name):
    assert logic.add_new_habit(USER, name) == {"error": "Habit name cannot be empty."}
    assert store.tables.get("habits", []) == []


def test_list_habits_includes_streak_and_history(store):
    add("Read", ["2024-06-10", "2024-06-09", "2024-06-07"])
    add("Run")

    habits = logic.list_user_habits(USER, today=TODAY)

    assert [h["name"] for h in habits] == ["Read", "Run"]
    read, run = habits
    assert read["streak"] == 2
    assert read["completed_today"] is True
    assert [d["completed"] for d in read["history"]] == [0, 0, 0, 1, 0, 1, 1]
    assert run["streak"] == 0
    assert run["completions"] == []


def test_list_habits_is_scoped_to_user(store):
    add("Read")
    logic.add_new_habit("someone-else", "Swim")

    assert [h["name"] for h in logic.list_user_habits(USER, today=TODAY)] == ["Read"]


def test_set_completion_keeps_dates_sorted_and_unique(store):
    habit_id = add("Read")

    logic.set_completion(habit_id, USER, "2024-06-10", True)
    logic.set_completion(habit_id, USER, "2024-06-08", True)
    result = logic.set_completion(habit_id, USER, "2024-06-10", True)

    assert result["success"] is True
    assert result["completions"] == ["2024-06-08", "2024-06-10"]
    assert store.tables["habits"][0]["completions"] == ["2024-06-08", "2024-06-10"]


def test_set_completion_unmarks_day(store):
    habit_id = add("Read", ["2024-06-09", "2024-06-10"])

    result = logic.set_completion(habit_id, USER, "2024-06-10", False)

    assert result["completions"] == ["2024-06-09"]
    assert result["completed"] is False


def test_set_completion_rejects_invalid_date(store):
    habit_id = add("Read")

    with pytest.raises(ValidationError):
        logic.set_completion(habit_id, USER, "2024-06-32", True)
    assert store.tables["habits"][0]["completions"] == []


def test_corrupt_stored_completion_is_not_a_request_error(store):
    habit_id = add("Read")
    store.tables["habits"][0]["completions"] = ["yesterday"]

    with pytest.raises(logic.CorruptHabitError) as exc:
        logic.set_completion(habit_id, USER, "2024-06-10", True)
    assert not isinstance(exc.value, ValidationError)
    assert exc.value.habit_id == habit_id
    assert exc.value.value == "yesterday"
    with pytest.raises(logic.CorruptHabitError):
        logic.list_user_habits(USER, today=TODAY)
    assert store.tables["habits"][0]["completions"] == ["yesterday"]


def test_set_completion_unknown_habit(store):
    assert logic.set_completion("missing", USER, "2024-06-10", True) == {"error": logic.HABIT_NOT_FOUND}


def test_complete_habit_marks_today(store):
    habit_id = add("Read")

    result = logic.complete_habit(habit_id, USER, today=TODAY)

    assert result["date"] == "2024-06-10"
    assert logic.get_habit_snapshot(habit_id, USER).is_completed_on(TODAY)


def test_remove_habit(store):
    habit_id = add("Read")

    assert logic.remove_habit(habit_id, USER) == {"deleted": True, "habit_id": habit_id}
    assert logic.remove_habit(habit_id, USER) == {"error": logic.HABIT_NOT_FOUND}
    assert logic.get_habit_snapshot(habit_id, USER) is None


def test_remove_habit_of_other_user_is_refused(store):
    habit_id = add("Read")

    assert logic.remove_habit(habit_id, "intruder") == {"error": logic.HABIT_NOT_FOUND}
    assert len(store.tables["habits"]) == 1


def test_today_status_summary(store):
    add("Read", ["2024-06-10"])
    add("Run", ["2024-06-09"])

    status = logic.get_today_status(USER, today=TODAY)

    assert status["date"] == "2024-06-10"
    assert status["summary"] == {"completed": 1, "total": 2}
    assert [s["completed"] for s in status["status"]] == [True, False]


def test_weekly_overview(store):
    add("Read", ["2024-06-04", "2024-06-05", "2024-06-06", "2024-06-07", "2024-06-08", "2024-06-09", "2024-06-10"])
    add("Run", ["2024-06-10", "2024-06-01"])

    overview = logic.get_weekly_overview(USER, today=TODAY)

    assert overview["week_start"] == "2024-06-04"
    assert overview["week_end"] == "2024-06-10"
    assert overview["completed_habits"] == 8
    assert overview["completion_pct"] == round(8 / 14 * 100, 1)
    assert overview["stars"] == 2
    assert overview["daily_breakdown"][-1] == {
        "date": "2024-06-10",
        "day_name": "Monday",
        "total_habits": 2,
        "completed_habits": 2,
        "completion_rate": 100.0,
    }


def test_weekly_overview_without_habits(store):
    overview = logic.get_weekly_overview(USER, today=TODAY)

    assert overview["completion_pct"] == 0
    assert overview["stars"] == 0
    assert len(overview["daily_breakdown"]) == 7


@pytest.mark.parametrize("pct,stars", [(100, 5), (95, 5), (94.9, 4), (85, 4), (70, 3), (50, 2), (25, 1), (24.9, 0), (0, 0)])
def test_stars_thresholds(pct, stars):
    assert logic.stars_for(pct) == stars

from datetime import date, timedelta
from pathlib import Path

import pytest
import requests
from streamlit.testing.v1 import AppTest

APP = str(Path(__file__).resolve().parents[1] / "Frontend" / "app.py")


class FakeResponse:
    status_code = 200

    def __init__(self, data):
        self.data = data

    def json(self):
        return self.data


def listed_habit(name):
    today = date.today()
    history = [{"date": (today - timedelta(days=n)).isoformat(), "day": "Mon", "completed": 0}
               for n in range(6, -1, -1)]
    return {"habit_id": "h1", "name": name, "completions": [], "streak": 0,
            "history": history, "completed_today": False}


@pytest.fixture
def api(monkeypatch):
    def fake_post(url, json=None, timeout=None):
        if url.endswith("/habit/list"):
            return FakeResponse({"success": True, "habits": [listed_habit("<b>Read</b>")]})
        return FakeResponse({"success": False, "error": "unexpected call"})

    monkeypatch.setattr(requests, "post", fake_post)


def test_dashboard_escapes_user_supplied_names(api):
    at = AppTest.from_file(APP, default_timeout=30)
    at.session_state["user"] = {"user_id": "u1", "name": "<i>Ada</i>", "email": "ada@example.com"}

    at.run()

    assert not at.exception
    rendered = "\n".join(md.value for md in at.markdown)
    assert "&lt;i&gt;Ada&lt;/i&gt;" in rendered
    assert "&lt;b&gt;Read&lt;/b&gt;" in rendered
    assert "<b>Read</b>" not in rendered

# src/db.py
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from supabase import create_client, Client

from settings import load_config

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


class StoreError(RuntimeError):
    """Raised when the Supabase store cannot be reached or is not configured."""


def get_client() -> Client:
    """Return the shared Supabase client, creating it on first use."""
    global _client
    if _client is None:
        config = load_config().supabase
        if not config.configured:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY must be set")
        _client = create_client(config.url, config.key)
        logger.info("Supabase client created for %s", config.url)
    return _client


def set_client(client) -> None:
    global _client
    _client = client


def _first(resp):
    return resp.data[0] if resp.data else None

# -------------------------------
# USERS
# -------------------------------
def create_user(name: str, email: str, password_hash: str):
    resp = get_client().table("users").insert({
        "name": name,
        "email": email,
        "password": password_hash,
        "created_at": datetime.now().isoformat()
    }).execute()
    return _first(resp)

def get_user_by_email(email: str):
    resp = get_client().table("users").select("*").eq("email", email).limit(1).execute()
    return _first(resp)

def find_user(email: str, password_hash: str):
    resp = get_client().table("users").select("*")\
        .eq("email", email)\
        .eq("password", password_hash)\
        .limit(1)\
        .execute()
    return _first(resp)

# -------------------------------
# HABITS
# -------------------------------
def create_habit(user_id: str, name: str):
    resp = get_client().table("habits").insert({
        "habit_id": str(uuid.uuid4()),
        "user_id": user_id,
        "name": name,
        "completions": [],
        "created_at": datetime.now().isoformat()
    }).execute()
    return _first(resp)

def get_habits(user_id: str) -> List[dict]:
    resp = get_client().table("habits").select("*").eq("user_id", user_id).order("created_at").execute()
    return resp.data if resp.data else []

def get_habit(habit_id: str, user_id: str):
    resp = get_client().table("habits").select("*")\
        .eq("habit_id", habit_id)\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    return _first(resp)

def update_completions(habit_id: str, user_id: str, completions: List[str]):
    resp = get_client().table("habits")\
        .update({"completions": completions})\
        .eq("habit_id", habit_id)\
        .eq("user_id", user_id)\
        .execute()
    return _first(resp)

def delete_habit(habit_id: str, user_id: str) -> bool:
    resp = get_client().table("habits").delete()\
        .eq("habit_id", habit_id)\
        .eq("user_id", user_id)\
        .execute()
    return bool(resp.data)

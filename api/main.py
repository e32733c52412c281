from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from datetime import datetime
import sys, os
import hashlib
import logging

sys.path.append(os.path.join(os.path.dirname(__file__), "../src"))
import db
import logic
import motivation
from habits import ValidationError, resolve_today
from logic import CorruptHabitError
from logging_setup import setup_logger
from settings import load_config

config = load_config()
setup_logger(config.log_file, config.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Habitual API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

HABIT_NOT_FOUND = logic.HABIT_NOT_FOUND

# -------------------------------
# PASSWORD HELPER
# -------------------------------
def hash_password(password: str) -> str:
    """Simple password hashing"""
    return hashlib.sha256(password.encode()).hexdigest()

# -------------------------------
# MODELS
# -------------------------------
class UserRegisterModel(BaseModel):
    name: str
    email: str
    password: str

class UserLoginModel(BaseModel):
    email: str
    password: str

class HabitAddModel(BaseModel):
    name: str
    user_id: str

class HabitIDModel(BaseModel):
    habit_id: str
    user_id: str

class HabitToggleModel(BaseModel):
    habit_id: str
    user_id: str
    date: str
    completed: bool = True

class UserIDModel(BaseModel):
    user_id: str

# -------------------------------
# RESPONSE HELPERS
# -------------------------------
def service_response(result: dict):
    """Translate a logic-layer result into the API's response shape."""
    if result.get("error") == HABIT_NOT_FOUND:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND)
    if result.get("error"):
        return {"success": False, "error": result["error"]}
    return {"success": True, **result}

def invalid_date(e: ValidationError):
    return HTTPException(status_code=422, detail=str(e))

def corrupt_habit(e: CorruptHabitError):
    logger.error("%s", e)
    return HTTPException(status_code=500, detail=str(e))

# -------------------------------
# AUTH ROUTES
# -------------------------------
@app.post("/auth/register")
def register_user(user: UserRegisterModel):
    try:
        if db.get_user_by_email(user.email):
            raise HTTPException(status_code=400, detail="User already exists with this email")

        created = db.create_user(user.name, user.email, hash_password(user.password))
        if not created:
            raise HTTPException(status_code=500, detail="Registration failed")
        logger.info("Registered user %s", created["user_id"])
        return {
            "success": True,
            "user_id": created["user_id"],
            "name": created["name"],
            "message": "Registration successful"
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Registration failed for %s", user.email)
        raise HTTPException(status_code=500, detail=f"Registration error: {str(e)}")

@app.post("/auth/login")
def login_user(user: UserLoginModel):
    try:
        found = db.find_user(user.email, hash_password(user.password))
        if not found:
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return {
            "success": True,
            "user_id": found["user_id"],
            "name": found["name"],
            "message": "Login successful"
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Login failed for %s", user.email)
        raise HTTPException(status_code=500, detail=f"Login error: {str(e)}")

# -------------------------------
# HABIT ROUTES
# -------------------------------
@app.post("/habit/add")
def add_habit(habit: HabitAddModel):
    try:
        return service_response(logic.add_new_habit(habit.user_id, habit.name))
    except Exception as e:
        logger.exception("Could not add habit for user %s", habit.user_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/list")
def list_habits(user: UserIDModel):
    today = resolve_today()
    try:
        return {"success": True, "today": today.isoformat(),
                "habits": logic.list_user_habits(user.user_id, today=today)}
    except CorruptHabitError as e:
        raise corrupt_habit(e)
    except Exception as e:
        logger.exception("Could not list habits for user %s", user.user_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/toggle")
def toggle_habit(t: HabitToggleModel):
    try:
        return service_response(logic.set_completion(t.habit_id, t.user_id, t.date, t.completed))
    except ValidationError as e:
        raise invalid_date(e)
    except CorruptHabitError as e:
        raise corrupt_habit(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Could not update habit %s", t.habit_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/complete")
def complete_habit(h: HabitIDModel):
    try:
        return service_response(logic.complete_habit(h.habit_id, h.user_id))
    except CorruptHabitError as e:
        raise corrupt_habit(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Could not complete habit %s", h.habit_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/remove")
def remove_habit(h: HabitIDModel):
    try:
        return service_response(logic.remove_habit(h.habit_id, h.user_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Could not remove habit %s", h.habit_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/today-status")
def today_status(user: UserIDModel):
    try:
        return {"success": True, **logic.get_today_status(user.user_id)}
    except CorruptHabitError as e:
        raise corrupt_habit(e)
    except Exception as e:
        logger.exception("Could not build today's status for user %s", user.user_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/weekly-performance")
def weekly_performance(user: UserIDModel):
    try:
        return {"success": True, **logic.get_weekly_overview(user.user_id)}
    except CorruptHabitError as e:
        raise corrupt_habit(e)
    except Exception as e:
        logger.exception("Could not build weekly overview for user %s", user.user_id)
        return {"success": False, "error": str(e)}

@app.post("/habit/motivation")
async def habit_motivation(h: HabitIDModel):
    try:
        habit = await run_in_threadpool(logic.get_habit_snapshot, h.habit_id, h.user_id)
    except CorruptHabitError as e:
        raise corrupt_habit(e)
    except Exception as e:
        logger.exception("Could not load habit %s for motivation", h.habit_id)
        return {"success": False, "error": str(e)}
    if habit is None:
        raise HTTPException(status_code=404, detail=HABIT_NOT_FOUND)

    request = motivation.MotivationRequest.from_habit(habit)
    result = await motivation.generate_motivational_message(request, config=config.ai)
    return {"habit_id": habit.id, "streak": request.streak_length, **result.to_dict()}

@app.get("/")
def root():
    return {"message": "Habitual API is running", "status": "healthy"}

# Health check endpoint
@app.get("/health")
def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}

# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

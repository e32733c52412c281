import streamlit as st
import requests
import calendar
import html
import logging
import os
import time
from datetime import date, datetime
import matplotlib.pyplot as plt
from dotenv import load_dotenv

load_dotenv()
API_URL = os.getenv("API_URL", "http://127.0.0.1:8000")
REQUEST_TIMEOUT = float(os.getenv("API_TIMEOUT", "60"))

logger = logging.getLogger(__name__)

FALLBACK_MOTIVATION = "Couldn't get a motivational message. Keep trying!"
BASE_COLOR = "#8A2BE2"
BACKGROUND = "#0a0e27"

# Set page config must be the first Streamlit command
st.set_page_config(
    page_title="Habitual",
    layout="wide",
    page_icon="🎯",
    initial_sidebar_state="expanded"
)

# -------------------------------
# SESSION STATE
# -------------------------------
if "user" not in st.session_state:
    st.session_state.user = None
if "auth_mode" not in st.session_state:
    st.session_state.auth_mode = "login"
if "motivation" not in st.session_state:
    st.session_state.motivation = {}
if "confirm_delete" not in st.session_state:
    st.session_state.confirm_delete = None

# -------------------------------
# STYLES
# -------------------------------
def apply_styles():
    st.markdown("""
    <style>
    .stApp {
        background: radial-gradient(1200px 600px at 10% 20%, rgba(255, 124, 170, 0.20), transparent 60%),
                    radial-gradient(1000px 500px at 90% 15%, rgba(148, 118, 255, 0.22), transparent 60%),
                    linear-gradient(160deg, #070a1f 0%, #0b0f2b 60%, #0a0e27 100%) !important;
    }
    .main-header {
        font-size: 2.5rem !important;
        color: #ffffff !important;
        text-align: center;
        text-shadow: 2px 2px 4px rgba(0,0,0,0.3) !important;
    }
    .habit-card {
        background: rgba(255, 255, 255, 0.08);
        border-radius: 18px;
        border: 1px solid rgba(255, 255, 255, 0.20);
        padding: 1rem 1.25rem 0.25rem 1.25rem;
        margin-bottom: 0.5rem;
        color: #ffffff;
    }
    .streak { opacity: 0.85; font-size: 0.92rem; }
    .month-cal { width: 100%; border-collapse: collapse; text-align: center; font-size: 0.8rem; }
    .month-cal th { opacity: 0.7; font-weight: 600; }
    .month-cal td { padding: 4px; border-radius: 6px; }
    .month-cal td.outside { opacity: 0.35; }
    .month-cal td.completed { background: rgba(138, 43, 226, 0.75); color: #ffffff; }
    .month-cal td.today { outline: 2px solid rgba(255, 190, 120, 0.9); }
    .star-filled { color: #FFD700; font-size: 1.6rem; }
    .star-empty { color: rgba(255,255,255,0.4); font-size: 1.6rem; }
    </style>
    """, unsafe_allow_html=True)

# -------------------------------
# API HELPERS
# -------------------------------
def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return {}

def api_post(path, payload):
    """POST to the API; connection problems come back as an error dict."""
    try:
        resp = requests.post(f"{API_URL}{path}", json=payload, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.warning("API call %s failed: %s", path, e)
        return {"success": False, "error": "Could not reach the Habitual API"}
    data = safe_json(resp)
    if resp.status_code >= 400:
        return {"success": False, "error": data.get("detail", f"HTTP {resp.status_code}")}
    return data

def register_api(name, email, password):
    return api_post("/auth/register", {"name": name, "email": email, "password": password})

def login_api(email, password):
    return api_post("/auth/login", {"email": email, "password": password})

def add_habit_api(name, user_id):
    return api_post("/habit/add", {"name": name, "user_id": user_id})

def list_habits_api(user_id):
    data = api_post("/habit/list", {"user_id": user_id})
    return data.get("habits", []) if data.get("success") else None

def toggle_habit_api(habit_id, user_id, day, completed):
    return api_post("/habit/toggle", {"habit_id": habit_id, "user_id": user_id,
                                      "date": day, "completed": completed})

def remove_habit_api(habit_id, user_id):
    return api_post("/habit/remove", {"habit_id": habit_id, "user_id": user_id})

def weekly_perf_api(user_id):
    return api_post("/habit/weekly-performance", {"user_id": user_id})

def motivation_api(habit_id, user_id):
    data = api_post("/habit/motivation", {"habit_id": habit_id, "user_id": user_id})
    return data.get("message") or FALLBACK_MOTIVATION

# -------------------------------
# CHARTS
# -------------------------------
def create_gradient_colors(base_color, num_colors):
    """Create gradient colors from a base color"""
    colors = []
    for i in range(num_colors):
        factor = 0.8 + (i * 0.2) / num_colors
        r = min(255, int(int(base_color[1:3], 16) * factor))
        g = min(255, int(int(base_color[3:5], 16) * factor))
        b = min(255, int(int(base_color[5:7], 16) * factor))
        colors.append(f'#{r:02x}{g:02x}{b:02x}')
    return colors

def style_axes(fig, ax):
    ax.set_facecolor(BACKGROUND)
    fig.patch.set_facecolor(BACKGROUND)
    ax.tick_params(colors='white', labelsize=10)
    for spine in ("top", "right", "left"):
        ax.spines[spine].set_visible(False)

def create_history_chart(history):
    """Bar chart of the last 7 days for one habit"""
    days = [entry["day"] for entry in history]
    values = [entry["completed"] for entry in history]

    fig, ax = plt.subplots(figsize=(4, 1.4))
    ax.bar(days, values, color=create_gradient_colors(BASE_COLOR, len(days)), width=0.6)
    ax.set_ylim(0, 1)
    ax.set_yticks([])
    style_axes(fig, ax)
    fig.tight_layout()
    return fig

def create_weekly_chart(weekly_data):
    """Create weekly progress chart"""
    if not weekly_data or not weekly_data.get('daily_breakdown'):
        return None

    daily_data = weekly_data['daily_breakdown']
    days = [entry['day_name'][:3] for entry in daily_data]
    completion_rates = [entry['completion_rate'] for entry in daily_data]

    fig, ax = plt.subplots(figsize=(10, 5))
    bars = ax.bar(days, completion_rates, color=create_gradient_colors(BASE_COLOR, len(days)),
                  edgecolor='white', linewidth=2)

    for bar, value in zip(bars, completion_rates):
        ax.text(bar.get_x() + bar.get_width()/2., bar.get_height() + 1,
                f'{value:.0f}%', ha='center', va='bottom',
                fontweight='bold', color='white', fontsize=10)

    ax.set_ylabel('Completion Rate (%)', color='white', fontweight='bold')
    ax.set_ylim(0, 105)
    ax.set_title('Last 7 Days', color='white', fontweight='bold', pad=20)
    style_axes(fig, ax)
    ax.grid(True, axis='y', alpha=0.3, color='white')
    return fig

def month_calendar_html(completions, today):
    """Current month as an HTML table with completed days highlighted"""
    done = set(completions)
    weeks = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(today.year, today.month)
    header = "".join(f"<th>{name}</th>" for name in ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"])
    rows = []
    for week in weeks:
        cells = []
        for day in week:
            classes = []
            if day.month != today.month:
                classes.append("outside")
            if day.isoformat() in done:
                classes.append("completed")
            if day == today:
                classes.append("today")
            cells.append(f'<td class="{" ".join(classes)}">{day.day}</td>')
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return f'<table class="month-cal"><tr>{header}</tr>{"".join(rows)}</table>'

def display_stars(rating):
    stars_html = "".join(
        '<span class="star-filled">⭐</span>' if i < rating else '<span class="star-empty">☆</span>'
        for i in range(5)
    )
    st.markdown(f'<div>{stars_html}</div>', unsafe_allow_html=True)

# -------------------------------
# AUTH PAGE
# -------------------------------
def auth_page():
    apply_styles()
    st.markdown('<h1 class="main-header">Habitual</h1>', unsafe_allow_html=True)
    st.markdown("<p style='text-align:center;'>Log in to track your habits</p>", unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🔐 Sign In", use_container_width=True,
                     type="primary" if st.session_state.auth_mode == "login" else "secondary"):
            st.session_state.auth_mode = "login"
            st.rerun()
    with col2:
        if st.button("🚀 Register", use_container_width=True,
                     type="primary" if st.session_state.auth_mode == "register" else "secondary"):
            st.session_state.auth_mode = "register"
            st.rerun()

    if st.session_state.auth_mode == "login":
        st.markdown("### Welcome Back")
        email = st.text_input("Email", placeholder="you@example.com")
        password = st.text_input("Password", type="password")

        if st.button("Sign In", use_container_width=True, type="primary"):
            if email and password:
                result = login_api(email, password)
                if result.get("success"):
                    st.session_state.user = {"user_id": result["user_id"], "name": result["name"], "email": email}
                    st.success("Welcome back! 🎉")
                    time.sleep(1)
                    st.rerun()
                else:
                    st.error(result.get("error", "Invalid credentials"))
            else:
                st.warning("Please fill in all fields")
    else:
        st.markdown("### Create Account")
        name = st.text_input("Full Name", placeholder="Enter your name")
        email = st.text_input("Email", placeholder="you@example.com")
        password = st.text_input("Password", type="password", placeholder="At least 6 characters")

        if st.button("Create Account", use_container_width=True, type="primary"):
            if not (name and email and password):
                st.warning("Please fill in all fields")
            elif len(password) < 6:
                st.warning("Password must be at least 6 characters")
            else:
                result = register_api(name, email, password)
                if result.get("success"):
                    st.session_state.user = {"user_id": result["user_id"], "name": result["name"], "email": email}
                    st.success("Welcome! 🎉")
                    time.sleep(1)
                    st.rerun()
                else:
                    st.error(result.get("error", "Registration failed"))

# -------------------------------
# HABIT CARD
# -------------------------------
def streak_caption(streak):
    if streak > 0:
        return f"Current streak: {streak} day{'s' if streak > 1 else ''}"
    return "No current streak. Let's start one!"

def habit_card(habit, user_id, today):
    habit_id = habit["habit_id"]
    st.markdown(f"""
    <div class="habit-card">
        <h4 style="margin:0;">{html.escape(habit["name"])}</h4>
        <p class="streak">{streak_caption(habit['streak'])}</p>
    </div>
    """, unsafe_allow_html=True)

    checked = st.checkbox("Mark as complete for today", value=habit["completed_today"], key=f"done_{habit_id}")
    if checked != habit["completed_today"]:
        result = toggle_habit_api(habit_id, user_id, today.isoformat(), checked)
        if not result.get("success"):
            st.error(result.get("error", "Could not update habit"))
        else:
            st.rerun()

    st.caption("Last 7 Days")
    fig = create_history_chart(habit["history"])
    st.pyplot(fig)
    plt.close(fig)

    with st.expander("This month"):
        st.markdown(month_calendar_html(habit["completions"], today), unsafe_allow_html=True)

    if st.button("💡 Get Motivation", key=f"motivate_{habit_id}", use_container_width=True):
        with st.spinner("Thinking of something inspiring..."):
            st.session_state.motivation[habit_id] = motivation_api(habit_id, user_id)
    if habit_id in st.session_state.motivation:
        st.info(st.session_state.motivation[habit_id])

    if st.session_state.confirm_delete == habit_id:
        st.warning(f'This will permanently delete the habit "{habit["name"]}" and all its history.')
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Delete", key=f"confirm_del_{habit_id}", type="primary", use_container_width=True):
                result = remove_habit_api(habit_id, user_id)
                st.session_state.confirm_delete = None
                st.session_state.motivation.pop(habit_id, None)
                if result.get("success"):
                    st.toast("Habit deleted")
                else:
                    st.toast(result.get("error", "Could not delete habit"))
                st.rerun()
        with col2:
            if st.button("Cancel", key=f"cancel_del_{habit_id}", use_container_width=True):
                st.session_state.confirm_delete = None
                st.rerun()
    elif st.button("🗑️ Delete", key=f"del_{habit_id}", use_container_width=True):
        st.session_state.confirm_delete = habit_id
        st.rerun()

# -------------------------------
# PAGES
# -------------------------------
def dashboard_page():
    apply_styles()
    user = st.session_state.user
    today = date.today()

    hour = datetime.now().hour
    greeting = "Good Morning" if hour < 12 else "Good Afternoon" if hour < 18 else "Good Evening"
    st.markdown(f'<h1 class="main-header">{greeting}, {html.escape(user["name"])}!</h1>', unsafe_allow_html=True)
    st.markdown(f"<h3 style='text-align:center;'>{today.strftime('%A, %B %d, %Y')}</h3>", unsafe_allow_html=True)

    habits = list_habits_api(user["user_id"])
    if habits is None:
        st.error("❌ Could not load your habits")
        return
    if not habits:
        st.info('No habits yet! Open "Add Habit" to start your journey. 🌟')
        return

    done = sum(1 for h in habits if h["completed_today"])
    st.progress(done / len(habits), text=f"{done} of {len(habits)} habits done today")

    columns = st.columns(3)
    for i, habit in enumerate(habits):
        with columns[i % 3]:
            habit_card(habit, user["user_id"], today)

def create_habit_page():
    apply_styles()
    st.markdown("### Add New Habit")

    with st.form("add_habit", clear_on_submit=True):
        habit_name = st.text_input("Habit Name", placeholder="What habit do you want to build?")
        submitted = st.form_submit_button("Create Habit", use_container_width=True, type="primary")

    if submitted:
        if habit_name.strip():
            result = add_habit_api(habit_name.strip(), st.session_state.user["user_id"])
            if result.get("success"):
                st.success(f"Habit '{habit_name.strip()}' created! 🌟")
            else:
                st.error(result.get("error", "Failed to create habit"))
        else:
            st.warning("Please enter a habit name")

def weekly_perf_page():
    apply_styles()
    st.markdown("# ⭐ Weekly Overview")

    data = weekly_perf_api(st.session_state.user["user_id"])
    if not data.get("success"):
        st.error(data.get("error", "Could not load weekly overview"))
        return

    st.write(f"{data['week_start']} → {data['week_end']}")
    display_stars(data["stars"])
    col1, col2 = st.columns(2)
    col1.metric("Completion", f"{data['completion_pct']}%")
    col2.metric("Check-ins", f"{data['completed_habits']}")

    fig = create_weekly_chart(data)
    if fig:
        st.pyplot(fig)
        plt.close(fig)

def main():
    if st.session_state.user is None:
        auth_page()
        return

    st.sidebar.markdown(f"### 👋 Hello, {st.session_state.user['name']}!")
    pages = {
        "🏠 Dashboard": dashboard_page,
        "➕ Add Habit": create_habit_page,
        "⭐ Weekly Overview": weekly_perf_page,
    }
    choice = st.sidebar.radio("Go to:", list(pages.keys()))
    pages[choice]()

    if st.sidebar.button("🚪 Logout", use_container_width=True):
        st.session_state.user = None
        st.session_state.auth_mode = "login"
        st.session_state.motivation = {}
        st.session_state.confirm_delete = None
        st.rerun()

if __name__ == "__main__":
    main()

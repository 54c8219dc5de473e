"""Session-scoped state of the Streamlit app.

One ``AppState`` lives in ``st.session_state`` per browser session. Views read
it freely but change it only through the functions below.
"""

from dataclasses import dataclass, field
from datetime import datetime

from expiry import utcnow
from settings_store import default_settings


TABS = ("generator", "history", "help")
SETTINGS_TABS = ("profile", "notifications", "privacy", "security", "language", "theme")


@dataclass
class AppState:
    user_id: str | None = None
    email: str = ""
    profile: dict | None = None
    settings: dict = field(default_factory=default_settings)
    records: list = field(default_factory=list)
    active_tab: str = "generator"
    settings_tab: str = "profile"
    last_record: dict | None = None
    error: str = ""
    share_url: str = ""
    share_title: str = ""
    last_activity: datetime | None = None
    last_sweep: datetime | None = None

    @property
    def signed_in(self):
        return self.user_id is not None


def sign_in_user(state, user_id, email, profile=None, settings=None, now=None):
    state.user_id = user_id
    state.email = email
    state.profile = profile
    state.settings = settings or default_settings()
    state.error = ""
    state.last_activity = now or utcnow()


def sign_out_user(state):
    fresh = AppState()
    for name in fresh.__dataclass_fields__:
        setattr(state, name, getattr(fresh, name))


def set_records(state, records):
    state.records = list(records)


def set_profile(state, profile):
    state.profile = dict(profile) if profile else None


def set_settings(state, settings):
    state.settings = settings


def set_error(state, message=""):
    state.error = message


def set_last_record(state, record):
    state.last_record = record


def select_tab(state, tab):
    if tab not in TABS:
        raise ValueError(f"Unknown tab {tab!r}")
    state.active_tab = tab


def select_settings_tab(state, tab):
    if tab not in SETTINGS_TABS:
        raise ValueError(f"Unknown settings tab {tab!r}")
    state.settings_tab = tab


def open_share(state, url, title=""):
    state.share_url = url
    state.share_title = title or "Check out my QR Code"


def close_share(state):
    state.share_url = ""
    state.share_title = ""


def touch(state, now=None):
    state.last_activity = now or utcnow()


def session_timed_out(state, now=None):
    if not state.signed_in or state.last_activity is None:
        return False
    now = now or utcnow()
    timeout_minutes = state.settings["security"]["session_timeout"]
    return (now - state.last_activity).total_seconds() > timeout_minutes * 60


def mark_swept(state, now=None):
    state.last_sweep = now or utcnow()

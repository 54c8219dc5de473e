import logging

import streamlit as st

from auth import SessionManager
from config import create_supabase_client, load_backend_config, log_level
from database import GENDERS, QR_TYPES, QRCodeStore
from errors import QRAppError, ValidationError
from expiry import SWEEP_INTERVAL_SECONDS, describe_time_left, expiring_soon, is_expired, sweep, sweep_due, utcnow
from qr_service import generate_qr_code
from settings_store import LANGUAGES, MAX_SESSION_TIMEOUT, MIN_SESSION_TIMEOUT, THEMES, load_settings, save_settings
from state import (
    SETTINGS_TABS,
    TABS,
    AppState,
    close_share,
    mark_swept,
    open_share,
    select_settings_tab,
    select_tab,
    session_timed_out,
    set_error,
    set_last_record,
    set_profile,
    set_records,
    set_settings,
    sign_in_user,
    sign_out_user,
    touch,
)
from utils.qr_generator import decode_data_url
from utils.share_links import build_share_links, share_target_for


logging.basicConfig(level=log_level())
logger = logging.getLogger(__name__)

TAB_LABELS = {"generator": "Generator", "history": "History", "help": "How to Use"}
SETTINGS_TAB_LABELS = {
    "profile": "Profile",
    "notifications": "Notifications",
    "privacy": "Privacy",
    "security": "Security",
    "language": "Language",
    "theme": "Theme",
}
UPLOAD_TYPES = {
    "image": ["png", "jpg", "jpeg", "gif", "webp", "bmp", "svg"],
    "video": ["mp4", "webm", "ogg", "mov", "m4v", "avi", "mkv"],
    "audio": ["mp3", "wav", "ogg", "m4a", "aac", "flac"],
    "document": ["pdf", "doc", "docx", "txt"],
}
THEME_CSS = {
    "light": "background-color: #ffffff; color: #1f2937;",
    "dark": "background-color: #111827; color: #f3f4f6;",
}


# -----------------------------
# Session plumbing
# -----------------------------
def get_state():
    if "app_state" not in st.session_state:
        st.session_state["app_state"] = AppState()
    return st.session_state["app_state"]


def get_client():
    if "supabase" not in st.session_state:
        st.session_state["supabase"] = create_supabase_client()
    return st.session_state["supabase"]


def get_admin_client():
    config = load_backend_config()
    if not config.service_key:
        return None
    if "supabase_admin" not in st.session_state:
        st.session_state["supabase_admin"] = create_supabase_client(config, use_service_key=True)
    return st.session_state["supabase_admin"]


def get_session_manager():
    return SessionManager(get_client(), admin_client=get_admin_client())


def refresh_records(state):
    try:
        set_records(state, QRCodeStore(get_client()).list_by_owner(state.user_id))
    except QRAppError as exc:
        logger.error("Error loading QR codes: %s", exc)


def show_error(exc):
    st.error(exc.user_message if isinstance(exc, QRAppError) else str(exc))


def apply_global_styles(theme):
    rules = THEME_CSS.get(theme)
    css = """
        section.main > div.block-container {
            max-width: 1200px;
            padding-top: 1rem;
        }
    """
    if rules:
        css += f"""
        .stApp {{ {rules} }}
        """
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)


# -----------------------------
# Login / Register
# -----------------------------
def show_login(state):
    login_tab, register_tab = st.tabs(["Sign In", "Create Account"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email Address")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In")
        if submitted:
            try:
                user, profile = get_session_manager().open_session(email, password)
            except QRAppError as exc:
                show_error(exc)
            else:
                sign_in_user(state, user.id, user.email or email, profile, load_settings(user.id))
                refresh_records(state)
                st.rerun()

    with register_tab:
        with st.form("register_form"):
            name = st.text_input("Full Name")
            email = st.text_input("Email Address", key="register_email")
            password = st.text_input("Password", type="password", key="register_password")
            gender = st.selectbox("Gender", GENDERS, format_func=str.capitalize)
            submitted = st.form_submit_button("Create Account")
        if submitted:
            try:
                get_session_manager().sign_up(email, password, name, gender)
            except QRAppError as exc:
                show_error(exc)
            else:
                st.success("Account created. Check your inbox to confirm, then sign in.")


# -----------------------------
# Generator
# -----------------------------
def show_share_options(state):
    if not state.share_url:
        return
    st.subheader("Share")
    links = build_share_links(state.share_url, state.share_title)
    cols = st.columns(len(links))
    for col, (platform, link) in zip(cols, links.items()):
        with col:
            st.link_button(platform, link)
    st.code(state.share_url, language=None)
    if st.button("Close", key="close_share"):
        close_share(state)
        st.rerun()


def show_generator(state, public_base_url):
    st.header("Generate QR Code")
    qr_type = st.radio(
        "Content type",
        QR_TYPES,
        horizontal=True,
        format_func=str.capitalize,
        key="qr_type",
    )

    with st.form("generator_form", clear_on_submit=True):
        text = ""
        files = []
        if qr_type in ("text", "url"):
            text = st.text_area(
                "Content",
                placeholder="https://example.com" if qr_type == "url" else "Enter your text here",
            )
        else:
            files = st.file_uploader(
                f"Choose {qr_type} files (max 2GB each)",
                type=UPLOAD_TYPES[qr_type],
                accept_multiple_files=True,
            ) or []
        notes = st.text_area("Add Notes", placeholder="Add any notes about this QR code...")
        submitted = st.form_submit_button("Generate QR Code")

    if submitted:
        with st.spinner("Generating..."):
            try:
                record = generate_qr_code(get_client(), state.user_id, qr_type, text, files, notes)
            except QRAppError as exc:
                logger.error("QR generation failed: %s", exc)
                set_error(state, exc.user_message)
            else:
                set_error(state)
                set_last_record(state, record)
                close_share(state)
                refresh_records(state)

    if state.error:
        st.error(state.error)

    record = state.last_record
    if not record:
        return

    st.subheader("Your QR Code")
    st.image(decode_data_url(record["qr_url"]), width=250)
    st.caption(describe_time_left(record))

    col_a, col_b = st.columns(2)
    with col_a:
        st.download_button(
            "Download",
            data=decode_data_url(record["qr_url"]),
            file_name="qrcode.png",
            mime="image/png",
        )
    with col_b:
        if st.button("Share", key="share_current"):
            open_share(state, share_target_for(record, public_base_url), record["content"])

    with st.form("notes_form"):
        note = st.text_area("Notes", value=record.get("notes") or "")
        save_note = st.form_submit_button("Save Notes")
    if save_note:
        try:
            updated = QRCodeStore(get_client()).update_note(record["id"], note, state.user_id)
        except QRAppError:
            st.error("Failed to save notes")
        else:
            set_last_record(state, updated or {**record, "notes": note or None})
            refresh_records(state)
            st.success("Notes saved.")

    show_share_options(state)


# -----------------------------
# History
# -----------------------------
def show_file_previews(record):
    for index, url in enumerate(record.get("files") or []):
        if record["type"] == "audio":
            st.audio(url)
        elif record["type"] == "video":
            st.video(url)
        elif record["type"] == "image":
            st.image(url, width="stretch")
        else:
            st.markdown(f"[View File {index + 1}]({url})")


def show_history(state, public_base_url):
    st.header("QR Code History")
    if not state.records:
        st.info("No QR codes generated yet.")
        return

    now = utcnow()
    for start in range(0, len(state.records), 2):
        cols = st.columns(2)
        for col, record in zip(cols, state.records[start:start + 2]):
            expired = is_expired(record, now)
            with col, st.container(border=True):
                # Expired rows stay visible, greyed out, until the sweep deletes them.
                st.image(decode_data_url(record["qr_url"]), width=96 if expired else 128)
                heading = record["type"].capitalize()
                st.markdown(f":gray[**{heading}**]" if expired else f"**{heading}**")
                if expired:
                    st.caption(record["content"])
                else:
                    st.write(record["content"])
                if record.get("notes"):
                    st.caption(f"Note: {record['notes']}")
                st.caption(describe_time_left(record, now))

                col_share, col_delete = st.columns(2)
                with col_share:
                    if not expired and st.button("Share", key=f"share_{record['id']}"):
                        open_share(state, share_target_for(record, public_base_url), record["content"])
                with col_delete:
                    if st.button("Delete", key=f"delete_{record['id']}"):
                        try:
                            QRCodeStore(get_client()).delete(record["id"], state.user_id)
                        except QRAppError as exc:
                            show_error(exc)
                        else:
                            if state.last_record and state.last_record["id"] == record["id"]:
                                set_last_record(state, None)
                            refresh_records(state)
                            st.rerun()
                show_file_previews(record)

    show_share_options(state)


# -----------------------------
# How to Use
# -----------------------------
def show_help():
    st.header("How to Use QR Code Generator")
    st.subheader("Content Types")
    st.markdown(
        """
- **Text** - For plain text content
- **URL** - For website links
- **Document** - PDF, DOC, TXT files
- **Video** - All video formats
- **Audio** - Music and sound files
- **Image** - JPG, PNG, GIF, etc.
"""
    )
    st.subheader("File Upload Guidelines")
    st.markdown(
        """
- Maximum file size: 2GB per file
- Multiple files can be uploaded at once
- Files are securely stored and accessible via QR code
- Supported formats depend on the selected content type
"""
    )
    st.subheader("QR Code Lifecycle")
    st.markdown(
        """
- QR codes are valid for 2 hours from generation
- Expired codes are automatically removed
- Track remaining time in the History tab
- Download codes before expiry for permanent access
"""
    )
    st.subheader("Sharing Options")
    st.markdown(
        """
- Download as PNG image
- Share directly to social media platforms
- Send via email
- Copy link for instant sharing
"""
    )
    st.info(
        "Tips: test QR codes after generation, download important ones for offline access "
        "and check file size limits before uploading."
    )


# -----------------------------
# Settings
# -----------------------------
def show_profile_settings(state):
    profile = state.profile or {"name": "", "email": state.email, "gender": "male", "avatar_url": None}

    if profile.get("avatar_url"):
        st.image(profile["avatar_url"], width=96)
    avatar = st.file_uploader("Profile photo", type=UPLOAD_TYPES["image"], key="avatar_upload")
    if avatar is not None and st.button("Upload photo"):
        try:
            avatar_url = get_session_manager().change_avatar(state.user_id, avatar)
        except QRAppError as exc:
            logger.error("Error uploading avatar: %s", exc)
            st.error(exc.user_message if isinstance(exc, ValidationError) else "Failed to upload avatar")
        else:
            set_profile(state, {**profile, "avatar_url": avatar_url})
            st.rerun()

    with st.form("profile_form"):
        name = st.text_input("Name", value=profile.get("name") or "")
        st.text_input("Email", value=profile.get("email") or state.email, disabled=True)
        gender_value = profile.get("gender") if profile.get("gender") in GENDERS else "male"
        gender = st.selectbox("Gender", GENDERS, index=GENDERS.index(gender_value), format_func=str.capitalize)
        submitted = st.form_submit_button("Save Changes")
    if submitted:
        try:
            get_session_manager().save_profile(state.user_id, name, gender)
        except QRAppError as exc:
            logger.error("Error updating profile: %s", exc)
            st.error("Failed to update profile")
        else:
            set_profile(state, {**profile, "name": name.strip(), "gender": gender})
            st.success("Profile saved.")


def show_preference_settings(state, tab):
    settings = state.settings
    updated = {
        "notifications": dict(settings["notifications"]),
        "privacy": dict(settings["privacy"]),
        "security": dict(settings["security"]),
        "language": settings["language"],
        "theme": settings["theme"],
    }

    if tab == "notifications":
        updated["notifications"]["email"] = st.toggle(
            "Email Notifications", value=settings["notifications"]["email"], help="Receive updates via email"
        )
        updated["notifications"]["push"] = st.toggle(
            "Push Notifications", value=settings["notifications"]["push"], help="Receive instant notifications"
        )
        updated["notifications"]["qr_expiry"] = st.toggle(
            "QR Code Expiry Reminders",
            value=settings["notifications"]["qr_expiry"],
            help="Get notified before QR codes expire",
        )
    elif tab == "privacy":
        visibility = settings["privacy"]["profile_visibility"]
        updated["privacy"]["profile_visibility"] = st.selectbox(
            "Profile Visibility",
            ["public", "private"],
            index=0 if visibility == "public" else 1,
            format_func=str.capitalize,
        )
        updated["privacy"]["share_history"] = st.toggle(
            "Share QR Code History", value=settings["privacy"]["share_history"]
        )
    elif tab == "security":
        updated["security"]["two_factor"] = st.toggle(
            "Two-Factor Authentication", value=settings["security"]["two_factor"]
        )
        updated["security"]["session_timeout"] = int(st.number_input(
            "Session Timeout (minutes)",
            min_value=MIN_SESSION_TIMEOUT,
            max_value=MAX_SESSION_TIMEOUT,
            value=int(settings["security"]["session_timeout"]),
            step=5,
        ))
    elif tab == "language":
        codes = list(LANGUAGES)
        updated["language"] = st.selectbox(
            "Select Language",
            codes,
            index=codes.index(settings["language"]),
            format_func=LANGUAGES.get,
        )
    elif tab == "theme":
        updated["theme"] = st.radio(
            "Select Theme",
            THEMES,
            index=THEMES.index(settings["theme"]),
            horizontal=True,
            format_func=str.capitalize,
        )

    if updated != settings:
        set_settings(state, save_settings(state.user_id, updated))
        st.rerun()


def show_settings(state):
    with st.sidebar:
        st.header("Settings")
        tab = st.selectbox(
            "Section",
            SETTINGS_TABS,
            index=SETTINGS_TABS.index(state.settings_tab),
            format_func=SETTINGS_TAB_LABELS.get,
        )
        select_settings_tab(state, tab)
        if tab == "profile":
            show_profile_settings(state)
        else:
            show_preference_settings(state, tab)

        st.divider()
        if st.button("Sign Out"):
            get_session_manager().sign_out()
            sign_out_user(state)
            st.rerun()


# -----------------------------
# Expiry
# -----------------------------
@st.fragment(run_every=SWEEP_INTERVAL_SECONDS)
def expiry_watch():
    state = get_state()
    if not state.signed_in:
        return
    now = utcnow()
    if not sweep_due(state.last_sweep, now):
        return
    try:
        sweep(QRCodeStore(get_client()), now)
    except QRAppError as exc:
        logger.error("Error cleaning up expired QR codes: %s", exc)
    mark_swept(state, now)
    refresh_records(state)

    if state.settings["notifications"]["qr_expiry"]:
        soon = expiring_soon(state.records, now)
        if soon:
            st.warning(f"{len(soon)} QR code(s) will expire within 10 minutes.")


# -----------------------------
# Page
# -----------------------------
st.set_page_config(
    page_title="QR Code Generator",
    page_icon="🔳",
    layout="wide",
)
state = get_state()
backend = load_backend_config()

if session_timed_out(state):
    get_session_manager().sign_out()
    sign_out_user(state)
    st.info("Your session timed out. Please sign in again.")

apply_global_styles(state.settings["theme"])
st.title("QR Code Generator")

if not state.signed_in:
    show_login(state)
else:
    touch(state)
    display_name = (state.profile or {}).get("name") or state.email
    st.caption(f"Signed in as {display_name}")

    expiry_watch()
    show_settings(state)

    tab = st.radio(
        "View",
        TABS,
        index=TABS.index(state.active_tab),
        horizontal=True,
        format_func=TAB_LABELS.get,
        label_visibility="collapsed",
    )
    select_tab(state, tab)

    if tab == "generator":
        show_generator(state, backend.public_base_url)
    elif tab == "history":
        show_history(state, backend.public_base_url)
    else:
        show_help()

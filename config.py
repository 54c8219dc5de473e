"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BackendConfig:
    supabase_url: str
    supabase_key: str
    service_key: str = ""
    public_base_url: str = ""


def load_backend_config():
    return BackendConfig(
        supabase_url=os.getenv("SUPABASE_URL", "").strip(),
        supabase_key=os.getenv("SUPABASE_KEY", "").strip(),
        service_key=os.getenv("SUPABASE_SERVICE_KEY", "").strip(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "").strip().rstrip("/"),
    )


def log_level():
    return os.getenv("LOG_LEVEL", "INFO").upper()


def create_supabase_client(config=None, use_service_key=False):
    """Build a Supabase client from *config* (defaults to the environment).

    The service key is only used by the public viewer, which reads records
    without a signed-in user.
    """
    from supabase import create_client

    config = config or load_backend_config()
    key = config.service_key if use_service_key and config.service_key else config.supabase_key
    if not config.supabase_url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set.")
    return create_client(config.supabase_url, key)

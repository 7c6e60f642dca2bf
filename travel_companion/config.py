# travel_companion/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping

from dotenv import load_dotenv

from travel_companion.errors import ConfigError
from travel_companion.log import get_logger

logger = get_logger(__name__)

# Load .env file if present
load_dotenv()

REQUIRED_VARS = (
    "OPENAI_API_KEY",
    "GOOGLE_PROJECT_ID",
    "GOOGLE_TRANSLATE_API_KEY",
    "FIREBASE_API_KEY",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_APP_ID",
)

DEV_SESSION_SECRET = "travel-companion-dev-secret"


def _split_csv(raw: str | None) -> List[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def _flag(raw: str | None) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    google_project_id: str
    google_translate_api_key: str
    firebase_api_key: str
    firebase_project_id: str
    firebase_app_id: str
    session_secret: str = DEV_SESSION_SECRET
    database_url: str = "sqlite:///./travel_companion.db"
    llm_model: str = "gpt-4o"
    llm_timeout: float = 30.0
    translate_timeout: float = 10.0
    admin_usernames: List[str] = field(default_factory=list)
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    cookie_https_only: bool = False

    @property
    def identity_client_config(self) -> dict:
        """Public identity-provider settings the browser needs to bootstrap."""
        return {
            "apiKey": self.firebase_api_key,
            "authDomain": f"{self.firebase_project_id}.firebaseapp.com",
            "projectId": self.firebase_project_id,
            "storageBucket": f"{self.firebase_project_id}.appspot.com",
            "appId": self.firebase_app_id,
        }


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment, failing fast on missing credentials."""
    env = os.environ if env is None else env

    missing = [name for name in REQUIRED_VARS if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )

    session_secret = env.get("SESSION_SECRET") or DEV_SESSION_SECRET
    if session_secret == DEV_SESSION_SECRET:
        logger.warning("SESSION_SECRET not set; using the development secret")

    origins = _split_csv(env.get("TRAVEL_COMPANION_ALLOWED_ORIGINS")) or ["*"]

    return Settings(
        openai_api_key=env["OPENAI_API_KEY"],
        google_project_id=env["GOOGLE_PROJECT_ID"],
        google_translate_api_key=env["GOOGLE_TRANSLATE_API_KEY"],
        firebase_api_key=env["FIREBASE_API_KEY"],
        firebase_project_id=env["FIREBASE_PROJECT_ID"],
        firebase_app_id=env["FIREBASE_APP_ID"],
        session_secret=session_secret,
        database_url=env.get("TRAVEL_COMPANION_DATABASE_URL") or "sqlite:///./travel_companion.db",
        llm_model=env.get("TRAVEL_COMPANION_LLM_MODEL") or "gpt-4o",
        llm_timeout=float(env.get("TRAVEL_COMPANION_LLM_TIMEOUT") or 30.0),
        translate_timeout=float(env.get("TRAVEL_COMPANION_TRANSLATE_TIMEOUT") or 10.0),
        admin_usernames=_split_csv(env.get("TRAVEL_COMPANION_ADMIN_USERNAMES")),
        allowed_origins=origins,
        cookie_https_only=_flag(env.get("TRAVEL_COMPANION_SECURE_COOKIES")),
    )

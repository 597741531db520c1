# Environment-driven settings and logging setup.
import logging
import os
from datetime import timedelta
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_JWT_SECRET = "default-secret-change-in-production"
DEFAULT_JWT_REFRESH_SECRET = "default-refresh-secret-change-in-production"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_API_KEY_ENV_VAR = "GROQ_API_KEY"


# Load a .env file into the process environment without overriding set values.
def load_environment(dotenv_path: Optional[str] = None) -> bool:
    return load_dotenv(dotenv_path=dotenv_path, override=False)


load_environment()


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring non-integer %s=%r, using %s", name, raw, default
        )
        return default


def get_jwt_secret() -> str:
    return os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET


def get_jwt_refresh_secret() -> str:
    return os.getenv("JWT_REFRESH_SECRET") or DEFAULT_JWT_REFRESH_SECRET


def get_access_token_ttl() -> timedelta:
    return timedelta(minutes=_get_int("JWT_ACCESS_TTL_MINUTES", 15))


def get_refresh_token_ttl() -> timedelta:
    return timedelta(days=_get_int("JWT_REFRESH_TTL_DAYS", 7))


# PBKDF2 rounds applied to newly hashed passwords.
def get_password_hash_iterations() -> int:
    return max(1, _get_int("PASSWORD_HASH_ITERATIONS", 600_000))


def get_ai_api_key() -> Optional[str]:
    return os.getenv(GROQ_API_KEY_ENV_VAR) or None


def get_ai_model() -> str:
    return os.getenv("GROQ_MODEL") or DEFAULT_GROQ_MODEL


def get_ai_base_url() -> str:
    return os.getenv("GROQ_BASE_URL") or DEFAULT_GROQ_BASE_URL


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").upper()


# Configure root logging once for the service process.
def configure_logging() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("quiz_studio").setLevel(get_log_level())

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ───── AI service ─────
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))
GEMINI_TIMEOUT_SECONDS = int(os.getenv("GEMINI_TIMEOUT_SECONDS", "120"))
GROUNDING_ENABLED = _env_flag("GROUNDING_ENABLED", True)


def get_api_key() -> str:
    """Read the service key on every call so a rotated key is picked up."""
    return (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()


# ───── Analysis limits ─────
MAX_INPUT_CHARS = 10000
MIN_INPUT_CHARS = 20
STRICT_RECONSTRUCTION = _env_flag("STRICT_RECONSTRUCTION", True)

# ───── Sessions ─────
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))

# ───── File support ─────
ALLOWED_EXTENSIONS = {"txt", "pdf", "docx"}
MAX_FILE_SIZE_MB = 10

# ───── Auth ─────
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# ───── HTTP ─────
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "verifyai.log")

import os
import logging
from dotenv import load_dotenv

load_dotenv()

IS_HF = os.environ.get("SPACE_ID") is not None

# --- LLM ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
LLM_API_URL = os.getenv("LLM_API_URL", "https://api.openai.com/v1/chat/completions")
MODEL_NAME = os.getenv("MODEL_NAME", "gpt-3.5-turbo")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))

# --- Localisation ---
SUPPORTED_LANGUAGES = ("en", "es")
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")

# --- Uploads ---
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
API_URL = os.getenv("API_URL", "http://localhost:8000")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def base_dir() -> str:
    return os.getenv("BASE_DIR", "/tmp/data" if IS_HF else "data")


def database_url() -> str:
    """Read at startup, not import, so a test run can point it elsewhere."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{os.path.join(base_dir(), 'app.db')}"


def resolve_language(language: str = None) -> str:
    lang = (language or DEFAULT_LANGUAGE).lower()
    return lang if lang in SUPPORTED_LANGUAGES else "en"


def configure_logging():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
    )

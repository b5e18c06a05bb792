import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "168"))  # 7 days

# --- Database ---
# Local SQLite by default, PostgreSQL in production via DATABASE_URL
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/notenova.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- OpenRouter ---
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "meta-llama/llama-3.3-70b-instruct:free")
OPENROUTER_MODEL_LABEL = os.getenv("OPENROUTER_MODEL_LABEL", "Meta Llama 3.3 70B Instruct (free)")
OPENROUTER_REFERER = os.getenv("OPENROUTER_REFERER", "http://localhost:3000")
OPENROUTER_SITE_NAME = os.getenv("OPENROUTER_SITE_NAME", "NoteNova")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))

# --- Caches ---
FLASHCARD_CACHE_TTL = int(os.getenv("FLASHCARD_CACHE_TTL", "86400"))
FLASHCARD_CACHE_MAX_ENTRIES = int(os.getenv("FLASHCARD_CACHE_MAX_ENTRIES", "256"))
AI_STATUS_CACHE_TTL = int(os.getenv("AI_STATUS_CACHE_TTL", "300"))  # 5 minutes

# --- Files ---
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploads")
NOTES_IMPORT_DIR = os.getenv("NOTES_IMPORT_DIR", "./notes")
FRONTEND_DIR = os.getenv(
    "FRONTEND_DIR",
    os.path.join(os.path.dirname(__file__), "..", "frontend", "build"),
)

# --- Server ---
APP_VERSION = "1.0.0"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Document store: "sql" (SQLAlchemy) or "firestore"
DOCUMENT_STORE = os.getenv("DOCUMENT_STORE", "sql")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./prepdeck.db")
TRANSACTION_MAX_ATTEMPTS = int(os.getenv("TRANSACTION_MAX_ATTEMPTS", "5"))

# Identity provider: "jwt" (local) or "firebase"
IDENTITY_PROVIDER = os.getenv("IDENTITY_PROVIDER", "jwt")

# JWT
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
ID_TOKEN_EXPIRE_MINUTES = 60

# Session cookie
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_EXPIRES_DAYS = int(os.getenv("SESSION_EXPIRES_DAYS", "5"))

# Header set by an upstream edge layer that already verified the caller
TRUSTED_USER_HEADER = os.getenv("TRUSTED_USER_HEADER", "x-user-id")
TRUST_USER_HEADER = _env_bool("TRUST_USER_HEADER", True)

# Cookie gate in front of /api/*
EDGE_AUTH_ENABLED = _env_bool("EDGE_AUTH_ENABLED", True)

# Firebase admin
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL", "")
FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n")

# Gemini
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# Frontend URL for CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

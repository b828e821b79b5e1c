# inbox/core/config.py
"""
Application configuration - loads from environment variables.
Single source of truth for all settings.
"""
import os
from typing import List
from urllib.parse import quote_plus
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables FIRST
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_path = BASE_DIR / '.env'
load_dotenv(dotenv_path=env_path)

# ────────────────────────────────────────────
# WhatsApp Bridge Configuration
# ────────────────────────────────────────────
PHONE_ID: str = os.getenv("WHATSAPP_PHONE_ID", "")
TOKEN: str = os.getenv("WHATSAPP_TOKEN", "")
VERIFY_TOKEN: str = os.getenv("VERIFY_TOKEN", "")
CALLBACK_URL: str = os.getenv("CALLBACK_URL", "")
VALIDATE_UPDATES: bool = os.getenv("VALIDATE_UPDATES", "true").lower() not in ("0", "false", "no")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
PORT: int = int(os.getenv("PORT", "3000"))

# ────────────────────────────────────────────
# Database Configuration
# ────────────────────────────────────────────
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "inbox_db")
DATABASE_URL = os.getenv("DATABASE_URL")

# Build DATABASE_URL
if not DATABASE_URL:
    encoded_password = quote_plus(DB_PASSWORD)
    DATABASE_URL = f"postgresql://{DB_USER}:{encoded_password}@{DB_HOST}:{DB_PORT}/{DB_NAME}"

# ────────────────────────────────────────────
# Bootstrap admin (scripts/create_admin.py)
# ────────────────────────────────────────────
ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Administrator")
ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin@123")

# ────────────────────────────────────────────
# JWT Configuration
# ────────────────────────────────────────────
JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ACCESS_TOKEN_LIFETIME_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_LIFETIME_MINUTES", "1440"))

if not JWT_SECRET_KEY:
    import warnings
    warnings.warn("JWT_SECRET_KEY not set! Using an insecure development secret.")
    JWT_SECRET_KEY = "insecure-development-secret-change-me"

# ────────────────────────────────────────────
# CORS
# ────────────────────────────────────────────
ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# ────────────────────────────────────────────
# Settings Class
# ────────────────────────────────────────────
class Settings:
    DATABASE_URL: str = DATABASE_URL
    PHONE_ID: str = PHONE_ID
    TOKEN: str = TOKEN
    VERIFY_TOKEN: str = VERIFY_TOKEN
    CALLBACK_URL: str = CALLBACK_URL
    VALIDATE_UPDATES: bool = VALIDATE_UPDATES
    ADMIN_EMAIL: str = ADMIN_EMAIL
    ADMIN_PASSWORD: str = ADMIN_PASSWORD
    JWT_SECRET_KEY: str = JWT_SECRET_KEY
    JWT_ALGORITHM: str = JWT_ALGORITHM
    JWT_ACCESS_TOKEN_LIFETIME_MINUTES: int = JWT_ACCESS_TOKEN_LIFETIME_MINUTES
    LOG_LEVEL: str = LOG_LEVEL
    ALLOWED_ORIGINS: List[str] = ALLOWED_ORIGINS

    @property
    def bridge_configured(self) -> bool:
        return bool(self.PHONE_ID and self.TOKEN and self.VERIFY_TOKEN)

settings = Settings()

import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # -> project root

# Load .env explicitly from project root
load_dotenv(BASE_DIR / ".env")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    PROJECT_NAME = "DLV Burundi API"
    SERVICE_NAME = "dlv-burundi-backend"
    VERSION = "1.0.0"

    # NODE_ENV is honoured so the portal frontend and this API can share one .env
    APP_ENV = os.getenv("APP_ENV") or os.getenv("NODE_ENV", "development")

    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'dlv.db'}")

    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    SUPABASE_STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "documents")
    SUPABASE_S3_ACCESS_KEY_ID = os.getenv("SUPABASE_S3_ACCESS_KEY_ID")
    SUPABASE_S3_SECRET_ACCESS_KEY = os.getenv("SUPABASE_S3_SECRET_ACCESS_KEY")
    SUPABASE_S3_REGION = os.getenv("SUPABASE_S3_REGION", "us-east-1")
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))

    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-key")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    TOKEN_EXPIRE_HOURS = int(os.getenv("TOKEN_EXPIRE_HOURS", 24))

    OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", 5))
    OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", 3))
    DEV_OTP_CODE = "123456"
    AUTH_SESSION_BACKEND = os.getenv("AUTH_SESSION_BACKEND", "database").lower()

    RATE_LIMIT_ENABLED = _flag("RATE_LIMIT_ENABLED", "true")
    RATE_LIMIT_WINDOW_MS = int(os.getenv("RATE_LIMIT_WINDOW_MS", 15 * 60 * 1000))
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", 100))

    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
    SEED_ON_STARTUP = _flag("SEED_ON_STARTUP", "true")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    ESIGNET_SWEEP_INTERVAL_MINUTES = int(os.getenv("ESIGNET_SWEEP_INTERVAL_MINUTES", 60))
    ESIGNET_SESSION_MAX_AGE_MINUTES = int(os.getenv("ESIGNET_SESSION_MAX_AGE_MINUTES", 60))

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def cors_origins(self) -> list[str]:
        if self.is_development:
            return ["*"]
        configured = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "").split(",")
            if origin.strip()
        ]
        return configured or [self.FRONTEND_URL, "http://localhost:3001"]

    @property
    def rate_limit(self) -> str:
        window_seconds = max(self.RATE_LIMIT_WINDOW_MS // 1000, 1)
        return f"{self.RATE_LIMIT_MAX_REQUESTS}/{window_seconds} seconds"


settings = Settings()

"""Settings management"""
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def split_csv(value: str) -> List[str]:
    """Split a comma-separated setting, dropping blanks and surrounding spaces."""
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    APP_NAME = os.getenv("APP_NAME", "Bookkeep")
    API_PREFIX = os.getenv("API_PREFIX", "/api")

    # Token signing
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Storage: "memory" or "supabase"
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory").strip().lower()

    # Supabase (document store for users and books)
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY")

    # CORS
    ALLOWED_ORIGINS = split_csv(os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:8080,http://localhost:5173"
    ))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "5000"))

    def validate(self) -> List[str]:
        """Return the names of settings required at startup but missing."""
        missing = []
        if not self.JWT_SECRET_KEY:
            missing.append("JWT_SECRET_KEY")
        if self.STORAGE_BACKEND == "supabase":
            if not self.SUPABASE_URL:
                missing.append("SUPABASE_URL")
            if not self.SUPABASE_KEY:
                missing.append("SUPABASE_KEY")
        elif self.STORAGE_BACKEND != "memory":
            missing.append("STORAGE_BACKEND")
        return missing


config = Config()

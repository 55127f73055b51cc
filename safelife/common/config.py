"""
Configuration loader for the safelife store.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Centralized configuration for the store and its tooling.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== Backend Selection =====
    # "firestore" (default) or "atlas"
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "firestore").lower()

    # ===== Firestore =====
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
    # Raw service-account JSON, not a file path
    FIREBASE_JSON: str = os.getenv("FIREBASE_JSON", "")

    # ===== MongoDB =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "safelife")

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "false").lower() == "true"

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required configuration is present.
        Raises ValueError if critical settings are missing.
        """
        if cls.STORE_BACKEND == "atlas":
            required_settings = {"MONGODB_URI": cls.MONGODB_URI}
        else:
            required_settings = {
                "FIREBASE_PROJECT_ID": cls.FIREBASE_PROJECT_ID,
                "FIREBASE_JSON": cls.FIREBASE_JSON,
            }

        missing = [name for name, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        return f"""
Configuration Summary:
  Backend: {cls.STORE_BACKEND}
  Firestore project: {cls.FIREBASE_PROJECT_ID or '✗ Missing'}
  Firestore credentials: {'✓ Configured' if cls.FIREBASE_JSON else '✗ Missing'}
  MongoDB: {'✓ Configured' if cls.MONGODB_URI else '✗ Missing'} (database: {cls.MONGODB_DATABASE})
  Logging: {cls.LOG_LEVEL} ({cls.LOG_FORMAT}){' debug' if cls.DEBUG_MODE else ''}
"""

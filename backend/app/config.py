"""Application configuration and settings."""
import os
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Google Directions API Configuration
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    GOOGLE_DIRECTIONS_URL: str = os.getenv(
        "GOOGLE_DIRECTIONS_URL", "https://maps.googleapis.com/maps/api/directions/json"
    )
    DIRECTIONS_TIMEOUT_S: float = float(os.getenv("DIRECTIONS_TIMEOUT_S", "15.0"))

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./db/driveless.db")

    # Application Configuration
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Configuration
    API_V1_PREFIX: str = "/api"

    # Usage limits
    DAILY_ROUTE_LIMIT: int = int(os.getenv("DAILY_ROUTE_LIMIT", "25"))
    ADMIN_USER_IDS: str = os.getenv("ADMIN_USER_IDS", "")

    # Route history
    ROUTE_HISTORY_LIMIT: int = int(os.getenv("ROUTE_HISTORY_LIMIT", "50"))

    # Map display (pixels) used for viewport refinement and previews
    MAP_WIDTH: int = int(os.getenv("MAP_WIDTH", "390"))
    MAP_HEIGHT: int = int(os.getenv("MAP_HEIGHT", "844"))

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def admin_user_ids(self) -> List[str]:
        """Admin user IDs, parsed from the comma separated setting."""
        return [uid.strip() for uid in self.ADMIN_USER_IDS.split(",") if uid.strip()]


settings = Settings()

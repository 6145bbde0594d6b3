"""
Core settings and environment variables for the Infraction Reporter.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Infraction Reporter"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Reverse geocoding
    # - GEOCODING_PROVIDER: "usig" (Buenos Aires street normalizer, default) or "nominatim"
    GEOCODING_PROVIDER: str = "usig"
    GEOCODING_URL: str = "https://servicios.usig.buenosaires.gob.ar/normalizar/"
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODING_TIMEOUT_SECONDS: float = 3.0

    # License plate recognition
    # - PLATE_RECOGNITION_PROVIDER: "huggingface" (remote inference) or "simulated"
    PLATE_RECOGNITION_PROVIDER: str = "huggingface"
    PLATE_RECOGNITION_URL: str = "https://api-inference.huggingface.co/models/ankandrew/fast-plate-ocr"
    PLATE_RECOGNITION_API_KEY: Optional[str] = None  # Bearer token, optional
    PLATE_RECOGNITION_TIMEOUT_SECONDS: float = 10.0
    PLATE_CONFIDENCE_THRESHOLD: float = 70.0  # Above this, detection is "high confidence"

    # Submission (mock boundary, nothing is stored)
    SUBMISSION_DELAY_SECONDS: float = 1.0

    # Uploads
    MAX_UPLOAD_BYTES: int = 15 * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()

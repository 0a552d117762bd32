"""
Environment configuration for the attendance reporting engine.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application configuration
    APP_NAME: str = Field(default="Attendance Reporting Engine", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Upstream stores
    ROSTER_SERVICE_URL: str = "http://localhost:8080/api"
    ATTENDANCE_SERVICE_URL: str = "http://localhost:8080/api"
    HTTP_TIMEOUT_SECONDS: float = 15.0
    ROSTER_CACHE_TTL_SECONDS: Optional[int] = 300

    # Reporting
    INSTITUTION_NAME: str = "KARPAGAM INSTITUTIONS"
    ATTENDANCE_GOOD_THRESHOLD: float = Field(default=75.0, ge=0, le=100)
    ATTENDANCE_WARNING_THRESHOLD: float = Field(default=60.0, ge=0, le=100)
    EXPORT_DIR: str = "exports"
    MAX_REPORT_RANGE_DAYS: int = Field(default=366, ge=1)

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from a comma separated string"""
        if isinstance(v, str):
            if v.startswith('[') and v.endswith(']'):
                import json
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode='after')
    def validate_thresholds(self) -> "Settings":
        """The warning band must sit below the good band"""
        if self.ATTENDANCE_WARNING_THRESHOLD > self.ATTENDANCE_GOOD_THRESHOLD:
            raise ValueError(
                "ATTENDANCE_WARNING_THRESHOLD must not exceed ATTENDANCE_GOOD_THRESHOLD"
            )
        return self

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

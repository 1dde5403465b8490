from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Campaign Ledger API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./campaign_ledger.db"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Admin access (empty key rejects every admin call)
    ADMIN_API_KEY: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"

    # Preview image storage
    MEDIA_ROOT: str = "./media"
    MEDIA_URL: str = "/media"
    MAX_IMAGE_SIZE_MB: int = 10
    ALLOWED_IMAGE_CONTENT_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
    ]

    # Template validation
    REQUIRE_CELEBRITY_PLACEHOLDER: bool = False

    # Rate limiting for public reads
    RATE_LIMIT_ENABLED: bool = True
    PUBLIC_RATE_LIMIT: str = "60/minute"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

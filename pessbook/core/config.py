"""Configuration settings for the face search service."""
from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    These settings are loaded from environment variables with the following precedence:
    1. Environment variables
    2. .env file
    3. Default values

    Attributes:
        COLLECTION_ROOTS: Mapping of collection id to the S3 root folder holding its images
        S3_READ_EXTERNAL_IDS: Read the external image id stored in each object's metadata
        SIMILARITY_THRESHOLD: Default similarity threshold for face matching (0-100)
    """
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        env_nested_delimiter="__"
    )

    # Core Settings
    PROJECT_NAME: str = "PNG Pess Book Face Search"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"

    # CORS Settings
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> List[str]:
        """Get list of allowed origins."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # AWS Settings
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    AWS_S3_BUCKET: str = "facerecog-app-storage"

    # Storage Settings
    PRESIGNED_URL_EXPIRATION: int = 3600  # seconds
    S3_READ_EXTERNAL_IDS: bool = False
    S3_METADATA_CONCURRENCY: int = 16

    # Face search settings
    DEFAULT_COLLECTION_ID: str = "PNG"
    DEFAULT_ROOT_FOLDER: str = "PNG"
    COLLECTION_ROOTS: Dict[str, str] = {}
    PLACEHOLDER_IMAGE: str = "/profile-placeholder.jpg"
    URL_RESOLUTION_CONCURRENCY: int = 10
    MAX_MATCHES: int = 100  # Maximum number of matches to return from search
    SIMILARITY_THRESHOLD: float = 70.0
    MAX_FACES_PER_IMAGE: int = 5

    # Database Settings
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "pessbook"
    POSTGRES_POOL_SIZE: int = 5
    POSTGRES_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30

    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL for the person registry database."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def root_folder_for(self, collection_id: str) -> str:
        """Get the S3 root folder that holds the images of a collection."""
        return self.COLLECTION_ROOTS.get(collection_id, collection_id)

    # Optional settings with defaults
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000

settings = Settings()

"""
Application settings and configuration
"""
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration"""

    # API Server
    host: str = "0.0.0.0"
    port: int = Field(default=4000, validation_alias=AliasChoices("CANCER_API_PORT", "PORT"))

    # Model artifact (single-file Keras model, fetched once at startup)
    model_url: Optional[str] = None
    model_cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "cancer-api")

    # Uploads
    max_upload_bytes: int = 1_000_000
    allowed_extensions: List[str] = [".jpg", ".jpeg", ".png"]

    # Inference
    image_size: int = 224
    threshold: float = 0.5
    max_concurrent_inferences: int = 4

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "CANCER_API_"
        env_file = ".env"
        protected_namespaces = ()


settings = Settings()


def get_settings() -> Settings:
    return settings

"""Configuration management using pydantic-settings"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    database_path: str = Field(default="./data/compliance.db", description="Path to SQLite database")
    log_level: str = Field(default="INFO", description="Logging level")

    # Database mode: 'supabase' or 'sqlite'
    db_mode: str = Field(default="sqlite", description="Database backend: 'supabase' or 'sqlite'")

    # Supabase settings
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_service_key: Optional[str] = Field(default=None, description="Supabase service role key")

    # Compliance document versions stamped on new records
    attestation_version: str = Field(default="1.0", description="Current attestation wording version")
    consent_version: str = Field(default="1.0", description="Current consent wording version")

    # When true, a failed audit insert aborts the surrounding write
    audit_strict: bool = Field(default=False, description="Fail writes when the audit append fails")

    default_page_size: int = Field(default=50, description="Page size for admin attestation listing")

    # API server
    api_host: str = Field(default="127.0.0.1", description="Host for the API server")
    api_port: int = Field(default=8000, description="Port for the API server")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()

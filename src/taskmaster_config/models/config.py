"""Typed views over sections of the effective configuration."""

from pathlib import Path

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """AI model selection."""

    main: str = Field(description="Primary model")
    research: str | None = Field(default=None, description="Model used for research prompts")
    fallback: str = Field(description="Model used when the primary fails")


class StorageConfig(BaseModel):
    """Resolved task storage settings.

    ``api_configured`` is derived: True when either an endpoint or an
    access token is present. For plain ``file`` storage the API fields are
    never exposed.
    """

    type: str = Field(description="Storage backend: file, api or auto")
    base_path: Path = Field(description="Directory tasks are stored under")
    api_endpoint: str | None = Field(default=None, description="API endpoint URL")
    api_access_token: str | None = Field(default=None, description="API access token")
    api_configured: bool = Field(default=False, description="Whether API credentials exist")
    encoding: str = Field(default="utf8", description="Text encoding for task files")
    atomic_operations: bool = Field(default=True, description="Use atomic file writes")

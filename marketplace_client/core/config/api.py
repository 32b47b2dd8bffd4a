"""Marketplace REST API connection settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class ApiSettings(BaseSettings):
    """Defines where the marketplace API lives and how long calls may take.

    The base URL is stored without a trailing slash so endpoint paths can be
    appended verbatim.
    """

    API_BASE_URL: str = "http://localhost:5000/api"
    API_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)

    @field_validator("API_BASE_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

"""
Application-wide settings.
"""
from typing import List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings such as the environment name, logging
    output and the languages user-facing messages are available in.
    """
    PROJECT_NAME: str = "marketplace-client"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    DEFAULT_LANGUAGE: str = "en"
    SUPPORTED_LANGUAGES: Union[str, List[str]] = ["en", "es"]

    @field_validator("SUPPORTED_LANGUAGES", mode="before")
    @classmethod
    def assemble_languages(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of language codes into a list.

        Args:
            v: Input value as a string or list of language codes.

        Returns:
            List of stripped, lower-cased language codes.
        """
        if isinstance(v, str):
            return [i.strip().lower() for i in v.split(",") if i.strip()]
        return v

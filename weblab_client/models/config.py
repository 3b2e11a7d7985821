"""
Pydantic model for client configuration.
Provides validation for the base URL and credentials.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from weblab_client.api.requests import DEFAULT_BASE_URL


class WebLabConfig(BaseModel):
    """A validated configuration model for the client."""

    base_url: str = DEFAULT_BASE_URL

    # Scraping path
    cookie: str = ""

    # REST path
    api_key: str = ""
    api_secret: str = ""

    # Internal fields not loaded from the INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensures the base URL is an absolute http(s) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must start with http:// or https://, got: {v}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_credentials(self) -> "WebLabConfig":
        """Validates that at least one access path is configured."""
        if not self.cookie and not self.api_key:
            raise ValueError(
                "No credentials configured. Provide a session cookie and/or an API key."
            )
        if self.api_secret and not self.api_key:
            raise ValueError("An API secret was given without an API key.")
        return self

    @property
    def has_cookie(self) -> bool:
        return bool(self.cookie)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}

"""Credentials and connection settings for the Calendafy CRM API."""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

TOKEN_BASE_URL_TEMPLATE = "https://{domain}.mycalendafy.com/crm/sales/api"
BEARER_BASE_URL = "https://api.calendafy.com/crm"

_ENV_KEYS = {
    "api_key": "CALENDAFY_API_KEY",
    "user_id": "CALENDAFY_USER_ID",
    "domain": "CALENDAFY_DOMAIN",
    "auth_mode": "CALENDAFY_AUTH_MODE",
    "base_url": "CALENDAFY_BASE_URL",
}


class CalendafyCredentials(BaseModel):
    """
    API key plus the account identifier and domain used to reach the API.
    Token mode talks to a per-domain base URL; bearer mode to a fixed one,
    where the remote router keys off the body's resource/operation tags.
    """

    api_key: str = Field(..., min_length=1, repr=False)
    user_id: Optional[str] = None
    domain: Optional[str] = None
    auth_mode: Literal["token", "bearer"] = "token"
    base_url: Optional[str] = Field(default=None, description="Override the computed base URL")

    @model_validator(mode="after")
    def _require_domain_for_token_mode(self) -> "CalendafyCredentials":
        if self.auth_mode == "token" and not self.domain and not self.base_url:
            raise ValueError("domain is required for token authentication")
        return self

    @property
    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        if self.auth_mode == "bearer":
            return BEARER_BASE_URL
        return TOKEN_BASE_URL_TEMPLATE.format(domain=self.domain)

    @property
    def authorization(self) -> str:
        if self.auth_mode == "bearer":
            return f"Bearer {self.api_key}"
        return f"Token token={self.api_key}"

    def headers(self) -> dict[str, str]:
        """Authentication headers attached to every request."""
        headers = {"Authorization": self.authorization}
        if self.user_id:
            headers["X-Calendafy-User-Id"] = str(self.user_id)
        return headers

    @classmethod
    def from_env(cls) -> "CalendafyCredentials":
        """Load from CALENDAFY_* environment variables."""
        data = {key: os.environ.get(env) for key, env in _ENV_KEYS.items()}
        data = {k: v.strip() for k, v in data.items() if v and v.strip()}
        data["api_key"] = data.get("api_key", "")
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "CalendafyCredentials":
        """Load from a YAML file. Supports a nested `calendafy:` section or flat keys."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        section = data.get("calendafy", data)
        flat = {key: section.get(key) for key in _ENV_KEYS if section.get(key) is not None}
        if "userid" in section and "user_id" not in flat:
            flat["user_id"] = section["userid"]
        if "user_id" in flat:
            flat["user_id"] = str(flat["user_id"])
        return cls.model_validate(flat)

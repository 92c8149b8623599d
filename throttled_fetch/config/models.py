"""Pydantic models describing fetcher and transport settings."""

from __future__ import annotations

import codecs
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class DrainPolicy(str, Enum):
    """How the bounded fetcher waits once the concurrency budget is reached."""

    # Wait for the whole in-flight window before issuing the next one.
    WINDOW = "window"
    # Refill each slot as soon as it frees up.
    ROLLING = "rolling"


DEFAULT_USER_AGENT = "throttled-fetch/0.1"


class TransportSettings(BaseModel):
    """Options handed to the HTTP transport."""

    timeout: float = Field(default=20.0, gt=0)
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    headers: dict[str, str] = Field(default_factory=dict)

    def request_headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        headers.update(self.headers)
        return headers


class FetchSettings(BaseModel):
    """Top level settings for a fetch run."""

    concurrency_budget: int = Field(default=4, ge=1)
    drain_policy: DrainPolicy = DrainPolicy.WINDOW
    encoding: str = "utf-8"
    digest_uppercase: bool = False
    transport: TransportSettings = Field(default_factory=TransportSettings)

    @field_validator("concurrency_budget", mode="before")
    @classmethod
    def _reject_bool_budget(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("concurrency_budget must be an integer, not a boolean")
        return value

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {value}") from exc
        return value


__all__ = ["DEFAULT_USER_AGENT", "DrainPolicy", "FetchSettings", "TransportSettings"]

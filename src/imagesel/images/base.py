"""Base selector interface and request parameter types."""

from __future__ import annotations

import abc
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_IMAGE = "default"


class SelectorError(Exception):
    """Raised when an image selector cannot be constructed."""


class Params(BaseModel):
    """Selection criteria taken from a build request."""

    model_config = ConfigDict(frozen=True)

    dist: str = ""
    group: str = ""
    os: str = ""

    @field_validator("dist", "group", "os", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Optional[str]) -> str:
        if value is None:
            return ""
        return value


class Selector(Protocol):
    """Protocol implemented by every image selector."""

    @abc.abstractmethod
    def select(self, params: Params) -> str:
        """Return the image name to use for a build with the given params."""
        ...

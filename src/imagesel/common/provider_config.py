"""Provider-scoped key/value configuration.

A provider config is a flat string mapping (``IMAGE_DEFAULT``,
``IMAGE_DIST_JAMMY`` ...) read from the process environment, a YAML file, or
handed over directly. Selectors consume it through :meth:`ProviderConfig.each`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import structlog
import yaml

LOGGER = structlog.get_logger("imagesel.common.provider_config")

ENV_NAMESPACE = "IMAGESEL_"


class ProviderConfigError(Exception):
    """Raised when a provider configuration file is invalid."""


def provider_env_prefix(provider: str) -> str:
    return provider.strip().upper().replace("-", "_") + "_"


class ProviderConfig:
    """Flat string configuration for a single provider."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ProviderConfig":
        return cls({str(key): _stringify(key, value) for key, value in payload.items()})

    @classmethod
    def from_environ(
        cls,
        provider: str,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ProviderConfig":
        """Collect ``IMAGESEL_<PROVIDER>_*`` and ``<PROVIDER>_*`` variables.

        The namespaced form wins when both spellings define the same key.
        """

        if environ is None:
            environ = os.environ
        bare_prefix = provider_env_prefix(provider)
        namespaced_prefix = ENV_NAMESPACE + bare_prefix

        bare: dict[str, str] = {}
        namespaced: dict[str, str] = {}
        for name, value in environ.items():
            if name.startswith(namespaced_prefix):
                namespaced[name[len(namespaced_prefix):]] = value
            elif name.startswith(bare_prefix):
                bare[name[len(bare_prefix):]] = value

        values = {**bare, **namespaced}
        values.pop("", None)
        LOGGER.debug("Loaded provider config from environment", provider=provider, keys=len(values))
        return cls(values)

    @classmethod
    def from_file(cls, path: Path) -> "ProviderConfig":
        if not path.exists():
            raise FileNotFoundError(f"Provider config file not found at {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ProviderConfigError(f"Cannot read provider config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ProviderConfigError(f"Invalid YAML in provider config file {path}: {exc}") from exc
        if data is None:
            LOGGER.info("Loaded empty provider config", path=str(path))
            return cls()
        if not isinstance(data, dict):
            raise ProviderConfigError("Provider config file must contain a mapping at the top level")
        config = cls.from_mapping(data)
        LOGGER.info("Loaded provider config", path=str(path), keys=len(config))
        return config

    def each(self, callback: Callable[[str, str], None]) -> None:
        """Invoke ``callback(key, value)`` for every entry, in key order."""

        for key in sorted(self._values):
            callback(key, self._values[key])

    def get(self, key: str) -> str:
        return self._values.get(key, "")

    def is_set(self, key: str) -> bool:
        return key in self._values

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def unset(self, key: str) -> None:
        self._values.pop(key, None)

    def merged(self, other: "ProviderConfig") -> "ProviderConfig":
        return ProviderConfig({**self._values, **other._values})

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ProviderConfig(keys={sorted(self._values)!r})"


def _stringify(key: Any, value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set)):
        raise ProviderConfigError(f"Provider config value for {key!r} must be a scalar, got {type(value).__name__}")
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

"""Image selection for build requests.

Selectors map build params (dist, group, os) onto the name of the image a
build should run on.
"""

from typing import Callable

from .base import DEFAULT_IMAGE, Params, Selector, SelectorError
from .env import ConfigSource, EnvSelector, build_lookup, candidate_keys, normalize_key

# Registry of all available selectors
SELECTORS: dict[str, Callable[[ConfigSource], Selector]] = {
    "env": EnvSelector,
}


def build_selector(name: str, config: ConfigSource) -> Selector:
    """Construct the selector registered under ``name``."""

    try:
        factory = SELECTORS[name]
    except KeyError:
        raise SelectorError(
            f"unknown image selector {name!r} (available: {', '.join(sorted(SELECTORS))})"
        ) from None
    return factory(config)


__all__ = [
    "DEFAULT_IMAGE",
    "SELECTORS",
    "ConfigSource",
    "EnvSelector",
    "Params",
    "Selector",
    "SelectorError",
    "build_lookup",
    "build_selector",
    "candidate_keys",
    "normalize_key",
]

"""Environment-style image selection.

Image names are looked up in a flat table built from ``IMAGE_*`` provider
configuration keys. Candidate keys derived from the build params are probed
from most to least specific, and the winning value may name one alias that is
resolved with a single extra lookup.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping, Protocol

import structlog

from .base import DEFAULT_IMAGE, Params

LOGGER = structlog.get_logger("imagesel.images.env")

IMAGE_PREFIX = "IMAGE_"
POWER_GROUP_KEY = "group_power_"
POWER_GROUP_REPLACEMENT = "group_power-"


class ConfigSource(Protocol):
    def each(self, callback: Callable[[str, str], None]) -> None: ...


def normalize_key(key: str) -> str:
    """Restore the hyphen in power group keys.

    Environment variable names cannot carry ``-``, yet groups such as
    ``power-small`` need one. Only the first ``group_power_`` is rewritten.
    """

    if POWER_GROUP_KEY in key:
        return key.replace(POWER_GROUP_KEY, POWER_GROUP_REPLACEMENT, 1)
    return key


def build_lookup(config: ConfigSource) -> Mapping[str, str]:
    """Build the read-only lookup table from ``IMAGE_*`` config entries."""

    lookup: dict[str, str] = {}

    def _collect(key: str, value: str) -> None:
        if not key.startswith(IMAGE_PREFIX):
            return
        lookup[normalize_key(key[len(IMAGE_PREFIX):].lower())] = value

    config.each(_collect)
    return MappingProxyType(lookup)


def candidate_keys(params: Params) -> list[str]:
    """Return the lookup keys for ``params``, most specific first.

    Index 0 is always the empty key; it never matches and is skipped.
    """

    full_key: list[str] = []
    candidates: list[str] = []

    has_dist = params.dist != ""
    has_group = params.group != ""
    has_os = params.os != ""

    if has_dist and has_group:
        candidates.append(f"dist_{params.dist}_group_{params.group}")
        candidates.append(f"{params.dist}_{params.group}")

    if has_dist:
        candidates.append(f"dist_{params.dist}")
        candidates.append(params.dist)

    if has_group:
        candidates.append(f"group_{params.group}")
        candidates.append(params.group)

    if has_os:
        candidates.append(f"os_{params.os}")
        candidates.append(params.os)

    return ["_".join(full_key), *candidates]


class EnvSelector:
    """Selector backed by ``IMAGE_*`` provider configuration."""

    def __init__(self, config: ConfigSource) -> None:
        self._lookup = build_lookup(config)
        LOGGER.debug("Image lookup table built", entries=len(self._lookup))

    @property
    def lookup(self) -> Mapping[str, str]:
        return self._lookup

    def select(self, params: Params) -> str:
        image_name = DEFAULT_IMAGE
        matched_key = None

        for key in candidate_keys(params):
            if key == "":
                continue
            if key in self._lookup:
                image_name = self._lookup[key]
                matched_key = key
                break

        # one level of indirection only
        aliased = image_name in self._lookup
        if aliased:
            image_name = self._lookup[image_name]

        LOGGER.debug(
            "Image selected",
            dist=params.dist,
            group=params.group,
            os=params.os,
            matched_key=matched_key,
            aliased=aliased,
            image=image_name,
        )
        return image_name

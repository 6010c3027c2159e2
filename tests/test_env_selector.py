from __future__ import annotations

import pytest

from imagesel.common.provider_config import ProviderConfig
from imagesel.images import DEFAULT_IMAGE, EnvSelector, Params, build_lookup, candidate_keys, normalize_key


def _selector(**values: str) -> EnvSelector:
    return EnvSelector(ProviderConfig(values))


def test_build_lookup_skips_keys_without_prefix():
    lookup = build_lookup(ProviderConfig({"IMAGE_DIST_TRUSTY": "trusty-img", "FOO_BAR": "x", "image_lower": "y"}))
    assert dict(lookup) == {"dist_trusty": "trusty-img"}


def test_build_lookup_lowercases_and_strips_prefix():
    lookup = build_lookup(ProviderConfig({"IMAGE_DIST_TRUSTY_GROUP_EDGE": "edge-img", "IMAGE_DEFAULT": "base"}))
    assert lookup["dist_trusty_group_edge"] == "edge-img"
    assert lookup["default"] == "base"


def test_build_lookup_only_strips_leading_prefix():
    lookup = build_lookup(ProviderConfig({"IMAGE_GROUP_IMAGE_X": "img"}))
    assert dict(lookup) == {"group_image_x": "img"}


def test_build_lookup_rewrites_power_group():
    lookup = build_lookup(ProviderConfig({"IMAGE_GROUP_POWER_SMALL": "ppc-img"}))
    assert dict(lookup) == {"group_power-small": "ppc-img"}


def test_build_lookup_empty_source():
    assert dict(build_lookup(ProviderConfig())) == {}


def test_build_lookup_last_write_wins():
    class _Source:
        def each(self, callback):
            callback("IMAGE_OS_LINUX", "first")
            callback("IMAGE_OS_LINUX", "second")

    assert build_lookup(_Source())["os_linux"] == "second"


def test_lookup_is_read_only():
    selector = _selector(IMAGE_DEFAULT="base")
    with pytest.raises(TypeError):
        selector.lookup["default"] = "other"  # type: ignore[index]


def test_lookup_not_affected_by_later_config_changes():
    config = ProviderConfig({"IMAGE_DEFAULT": "base"})
    selector = EnvSelector(config)
    config.set("IMAGE_DEFAULT", "changed")
    assert selector.select(Params()) == "base"


def test_normalize_key_first_occurrence_only():
    assert normalize_key("group_power_small") == "group_power-small"
    assert normalize_key("group_power_group_power_x") == "group_power-group_power_x"
    assert normalize_key("group_edge") == "group_edge"


def test_candidate_keys_full_params():
    keys = candidate_keys(Params(dist="trusty", group="edge", os="linux"))
    assert keys == [
        "",
        "dist_trusty_group_edge",
        "trusty_edge",
        "dist_trusty",
        "trusty",
        "group_edge",
        "edge",
        "os_linux",
        "linux",
    ]


def test_candidate_keys_partial_params():
    assert candidate_keys(Params(group="edge")) == ["", "group_edge", "edge"]
    assert candidate_keys(Params(dist="xenial", os="linux")) == ["", "dist_xenial", "xenial", "os_linux", "linux"]
    assert candidate_keys(Params()) == [""]


def test_params_coerce_none_to_empty():
    params = Params(dist=None, group="edge", os=None)
    assert params.dist == ""
    assert params.os == ""
    assert candidate_keys(params) == ["", "group_edge", "edge"]


def test_select_defaults_without_config():
    assert _selector().select(Params(dist="trusty", group="edge", os="linux")) == DEFAULT_IMAGE


def test_select_empty_params_returns_default():
    assert _selector(IMAGE_OS_LINUX="linux-img").select(Params()) == "default"


def test_select_empty_params_uses_default_entry():
    assert _selector(IMAGE_DEFAULT="base-img").select(Params()) == "base-img"


def test_select_default_entry_is_the_only_hop():
    selector = _selector(IMAGE_DEFAULT="xenial", IMAGE_XENIAL="travisci/ci-xenial:2024")
    assert selector.select(Params(os="osx")) == "xenial"
    assert selector.select(Params(dist="xenial")) == "travisci/ci-xenial:2024"


def test_select_most_specific_match_wins():
    selector = _selector(IMAGE_DIST_TRUSTY_GROUP_FOO="imgA", IMAGE_TRUSTY="imgB")
    assert selector.select(Params(dist="trusty", group="foo")) == "imgA"


def test_select_precedence_across_tiers():
    selector = _selector(
        IMAGE_TRUSTY_EDGE="combined-bare",
        IMAGE_DIST_TRUSTY="dist-prefixed",
        IMAGE_GROUP_EDGE="group-prefixed",
        IMAGE_OS_LINUX="os-prefixed",
    )
    assert selector.select(Params(dist="trusty", group="edge", os="linux")) == "combined-bare"
    assert selector.select(Params(dist="trusty", group="stable", os="linux")) == "dist-prefixed"
    assert selector.select(Params(dist="precise", group="edge", os="linux")) == "group-prefixed"
    assert selector.select(Params(dist="precise", group="stable", os="linux")) == "os-prefixed"


def test_select_prefixed_form_beats_bare_form():
    selector = _selector(IMAGE_GROUP_EDGE="prefixed", IMAGE_EDGE="bare")
    assert selector.select(Params(group="edge")) == "prefixed"


def test_select_applies_alias_hop():
    selector = _selector(IMAGE_IMGALIAS="imgReal", IMAGE_GROUP_BAR="imgalias")
    assert selector.select(Params(group="bar")) == "imgReal"


def test_select_alias_hop_is_not_chained():
    selector = _selector(
        IMAGE_GROUP_BAR="img_alias",
        IMAGE_IMG_ALIAS="img_chain2",
        IMAGE_IMG_CHAIN2="img_chain3",
    )
    assert selector.select(Params(group="bar")) == "img_chain2"


def test_select_power_group():
    selector = _selector(IMAGE_GROUP_POWER_SMALL="ppc64le-img", IMAGE_DEFAULT="base")
    assert selector.select(Params(group="power-small")) == "ppc64le-img"
    assert selector.select(Params(group="power_small")) == "base"


def test_select_is_case_sensitive_on_params():
    selector = _selector(IMAGE_DIST_TRUSTY="trusty-img")
    assert selector.select(Params(dist="Trusty")) == "default"

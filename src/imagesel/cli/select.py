"""CLI for resolving build images from provider configuration."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

from ..common.observability import configure_logging
from ..common.provider_config import ProviderConfig, ProviderConfigError
from ..common.settings import SelectorSettings, load_provider_config
from ..images import Params, SelectorError, build_selector, candidate_keys


def _add_params_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dist", default="", help="Distribution requested by the build")
    parser.add_argument("--group", default="", help="Group/tag requested by the build")
    parser.add_argument("--os", default="", help="Operating system requested by the build")


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--provider", help="Provider whose environment variables are read")
    parser.add_argument("--config", type=Path, help="YAML file with IMAGE_* mappings")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve build images from IMAGE_* configuration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    select_parser = subparsers.add_parser("select", help="Resolve the image for a build")
    _add_params_arguments(select_parser)
    _add_source_arguments(select_parser)
    select_parser.add_argument("--json", action="store_true", help="Output JSON")

    candidates_parser = subparsers.add_parser("candidates", help="List lookup keys in probe order")
    _add_params_arguments(candidates_parser)
    candidates_parser.add_argument("--json", action="store_true", help="Output JSON")

    table_parser = subparsers.add_parser("table", help="Show the normalized lookup table")
    _add_source_arguments(table_parser)
    table_parser.add_argument("--json", action="store_true", help="Output JSON")

    return parser.parse_args(argv)


def _params_from_args(args: argparse.Namespace) -> Params:
    return Params(dist=args.dist, group=args.group, os=args.os)


def _load_config(
    args: argparse.Namespace,
    settings: SelectorSettings,
    environ: Optional[Mapping[str, str]],
) -> ProviderConfig:
    update: dict[str, Any] = {}
    if args.provider:
        update["provider"] = args.provider.strip().lower()
    if args.config:
        update["image_config_path"] = args.config
    if update:
        settings = settings.model_copy(update=update)
    return load_provider_config(settings, environ)


def select_command(
    args: argparse.Namespace,
    settings: SelectorSettings,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    config = _load_config(args, settings, environ)
    selector = build_selector(settings.selector, config)
    params = _params_from_args(args)
    image = selector.select(params)
    if args.json:
        print(json.dumps({"params": params.model_dump(), "image": image}, indent=2))
    else:
        print(image)
    return 0


def candidates_command(args: argparse.Namespace) -> int:
    keys = candidate_keys(_params_from_args(args))
    if args.json:
        print(json.dumps(keys, indent=2))
    else:
        for key in keys:
            if key:
                print(key)
    return 0


def table_command(
    args: argparse.Namespace,
    settings: SelectorSettings,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    selector = build_selector(settings.selector, _load_config(args, settings, environ))
    lookup = getattr(selector, "lookup", None)
    if lookup is None:
        raise SelectorError(f"image selector {settings.selector!r} does not expose a lookup table")
    if args.json:
        print(json.dumps(dict(sorted(lookup.items())), indent=2))
        return 0
    if not lookup:
        print("No IMAGE_* entries configured")
        return 0
    width = max(len(key) for key in lookup)
    for key, value in sorted(lookup.items()):
        print(f"{key.ljust(width)}  {value}")
    return 0


def run(
    argv: list[str],
    settings: Optional[SelectorSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    args = parse_args(argv)
    if settings is None:
        settings = SelectorSettings()
    configure_logging("imagesel", settings.log_level)

    try:
        if args.command == "select":
            return select_command(args, settings, environ)
        if args.command == "candidates":
            return candidates_command(args)
        return table_command(args, settings, environ)
    except (ProviderConfigError, SelectorError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


def main(argv: list[str] | None = None) -> int:
    return run(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    sys.exit(main())

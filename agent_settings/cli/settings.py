"""agent-settings CLI entrypoint.

Subcommands: show, get, explain.

Resolves the four settings layers the same way the agent does at startup and
prints the result as JSON. Secrets are redacted in ``show`` and ``explain``.

Exit codes: 0 ok, 1 key not set, 2 resolution or coercion error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, Optional, TextIO

from agent_settings.accessor import COERCERS
from agent_settings.adapters.telemetry.jsonl import JsonlTelemetry
from agent_settings.adapters.telemetry.logger import LoggingTelemetry
from agent_settings.errors import SettingsError
from agent_settings.models import REDACTED, SECRET_KEYS
from agent_settings.ports.telemetry import Telemetry
from agent_settings.resolver import ResolvedSettings, SettingsResolver
from agent_settings.sources.properties import SYSTEM_PROPERTIES, PropertyTable
from agent_settings.types import SettingKey, SettingValue, SourceLayer

TYPE_NAMES: dict[str, type] = {"bool": bool, "int": int, "str": str, "list": list}
EXIT_OK = 0
EXIT_NOT_SET = 1
EXIT_ERROR = 2

_MISSING = object()


def build_parser() -> argparse.ArgumentParser:
    """
    Return the top-level CLI argument parser.
    """
    p = argparse.ArgumentParser(prog="agent-settings")
    sub = p.add_subparsers(dest="command", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        """Add arguments shared across all subcommands."""
        sp.add_argument("--config", type=Path, required=False, help="Path to newrelic.yml")
        sp.add_argument("--environment", help="newrelic.yml section overlaid on 'common'")
        sp.add_argument("--env-file", type=Path, help=".env file beneath the real environment")
        sp.add_argument(
            "-D",
            "--property",
            dest="properties",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Set a system property, e.g. newrelic.config.app_name=X (may be repeated)",
        )
        sp.add_argument("--events", type=Path, help="Write resolver events to this JSONL file")
        sp.add_argument("--log-level", default="WARNING", help="Python logging level")

    show = sub.add_parser("show", help="Print the effective settings with provenance")
    add_common(show)

    get = sub.add_parser("get", help="Print one typed setting")
    add_common(get)
    get.add_argument("key")
    get.add_argument("--type", dest="value_type", choices=sorted(TYPE_NAMES), default="str")
    get.add_argument("--default", help="Value used when the key is not set")

    explain = sub.add_parser("explain", help="Print every layer's value for one setting")
    add_common(explain)
    explain.add_argument("key")
    return p


def _telemetry_for(events: Optional[Path]) -> Telemetry:
    if events is None:
        return LoggingTelemetry()
    return JsonlTelemetry(run_id=str(uuid.uuid4()), sink_path=events)


def _is_secret(key: SettingKey) -> bool:
    return key.path in SECRET_KEYS


def _show(resolved: ResolvedSettings) -> dict[str, Any]:
    settings = {
        str(key): {
            "value": resolved.redacted_config[str(key)],
            "layer": value.layer.label,
        }
        for key, value in resolved.effective.items()
    }
    return {
        "config_hash": resolved.config_hash,
        "config_keys_total": resolved.config_keys_total,
        "redacted_count": resolved.redacted_count,
        "layer_counts": resolved.effective.layer_counts(),
        "dropped_keys": {layer: list(names) for layer, names in resolved.dropped_keys.items()},
        "settings": settings,
    }


def _emit(payload: Any, out: TextIO) -> None:
    out.write(json.dumps(payload, indent=2, sort_keys=True) + "\n")


def run(
    args: argparse.Namespace, *, out: Optional[TextIO] = None, err: Optional[TextIO] = None
) -> int:
    """Resolve settings and execute one subcommand."""
    out = out or sys.stdout
    err = err or sys.stderr
    table = PropertyTable(SYSTEM_PROPERTIES.snapshot())
    try:
        table.update_from_args(args.properties)
    except ValueError as exc:
        print(str(exc), file=err)
        return EXIT_ERROR

    resolver = SettingsResolver.from_process(
        args.config,
        environment=args.environment,
        dotenv_path=args.env_file,
        properties=table,
        telemetry=_telemetry_for(args.events),
    )
    try:
        resolved = resolver.load()
    except SettingsError as exc:
        print(f"Settings resolution failed: {exc}", file=err)
        return EXIT_ERROR

    if args.command == "show":
        _emit(_show(resolved), out)
        return EXIT_OK

    try:
        key = SettingKey.of(args.key)
        if args.command == "get":
            value_type = TYPE_NAMES[args.value_type]
            value = resolver.get(key, value_type, _MISSING)
            if value is _MISSING:
                if args.default is None:
                    print(f"Setting '{key}' is not set", file=err)
                    return EXIT_NOT_SET
                fallback = SettingValue.from_raw(args.default, SourceLayer.DEFAULT, origin="cli")
                value = COERCERS[value_type](key, fallback)
            _emit(value, out)
            return EXIT_OK

        candidates = resolver.explain(key)
    except SettingsError as exc:
        print(str(exc), file=err)
        return EXIT_ERROR

    if not candidates:
        print(f"Setting '{key}' is not set in any layer", file=err)
        return EXIT_NOT_SET
    _emit(
        [
            {
                "layer": candidate.layer.label,
                "origin": candidate.origin,
                "value": REDACTED if _is_secret(key) else candidate.to_python(),
                "effective": index == 0,
            }
            for index, candidate in enumerate(candidates)
        ],
        out,
    )
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint wrapper compatible with setuptools scripts."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    return run(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

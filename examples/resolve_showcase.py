#!/usr/bin/env python3
"""
Layered Settings - End-to-End Showcase

Resolves examples/newrelic.yml together with system properties and
environment variables, then walks through typed access, provenance,
explain and reload.

Usage:
    python examples/resolve_showcase.py
"""

from __future__ import annotations

from pathlib import Path

from agent_settings import (
    DefaultReader,
    EnvironmentReader,
    FileReader,
    PropertyTable,
    SettingsResolver,
    SystemPropertyReader,
    TypeMismatchError,
)

SAMPLE_FILE = Path(__file__).with_name("newrelic.yml")


def build_resolver(properties: PropertyTable, environ: dict[str, str]) -> SettingsResolver:
    return SettingsResolver(
        DefaultReader(),
        FileReader(SAMPLE_FILE, environment="production"),
        SystemPropertyReader(properties),
        EnvironmentReader(environ),
    )


def main() -> None:
    print("=" * 70)
    print("LAYERED SETTINGS - END-TO-END SHOWCASE")
    print("=" * 70)

    properties = PropertyTable({"newrelic.config.span_events.max_samples_stored": "1500"})
    environ = {
        "NEW_RELIC_APPLICATION_LOGGING_ENABLED": "FALSE",
        "NEW_RELIC_ATTRIBUTES_EXCLUDE": "request.uri, response.body",
        "NEW_RELIC_NOT_A_SETTING": "ignored",
    }
    resolver = build_resolver(properties, environ)

    # =========================================================================
    # STEP 1: Load
    # =========================================================================
    print("\n" + "=" * 70)
    print("STEP 1: Load")
    print("=" * 70)
    resolved = resolver.load()
    print(f"Keys resolved:  {resolved.config_keys_total}")
    print(f"Config hash:    {resolved.config_hash[:16]}...")
    print(f"Secrets masked: {resolved.redacted_count}")
    print(f"Layer counts:   {resolved.effective.layer_counts()}")
    print(f"Dropped keys:   {dict(resolved.dropped_keys)}")

    # =========================================================================
    # STEP 2: Typed access
    # =========================================================================
    print("\n" + "=" * 70)
    print("STEP 2: Typed access")
    print("=" * 70)
    lookups = [
        ("app_name", str, None),
        ("transaction_events.max_samples_stored", int, None),
        ("span_events.max_samples_stored", int, None),
        ("application_logging.enabled", bool, None),
        ("attributes.exclude", list, None),
        ("proxy_host", str, "<unset>"),
    ]
    for key, expected_type, default in lookups:
        value = resolver.get(key, expected_type, default)
        layer = resolver.config.provenance(key)
        source = layer.label if layer is not None else "caller default"
        print(f"  {key:<42} {value!r:<40} [{source}]")

    # =========================================================================
    # STEP 3: Explain
    # =========================================================================
    print("\n" + "=" * 70)
    print("STEP 3: Explain transaction_events.max_samples_stored")
    print("=" * 70)
    for index, candidate in enumerate(resolver.explain("transaction_events.max_samples_stored")):
        marker = "*" if index == 0 else " "
        print(f"  {marker} {candidate.layer.label:<16} {candidate.value!r:<8} {candidate.origin}")

    # =========================================================================
    # STEP 4: Reload
    # =========================================================================
    print("\n" + "=" * 70)
    print("STEP 4: Reload after an environment change")
    print("=" * 70)
    environ["NEW_RELIC_TRANSACTION_EVENTS_MAX_SAMPLES_STORED"] = "oops"
    reloaded = resolver.reload()
    print(f"Hash changed: {reloaded.config_hash != resolved.config_hash}")
    try:
        resolver.get("transaction_events.max_samples_stored", int)
    except TypeMismatchError as exc:
        print(f"Type mismatch reported: {exc}")

    print("\n" + "=" * 70)
    print("SHOWCASE COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()

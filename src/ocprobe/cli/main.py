# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""ocprobe CLI."""

import argparse
import json
import sys
from typing import Any

from ..config import ProbeSettings, load_probe_settings
from ..errors import error_category_to_reason
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import ProbeOutcome, ProbeResultCode
from ..runtime import OcProbe

_CODE_LABELS: dict[ProbeResultCode, str] = {
    ProbeResultCode.OK_SSL: "valid server, secure connection",
    ProbeResultCode.OK_NO_SSL: "valid server, NON secure connection",
    ProbeResultCode.OK_REDIRECT_TO_NON_SECURE_CONNECTION: "valid server, redirected to a NON secure connection",
    ProbeResultCode.INSTANCE_NOT_CONFIGURED: "not a configured server instance",
    ProbeResultCode.TRANSPORT_ERROR: "server not reachable",
    ProbeResultCode.SSL_ERROR: "secure connection failed",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check whether a location serves a valid cloud-storage status endpoint")
    parser.add_argument("target", help="Server location, with or without http:// or https://")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed servers)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Connect and read timeout in seconds")
    parser.add_argument("--max-redirects", type=int, default=None, help="Maximum redirects to follow")
    parser.add_argument(
        "--no-ssl-fallback",
        action="store_true",
        help="Do not retry over http after a TLS handshake failure",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: OCPROBE_LOG_LEVEL or WARNING)")
    return parser


def apply_arguments(settings: ProbeSettings, args: argparse.Namespace) -> ProbeSettings:
    if args.ignore_ssl_errors:
        settings.verify_ssl = False
    if args.timeout is not None and args.timeout > 0:
        settings.connect_timeout = args.timeout
        settings.read_timeout = args.timeout
    if args.max_redirects is not None and args.max_redirects >= 0:
        settings.max_redirects = args.max_redirects
    if args.no_ssl_fallback:
        settings.fallback_on_ssl_error = False
    return settings


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(outcome: ProbeOutcome) -> None:
    label = _CODE_LABELS.get(outcome.code, outcome.code.value)
    print(f"[ocprobe] Result: {outcome.code.value} ({label})")
    if outcome.location:
        print(f"Location: {outcome.location}")
    if outcome.version is not None:
        validity = "" if outcome.version.is_valid else " (unrecognised format)"
        print(f"Version: {outcome.version}{validity}")
    if outcome.status is not None and outcome.status.product_name:
        edition = f" {outcome.status.edition}" if outcome.status.edition else ""
        print(f"Product: {outcome.status.product_name}{edition}")
    if len(outcome.hops) > 1:
        print("Redirects:")
        for hop in outcome.hops:
            print(f"- {hop.location} -> {hop.status_code}")
    if not outcome.is_success:
        reason = outcome.error_message or error_category_to_reason(outcome.error_category)
        if reason:
            print(f"Reason: {reason}")
    if outcome.secure_handshake_failed:
        print("Warning: the secure handshake failed before falling back to http")
    if outcome.fallback is not None:
        print(f"Non secure retry: {outcome.fallback.code.value}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = apply_arguments(load_probe_settings(), args)
    http_client = create_default_http_client(settings)

    with OcProbe(http_client=http_client, settings=settings) as probe:
        outcome = probe.discover(args.target)

    if args.json:
        _print_json(outcome)
    else:
        _pretty_print(outcome)

    return 0 if outcome.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())

# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import threading

import pytest

from ocprobe.config import ProbeSettings
from ocprobe.errors import ErrorCategory
from ocprobe.http.adapters import StubHttpClient
from ocprobe.http.models import HttpRequest, HttpResponse
from ocprobe.models import ProbeResultCode
from ocprobe.status.prober import StatusProber
from ocprobe.utils.version import parse_server_version

VALID_STATUS = {"installed": True, "version": "10.5.0", "productname": "ownCloud", "edition": "Community"}


def ok_status(payload=None, status_code=200):
    return HttpResponse(ok=True, status_code=status_code, text=json.dumps(payload or VALID_STATUS))


def redirect_to(location, status_code=302):
    return HttpResponse(ok=True, status_code=status_code, headers={"location": location})


def failure(category, message="boom"):
    return HttpResponse(ok=False, error_category=category.value, error_message=message, error_type="ConnectError")


def make_prober(responses, **settings_overrides):
    client = StubHttpClient(dict(responses))
    return StatusProber(client, ProbeSettings(**settings_overrides)), client


def test_secure_success_skips_insecure_attempt():
    prober, client = make_prober({"https://cloud.example.com/status.php": ok_status()})

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_SSL
    assert str(outcome.version) == "10.5.0"
    assert outcome.status.product_name == "ownCloud"
    assert outcome.location == "https://cloud.example.com"
    assert client.requested_urls == ["https://cloud.example.com/status.php"]


def test_secure_timeout_falls_back_to_insecure():
    prober, client = make_prober(
        {
            "https://cloud.example.com/status.php": failure(ErrorCategory.TIMEOUT, "timed out"),
            "http://cloud.example.com/status.php": ok_status(),
        }
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_NO_SSL
    assert outcome.secure_handshake_failed is False
    assert client.requested_urls == [
        "https://cloud.example.com/status.php",
        "http://cloud.example.com/status.php",
    ]


def test_redirect_to_insecure_location_is_flagged():
    prober, _ = make_prober(
        {
            "https://cloud.example.com/status.php": redirect_to("http://cloud.example.com/new", 301),
            "http://cloud.example.com/new/status.php": ok_status(),
        }
    )

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_REDIRECT_TO_NON_SECURE_CONNECTION
    assert outcome.location == "http://cloud.example.com/new"
    assert [hop.status_code for hop in outcome.hops] == [301, 200]
    assert outcome.hops[0].redirect_target == "http://cloud.example.com/new"


def test_downgrade_flag_survives_later_upgrade():
    prober, _ = make_prober(
        {
            "https://cloud.example.com/status.php": redirect_to("http://cloud.example.com/a"),
            "http://cloud.example.com/a/status.php": redirect_to("https://cloud.example.com/b"),
            "https://cloud.example.com/b/status.php": ok_status(),
        }
    )

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_REDIRECT_TO_NON_SECURE_CONNECTION
    assert outcome.location == "https://cloud.example.com/b"


def test_upgrade_to_secure_is_not_a_downgrade():
    prober, _ = make_prober(
        {
            "http://cloud.example.com/status.php": redirect_to("https://cloud.example.com"),
            "https://cloud.example.com/status.php": ok_status(),
        }
    )

    outcome = prober.discover("http://cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_SSL


def test_path_only_redirect_keeps_scheme_host_and_port():
    prober, client = make_prober(
        {
            "https://cloud.example.com:8443/status.php": redirect_to("/owncloud"),
            "https://cloud.example.com:8443/owncloud/status.php": ok_status(),
        }
    )

    outcome = prober.discover("https://cloud.example.com:8443")

    assert outcome.code == ProbeResultCode.OK_SSL
    assert client.requested_urls[-1] == "https://cloud.example.com:8443/owncloud/status.php"


def test_uninstalled_instance_is_not_the_expected_service():
    prober, _ = make_prober({"https://cloud.example.com/status.php": ok_status({"installed": False, "version": "x"})})

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.INSTANCE_NOT_CONFIGURED
    assert outcome.version is None
    assert outcome.http_status == 200


def test_malformed_payload_is_not_the_expected_service():
    prober, _ = make_prober(
        {"https://cloud.example.com/status.php": HttpResponse(ok=True, status_code=200, text="<html>hello</html>")}
    )

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.INSTANCE_NOT_CONFIGURED
    assert outcome.error_type == "StatusPayloadError"


def test_malformed_version_still_succeeds():
    prober, _ = make_prober(
        {"https://cloud.example.com/status.php": ok_status({"installed": True, "version": "not-a-version"})}
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_SSL
    assert outcome.version.is_valid is False
    assert str(outcome.version) == "not-a-version"


def test_explicit_scheme_is_tried_once():
    prober, client = make_prober(
        {
            "https://cloud.example.com/status.php": failure(ErrorCategory.TIMEOUT),
            "http://cloud.example.com/status.php": ok_status(),
        }
    )

    outcome = prober.discover("https://cloud.example.com/")

    assert outcome.code == ProbeResultCode.TRANSPORT_ERROR
    assert outcome.error_category == ErrorCategory.TIMEOUT.value
    assert client.requested_urls == ["https://cloud.example.com/status.php"]


def test_handshake_failure_then_insecure_success_is_reported():
    prober, _ = make_prober(
        {
            "https://cloud.example.com/status.php": failure(ErrorCategory.SSL_ERROR, "WRONG_VERSION_NUMBER"),
            "http://cloud.example.com/status.php": ok_status(),
        }
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_NO_SSL
    assert outcome.secure_handshake_failed is True


def test_handshake_failure_is_kept_when_insecure_attempt_also_fails():
    prober, client = make_prober(
        {
            "https://cloud.example.com/status.php": failure(ErrorCategory.SSL_ERROR, "CERTIFICATE_VERIFY_FAILED"),
            "http://cloud.example.com/status.php": failure(ErrorCategory.CONNECTION_ERROR, "refused"),
        }
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.SSL_ERROR
    assert outcome.secure_handshake_failed is True
    assert outcome.fallback is not None
    assert outcome.fallback.code == ProbeResultCode.TRANSPORT_ERROR
    assert len(client.requests) == 2


def test_handshake_failure_without_fallback_stops():
    prober, client = make_prober(
        {"https://cloud.example.com/status.php": failure(ErrorCategory.SSL_ERROR)},
        fallback_on_ssl_error=False,
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.SSL_ERROR
    assert outcome.fallback is None
    assert len(client.requests) == 1


def test_secure_redirect_to_insecure_success_skips_fallback():
    prober, client = make_prober(
        {
            "https://cloud.example.com/status.php": redirect_to("http://cloud.example.com"),
            "http://cloud.example.com/status.php": ok_status(),
        }
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_REDIRECT_TO_NON_SECURE_CONNECTION
    assert len(client.requests) == 2


def test_http_error_without_redirect_ends_chain():
    prober, _ = make_prober(
        {
            "https://cloud.example.com/status.php": HttpResponse(ok=True, status_code=404, text="missing"),
            "http://cloud.example.com/status.php": HttpResponse(ok=True, status_code=404, text="missing"),
        }
    )

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.TRANSPORT_ERROR
    assert outcome.http_status == 404
    assert outcome.error_category == ErrorCategory.HTTP_ERROR.value
    assert outcome.location == "http://cloud.example.com"


def test_redirect_status_without_location_ends_chain():
    prober, _ = make_prober({"https://cloud.example.com/status.php": HttpResponse(ok=True, status_code=302)})

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.TRANSPORT_ERROR
    assert outcome.http_status == 302


def test_redirect_loop_is_bounded():
    prober, client = make_prober(
        {"https://cloud.example.com/status.php": redirect_to("/")},
        max_redirects=3,
    )

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.TRANSPORT_ERROR
    assert outcome.error_category == ErrorCategory.TOO_MANY_REDIRECTS.value
    assert len(client.requests) == 4
    assert len(outcome.hops) == 4


def test_cancelled_probe_issues_no_request():
    prober, client = make_prober({"https://cloud.example.com/status.php": ok_status()})
    cancel = threading.Event()
    cancel.set()

    outcome = prober.discover("cloud.example.com", cancel_event=cancel)

    assert outcome.code == ProbeResultCode.TRANSPORT_ERROR
    assert outcome.error_category == ErrorCategory.CANCELLED.value
    assert client.requests == []


def test_requests_use_short_timeouts_and_no_redirects():
    prober, client = make_prober({"https://cloud.example.com/status.php": ok_status()})

    prober.discover("cloud.example.com")

    request = client.requests[0]
    assert request.method == "GET"
    assert request.connect_timeout == 5.0
    assert request.read_timeout == 5.0
    assert request.allow_redirects is False


def test_raising_client_is_reported_as_transport_error():
    class ExplodingClient:
        def request(self, request: HttpRequest) -> HttpResponse:  # noqa: ARG002
            raise ConnectionRefusedError("refused")

        def close(self) -> None:
            return None

    prober = StatusProber(ExplodingClient(), ProbeSettings())

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == ProbeResultCode.TRANSPORT_ERROR
    assert outcome.error_category == ErrorCategory.CONNECTION_ERROR.value
    assert outcome.error_type == "ConnectionRefusedError"


def test_custom_version_parser_is_used():
    seen = []

    def parser(raw):
        seen.append(raw)
        return parse_server_version(raw)

    client = StubHttpClient({"https://cloud.example.com/status.php": ok_status()})
    prober = StatusProber(client, ProbeSettings(), version_parser=parser)

    outcome = prober.discover("cloud.example.com")

    assert outcome.is_success
    assert seen == ["10.5.0"]


@pytest.mark.parametrize(
    "body, expected",
    [
        ("[" * 200000, ProbeResultCode.INSTANCE_NOT_CONFIGURED),
        ("[]", ProbeResultCode.INSTANCE_NOT_CONFIGURED),
        ('{"installed": true, "version": null}', ProbeResultCode.INSTANCE_NOT_CONFIGURED),
        ('{"installed": true, "version": "' + "9" * 5000 + '"}', ProbeResultCode.OK_SSL),
    ],
)
def test_hostile_bodies_always_yield_an_outcome(body, expected):
    prober, _ = make_prober(
        {"https://cloud.example.com/status.php": HttpResponse(ok=True, status_code=200, text=body)}
    )

    outcome = prober.discover("https://cloud.example.com")

    assert outcome.code == expected
    if outcome.is_success:
        assert outcome.version.is_valid is False


def test_failing_version_parser_does_not_fail_the_discovery():
    def exploding(raw):  # noqa: ARG001
        raise RuntimeError("bad parser")

    client = StubHttpClient({"https://cloud.example.com/status.php": ok_status()})
    prober = StatusProber(client, ProbeSettings(), version_parser=exploding)

    outcome = prober.discover("cloud.example.com")

    assert outcome.code == ProbeResultCode.OK_SSL
    assert str(outcome.version) == "10.5.0"
    assert outcome.version.is_valid is False

"""Envelope construction and response decoding."""

import betterproto
import pytest

from pogo_rpc import (
    AuthMissingError,
    CountMismatchError,
    MalformedEnvelopeError,
    MessageCatalog,
    RequestError,
    RequestType,
    ResponseDecodeError,
)
from pogo_rpc.catalog import LogicalRequest
from pogo_rpc.models.envelope import RequestEnvelope, ResponseEnvelope, SendEncryptedSignatureRequest
from pogo_rpc.models.session import Location, Session
from pogo_rpc.transport.envelope import (
    LOCATION_FIX_AGE_MS,
    attach_signature,
    build_envelope,
    clear_platform_requests,
    decode_response,
    endpoint_from_api_url,
    pair_responses,
)

from conftest import ok, ticket

catalog = MessageCatalog()


def session_with_token() -> Session:
    session = Session(endpoint="https://bootstrap.test/rpc", request_id_seed=42)
    session.set_auth_info("ptc", "token-abc")
    return session


class TestBuildEnvelope:
    def test_uses_provider_token_without_ticket(self):
        envelope = build_envelope(session_with_token(), [catalog.request(RequestType.GET_PLAYER)])
        assert envelope.status_code == 2
        assert envelope.request_id == (705894 << 32) | 1
        assert envelope.ms_since_last_locationfix == LOCATION_FIX_AGE_MS
        assert envelope.auth_info.provider == "ptc"
        assert envelope.auth_info.token.contents == "token-abc"
        assert not betterproto.serialized_on_wire(envelope.auth_ticket)

    def test_prefers_ticket(self):
        session = session_with_token()
        session.auth_ticket = ticket()
        envelope = RequestEnvelope().parse(bytes(build_envelope(session, [catalog.request(RequestType.ECHO)])))
        assert envelope.auth_ticket.start == b"t1"
        assert not betterproto.serialized_on_wire(envelope.auth_info)

    def test_requires_some_auth(self):
        with pytest.raises(AuthMissingError):
            build_envelope(Session(), [catalog.request(RequestType.ECHO)])

    def test_sub_requests_keep_order(self):
        requests = [
            catalog.request(RequestType.GET_PLAYER),
            catalog.request(RequestType.DOWNLOAD_SETTINGS, {"hash": "abc"}),
            catalog.request(RequestType.ECHO, expect_response=False),
        ]
        envelope = build_envelope(session_with_token(), requests)
        assert [r.request_type for r in envelope.requests] == [2, 5, 666]
        assert envelope.requests[1].request_message == requests[1].payload

    def test_location_at_origin_is_sent(self):
        session = session_with_token()
        session.location = Location(latitude=0.0, longitude=0.0)
        envelope = RequestEnvelope().parse(bytes(build_envelope(session, [catalog.request(RequestType.ECHO)])))
        assert envelope.latitude == 0.0
        assert envelope.longitude == 0.0
        assert envelope.accuracy == 0.0

    def test_unset_location_is_omitted(self):
        envelope = RequestEnvelope().parse(
            bytes(build_envelope(session_with_token(), [catalog.request(RequestType.ECHO)]))
        )
        assert envelope.latitude is None
        assert envelope.longitude is None
        assert envelope.accuracy is None

    def test_signature_attachment_replaces_previous(self):
        envelope = build_envelope(session_with_token(), [catalog.request(RequestType.ECHO)])
        attach_signature(envelope, b"first")
        clear_platform_requests(envelope)
        attach_signature(envelope, b"second")
        assert len(envelope.platform_requests) == 1
        platform = envelope.platform_requests[0]
        assert platform.type == 6
        assert SendEncryptedSignatureRequest().parse(platform.request_message).encrypted_signature == b"second"


class TestDecodeResponse:
    def test_pairs_in_order(self):
        requests = [catalog.request(RequestType.GET_PLAYER), catalog.request(RequestType.GET_INVENTORY)]
        decoded = decode_response(bytes(ok(b"player", b"inventory")), requests)
        assert decoded.status_code == 1
        assert decoded.responses == [b"player", b"inventory"]
        assert decoded.endpoint is None
        assert decoded.auth_ticket is None

    def test_only_requests_with_decoder_are_paired(self):
        requests = [
            catalog.request(RequestType.ECHO, expect_response=False),
            catalog.request(RequestType.GET_PLAYER),
        ]
        assert decode_response(bytes(ok(b"player")), requests).responses == [b"player"]

    def test_count_mismatch(self):
        requests = [catalog.request(RequestType.GET_PLAYER), catalog.request(RequestType.GET_INVENTORY)]
        with pytest.raises(CountMismatchError) as exc_info:
            decode_response(bytes(ok(b"player")), requests)
        assert exc_info.value.fatal

    def test_non_success_status_skips_pairing(self):
        decoded = decode_response(bytes(ok(status=53, api_url="real.test/plfe/7")), [catalog.request(2)])
        assert decoded.responses == []
        assert decoded.endpoint == "https://real.test/plfe/7/rpc"

    def test_captures_ticket(self):
        decoded = decode_response(bytes(ok(b"x", auth_ticket=ticket(b"abc"))), [catalog.request(2)])
        assert decoded.auth_ticket.start == b"abc"
        assert decoded.auth_ticket.end == b"cba"

    def test_malformed_envelope(self):
        with pytest.raises(MalformedEnvelopeError):
            decode_response(b"\x08\xff\xff\xff", [catalog.request(2)])

    def test_server_error_is_fatal(self):
        with pytest.raises(RequestError) as exc_info:
            decode_response(bytes(ResponseEnvelope(status_code=3, error="bad things")), [catalog.request(2)])
        assert exc_info.value.code == "server_error"
        assert exc_info.value.fatal

    def test_round_trip_synthetic_responses(self):
        from pogo_rpc.models.messages import DownloadSettingsResponse, GlobalSettings, MapSettings

        settings = DownloadSettingsResponse(
            hash="h1",
            settings=GlobalSettings(map_settings=MapSettings(get_map_objects_min_refresh_seconds=10.0)),
        )
        requests = [
            catalog.request(RequestType.GET_PLAYER),
            catalog.request(RequestType.DOWNLOAD_SETTINGS, {"hash": "h0"}),
        ]
        decoded = decode_response(bytes(ok(b"\x0a\x00", bytes(settings))), requests)
        assert decoded.responses[0] == b"\x0a\x00"
        assert decoded.responses[1].hash == "h1"
        assert decoded.responses[1].settings.map_settings.get_map_objects_min_refresh_seconds == 10.0


class TestPairResponses:
    def test_decoder_failure(self):
        def broken(data: bytes):
            raise ValueError("nope")

        with pytest.raises(ResponseDecodeError) as exc_info:
            pair_responses([LogicalRequest(request_type=2, decoder=broken)], [b"x"])
        assert exc_info.value.details == {"request_type": 2}

    def test_partial_result_still_fails(self):
        class PartialError(ValueError):
            decoded = "partial"

        def partial(data: bytes):
            raise PartialError("truncated")

        requests = [LogicalRequest(request_type=2, decoder=partial), LogicalRequest(request_type=4, decoder=bytes)]
        with pytest.raises(ResponseDecodeError):
            pair_responses(requests, [b"x", b"y"])


def test_endpoint_from_api_url():
    assert endpoint_from_api_url("") is None
    assert endpoint_from_api_url("pgorelease.nianticlabs.com/plfe/123") == (
        "https://pgorelease.nianticlabs.com/plfe/123/rpc"
    )

"""Client surface: bootstrap, settings negotiation, positions, login, sync wrapper."""

import httpx
import pytest

from pogo_rpc import AuthError, CatalogError, Location, PogoClient, RequestType, RpcEvent
from pogo_rpc.auth import Authenticator, StaticTokenProvider
from pogo_rpc.config import DEFAULT_SETTINGS_HASH
from pogo_rpc.models.messages import (
    DownloadSettingsMessage,
    DownloadSettingsResponse,
    GetMapObjectsMessage,
    GlobalSettings,
    MapSettings,
    PlayerUpdateMessage,
)

from conftest import fast_options, ok, ticket


def settings_reply(min_refresh: float) -> bytes:
    return bytes(DownloadSettingsResponse(
        hash="h2",
        settings=GlobalSettings(map_settings=MapSettings(get_map_objects_min_refresh_seconds=min_refresh)),
    ))


class TestInit:
    @pytest.mark.asyncio
    async def test_bootstrap_sequence(self, server, make_client):
        client = make_client()
        server.reply(
            ok(status=53, api_url="real.test/plfe/9"),
            ok(b"player", b"eggs", b"inventory", b"badges", settings_reply(10.0), auth_ticket=ticket()),
        )
        responses = await client.init()

        assert [r.request_type for r in server.envelopes[0].requests] == [2, 126, 4, 129, 5]
        settings_request = DownloadSettingsMessage().parse(server.envelopes[0].requests[4].request_message)
        assert settings_request.hash == DEFAULT_SETTINGS_HASH

        assert client.endpoint == "https://real.test/plfe/9/rpc"
        assert client.session.auth_ticket.start == b"t1"
        assert responses[:4] == [b"player", b"eggs", b"inventory", b"badges"]
        assert responses[4].hash == "h2"
        assert client.session.min_delays[RequestType.GET_MAP_OBJECTS] == 10.0
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_settings_keep_default_delay(self, server, make_client):
        client = make_client(fast_options(map_objects_min_delay=3.0))
        server.reply(ok(b"", b"", b"", b"", b""))
        await client.init()
        assert client.session.min_delays[RequestType.GET_MAP_OBJECTS] == 3.0
        await client.close()


class TestPosition:
    @pytest.mark.asyncio
    async def test_player_update_carries_location(self, server, make_client):
        client = make_client()
        client.set_position(Location(latitude=37.8, longitude=-122.4, accuracy=5.0))
        await client.player_update()
        envelope = server.envelopes[0]
        assert envelope.accuracy == 5.0
        update = PlayerUpdateMessage().parse(envelope.requests[0].request_message)
        assert (update.latitude, update.longitude) == (37.8, -122.4)
        await client.close()

    @pytest.mark.asyncio
    async def test_map_objects_payload(self, server, make_client):
        client = make_client()
        client.set_position(37.8, -122.4)
        await client.get_map_objects([9926595610352287744, 9926595612499771392], [0, 0])
        message = GetMapObjectsMessage().parse(server.envelopes[0].requests[0].request_message)
        assert message.cell_id == [9926595610352287744, 9926595612499771392]
        assert message.latitude == 37.8
        await client.close()

    def test_longitude_required(self, make_client):
        client = make_client()
        with pytest.raises(ValueError):
            client.set_position(1.0)

    def test_operation_without_schema(self, make_client):
        client = make_client()
        with pytest.raises(CatalogError):
            client.batch().release_pokemon(123)


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_sets_token(self, server, make_client):
        client = make_client()
        token = await client.login("google", StaticTokenProvider("g-token"), "ash", "pikachu")
        assert token == "g-token"
        await client.get_player()
        assert server.envelopes[0].auth_info.provider == "google"
        assert server.envelopes[0].auth_info.token.contents == "g-token"
        await client.close()

    @pytest.mark.asyncio
    async def test_provider_failure(self):
        class Broken:
            async def authenticate(self, username, password):
                raise RuntimeError("bad password")

        with pytest.raises(AuthError):
            await Authenticator("ptc", Broken(), "ash", "nope").login()

    @pytest.mark.asyncio
    async def test_empty_token(self):
        with pytest.raises(AuthError):
            await Authenticator("ptc", StaticTokenProvider(""), "ash", "pikachu").login()


class TestSyncClient:
    def test_submit_batch(self, server):
        client = PogoClient(fast_options(), transport=httpx.MockTransport(server.handler))
        client.set_auth_info("ptc", "token-abc")
        batch = client.batch().get_player().get_inventory()
        assert client.submit(batch) == [b"r2", b"r4"]
        assert client.call([client.catalog.request(RequestType.GET_PLAYER)]) == b"r2"
        assert len(server.received) == 2
        client.close()

    def test_operation_methods_block(self, server):
        with PogoClient(fast_options(), transport=httpx.MockTransport(server.handler)) as client:
            client.set_auth_info("ptc", "token-abc")
            events = []
            client.add_event_handler(lambda event, data: events.append(event))
            assert client.get_player() == b"r2"
            client.set_position(51.5, -0.12)
            assert client.get_map_objects([1, 2], [0, 0]) == b"r106"
            assert events.count(RpcEvent.RESPONSE) == 2
        assert server.envelopes[1].latitude == 51.5

    def test_relogin_through_sync_client(self, server):
        client = PogoClient(fast_options(), transport=httpx.MockTransport(server.handler))
        client.set_auth_info("ptc", "token-abc")
        client.set_authentication("ptc", StaticTokenProvider("fresh-token"), "ash", "pikachu")
        server.reply(ok(status=102))
        assert client.get_inventory() == b"r4"
        assert server.envelopes[1].auth_info.token.contents == "fresh-token"
        client.close()
        client.close()

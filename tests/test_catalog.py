"""Message catalog: payload encoding and response decoders."""

from dataclasses import dataclass

import betterproto
import pytest

from pogo_rpc import CatalogError, MessageCatalog, RequestType
from pogo_rpc.catalog import raw_payload
from pogo_rpc.models.messages import DownloadSettingsMessage, DownloadSettingsResponse, GetMapObjectsMessage


@dataclass(eq=False, repr=False)
class PlayerAvatar(betterproto.Message):
    skin: int = betterproto.int32_field(2)
    hair: int = betterproto.int32_field(3)


@dataclass(eq=False, repr=False)
class SetAvatarMessage(betterproto.Message):
    player_avatar: PlayerAvatar = betterproto.message_field(1)


@dataclass(eq=False, repr=False)
class ReleasePokemonMessage(betterproto.Message):
    pokemon_id: int = betterproto.fixed64_field(1)


@dataclass(eq=False, repr=False)
class ReleasePokemonResponse(betterproto.Message):
    result: int = betterproto.int32_field(1)
    candy_awarded: int = betterproto.int32_field(2)


class TestEncode:
    def test_builtin_schema(self):
        catalog = MessageCatalog()
        payload = catalog.encode(RequestType.DOWNLOAD_SETTINGS, {"hash": "abc"})
        assert DownloadSettingsMessage().parse(payload).hash == "abc"

    def test_none_fields_are_dropped(self):
        catalog = MessageCatalog()
        assert catalog.encode(RequestType.GET_HATCHED_EGGS, {"anything": None}) is None
        assert catalog.encode(RequestType.GET_PLAYER, {"app_version": None}) == b""

    def test_repeated_fields(self):
        catalog = MessageCatalog()
        payload = catalog.encode(
            RequestType.GET_MAP_OBJECTS,
            {"cell_id": [1, 2, 3], "since_timestamp_ms": [0, 0, 0], "latitude": 0.0, "longitude": 0.0},
        )
        message = GetMapObjectsMessage().parse(payload)
        assert message.cell_id == [1, 2, 3]
        assert message.since_timestamp_ms == [0, 0, 0]

    def test_fields_without_schema_are_rejected(self):
        with pytest.raises(CatalogError):
            MessageCatalog().encode(RequestType.RELEASE_POKEMON, {"pokemon_id": 7})

    def test_unknown_field_is_rejected(self):
        with pytest.raises(CatalogError) as exc_info:
            MessageCatalog().encode(RequestType.DOWNLOAD_SETTINGS, {"hsah": "abc"})
        assert "hsah" in str(exc_info.value)

    def test_nested_message_from_mapping(self):
        catalog = MessageCatalog()
        catalog.register("set_avatar", SetAvatarMessage)
        payload = catalog.encode(RequestType.SET_AVATAR, {"player_avatar": {"skin": 1, "hair": 4}})
        avatar = SetAvatarMessage().parse(payload).player_avatar
        assert (avatar.skin, avatar.hair) == (1, 4)


class TestDecode:
    def test_raw_bytes_without_schema(self):
        catalog = MessageCatalog()
        assert catalog.decoder(RequestType.ECHO) is raw_payload
        assert catalog.decode(RequestType.ECHO, b"\x01\x02") == b"\x01\x02"

    def test_builtin_response_schema(self):
        data = bytes(DownloadSettingsResponse(hash="h2"))
        decoded = MessageCatalog().decode(RequestType.DOWNLOAD_SETTINGS, data)
        assert isinstance(decoded, DownloadSettingsResponse)
        assert decoded.hash == "h2"

    def test_register_by_opcode(self):
        catalog = MessageCatalog()
        catalog.register(RequestType.RELEASE_POKEMON, ReleasePokemonMessage, ReleasePokemonResponse)
        request = catalog.request(RequestType.RELEASE_POKEMON, {"pokemon_id": 99})
        assert ReleasePokemonMessage().parse(request.payload).pokemon_id == 99
        decoded = request.decoder(bytes(ReleasePokemonResponse(result=1, candy_awarded=3)))
        assert decoded.candy_awarded == 3

    def test_register_unknown_operation(self):
        catalog = MessageCatalog()
        with pytest.raises(CatalogError):
            catalog.register("no_such_op", ReleasePokemonMessage)
        with pytest.raises(CatalogError):
            catalog.register(4242, ReleasePokemonMessage)

    def test_register_keeps_other_half(self):
        catalog = MessageCatalog()
        catalog.register("download_settings", response_message=ReleasePokemonResponse)
        schema = catalog.schema(RequestType.DOWNLOAD_SETTINGS)
        assert schema.request_message is DownloadSettingsMessage
        assert schema.response_message is ReleasePokemonResponse


class TestLogicalRequest:
    def test_expect_response_flag(self):
        catalog = MessageCatalog()
        assert catalog.request(RequestType.ECHO).expects_response
        silent = catalog.request(RequestType.ECHO, expect_response=False)
        assert not silent.expects_response
        assert silent.name == "Echo"
        assert silent.request_type == 666

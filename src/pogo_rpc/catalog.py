"""
Message catalog: opcode -> request payload schema and response decoder.

Payload schemas are betterproto message classes. The catalog ships the
handful the client needs for its own bootstrap; callers register the rest.
Operations without a registered response schema still get a decoder that
hands back the raw payload bytes, so response pairing stays positional.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import betterproto

from pogo_rpc.errors import CatalogError
from pogo_rpc.models import messages
from pogo_rpc.models.request_types import RequestType, display_name, request_type_for

Decoder = Callable[[bytes], Any]
MessageClass = type[betterproto.Message]


@dataclass(frozen=True)
class LogicalRequest:
    """One opcode destined for an envelope. Built by the catalog, never mutated."""

    request_type: int
    payload: Optional[bytes] = None
    decoder: Optional[Decoder] = None

    @property
    def name(self) -> str:
        return display_name(self.request_type)

    @property
    def expects_response(self) -> bool:
        return self.decoder is not None


@dataclass(frozen=True)
class Schema:
    request_message: Optional[MessageClass] = None
    response_message: Optional[MessageClass] = None


BUILTIN_SCHEMAS: dict[int, Schema] = {
    RequestType.PLAYER_UPDATE: Schema(messages.PlayerUpdateMessage),
    RequestType.GET_PLAYER: Schema(messages.GetPlayerMessage),
    RequestType.GET_INVENTORY: Schema(messages.GetInventoryMessage),
    RequestType.DOWNLOAD_SETTINGS: Schema(messages.DownloadSettingsMessage, messages.DownloadSettingsResponse),
    RequestType.GET_MAP_OBJECTS: Schema(messages.GetMapObjectsMessage),
}


def raw_payload(data: bytes) -> bytes:
    return bytes(data)


def message_decoder(message_class: MessageClass) -> Decoder:
    def decode(data: bytes) -> betterproto.Message:
        return message_class().parse(data)
    return decode


class MessageCatalog:
    def __init__(self, schemas: Optional[dict[int, Schema]] = None):
        self._schemas: dict[int, Schema] = dict(BUILTIN_SCHEMAS)
        if schemas:
            self._schemas.update(schemas)

    def register(
        self,
        operation: Union[str, int],
        request_message: Optional[MessageClass] = None,
        response_message: Optional[MessageClass] = None,
    ) -> None:
        """Register payload schemas for an operation name or opcode.

        A schema given here replaces the corresponding half of any existing one.
        """
        request_type = request_type_for(operation)
        current = self._schemas.get(request_type, Schema())
        self._schemas[request_type] = Schema(
            request_message or current.request_message,
            response_message or current.response_message,
        )

    def schema(self, request_type: int) -> Schema:
        return self._schemas.get(request_type, Schema())

    def encode(self, request_type: int, fields: Optional[dict[str, Any]] = None) -> Optional[bytes]:
        """Encode request fields. Returns None when the operation carries no payload."""
        values = {k: v for k, v in (fields or {}).items() if v is not None}
        message_class = self.schema(request_type).request_message
        if message_class is None:
            if values:
                raise CatalogError(
                    f"No request schema registered for {display_name(request_type)}; "
                    f"cannot encode fields {sorted(values)}"
                )
            return None
        known = {f.name for f in dataclasses.fields(message_class)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise CatalogError(f"{message_class.__name__} has no field(s) {unknown}")

        message = message_class()
        try:
            for name, value in values.items():
                if isinstance(value, dict):
                    # Nested message given as a plain mapping.
                    value = getattr(message, name).from_dict(value)
                setattr(message, name, value)
            return bytes(message)
        except (TypeError, ValueError, AttributeError) as e:
            raise CatalogError(f"Failed to encode {display_name(request_type)}: {e}")

    def decoder(self, request_type: int) -> Decoder:
        message_class = self.schema(request_type).response_message
        if message_class is None:
            return raw_payload
        return message_decoder(message_class)

    def decode(self, request_type: int, data: bytes) -> Any:
        return self.decoder(request_type)(data)

    def request(
        self,
        request_type: int,
        fields: Optional[dict[str, Any]] = None,
        *,
        expect_response: bool = True,
    ) -> LogicalRequest:
        return LogicalRequest(
            request_type=int(request_type),
            payload=self.encode(request_type, fields),
            decoder=self.decoder(request_type) if expect_response else None,
        )

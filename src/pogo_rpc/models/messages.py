"""
Payload schemas the client itself depends on.

The bootstrap sequence, the settings negotiation and the location-bearing
calls need these. Every other payload schema is supplied by the caller
through the MessageCatalog.
"""

from dataclasses import dataclass
from typing import List

import betterproto


@dataclass(eq=False, repr=False)
class PlayerUpdateMessage(betterproto.Message):
    latitude: float = betterproto.double_field(1)
    longitude: float = betterproto.double_field(2)


@dataclass(eq=False, repr=False)
class GetPlayerMessage(betterproto.Message):
    app_version: str = betterproto.string_field(1)


@dataclass(eq=False, repr=False)
class GetInventoryMessage(betterproto.Message):
    last_timestamp_ms: int = betterproto.int64_field(1)


@dataclass(eq=False, repr=False)
class DownloadSettingsMessage(betterproto.Message):
    hash: str = betterproto.string_field(1)


@dataclass(eq=False, repr=False)
class MapSettings(betterproto.Message):
    pokemon_visible_range: float = betterproto.double_field(1)
    poke_nav_range_meters: float = betterproto.double_field(2)
    encounter_range_meters: float = betterproto.double_field(3)
    get_map_objects_min_refresh_seconds: float = betterproto.float_field(4)
    get_map_objects_max_refresh_seconds: float = betterproto.float_field(5)
    get_map_objects_min_distance_meters: float = betterproto.float_field(6)
    google_maps_api_key: str = betterproto.string_field(7)


@dataclass(eq=False, repr=False)
class GlobalSettings(betterproto.Message):
    map_settings: MapSettings = betterproto.message_field(3)
    minimum_client_version: str = betterproto.string_field(6)


@dataclass(eq=False, repr=False)
class DownloadSettingsResponse(betterproto.Message):
    error: str = betterproto.string_field(1)
    hash: str = betterproto.string_field(2)
    settings: GlobalSettings = betterproto.message_field(3)


@dataclass(eq=False, repr=False)
class GetMapObjectsMessage(betterproto.Message):
    cell_id: List[int] = betterproto.uint64_field(1)
    since_timestamp_ms: List[int] = betterproto.int64_field(2)
    latitude: float = betterproto.double_field(3)
    longitude: float = betterproto.double_field(4)

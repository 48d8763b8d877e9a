"""
Opcodes and status codes of the RPC protocol.
"""

from enum import IntEnum
from typing import Union

from pogo_rpc.errors import CatalogError


class RequestType(IntEnum):
    METHOD_UNSET = 0
    PLAYER_UPDATE = 1
    GET_PLAYER = 2
    GET_INVENTORY = 4
    DOWNLOAD_SETTINGS = 5
    DOWNLOAD_ITEM_TEMPLATES = 6
    DOWNLOAD_REMOTE_CONFIG_VERSION = 7
    FORT_SEARCH = 101
    ENCOUNTER = 102
    CATCH_POKEMON = 103
    FORT_DETAILS = 104
    GET_MAP_OBJECTS = 106
    FORT_DEPLOY_POKEMON = 110
    FORT_RECALL_POKEMON = 111
    RELEASE_POKEMON = 112
    USE_ITEM_POTION = 113
    USE_ITEM_CAPTURE = 114
    USE_ITEM_REVIVE = 116
    GET_PLAYER_PROFILE = 121
    EVOLVE_POKEMON = 125
    GET_HATCHED_EGGS = 126
    ENCOUNTER_TUTORIAL_COMPLETE = 127
    LEVEL_UP_REWARDS = 128
    CHECK_AWARDED_BADGES = 129
    USE_ITEM_GYM = 133
    GET_GYM_DETAILS = 134
    START_GYM_BATTLE = 135
    ATTACK_GYM = 136
    RECYCLE_INVENTORY_ITEM = 137
    COLLECT_DAILY_BONUS = 138
    USE_ITEM_XP_BOOST = 139
    USE_ITEM_EGG_INCUBATOR = 140
    USE_INCENSE = 141
    GET_INCENSE_POKEMON = 142
    INCENSE_ENCOUNTER = 143
    ADD_FORT_MODIFIER = 144
    DISK_ENCOUNTER = 145
    COLLECT_DAILY_DEFENDER_BONUS = 146
    UPGRADE_POKEMON = 147
    SET_FAVORITE_POKEMON = 148
    NICKNAME_POKEMON = 149
    EQUIP_BADGE = 150
    SET_CONTACT_SETTINGS = 151
    GET_ASSET_DIGEST = 300
    GET_DOWNLOAD_URLS = 301
    GET_SUGGESTED_CODENAMES = 401
    CHECK_CODENAME_AVAILABLE = 402
    CLAIM_CODENAME = 403
    SET_AVATAR = 404
    SET_PLAYER_TEAM = 405
    MARK_TUTORIAL_COMPLETE = 406
    ECHO = 666
    SFIDA_ACTION_LOG = 801


class PlatformRequestType(IntEnum):
    METHOD_UNSET = 0
    SEND_ENCRYPTED_SIGNATURE = 6


class StatusCode(IntEnum):
    UNKNOWN = 0
    OK = 1
    OK_RPC_URL_IN_RESPONSE = 2
    BAD_REQUEST = 3
    THROTTLED = 52
    REDIRECT = 53
    INVALID_AUTH_TOKEN = 102


SUCCESS_STATUS_CODES = frozenset({StatusCode.OK, StatusCode.OK_RPC_URL_IN_RESPONSE})

# Operation name -> opcode, e.g. "get_map_objects" -> RequestType.GET_MAP_OBJECTS
OPERATIONS: dict[str, RequestType] = {
    member.name.lower(): member for member in RequestType if member is not RequestType.METHOD_UNSET
}


def request_type_for(operation: Union[str, int]) -> RequestType:
    """Resolve an operation name or raw opcode to a RequestType."""
    if isinstance(operation, str):
        try:
            return OPERATIONS[operation.lower().replace("-", "_")]
        except KeyError:
            raise CatalogError(f"Unknown operation: {operation}") from None
    try:
        return RequestType(operation)
    except ValueError:
        raise CatalogError(f"Unknown opcode: {operation}") from None


def display_name(request_type: int) -> str:
    """'GET_MAP_OBJECTS' -> 'Get Map Objects'. Unknown opcodes render as their number."""
    try:
        name = RequestType(request_type).name
    except ValueError:
        return str(request_type)
    return " ".join(word.capitalize() for word in name.split("_"))

"""
Logical operations, one method each.

RequestMethods is mixed into both the client and the batch builder. Each
method builds a LogicalRequest through the message catalog and hands it to
`_dispatch`. Clients send it straight away (the async client returns an
awaitable, the sync client blocks); a batch appends it and returns itself
for chaining.

Field names follow the game's message definitions; operations whose payload
schema has not been registered with the catalog raise CatalogError when
called with arguments.
"""

from typing import Any, Optional, Sequence

from pogo_rpc.catalog import LogicalRequest, MessageCatalog
from pogo_rpc.models.request_types import RequestType
from pogo_rpc.models.session import Session


class RequestMethods:
    session: Session
    catalog: MessageCatalog

    def _dispatch(self, request: LogicalRequest) -> Any:
        raise NotImplementedError

    def _op(self, request_type: RequestType, **fields: Any) -> Any:
        return self._dispatch(self.catalog.request(request_type, fields))

    def _position(self) -> tuple[Optional[float], Optional[float]]:
        location = self.session.location
        if location is None:
            return None, None
        return location.latitude, location.longitude

    # Player and settings

    def player_update(self) -> Any:
        """Report the session location to the server."""
        lat, lng = self._position()
        return self._op(RequestType.PLAYER_UPDATE, latitude=lat, longitude=lng)

    def get_player(self, app_version: Optional[str] = None) -> Any:
        return self._op(RequestType.GET_PLAYER, app_version=app_version)

    def get_inventory(self, last_timestamp: Optional[int] = None) -> Any:
        return self._op(RequestType.GET_INVENTORY, last_timestamp_ms=last_timestamp)

    def download_settings(self, hash: Optional[str] = None) -> Any:
        return self._op(RequestType.DOWNLOAD_SETTINGS, hash=hash)

    def download_item_templates(self) -> Any:
        return self._op(RequestType.DOWNLOAD_ITEM_TEMPLATES)

    def download_remote_config_version(
        self, platform: int, device_manufacturer: str, device_model: str, locale: str, app_version: int,
    ) -> Any:
        return self._op(
            RequestType.DOWNLOAD_REMOTE_CONFIG_VERSION,
            platform=platform,
            device_manufacturer=device_manufacturer,
            device_model=device_model,
            locale=locale,
            app_version=app_version,
        )

    def get_player_profile(self, player_name: str) -> Any:
        return self._op(RequestType.GET_PLAYER_PROFILE, player_name=player_name)

    def get_hatched_eggs(self) -> Any:
        return self._op(RequestType.GET_HATCHED_EGGS)

    def level_up_rewards(self, level: int) -> Any:
        return self._op(RequestType.LEVEL_UP_REWARDS, level=level)

    def check_awarded_badges(self) -> Any:
        return self._op(RequestType.CHECK_AWARDED_BADGES)

    def collect_daily_bonus(self) -> Any:
        return self._op(RequestType.COLLECT_DAILY_BONUS)

    def collect_daily_defender_bonus(self) -> Any:
        return self._op(RequestType.COLLECT_DAILY_DEFENDER_BONUS)

    def equip_badge(self, badge_type: int) -> Any:
        return self._op(RequestType.EQUIP_BADGE, badge_type=badge_type)

    def set_contact_settings(self, send_marketing_emails: bool, send_push_notifications: bool) -> Any:
        return self._op(
            RequestType.SET_CONTACT_SETTINGS,
            contact_settings={
                "send_marketing_emails": send_marketing_emails,
                "send_push_notifications": send_push_notifications,
            },
        )

    def get_asset_digest(
        self, platform: int, device_manufacturer: str, device_model: str, locale: str, app_version: int,
    ) -> Any:
        return self._op(
            RequestType.GET_ASSET_DIGEST,
            platform=platform,
            device_manufacturer=device_manufacturer,
            device_model=device_model,
            locale=locale,
            app_version=app_version,
        )

    def get_download_urls(self, asset_ids: Sequence[str]) -> Any:
        return self._op(RequestType.GET_DOWNLOAD_URLS, asset_id=list(asset_ids))

    # Map

    def get_map_objects(self, cell_ids: Sequence[int], since_timestamps: Sequence[int]) -> Any:
        """Fetch map objects. Rate limited by the dispatcher."""
        lat, lng = self._position()
        return self._op(
            RequestType.GET_MAP_OBJECTS,
            cell_id=list(cell_ids),
            since_timestamp_ms=list(since_timestamps),
            latitude=lat,
            longitude=lng,
        )

    def fort_search(self, fort_id: str, fort_latitude: float, fort_longitude: float) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.FORT_SEARCH,
            fort_id=fort_id,
            player_latitude=lat,
            player_longitude=lng,
            fort_latitude=fort_latitude,
            fort_longitude=fort_longitude,
        )

    def fort_details(self, fort_id: str, fort_latitude: float, fort_longitude: float) -> Any:
        return self._op(RequestType.FORT_DETAILS, fort_id=fort_id, latitude=fort_latitude, longitude=fort_longitude)

    def add_fort_modifier(self, modifier_item_id: int, fort_id: str) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.ADD_FORT_MODIFIER,
            modifier_type=modifier_item_id,
            fort_id=fort_id,
            player_latitude=lat,
            player_longitude=lng,
        )

    # Encounters

    def encounter(self, encounter_id: int, spawn_point_id: str) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.ENCOUNTER,
            encounter_id=encounter_id,
            spawn_point_id=spawn_point_id,
            player_latitude=lat,
            player_longitude=lng,
        )

    def disk_encounter(self, encounter_id: int, fort_id: str) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.DISK_ENCOUNTER,
            encounter_id=encounter_id,
            fort_id=fort_id,
            player_latitude=lat,
            player_longitude=lng,
        )

    def incense_encounter(self, encounter_id: int, encounter_location: str) -> Any:
        return self._op(
            RequestType.INCENSE_ENCOUNTER, encounter_id=encounter_id, encounter_location=encounter_location,
        )

    def get_incense_pokemon(self) -> Any:
        lat, lng = self._position()
        return self._op(RequestType.GET_INCENSE_POKEMON, player_latitude=lat, player_longitude=lng)

    def encounter_tutorial_complete(self, pokemon_id: int) -> Any:
        return self._op(RequestType.ENCOUNTER_TUTORIAL_COMPLETE, pokemon_id=pokemon_id)

    def catch_pokemon(
        self,
        encounter_id: int,
        pokeball_item_id: int,
        normalized_reticle_size: float,
        spawn_point_id: str,
        hit_pokemon: bool,
        spin_modifier: float,
        normalized_hit_position: float,
    ) -> Any:
        return self._op(
            RequestType.CATCH_POKEMON,
            encounter_id=encounter_id,
            pokeball=pokeball_item_id,
            normalized_reticle_size=normalized_reticle_size,
            spawn_point_id=spawn_point_id,
            hit_pokemon=hit_pokemon,
            spin_modifier=spin_modifier,
            normalized_hit_position=normalized_hit_position,
        )

    # Pokemon management

    def release_pokemon(self, pokemon_id: int) -> Any:
        return self._op(RequestType.RELEASE_POKEMON, pokemon_id=pokemon_id)

    def evolve_pokemon(self, pokemon_id: int) -> Any:
        return self._op(RequestType.EVOLVE_POKEMON, pokemon_id=pokemon_id)

    def upgrade_pokemon(self, pokemon_id: int) -> Any:
        return self._op(RequestType.UPGRADE_POKEMON, pokemon_id=pokemon_id)

    def set_favorite_pokemon(self, pokemon_id: int, is_favorite: bool) -> Any:
        return self._op(RequestType.SET_FAVORITE_POKEMON, pokemon_id=pokemon_id, is_favorite=is_favorite)

    def nickname_pokemon(self, pokemon_id: int, nickname: str) -> Any:
        return self._op(RequestType.NICKNAME_POKEMON, pokemon_id=pokemon_id, nickname=nickname)

    # Items

    def use_item_potion(self, item_id: int, pokemon_id: int) -> Any:
        return self._op(RequestType.USE_ITEM_POTION, item_id=item_id, pokemon_id=pokemon_id)

    def use_item_revive(self, item_id: int, pokemon_id: int) -> Any:
        return self._op(RequestType.USE_ITEM_REVIVE, item_id=item_id, pokemon_id=pokemon_id)

    def use_item_capture(self, item_id: int, encounter_id: int, spawn_point_guid: str) -> Any:
        return self._op(
            RequestType.USE_ITEM_CAPTURE, item_id=item_id, encounter_id=encounter_id, spawn_point_guid=spawn_point_guid,
        )

    def use_item_xp_boost(self, item_id: int) -> Any:
        return self._op(RequestType.USE_ITEM_XP_BOOST, item_id=item_id)

    def use_item_egg_incubator(self, item_id: str, pokemon_id: int) -> Any:
        return self._op(RequestType.USE_ITEM_EGG_INCUBATOR, item_id=item_id, pokemon_id=pokemon_id)

    def use_incense(self, item_id: int) -> Any:
        return self._op(RequestType.USE_INCENSE, incense_type=item_id)

    def recycle_inventory_item(self, item_id: int, count: int) -> Any:
        return self._op(RequestType.RECYCLE_INVENTORY_ITEM, item_id=item_id, count=count)

    # Gyms

    def fort_deploy_pokemon(self, fort_id: str, pokemon_id: int) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.FORT_DEPLOY_POKEMON,
            fort_id=fort_id,
            pokemon_id=pokemon_id,
            player_latitude=lat,
            player_longitude=lng,
        )

    def fort_recall_pokemon(self, fort_id: str, pokemon_id: int) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.FORT_RECALL_POKEMON,
            fort_id=fort_id,
            pokemon_id=pokemon_id,
            player_latitude=lat,
            player_longitude=lng,
        )

    def use_item_gym(self, item_id: int, gym_id: str) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.USE_ITEM_GYM, item_id=item_id, gym_id=gym_id, player_latitude=lat, player_longitude=lng,
        )

    def get_gym_details(self, gym_id: str, gym_latitude: float, gym_longitude: float) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.GET_GYM_DETAILS,
            gym_id=gym_id,
            player_latitude=lat,
            player_longitude=lng,
            gym_latitude=gym_latitude,
            gym_longitude=gym_longitude,
        )

    def start_gym_battle(self, gym_id: str, attacking_pokemon_ids: Sequence[int], defending_pokemon_id: int) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.START_GYM_BATTLE,
            gym_id=gym_id,
            attacking_pokemon_ids=list(attacking_pokemon_ids),
            defending_pokemon_id=defending_pokemon_id,
            player_latitude=lat,
            player_longitude=lng,
        )

    def attack_gym(self, gym_id: str, battle_id: str, attack_actions: Sequence[Any], last_retrieved_action: Any) -> Any:
        lat, lng = self._position()
        return self._op(
            RequestType.ATTACK_GYM,
            gym_id=gym_id,
            battle_id=battle_id,
            attack_actions=list(attack_actions),
            last_retrieved_action=last_retrieved_action,
            player_latitude=lat,
            player_longitude=lng,
        )

    # Account and tutorial

    def get_suggested_codenames(self) -> Any:
        return self._op(RequestType.GET_SUGGESTED_CODENAMES)

    def check_codename_available(self, codename: str) -> Any:
        return self._op(RequestType.CHECK_CODENAME_AVAILABLE, codename=codename)

    def claim_codename(self, codename: str) -> Any:
        return self._op(RequestType.CLAIM_CODENAME, codename=codename)

    def set_avatar(self, **avatar: int) -> Any:
        """Set the player avatar (skin, hair, shirt, pants, hat, shoes, gender, eyes, backpack)."""
        return self._op(RequestType.SET_AVATAR, player_avatar=avatar)

    def set_player_team(self, team: int) -> Any:
        return self._op(RequestType.SET_PLAYER_TEAM, team=team)

    def mark_tutorial_complete(
        self, tutorials_completed: Sequence[int], send_marketing_emails: bool, send_push_notifications: bool,
    ) -> Any:
        return self._op(
            RequestType.MARK_TUTORIAL_COMPLETE,
            tutorials_completed=list(tutorials_completed),
            send_marketing_emails=send_marketing_emails,
            send_push_notifications=send_push_notifications,
        )

    # Misc

    def echo(self) -> Any:
        return self._op(RequestType.ECHO)

    def sfida_action_log(self) -> Any:
        return self._op(RequestType.SFIDA_ACTION_LOG)

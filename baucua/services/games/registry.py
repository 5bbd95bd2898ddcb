import logging
import threading
from typing import Dict, Optional

from baucua.errors import DuplicateRoom, RoomNotFound, RoomFull, GameInProgress, InvalidRoomCode
from baucua.models import Settings, generate_room_code, normalize_room_code
from .room import GameRoom

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live room, keyed by room code.

    Used like a Flask extension: a module-level instance is configured per
    app in ``init_app``.
    """

    def __init__(self, app=None):
        self._rooms: Dict[str, GameRoom] = {}
        self._lock = threading.Lock()
        self.max_players = 8
        self.min_players = 2
        self.chat_limit = 100
        self.defaults = {'time_limit': 30, 'round_limit': 5, 'starting_balance': 10}
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.max_players = int(app.config.get('MAX_PLAYERS', 8))
        self.min_players = int(app.config.get('MIN_PLAYERS', 2))
        self.chat_limit = int(app.config.get('CHAT_HISTORY_LIMIT', 100))
        self.defaults = {
            'time_limit': int(app.config.get('DEFAULT_TIME_LIMIT', 30)),
            'round_limit': int(app.config.get('DEFAULT_ROUND_LIMIT', 5)),
            'starting_balance': int(app.config.get('DEFAULT_STARTING_BALANCE', 10)),
        }
        self.clear()

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, code):
        return code in self._rooms

    def new_code(self) -> str:
        code = generate_room_code()
        while code in self._rooms:
            logger.warning(f"[room-code] collision on {code}, regenerating")
            code = generate_room_code()
        return code

    def create_room(self, code: Optional[str], host_id: str, host_name: str) -> GameRoom:
        """Create a room and seat its host as the first player."""
        code = normalize_room_code(code) if code else self.new_code()
        room = GameRoom(
            code,
            settings=Settings(**self.defaults),
            max_players=self.max_players,
            min_players=self.min_players,
            chat_limit=self.chat_limit,
        )
        # Seat the host before publishing so an empty room is never visible
        room.add_player(host_id, host_name)
        with self._lock:
            if code in self._rooms:
                raise DuplicateRoom(code)
            self._rooms[code] = room
        logger.info(f"[room-create] code={code} host={host_id}")
        return room

    def find_room(self, code) -> GameRoom:
        try:
            key = normalize_room_code(code)
        except InvalidRoomCode:
            raise RoomNotFound(code) from None
        room = self._rooms.get(key)
        if room is None:
            raise RoomNotFound(key)
        return room

    def check_room(self, code) -> GameRoom:
        """Raise the error a join would hit, without joining."""
        room = self.find_room(code)
        if len(room.roster) >= room.roster.max_players:
            raise RoomFull(room.code)
        if room.active:
            raise GameInProgress()
        return room

    def remove_player(self, code: str, player_id: str):
        """Remove a player; destroys the room when it empties.

        Caller must hold ``room.lock``. Returns (room, player, new_host_id).
        """
        room = self.find_room(code)
        player, new_host = room.remove_player(player_id)
        logger.info(f"[player-leave] code={room.code} player={player_id} remaining={len(room.roster)}")
        if room.roster.is_empty:
            self.destroy_room(room.code)
        return room, player, new_host

    def destroy_room(self, code: str) -> None:
        room = self._rooms.get(code)
        if room is None:
            return
        with room.lock:
            room.cancel_timer()
            room.destroyed = True
            room.ledger.clear()
            with self._lock:
                self._rooms.pop(code, None)
        logger.info(f"[room-destroy] code={code}")

    def clear(self) -> None:
        for code in list(self._rooms):
            self.destroy_room(code)

from collections import deque
from typing import List, Optional, Tuple

from baucua.errors import RoomFull, NoColorsAvailable, PlayerNotFound
from baucua.models import Player, PALETTE, normalize_name


class PlayerRoster:
    """Room membership in join order, the color pool and the host seat.

    Colors are handed out from the front of the pool and returned to the
    back, so the assigned colors plus the pool always equal the palette.
    """

    def __init__(self, max_players: int = len(PALETTE), code: Optional[str] = None):
        self.code = code
        self.players: List[Player] = []
        self.colors = deque(PALETTE)
        self.host_id: Optional[str] = None
        self.max_players = min(max_players, len(PALETTE))

    def __len__(self):
        return len(self.players)

    def __iter__(self):
        return iter(self.players)

    @property
    def is_empty(self) -> bool:
        return not self.players

    def get(self, player_id: str) -> Player:
        for p in self.players:
            if p.id == player_id:
                return p
        raise PlayerNotFound(player_id)

    def __contains__(self, player_id):
        return any(p.id == player_id for p in self.players)

    def add_player(self, player_id: str, name: str) -> Player:
        name = normalize_name(name)
        if len(self.players) >= self.max_players:
            raise RoomFull(self.code)
        if not self.colors:
            raise NoColorsAvailable("No colors left in this room")
        player = Player(player_id, name, self.colors.popleft())
        self.players.append(player)
        if self.host_id is None:
            self.host_id = player.id
        return player

    def remove_player(self, player_id: str) -> Tuple[Player, Optional[str]]:
        """Remove a player and return it with the new host id, if the host changed."""
        player = self.get(player_id)
        self.players.remove(player)
        self.colors.append(player.color)
        new_host = None
        if self.host_id == player_id:
            self.host_id = self.players[0].id if self.players else None
            new_host = self.host_id
        return player, new_host

    def to_list(self):
        return [p.to_dict() for p in self.players]

import random
import threading
from enum import Enum
from typing import List, Optional

from baucua.errors import (
    GameInProgress,
    GameNotActive,
    NotEnoughPlayers,
    NotHost,
    BettingClosed,
    InvalidMessage,
)
from baucua.models import Settings, ChatMessage, Player, validate_setting
from .ledger import BettingLedger
from .roster import PlayerRoster
from . import scoring


class Phase(str, Enum):
    LOBBY = 'lobby'
    ROUND_INTRO = 'round_intro'
    BETTING = 'betting'
    REVEALING = 'revealing'
    SETTLING = 'settling'
    ROUND_END = 'round_end'
    GAME_OVER = 'game_over'


MAX_MESSAGE_LENGTH = 200


class GameRoom:
    """One game session: roster, ledger, settings, dice and round counters.

    All mutation goes through ``lock``; callers hold it for the whole
    request or timer callback, including the broadcast that follows.
    """

    def __init__(self, code: str, settings: Optional[Settings] = None,
                 max_players: int = 8, min_players: int = 2, chat_limit: int = 100):
        self.code = code
        self.settings = settings or Settings()
        self.roster = PlayerRoster(max_players, code)
        self.ledger = BettingLedger()
        self.min_players = min_players
        self.chat_limit = chat_limit
        self.chat: List[ChatMessage] = []
        self.active = False
        self.phase = Phase.LOBBY
        self.round = 1
        self.timer = self.settings.time_limit
        self.dice: List[str] = []
        self.timer_handle = None
        self.destroyed = False
        self.lock = threading.RLock()

    # ---- roster ----

    @property
    def host_id(self) -> Optional[str]:
        return self.roster.host_id

    @property
    def players(self) -> List[Player]:
        return self.roster.players

    def get_player(self, player_id: str) -> Player:
        return self.roster.get(player_id)

    def add_player(self, player_id: str, name: str) -> Player:
        if self.active:
            raise GameInProgress()
        return self.roster.add_player(player_id, name)

    def remove_player(self, player_id: str):
        """Remove a player, forfeiting any open bets. Returns (player, new_host_id)."""
        player, new_host = self.roster.remove_player(player_id)
        self.ledger.forfeit(player_id)
        return player, new_host

    def require_host(self, player_id: str) -> None:
        if player_id != self.host_id:
            raise NotHost()

    # ---- settings & game lifecycle ----

    def update_setting(self, name: str, value):
        if self.active:
            raise GameInProgress("Settings are locked while a game is running.")
        self.settings.update(name, value)
        if name == 'timeLimit':
            self.timer = value
        return value

    def start_game(self, starting_balance=None) -> None:
        if self.active:
            raise GameInProgress("The game has already started.")
        if len(self.roster) < self.min_players:
            raise NotEnoughPlayers(f"At least {self.min_players} players are needed to start")
        if starting_balance is None:
            starting_balance = self.settings.starting_balance
        validate_setting('startingBalance', starting_balance)

        self.active = True
        self.phase = Phase.LOBBY
        self.round = 1
        self.timer = self.settings.time_limit
        for p in self.players:
            p.reset_stats(starting_balance)
        self.ledger.clear()
        self.dice = []

    def reset_game(self) -> None:
        self.cancel_timer()
        self.active = False
        self.phase = Phase.LOBBY
        self.round = 1
        self.timer = self.settings.time_limit
        for p in self.players:
            p.reset_stats()
        self.ledger.clear()
        self.dice = []

    # ---- betting ----

    def _require_betting(self):
        if not self.active:
            raise GameNotActive("The game has not started.")
        if self.phase != Phase.BETTING:
            raise BettingClosed()

    def place_bet(self, player_id: str, amount, face: str):
        self._require_betting()
        return self.ledger.place_bet(self.get_player(player_id), amount, face)

    def remove_bet(self, player_id: str, amount, face: str) -> None:
        self._require_betting()
        self.ledger.remove_bet(self.get_player(player_id), amount, face)

    def set_ready(self, player_id: str) -> Player:
        self._require_betting()
        player = self.get_player(player_id)
        player.ready = True
        return player

    def all_ready(self) -> bool:
        """True once every non-bankrupt player has bet or marked ready."""
        return all(
            p.bankrupt or p.ready or self.ledger.has_bets(p.id)
            for p in self.players
        )

    # ---- timer ----

    def reset_timer(self) -> int:
        self.timer = self.settings.time_limit
        return self.timer

    def update_timer(self) -> Optional[int]:
        """Count down one second; None means everyone is ready and ticking stops."""
        if self.all_ready():
            return None
        self.timer -= 1
        return self.timer

    def cancel_timer(self) -> None:
        if self.timer_handle is not None:
            self.timer_handle.cancel()
            self.timer_handle = None

    # ---- round ----

    def begin_round(self) -> None:
        self.reset_timer()
        self.dice = []
        for p in self.players:
            p.ready = p.bankrupt

    def roll_dice(self, rng=random) -> List[str]:
        self.dice = scoring.roll_dice(rng)
        return list(self.dice)

    def settle(self) -> List[Player]:
        return scoring.settle_bets(self.players, self.ledger, self.dice)

    def finalize(self) -> List[Player]:
        return scoring.finalize_round(self.players, self.ledger)

    def set_rankings(self) -> List[Player]:
        return scoring.set_rankings(self.players)

    def next_round(self) -> int:
        """Advance the round counter; -1 means the game is over."""
        self.round += 1
        if self.round > self.settings.round_limit or self.all_bankrupt():
            return -1
        return self.round

    def all_bankrupt(self) -> bool:
        return bool(self.players) and all(p.bankrupt for p in self.players)

    # ---- chat ----

    def add_message(self, player_id: str, text) -> List[dict]:
        player = self.get_player(player_id)
        if not isinstance(text, str) or not text.strip():
            raise InvalidMessage("Message is empty")
        text = text.strip()
        if len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidMessage(f"Messages are limited to {MAX_MESSAGE_LENGTH} characters")
        self.chat.append(ChatMessage(player.name, player.color, text))
        if len(self.chat) > self.chat_limit:
            del self.chat[:len(self.chat) - self.chat_limit]
        return self.chat_history()

    def chat_history(self) -> List[dict]:
        return [m.to_dict() for m in self.chat]

    # ---- snapshots ----

    def summary(self) -> dict:
        return {
            'code': self.code,
            'host': self.host_id,
            'settings': self.settings.to_dict(),
        }

    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'active': self.active,
            'phase': self.phase.value,
            'host': self.host_id,
            'players': self.roster.to_list(),
            'bets': self.ledger.to_list(),
            'dice': list(self.dice),
            'settings': self.settings.to_dict(),
            'round': self.round,
            'timer': self.timer,
        }

from typing import Dict, List, Tuple

from baucua.errors import InvalidFace, InvalidAmount, PlayerBankrupt, BetNotFound
from baucua.models import Bet, Player, FACES


class BettingLedger:
    """Bets for the current round, keyed by (player id, face).

    Stakes are escrowed when placed: the amount leaves the player's balance
    and net delta immediately, and comes back only through ``remove_bet`` or
    settlement.
    """

    def __init__(self):
        self._bets: Dict[Tuple[str, str], Bet] = {}

    def __len__(self):
        return len(self._bets)

    def __iter__(self):
        return iter(list(self._bets.values()))

    def place_bet(self, player: Player, amount, face: str) -> Bet:
        if face not in FACES:
            raise InvalidFace(face)
        if player.bankrupt:
            raise PlayerBankrupt(player.id)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount("Bets must be a positive whole number")
        if amount > player.balance:
            raise InvalidAmount("You cannot bet more than your balance")

        key = (player.id, face)
        bet = self._bets.get(key)
        if bet is None:
            bet = self._bets[key] = Bet(player.id, face, 0)
        bet.amount += amount
        player.balance -= amount
        player.net_delta -= amount
        return bet

    def remove_bet(self, player: Player, amount, face: str) -> None:
        bet = self._bets.get((player.id, face))
        if bet is None:
            raise BetNotFound(player.id, face)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount("Bets must be a positive whole number")
        if bet.amount < amount:
            raise BetNotFound(player.id, face)
        bet.amount -= amount
        if bet.amount == 0:
            del self._bets[(player.id, face)]
        player.balance += amount
        player.net_delta += amount

    def has_bets(self, player_id: str) -> bool:
        return any(pid == player_id for pid, _ in self._bets)

    def bets_for(self, player_id: str) -> List[Bet]:
        return [b for (pid, _), b in self._bets.items() if pid == player_id]

    def forfeit(self, player_id: str) -> int:
        """Drop a departing player's bets without refunding them."""
        lost = 0
        for bet in self.bets_for(player_id):
            lost += bet.amount
            del self._bets[(player_id, bet.face)]
        return lost

    def clear(self):
        self._bets.clear()

    def to_list(self):
        return [b.to_dict() for b in self._bets.values()]

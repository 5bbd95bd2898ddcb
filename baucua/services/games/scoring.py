import random
from typing import Dict, Iterable, List

from baucua.models import Player, FACES
from .ledger import BettingLedger


def roll_dice(rng=random, count: int = 3) -> List[str]:
    """Roll ``count`` independent dice; repeated faces are kept."""
    return [rng.choice(FACES) for _ in range(count)]


def face_multipliers(dice: Iterable[str]) -> Dict[str, int]:
    """Sum of occurrence multipliers per face.

    The first die showing a face is worth 2, every later die with the same
    face is worth 1, so a face rolled k times pays k + 1 times the stake.
    """
    totals: Dict[str, int] = {}
    for face in dice:
        totals[face] = totals.get(face, 0) + (1 if face in totals else 2)
    return totals


def settle_bets(players: Iterable[Player], ledger: BettingLedger, dice: List[str]) -> List[Player]:
    """Apply the roll to every player's net delta.

    The escrowed stake is released from net delta and each bet credits
    ``amount x multiplier`` for its face, leaving net delta equal to the
    round's gross return. Returns players ordered by net delta, best first.
    """
    players = list(players)
    by_id = {p.id: p for p in players}
    multipliers = face_multipliers(dice)
    for bet in ledger:
        player = by_id.get(bet.player_id)
        if not player:
            continue
        player.net_delta += bet.amount
        player.net_delta += bet.amount * multipliers.get(bet.face, 0)
    return sorted(players, key=lambda p: p.net_delta, reverse=True)


def finalize_round(players: Iterable[Player], ledger: BettingLedger) -> List[Player]:
    """Bank winnings, clear the round and flag bankrupt players.

    Losses already left the balance when the bets were placed, so only the
    positive part of net delta is added. Returns the newly bankrupt players.
    """
    newly_bankrupt = []
    for p in players:
        if p.net_delta > 0:
            p.balance += p.net_delta
        p.net_delta = 0
        if p.balance == 0 and not p.bankrupt:
            p.bankrupt = True
            p.ready = True
            newly_bankrupt.append(p)
    ledger.clear()
    return newly_bankrupt


def set_rankings(players: Iterable[Player]) -> List[Player]:
    """Competition ranking by balance: ties share a rank, the next rank skips."""
    ranked = sorted(players, key=lambda p: p.balance, reverse=True)
    for i, p in enumerate(ranked):
        if i == 0:
            p.rank = 1
        elif p.balance < ranked[i - 1].balance:
            p.rank = i + 1
        else:
            p.rank = ranked[i - 1].rank
    return ranked

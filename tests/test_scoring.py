import random

from baucua.models import Player, FACES
from baucua.services.games.ledger import BettingLedger
from baucua.services.games import scoring


def _player(pid, balance):
    p = Player(pid, pid.title(), '#000000')
    p.balance = balance
    return p


def test_face_multipliers_count_repeats():
    assert scoring.face_multipliers(['deer', 'deer', 'fish']) == {'deer': 3, 'fish': 2}
    assert scoring.face_multipliers(['crab', 'crab', 'crab']) == {'crab': 4}
    assert scoring.face_multipliers(['fish', 'crab', 'shrimp']) == {'fish': 2, 'crab': 2, 'shrimp': 2}


def test_settlement_with_repeated_face():
    a, b = _player('a', 20), _player('b', 20)
    ledger = BettingLedger()
    ledger.place_bet(a, 10, 'deer')
    ledger.place_bet(b, 5, 'crab')

    results = scoring.settle_bets([a, b], ledger, ['deer', 'deer', 'fish'])

    assert a.net_delta == 30
    assert b.net_delta == 0
    assert [p.id for p in results] == ['a', 'b']


def test_finalize_banks_only_positive_delta():
    a, b = _player('a', 20), _player('b', 20)
    ledger = BettingLedger()
    ledger.place_bet(a, 10, 'deer')
    ledger.place_bet(b, 5, 'crab')
    scoring.settle_bets([a, b], ledger, ['deer', 'deer', 'fish'])

    bankrupt = scoring.finalize_round([a, b], ledger)

    assert a.balance == 40
    assert b.balance == 15
    assert a.net_delta == b.net_delta == 0
    assert len(ledger) == 0
    assert bankrupt == []


def test_player_at_zero_goes_bankrupt_and_ready():
    a = _player('a', 4)
    ledger = BettingLedger()
    ledger.place_bet(a, 4, 'gourd')
    scoring.settle_bets([a], ledger, ['fish', 'fish', 'fish'])
    bankrupt = scoring.finalize_round([a], ledger)
    assert bankrupt == [a]
    assert a.balance == 0
    assert a.bankrupt is True
    assert a.ready is True


def test_split_bets_return_stake_on_hit():
    a = _player('a', 10)
    ledger = BettingLedger()
    ledger.place_bet(a, 5, 'fish')
    ledger.place_bet(a, 5, 'deer')
    scoring.settle_bets([a], ledger, ['fish', 'crab', 'shrimp'])
    scoring.finalize_round([a], ledger)
    assert a.balance == 10
    assert a.bankrupt is False


def test_competition_ranking_shares_ties():
    players = [_player('a', 10), _player('b', 15), _player('c', 10), _player('d', 5)]
    ranked = scoring.set_rankings(players)
    assert [p.id for p in ranked] == ['b', 'a', 'c', 'd']
    assert [p.rank for p in ranked] == [1, 2, 2, 4]


def test_ranking_all_tied():
    players = [_player('a', 0), _player('b', 0)]
    scoring.set_rankings(players)
    assert [p.rank for p in players] == [1, 1]


def test_roll_dice_uses_alphabet_with_replacement():
    dice = scoring.roll_dice(random.Random(7))
    assert len(dice) == 3
    assert all(face in FACES for face in dice)
    seen = set()
    rng = random.Random(1)
    for _ in range(200):
        roll = scoring.roll_dice(rng)
        seen.add(len(set(roll)))
    assert 1 in seen or 2 in seen

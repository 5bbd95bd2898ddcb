import random
import string

from baucua.errors import InvalidRoomCode, InvalidName, InvalidSetting

FACES = ('deer', 'gourd', 'rooster', 'fish', 'crab', 'shrimp')

PALETTE = (
    '#c04e48',  # red
    '#4a7eac',  # blue
    '#d3c56e',  # yellow
    '#4e9e58',  # green
    '#ca7f3e',  # orange
    '#7fc7b1',  # teal
    '#ca709d',  # pink
    '#903c9c',  # purple
)

ROOM_CODE_LENGTH = 6
MAX_NAME_LENGTH = 20

# Wire name -> (attribute, min, max)
SETTING_RANGES = {
    'timeLimit': ('time_limit', 10, 60),
    'roundLimit': ('round_limit', 1, 20),
    'startingBalance': ('starting_balance', 1, 1000),
}


def generate_room_code(length=ROOM_CODE_LENGTH):
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


def normalize_room_code(code):
    """Uppercase a client-supplied room code and check its shape."""
    if not isinstance(code, str):
        raise InvalidRoomCode(code)
    normalized = code.strip().upper()
    if len(normalized) != ROOM_CODE_LENGTH or not normalized.isalnum() or not normalized.isascii():
        raise InvalidRoomCode(code)
    return normalized


def normalize_name(name):
    if not isinstance(name, str) or not name.strip():
        raise InvalidName("A name is required")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidName(f"Names are limited to {MAX_NAME_LENGTH} characters")
    return name


def validate_setting(name, value):
    """Return the attribute name for a setting after range-checking value."""
    if name not in SETTING_RANGES:
        raise InvalidSetting(f"Unknown setting {name!r}")
    attr, low, high = SETTING_RANGES[name]
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSetting(f"{name} must be a whole number")
    if not low <= value <= high:
        raise InvalidSetting(f"{name} must be between {low} and {high}")
    return attr


class Settings:
    def __init__(self, time_limit=30, round_limit=5, starting_balance=10):
        self.time_limit = time_limit
        self.round_limit = round_limit
        self.starting_balance = starting_balance

    def update(self, name, value):
        setattr(self, validate_setting(name, value), value)
        return value

    def to_dict(self):
        return {
            'timeLimit': self.time_limit,
            'roundLimit': self.round_limit,
            'startingBalance': self.starting_balance,
        }


class Player:
    def __init__(self, id, name, color):
        self.id = id
        self.name = name
        self.color = color
        self.balance = 0
        self.net_delta = 0
        self.rank = 1
        self.bankrupt = False
        self.ready = False

    def reset_stats(self, balance=0):
        self.balance = balance
        self.net_delta = 0
        self.rank = 1
        self.bankrupt = False
        self.ready = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'balance': self.balance,
            'netDelta': self.net_delta,
            'rank': self.rank,
            'bankrupt': self.bankrupt,
            'ready': self.ready,
        }


class Bet:
    def __init__(self, player_id, face, amount):
        self.player_id = player_id
        self.face = face
        self.amount = amount

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'face': self.face,
            'amount': self.amount,
        }


class ChatMessage:
    def __init__(self, author, color, text):
        self.author = author
        self.color = color
        self.text = text

    def to_dict(self):
        return {
            'author': self.author,
            'color': self.color,
            'text': self.text,
        }

"""Game errors.

Every error a client request can trigger derives from ``BauCuaError`` so the
socket layer can turn it into an acknowledgement in one place.
"""


class BauCuaError(Exception):
    """Base class for all game errors"""

    def to_ack(self):
        return {'ok': False, 'error': str(self), 'type': type(self).__name__}


class ValidationError(BauCuaError):
    """Request carried a malformed or out-of-range value"""
    pass


class StateError(BauCuaError):
    """Request is not allowed in the room's current state"""
    pass


class StaleCallback(BauCuaError):
    """A timer fired for a room that was destroyed or moved on"""
    pass


# ============ Validation ============

class InvalidSetting(ValidationError):
    pass


class InvalidAmount(ValidationError):
    pass


class InvalidFace(ValidationError):
    def __init__(self, face):
        self.face = face
        super().__init__(f"{face!r} is not a dice face")


class InvalidName(ValidationError):
    pass


class InvalidRoomCode(ValidationError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room code {code!r} must be 6 letters or digits")


class InvalidMessage(ValidationError):
    pass


# ============ Rooms ============

class RoomNotFound(StateError):
    def __init__(self, code):
        self.code = code
        super().__init__("The room you tried to enter does not exist.")


class RoomFull(StateError):
    def __init__(self, code):
        self.code = code
        super().__init__("The room you tried to enter is already full.")


class DuplicateRoom(StateError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} already exists.")


class NoColorsAvailable(StateError):
    pass


# ============ Game flow ============

class GameInProgress(StateError):
    def __init__(self, message="The room you tried to enter has already started."):
        super().__init__(message)


class GameNotActive(StateError):
    pass


class NotEnoughPlayers(StateError):
    pass


class NotHost(StateError):
    def __init__(self):
        super().__init__("Only the host can do that.")


class RoundInProgress(StateError):
    pass


class GameFinished(StateError):
    def __init__(self):
        super().__init__("The game is over. Use play again to return to the lobby.")


class BettingClosed(StateError):
    def __init__(self):
        super().__init__("Betting is closed.")


# ============ Players & bets ============

class PlayerNotFound(StateError):
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class PlayerBankrupt(StateError):
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__("Bankrupt players cannot bet.")


class BetNotFound(StateError):
    def __init__(self, player_id, face):
        self.player_id = player_id
        self.face = face
        super().__init__(f"No bet of that size on {face}")

"""Game domain services: roster, betting, scoring and round timers.

This package contains the room engine that the socket handlers and HTTP
routes call into, keeping transport concerns separated from core game
mechanics.
"""
from .registry import RoomRegistry
from .room import GameRoom, Phase
from .scheduler import RoundScheduler
from .timers import BackgroundTimers, TimerHandle

__all__ = [
    'RoomRegistry',
    'GameRoom',
    'Phase',
    'RoundScheduler',
    'BackgroundTimers',
    'TimerHandle',
]

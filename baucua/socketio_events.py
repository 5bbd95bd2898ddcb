import functools
import logging
from contextlib import contextmanager
from typing import Dict

from flask import request
from flask_socketio import join_room, leave_room, emit

from baucua import socketio, registry, scheduler, room_channel
from baucua.errors import BauCuaError, RoomNotFound
from baucua.models import normalize_name, normalize_room_code

logger = logging.getLogger(__name__)

# socket id -> room code; a socket sits in at most one room
_sid_to_room: Dict[str, str] = {}
_broadcast = None


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _acknowledged(handler):
    """Turn game errors into an ack for the sender; nothing is broadcast."""
    @functools.wraps(handler)
    def wrapper(data=None):
        try:
            result = handler(data if isinstance(data, dict) else {})
        except BauCuaError as exc:
            logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} error={type(exc).__name__}: {exc}")
            return exc.to_ack()
        ack = {'ok': True}
        if result:
            ack.update(result)
        return ack
    return wrapper


@contextmanager
def _room_session(code):
    """Yield a live room with its lock held."""
    room = registry.find_room(code)
    with room.lock:
        if room.destroyed:
            raise RoomNotFound(code)
        yield room


def _current_code() -> str:
    code = _sid_to_room.get(_get_sid())
    if not code:
        raise RoomNotFound(None)
    return code


def _vacate(sid: str, code: str, leave_channel: bool = True) -> None:
    """Take ``sid`` out of room ``code`` and tell whoever is left."""
    if leave_channel:
        leave_room(room_channel(code))
    try:
        with _room_session(code) as room:
            if sid not in room.roster:
                return
            _, _, new_host = registry.remove_player(code, sid)
            if room.destroyed:
                return
            _broadcast(code, 'players', {'players': room.roster.to_list()})
            if new_host:
                _broadcast(code, 'new_host', {'host': new_host})
            if room.active:
                _broadcast(code, 'new_game_state', {'gamestate': room.to_dict()})
    except RoomNotFound:
        return


def _leave_current_room(sid: str, leave_channel: bool = True) -> None:
    code = _sid_to_room.pop(sid, None)
    if code:
        _vacate(sid, code, leave_channel)


def _take_seat(sid: str, code: str) -> None:
    _sid_to_room[sid] = code
    join_room(room_channel(code))


# ---- connection ----

def handle_connect(auth=None):
    logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    logger.info(f"[disconnect] sid={sid} reason={reason}")
    _leave_current_room(sid, leave_channel=False)


# ---- rooms ----

@_acknowledged
def handle_host(data):
    sid = _get_sid()
    name = normalize_name(data.get('name'))
    code = normalize_room_code(data['code']) if data.get('code') else None
    previous = _sid_to_room.get(sid)
    room = registry.create_room(code, sid, name)
    _take_seat(sid, room.code)
    if previous:
        _vacate(sid, previous)
    return {'code': room.code, 'player': room.get_player(sid).to_dict()}


@_acknowledged
def handle_join(data):
    sid = _get_sid()
    name = normalize_name(data.get('name'))
    previous = _sid_to_room.get(sid)
    with _room_session(data.get('code')) as room:
        if sid in room.roster:
            return {'code': room.code, 'player': room.get_player(sid).to_dict()}
        player = room.add_player(sid, name)
        _take_seat(sid, room.code)
        logger.info(f"[player-join] code={room.code} player={sid} count={len(room.roster)}")
        _broadcast(room.code, 'players', {'players': room.roster.to_list()})
        ack = {'code': room.code, 'player': player.to_dict()}
    # old room's lock is taken only after the new one is released
    if previous and previous != ack['code']:
        _vacate(sid, previous)
    return ack


@_acknowledged
def handle_check(data):
    room = registry.check_room(data.get('code'))
    return {'code': room.code}


@_acknowledged
def handle_leave(data):
    _current_code()
    _leave_current_room(_get_sid())


@_acknowledged
def handle_room_setup(data):
    with _room_session(_current_code()) as room:
        _broadcast(room.code, 'room_data', room.summary())
        _broadcast(room.code, 'players', {'players': room.roster.to_list()})


# ---- lobby ----

@_acknowledged
def handle_change_setting(data):
    name = data.get('name')
    with _room_session(_current_code()) as room:
        room.require_host(_get_sid())
        value = room.update_setting(name, data.get('value'))
        _broadcast(room.code, 'setting_changed', {'name': name, 'value': value})
        return {'name': name, 'value': value}


@_acknowledged
def handle_start_game(data):
    with _room_session(_current_code()) as room:
        room.require_host(_get_sid())
        room.start_game(data.get('balance'))
        logger.info(f"[game-start] code={room.code} players={len(room.roster)}")
        _broadcast(room.code, 'game_start', {'gamestate': room.to_dict()})


@_acknowledged
def handle_play_again(data):
    with _room_session(_current_code()) as room:
        room.require_host(_get_sid())
        room.reset_game()
        _broadcast(room.code, 'game_restart', {'gamestate': room.to_dict()})


# ---- rounds ----

@_acknowledged
def handle_start_round(data):
    with _room_session(_current_code()) as room:
        room.require_host(_get_sid())
        scheduler.start_round(room)


@_acknowledged
def handle_bet(data):
    with _room_session(_current_code()) as room:
        room.place_bet(_get_sid(), data.get('amount'), data.get('face'))
        _broadcast(room.code, 'new_game_state', {'gamestate': room.to_dict()})


@_acknowledged
def handle_unbet(data):
    with _room_session(_current_code()) as room:
        room.remove_bet(_get_sid(), data.get('amount'), data.get('face'))
        _broadcast(room.code, 'new_game_state', {'gamestate': room.to_dict()})


@_acknowledged
def handle_ready(data):
    with _room_session(_current_code()) as room:
        room.set_ready(_get_sid())
        _broadcast(room.code, 'new_game_state', {'gamestate': room.to_dict()})


@_acknowledged
def handle_send_message(data):
    with _room_session(_current_code()) as room:
        chatbox = room.add_message(_get_sid(), data.get('text'))
        _broadcast(room.code, 'chatbox', {'chatbox': chatbox})


def register_socketio_handlers(namespace='/ws', broadcast=None) -> None:
    """Register Socket.IO event handlers on the game namespace."""
    global _broadcast
    _broadcast = broadcast
    _sid_to_room.clear()

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('host', handle_host, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('check', handle_check, namespace=namespace)
    socketio.on_event('leave', handle_leave, namespace=namespace)
    socketio.on_event('room_setup', handle_room_setup, namespace=namespace)
    socketio.on_event('change_setting', handle_change_setting, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('play_again', handle_play_again, namespace=namespace)
    socketio.on_event('start_round', handle_start_round, namespace=namespace)
    socketio.on_event('bet', handle_bet, namespace=namespace)
    socketio.on_event('unbet', handle_unbet, namespace=namespace)
    socketio.on_event('ready', handle_ready, namespace=namespace)
    socketio.on_event('send_message', handle_send_message, namespace=namespace)

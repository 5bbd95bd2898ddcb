import logging
import random

from baucua.errors import GameFinished, GameNotActive, RoundInProgress, StaleCallback
from .room import GameRoom, Phase

logger = logging.getLogger(__name__)


def _snapshot(players):
    return [p.to_dict() for p in players]


class RoundScheduler:
    """Drives a room through its round phases on timers.

    - One live timer handle per room (``room.timer_handle``); scheduling a new
      one cancels the old
    - Every callback re-checks the room under its lock and is dropped if the
      room was destroyed, changed phase, or the handle was superseded
    - Pipeline: round_intro -> betting -> revealing -> settling -> round_end
      -> round_intro | game_over
    """

    def __init__(self, timers=None, emit=None, rng=None):
        self.timers = timers
        self.emit = emit
        self.rng = rng or random.SystemRandom()
        self.intro_duration = 3
        self.tick_interval = 1
        self.times_up_duration = 3
        self.reveal_duration = 5.5
        self.results_duration = 5

    def init_app(self, app, timers, emit, rng=None) -> None:
        self.timers = timers
        self.emit = emit
        if rng is not None:
            self.rng = rng
        self.intro_duration = float(app.config.get('ROUND_INTRO_DURATION_SEC', 3))
        self.tick_interval = float(app.config.get('TICK_INTERVAL_SEC', 1))
        self.times_up_duration = float(app.config.get('TIMES_UP_DURATION_SEC', 3))
        self.reveal_duration = float(app.config.get('REVEAL_DURATION_SEC', 5.5))
        self.results_duration = float(app.config.get('RESULTS_DURATION_SEC', 5))

    # ---- plumbing ----

    def _transition(self, room: GameRoom, phase: Phase) -> None:
        logger.info(f"[phase] room={room.code} round={room.round} {room.phase.value} -> {phase.value}")
        room.cancel_timer()
        room.phase = phase

    def _set_timer(self, room: GameRoom, delay, step) -> None:
        room.cancel_timer()
        room.timer_handle = self.timers.schedule(delay, self._fire, room, room.phase, step)
        logger.debug(f"[timer-set] room={room.code} phase={room.phase.value} round={room.round} delay={delay}s")

    def _fire(self, handle, room: GameRoom, expected_phase: Phase, step) -> None:
        try:
            with room.lock:
                if room.destroyed:
                    raise StaleCallback(f"room {room.code} is gone")
                if handle.cancelled or room.timer_handle is not handle:
                    raise StaleCallback(f"handle superseded in room {room.code}")
                if room.phase != expected_phase:
                    raise StaleCallback(
                        f"room {room.code} expected {expected_phase.value}, is {room.phase.value}"
                    )
                room.timer_handle = None
                step(room)
        except StaleCallback as exc:
            logger.info(f"[timer-abort] {exc}")
        except Exception:
            logger.exception(f"[timer-error] room={room.code} phase={expected_phase.value}")

    def cancel(self, room: GameRoom) -> None:
        room.cancel_timer()

    # ---- phases ----

    def start_round(self, room: GameRoom) -> None:
        """Kick off the first round of a started game. Caller holds room.lock."""
        if not room.active:
            raise GameNotActive("The game has not started.")
        if room.phase == Phase.GAME_OVER:
            raise GameFinished()
        if room.phase != Phase.LOBBY:
            raise RoundInProgress("A round is already running.")
        self._begin_round(room)

    def _begin_round(self, room: GameRoom) -> None:
        self._transition(room, Phase.ROUND_INTRO)
        room.begin_round()
        self.emit(room.code, 'timer', {'current_time': room.timer})
        self.emit(room.code, 'clear_dice', {})
        self.emit(room.code, 'show_round', {'round': room.round})
        self._set_timer(room, self.intro_duration, self._open_betting)

    def _open_betting(self, room: GameRoom) -> None:
        self._transition(room, Phase.BETTING)
        self.emit(room.code, 'hide_round', {})
        self._set_timer(room, self.tick_interval, self._tick)

    def _tick(self, room: GameRoom) -> None:
        # Readiness is checked before the countdown so a tick that sees
        # everyone ready never also counts as a timeout
        current_time = room.update_timer()
        if current_time is None:
            self._close_betting(room, 'all_ready')
        elif current_time >= 0:
            self.emit(room.code, 'timer', {'current_time': current_time})
            self._set_timer(room, self.tick_interval, self._tick)
        else:
            self._close_betting(room, 'timeout')

    def _close_betting(self, room: GameRoom, reason: str) -> None:
        logger.info(f"[betting-closed] room={room.code} round={room.round} reason={reason}")
        room.timer = max(room.timer, 0)
        self._transition(room, Phase.REVEALING)
        self.emit(room.code, 'show_times_up', {'reason': reason})
        self._set_timer(room, self.times_up_duration, self._reveal)

    def _reveal(self, room: GameRoom) -> None:
        self.emit(room.code, 'hide_times_up', {})
        dice = room.roll_dice(self.rng)
        logger.info(f"[dice] room={room.code} round={room.round} dice={dice}")
        self.emit(room.code, 'dice_roll', {'dice': dice})
        self._set_timer(room, self.reveal_duration, self._settle)

    def _settle(self, room: GameRoom) -> None:
        self._transition(room, Phase.SETTLING)
        results = room.settle()
        self.emit(room.code, 'show_results', {'results': _snapshot(results)})
        self._set_timer(room, self.results_duration, self._finish_round)

    def _finish_round(self, room: GameRoom) -> None:
        self.emit(room.code, 'hide_results', {})
        bankrupt = room.finalize()
        for p in bankrupt:
            logger.info(f"[bankrupt] room={room.code} player={p.id}")
        self._transition(room, Phase.ROUND_END)
        ranked = room.set_rankings()
        self.emit(room.code, 'new_game_state', {'gamestate': room.to_dict()})

        next_round = room.next_round()
        if next_round == -1:
            self._transition(room, Phase.GAME_OVER)
            logger.info(f"[game-over] room={room.code} rounds_played={room.round - 1}")
            self.emit(room.code, 'game_over', {'results': _snapshot(ranked)})
            return
        self.emit(room.code, 'next_round', {'round': next_round})
        self._begin_round(room)

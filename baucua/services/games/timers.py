class TimerHandle:
    """A pending callback; ``cancel`` makes the eventual firing a no-op."""

    def __init__(self, delay):
        self.delay = delay
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class BackgroundTimers:
    """One-shot timers on Socket.IO background tasks.

    ``socketio.sleep`` cooperates with whichever async mode the server runs
    under (threading, eventlet or gevent).
    """

    def __init__(self, socketio):
        self.socketio = socketio

    def schedule(self, delay, callback, *args):
        handle = TimerHandle(delay)

        def _worker():
            self.socketio.sleep(delay)
            if handle.cancelled:
                return
            callback(handle, *args)

        self.socketio.start_background_task(_worker)
        return handle

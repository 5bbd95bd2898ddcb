import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Round phase timers (seconds)
    ROUND_INTRO_DURATION_SEC = float(os.environ.get('ROUND_INTRO_DURATION_SEC', '3'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    TIMES_UP_DURATION_SEC = float(os.environ.get('TIMES_UP_DURATION_SEC', '3'))
    REVEAL_DURATION_SEC = float(os.environ.get('REVEAL_DURATION_SEC', '5.5'))
    RESULTS_DURATION_SEC = float(os.environ.get('RESULTS_DURATION_SEC', '5'))
    # Room capacity (never above the 8-color palette)
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '8'))
    # Lobby defaults for new rooms
    DEFAULT_TIME_LIMIT = int(os.environ.get('DEFAULT_TIME_LIMIT', '30'))
    DEFAULT_ROUND_LIMIT = int(os.environ.get('DEFAULT_ROUND_LIMIT', '5'))
    DEFAULT_STARTING_BALANCE = int(os.environ.get('DEFAULT_STARTING_BALANCE', '10'))
    CHAT_HISTORY_LIMIT = int(os.environ.get('CHAT_HISTORY_LIMIT', '100'))

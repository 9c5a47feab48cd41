from __future__ import annotations

import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.models import DEFAULT_WIN_CONDITION, WIN_CONDITIONS
from .game.service import RoomRegistry
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .realtime.handlers import make_sender, register_socketio_handlers
from .storage import create_store


def select_async_mode(configured: str) -> str:
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config_class=Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=select_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", "")),
    )

    default_win_condition = app.config.get("DEFAULT_WIN_CONDITION", DEFAULT_WIN_CONDITION)
    if default_win_condition not in WIN_CONDITIONS:
        default_win_condition = DEFAULT_WIN_CONDITION

    rooms = RoomRegistry(
        create_store(app.config.get("REDIS_URL", "")),
        make_sender(socketio),
        key_prefix=app.config.get("STATE_KEY_PREFIX", "meld"),
        min_players=app.config.get("MIN_PLAYERS_TO_START", 2),
        max_name_length=app.config.get("MAX_NAME_LENGTH", 20),
        default_win_condition=default_win_condition,
    )
    app.extensions["meld.rooms"] = rooms

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, rooms)

    return app, socketio

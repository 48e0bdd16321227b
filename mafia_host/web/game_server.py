"""
Real-time server for the hosted game.
"""

import threading
from typing import Optional, Dict, Any, Callable

from flask import Flask, jsonify, request
from flask_socketio import SocketIO

from .commands import COMMAND_TYPES
from .event_emitter import EventEmitter
from ..config.game_config import GameConfig, default_config
from ..core.timer import ThreadScheduler
from ..session import GameSession


class GameServer:
    """
    Flask-SocketIO front end for a single ``GameSession``.

    Socket handlers and timer callbacks share one lock, so the session only
    ever sees one event at a time.
    """

    def __init__(self, config: GameConfig = default_config, event_emitter: Optional[EventEmitter] = None):
        self.config = config
        self.host = config.host
        self.port = config.port

        self.app = Flask(__name__)
        self.socketio = SocketIO(self.app, cors_allowed_origins=config.cors_allowed_origins,
                                 async_mode='threading')
        self.lock = threading.RLock()
        self.event_emitter = event_emitter or EventEmitter()
        self.session = GameSession(
            config,
            event_emitter=self.event_emitter,
            scheduler=ThreadScheduler(self.lock),
        )
        self.clients_connected = 0

        # Register event emitter listener
        self.event_emitter.add_listener(self._broadcast_event)

        # Setup routes
        self._setup_routes()

        # Setup socketio handlers
        self._setup_socketio()

    def _setup_routes(self):
        """Setup Flask routes."""
        @self.app.route('/status')
        def status():
            with self.lock:
                summary = self.session.game_state.get_game_summary()
            summary["clients_connected"] = self.clients_connected
            return jsonify(summary)

    def _setup_socketio(self):
        """Setup SocketIO event handlers."""
        @self.socketio.on('connect')
        def handle_connect(*args):
            with self.lock:
                self.clients_connected += 1
            print(f"[SERVER] Client connected. Total clients: {self.clients_connected}")

        @self.socketio.on('disconnect')
        def handle_disconnect(*args):
            with self.lock:
                self.clients_connected -= 1
                self.session.disconnect(request.sid)
            print(f"[SERVER] Client disconnected. Total clients: {self.clients_connected}")

        for event in sorted(COMMAND_TYPES):
            self.socketio.on_event(event, self._command_handler(event))

    def _command_handler(self, event: str) -> Callable[..., None]:
        def handler(*args):
            payload = args[0] if args else None
            with self.lock:
                self.session.handle(request.sid, event, payload)
        handler.__name__ = f"handle_{event}"
        return handler

    def _broadcast_event(self, event_type: str, data: Dict[str, Any], to: Optional[str]) -> None:
        """Send an event to one connection, or to everyone when ``to`` is None."""
        self.socketio.emit(event_type, data, to=to)

    def start(self) -> None:
        """Start the server."""
        print(f"\n{'='*60}")
        print(f"Starting game server on http://{self.host}:{self.port}")
        print(f"{'='*60}\n")
        self.socketio.run(self.app, host=self.host, port=self.port, debug=False, allow_unsafe_werkzeug=True)

"""
Entry point for the hosted Mafia game server.
"""

import argparse
import os
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from mafia_host.config import GameConfig, load_config
from mafia_host.web import EventEmitter, RunRecorder
from mafia_host.web.game_server import GameServer


def build_event_emitter(config: GameConfig, run_name: Optional[str] = None) -> EventEmitter:
    """Event emitter that records to ``runs/<run_name>/`` when recording is on."""
    if not config.record_events:
        return EventEmitter()

    run_recorder = RunRecorder(config.runs_dir)
    run_name = run_recorder.create_run(run_name)
    run_recorder.save_metadata({
        "run_name": run_name,
        "started_at": datetime.now().isoformat(),
        "min_players": config.min_players,
        "mafia_ratio": config.mafia_ratio,
        "max_revotes": config.max_revotes,
        "random_seed": config.random_seed,
    })
    print(f"Recording events to: {run_recorder.get_run_path()}/")
    return EventEmitter(run_recorder)


def main():
    """Entry point for running the server."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Host a Mafia party game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                # Default settings on port 3000
  python main.py --config configs/default.yaml  # Load settings from YAML
  python main.py --port 8080 --no-record        # Different port, no event recording
  PORT=8080 python main.py                      # Port from the environment
        """
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: use default config)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Address to bind (overrides config)"
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Port to listen on (overrides PORT and config)"
    )
    parser.add_argument(
        "--seed",
        "-s",
        type=int,
        default=None,
        help="Random seed for reproducible role assignment"
    )
    parser.add_argument(
        "--run-name",
        "-r",
        type=str,
        default=None,
        help="Custom name for this run (default: auto-generated timestamp)"
    )
    parser.add_argument(
        "--no-record",
        action="store_true",
        help="Do not record broadcast events to the runs directory"
    )

    args = parser.parse_args()

    config = load_config(args.config)

    # Command line beats the environment, which beats the config file
    if os.environ.get("PORT"):
        config.port = int(os.environ["PORT"])
    if args.port is not None:
        config.port = args.port
    if args.host is not None:
        config.host = args.host
    if args.seed is not None:
        config.random_seed = args.seed
    if args.no_record:
        config.record_events = False

    print("Mafia Game Server")
    print("=" * 60)
    if args.config:
        print(f"Using config: {args.config}")
    print(f"Minimum players: {config.min_players} (host included)")
    print("=" * 60)

    server = GameServer(config, event_emitter=build_event_emitter(config, args.run_name))
    server.start()


if __name__ == "__main__":
    main()

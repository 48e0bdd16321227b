"""
Game configuration and constants.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Configuration for game parameters."""

    # Table rules
    min_players: int = 5  # Total people required to start, host included
    mafia_ratio: float = 0.25
    max_revotes: int = 3

    # Time limits (seconds)
    game_over_delay: float = 5.0  # Lets the final elimination be seen before Game Over
    default_voting_duration: int = 120
    default_extend_seconds: int = 60
    timer_tick_interval: float = 1.0

    # Boundary
    max_name_length: int = 24

    # Session settings
    allow_spectator_view: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_allowed_origins: str = "*"

    # Event recording
    record_events: bool = True
    runs_dir: str = "runs"

    # Console announcements
    use_announcements: bool = True

    random_seed: Optional[int] = None  # Seeds the role shuffle for reproducible games


# Default configuration instance
default_config = GameConfig()

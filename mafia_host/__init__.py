"""
Hosted Mafia party game: session engine and real-time server.
"""

__version__ = "0.1.0"

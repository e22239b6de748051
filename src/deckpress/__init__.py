"""Deck Press: printable proxy decks from card lists."""

__version__ = "1.0.0"

"""Configuration for Deck Press (pydantic-settings)."""

"""Deck model, card list parsing and grouping."""

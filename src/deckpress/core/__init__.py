"""
Cross-cutting infrastructure for Deck Press (logging).
"""

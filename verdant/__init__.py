"""Verdant: carbon-weighted green investment screener."""

"""Timed auction house channel."""

"""Test doubles for code that sends API requests."""

from src.testing.tapper import HttpTapper, UnmatchedRequestError


__all__ = ["HttpTapper", "UnmatchedRequestError"]

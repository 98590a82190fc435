"""Courier - a durable publication ledger for fan-out occurrence delivery."""

__version__ = "0.1.0"

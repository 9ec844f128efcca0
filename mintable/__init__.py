"""Mintable fungible-token ledger."""

__version__ = "0.1.0"

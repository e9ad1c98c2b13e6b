"""Meetat marketing ledger: card balances, dotation limits and reversible transactions."""

__version__ = "0.1.0"

"""
Odysseus - Ledger API

A FastAPI-based service where users open typed accounts and post
idempotent credit/debit transactions against them.
"""

__version__ = "0.1.0"

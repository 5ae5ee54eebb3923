"""
Token giveaway: distribute an SPL token to random winners in one transaction.

Mints a token, picks winners, and sends the batch of transfers as a single
versioned transaction twice: compressed through an address lookup table and
with every address inline, so the two serialized sizes can be compared.
"""

__version__ = "0.1.0"

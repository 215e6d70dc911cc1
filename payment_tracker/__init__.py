"""
Payment Tracker - Source Package

A single-user tracker of who owes what: named amounts filed as pending,
paid or debit, kept in sync with a remote store.

DESIGN PRINCIPLES:
1. Remote first, local second: the local list never shows a change
   the remote store has not accepted
2. Fail visibly, never retry silently
3. Deletes are final remotely but undoable for a short window
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Payment Tracker Team"

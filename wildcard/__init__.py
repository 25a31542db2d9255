"""Wildcard fantasy football league core.

Scoring engine, lineup slot assignment and lineup locking for a seasonal
"Wildcard" fantasy competition, plus the storage, API and CLI layers that
drive them.
"""

__version__ = "0.1.0"

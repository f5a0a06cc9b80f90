"""
Async PostgreSQL data-access layer for user records.
"""

__version__ = "0.1.0"

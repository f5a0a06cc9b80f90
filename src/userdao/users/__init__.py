"""
User records: schemas, table definition and data-access object.

Keep this module lightweight; import from the submodules directly.
"""

__all__ = [
    "dao",
    "models",
    "schemas",
]

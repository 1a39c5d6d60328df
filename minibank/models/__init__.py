"""
SQLAlchemy ORM models package.

Models are imported here so RecordStore.create_schema() registers them on
Base.metadata, and other modules can import from minibank.models directly.
"""

from minibank.models.user import AccountType, Role, User  # noqa: F401

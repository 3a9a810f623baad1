"""
Stored Credential ORM Model
===========================

The ``StoredCredential`` model maps the ``stored_credential`` table, a tiny
key/value table holding the bearer token between two runs of the client.

Key features
~~~~~~~~~~~~
- String primary key (``key``), the storage key from settings (``token``)
- Raw token value (``value``)
- Timezone-aware ``updated_at`` timestamp (UTC)
"""

from datetime import datetime, timezone

from sqlalchemy import TEXT, VARCHAR, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from avocat_assist.database.config.connection_engine import declarativeBase


class StoredCredential(declarativeBase):
    """
    ORM model for the `stored_credential` table.

    Attributes
    ----------
    key : str
        Primary key. Storage key of the credential.
    value : str
        The persisted token.
    updated_at : datetime
        Last time the credential was written (timezone-aware, UTC).
    """

    __tablename__ = "stored_credential"

    key: Mapped[str] = mapped_column(VARCHAR(64), primary_key=True)
    """Storage key (cannot be null)."""

    value: Mapped[str] = mapped_column(TEXT, nullable=False)
    """The token itself."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    """Timestamp of the last write (UTC, timezone-aware)."""

    def __init__(self, key: str, value: str, updated_at=None):
        self.key = key
        self.value = value
        self.updated_at = updated_at or datetime.now(timezone.utc)

    def __str__(self) -> str:
        # never print the token itself
        return f"StoredCredential: key:{self.key}, updated_at: {self.updated_at}"

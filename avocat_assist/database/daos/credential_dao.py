"""
Credential DAO

Purpose
-------
Thin data-access layer for the `StoredCredential` entity:
- Fetch a credential by key
- Insert or replace a credential
- Delete a credential

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller (no session
  creation inside the DAO). Commit/rollback belong to `@transactional`.
- Errors are logged and re-raised so the storage layer decides the policy.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from avocat_assist.database.entities.credential import StoredCredential

logger = logging.getLogger(__name__)


class CredentialDao:
    """
    Data Access Object (DAO) for `StoredCredential` rows.
    """

    def fetchCredential(self, session: Session, key: str) -> Optional[StoredCredential]:
        """
        Fetch the credential stored under `key`.

        Returns
        -------
        StoredCredential | None
            The row, or None if nothing is stored.
        """
        try:
            return session.get(StoredCredential, key)
        except Exception:
            logger.exception("Error in CredentialDao.fetchCredential")
            raise

    def upsertCredential(self, session: Session, key: str, value: str) -> None:
        """Insert the credential or overwrite the existing value."""
        try:
            credential = session.get(StoredCredential, key)
            if credential is None:
                session.add(StoredCredential(key=key, value=value))
            else:
                credential.value = value
                credential.updated_at = datetime.now(timezone.utc)
        except Exception:
            logger.exception("Error in CredentialDao.upsertCredential")
            raise

    def deleteCredential(self, session: Session, key: str) -> None:
        """Remove the credential; deleting a missing key is a no-op."""
        try:
            credential = session.get(StoredCredential, key)
            if credential is not None:
                session.delete(credential)
        except Exception:
            logger.exception("Error in CredentialDao.deleteCredential")
            raise

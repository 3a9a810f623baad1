"""
Durable storage of the bearer token.

The session store is the only writer; the HTTP adapter reads the token
through the session store's credential provider. Two implementations:

- `MemoryTokenStorage`: process-local, for tests and ephemeral shells.
- `SqlTokenStorage`: one row in the `stored_credential` table, surviving
  restarts of the client.
"""

from typing import Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from avocat_assist.config.config import settings
from avocat_assist.database.config.connection_engine import create_connection_engine
from avocat_assist.database.daos.credential_dao import CredentialDao
from avocat_assist.database.helpers.transactionManagement import transactional


class TokenStorage(Protocol):
    """Contract of a credential store."""

    def get(self) -> Optional[str]: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStorage:
    """Keeps the token in memory only."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class SqlTokenStorage:
    """
    Token store backed by SQLAlchemy.

    Parameters
    ----------
    engine : Engine, optional
        Engine of the credential database. Defaults to an engine built from
        `settings.TOKEN_DB_URL`.
    key : str, optional
        Storage key. Defaults to `settings.TOKEN_STORAGE_KEY`.
    """

    def __init__(self, engine: Optional[Engine] = None, key: Optional[str] = None):
        self.engine = engine or create_connection_engine()
        self.key = key or settings.TOKEN_STORAGE_KEY
        self.session_factory = sessionmaker(bind=self.engine)
        self.dao = CredentialDao()

    @transactional
    def get(self, session: Session = None) -> Optional[str]:
        credential = self.dao.fetchCredential(session, self.key)
        return credential.value if credential else None

    @transactional
    def set(self, token: str, session: Session = None) -> None:
        self.dao.upsertCredential(session, self.key, token)

    @transactional
    def clear(self, session: Session = None) -> None:
        self.dao.deleteCredential(session, self.key)

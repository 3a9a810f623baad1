"""
AvocatAssist client — composition root
======================================

Builds the collaborators once and wires them together:

    storage ──► SessionStore ──credentials──► ApiClient (BearerTokenAuth)
                     ▲                              │
                     └────── on_unauthorized ───────┘

Usage
-----
app = AvocatAssist.create()
await app.initialize()
await app.session.login("client@example.com", "secret123")
chat = await app.open_chat(OwnerRef.project(42, "Litige bail"))
await chat.send("Quels sont mes recours ?")
await app.aclose()
"""

import logging
import random
from typing import Optional

import httpx

from avocat_assist.api.errors import ApiError
from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import OwnerRef, OwnerType, Role, User
from avocat_assist.api.resources import LegalRequestsApi, ProjectsApi
from avocat_assist.auth.notifications import Notifier
from avocat_assist.auth.session_store import SessionStore
from avocat_assist.chat.profiles import RoleProfile, profile_for
from avocat_assist.chat.reconciliation import ConversationDirectory
from avocat_assist.chat.workflow import ChatWorkflow
from avocat_assist.config.config import Settings, settings as default_settings
from avocat_assist.database.config.connection_engine import create_connection_engine
from avocat_assist.database.core.token_storage import SqlTokenStorage, TokenStorage

logger = logging.getLogger(__name__)


class AvocatAssist:
    """
    The assembled client.

    Attributes
    ----------
    settings : Settings
        Configuration the collaborators were built from.
    notifier : Notifier
        Success/failure notifications of every flow.
    session : SessionStore
        Token lifecycle and current user.
    api : ApiClient
        The one HTTP client, authenticated through `session.credentials`.
    projects, legal_requests : ProjectsApi, LegalRequestsApi
        Typed resource wrappers.
    conversations : ConversationDirectory
        Standalone conversations of the quick assistant.
    """

    def __init__(self, settings: Settings, notifier: Notifier, session: SessionStore, api: ApiClient):
        self.settings = settings
        self.notifier = notifier
        self.session = session
        self.api = api
        self.projects = ProjectsApi(api)
        self.legal_requests = LegalRequestsApi(api)
        self.conversations = ConversationDirectory(api)

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        storage: Optional[TokenStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        notifier: Optional[Notifier] = None,
    ) -> "AvocatAssist":
        """
        Build a client.

        Parameters
        ----------
        settings : Settings, optional
            Defaults to the process settings (environment / `.env`).
        storage : TokenStorage, optional
            Defaults to `SqlTokenStorage` on `settings.TOKEN_DB_URL`.
        transport : httpx.AsyncBaseTransport, optional
            Alternative transport (tests use ``httpx.MockTransport``).
        """
        settings = settings or default_settings
        notifier = notifier or Notifier(history_limit=settings.NOTIFICATION_HISTORY_LIMIT)
        if storage is None:
            storage = SqlTokenStorage(create_connection_engine(settings.TOKEN_DB_URL), settings.TOKEN_STORAGE_KEY)
        session = SessionStore(storage, notifier)
        api = ApiClient(
            settings.API_URL,
            credentials=session.credentials,
            timeout=settings.REQUEST_TIMEOUT,
            transport=transport,
        )
        session.bind_client(api)
        logger.debug("AvocatAssist client created for %s", settings.API_URL)
        return cls(settings, notifier, session, api)

    async def __aenter__(self) -> "AvocatAssist":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def initialize(self) -> Optional[User]:
        """Restore the persisted session (see `SessionStore.initialize`)."""
        return await self.session.initialize()

    def profile(self) -> RoleProfile:
        """Chat profile of the signed-in user (client wording for visitors)."""
        user = self.session.current_user
        return profile_for(user.role if user else Role.CLIENT)

    async def open_chat(self, owner: OwnerRef, rng: Optional[random.Random] = None) -> ChatWorkflow:
        """
        Open the chat of `owner` with the current user's profile.

        A project reference without a title gets it from `/projects/{id}`
        for the client title template; a failed lookup keeps the id.
        """
        if owner.owner_entity_type == OwnerType.PROJECT and owner.title is None and owner.owner_entity_id is not None:
            owner = await self._with_project_title(owner)
        workflow = ChatWorkflow(
            self.api, self.profile(), owner, rng=rng,
            progress_interval=self.settings.UPLOAD_PROGRESS_INTERVAL,
            progress_step=self.settings.UPLOAD_PROGRESS_STEP,
            progress_cap=self.settings.UPLOAD_PROGRESS_CAP,
            download_dir=self.settings.DOWNLOAD_DIR,
        )
        await workflow.open()
        return workflow

    async def _with_project_title(self, owner: OwnerRef) -> OwnerRef:
        try:
            project = await self.projects.get(owner.owner_entity_id)
        except (ApiError, ValueError) as e:
            logger.info("Project %s title unavailable: %s", owner.owner_entity_id, e)
            return owner
        return OwnerRef.project(owner.owner_entity_id, project.title or None)

    async def aclose(self) -> None:
        await self.api.aclose()

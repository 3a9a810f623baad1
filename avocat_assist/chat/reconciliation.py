"""
Conversation Reconciliation — find-or-create
============================================

Purpose
-------
Map a business entity (project, legal request, or nothing for a standalone
conversation) to exactly one chat thread usable for message exchange.

Algorithm
---------
1. Ask the backend for the threads filtered by the owner reference.
2. Keep the first thread that belongs to the owner (backend ordering is
   trusted). Entries naming another owner (id or entity type) are skipped,
   since the backend may ignore the filter and return every chat of the user.
3. None found → create one titled with the role profile's template.
4. Suggestions come from the thread's persisted `lastSuggestedQuestions`
   when non-empty, else from the profile defaults.

Endpoints
---------
- project        : GET /chats?projectId=…       POST /chats {projectId, title}
- legal request  : GET /chats?legalRequestId=…  POST /chats {legalRequestId, title}
- standalone     : GET /conversations           POST /conversations {title}

A missing owner id fails fast, before any request. Any failure surfaces as a
`ThreadResolutionError`; the view must not send messages without a thread.
"""

import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel

from avocat_assist.api.errors import (
    ApiError,
    FormValidationError,
    ThreadResolutionError,
    describe_error,
)
from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import ConversationThread, OwnerRef, OwnerType
from avocat_assist.chat.profiles import RoleProfile

logger = logging.getLogger(__name__)

RESOLUTION_FAILED_MESSAGE = "Impossible de charger ou créer la conversation pour ce dossier."

MISSING_OWNER_MESSAGES = {
    OwnerType.PROJECT: "ID du dossier (projet) manquant.",
    OwnerType.LEGAL_REQUEST: "ID de la demande juridique manquant.",
}


def thread_endpoint(owner_type: OwnerType) -> Tuple[str, Optional[str]]:
    """Collection path and owner filter field for an owner type."""
    if owner_type == OwnerType.PROJECT:
        return "/chats", "projectId"
    if owner_type == OwnerType.LEGAL_REQUEST:
        return "/chats", "legalRequestId"
    return "/conversations", None


def _thread_list(payload) -> list:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("chats", "conversations"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


OWNER_FIELDS = ("projectId", "legalRequestId")


def _belongs_to(raw, owner_field: Optional[str], owner_id) -> bool:
    """False when `raw` names any owner other than (`owner_field`, `owner_id`)."""
    if not owner_field or not isinstance(raw, dict):
        return True
    for field in OWNER_FIELDS:
        value = raw.get(field)
        if value is None:
            continue
        if field != owner_field or str(value) != str(owner_id):
            return False
    return True


class ResolvedThread(BaseModel):
    """A reconciled thread and the suggestions to display with it."""
    thread: ConversationThread
    suggestions: List[str]
    created: bool = False


class ConversationReconciler:
    """
    Find-or-create of the thread owned by an entity.

    Parameters
    ----------
    api : ApiClient
        HTTP adapter.
    profile : RoleProfile
        Supplies the title templates and default suggestions.
    """

    def __init__(self, api: ApiClient, profile: RoleProfile):
        self.api = api
        self.profile = profile

    async def resolve(self, owner: OwnerRef) -> ResolvedThread:
        """
        Return the single thread of `owner`, creating it if needed.

        Raises
        ------
        ThreadResolutionError
            Missing owner id (no request issued), network/backend failure, or
            a create response without an id.
        """
        owner_type = owner.owner_entity_type
        if owner_type != OwnerType.STANDALONE and owner.owner_entity_id in (None, ""):
            raise ThreadResolutionError(MISSING_OWNER_MESSAGES[owner_type])

        collection, owner_field = thread_endpoint(owner_type)
        params = {owner_field: owner.owner_entity_id} if owner_field else None
        created = False
        try:
            existing = [
                t for t in _thread_list(await self.api.get(collection, params=params, fallback=RESOLUTION_FAILED_MESSAGE))
                if _belongs_to(t, owner_field, owner.owner_entity_id)
            ]
            if existing:
                raw = existing[0]
            else:
                body = {"title": self.profile.thread_title(owner)}
                if owner_field:
                    body[owner_field] = owner.owner_entity_id
                logger.info("No thread for %s %s, creating one", owner_type.value, owner.owner_entity_id)
                raw = await self.api.post(collection, json=body, fallback=RESOLUTION_FAILED_MESSAGE)
                if not isinstance(raw, dict) or raw.get("id") is None:
                    raise ThreadResolutionError("La création de la conversation a échoué.")
                created = True
            thread = ConversationThread.model_validate(raw)
        except ApiError as e:
            raise ThreadResolutionError(describe_error(e, RESOLUTION_FAILED_MESSAGE)) from e
        except ValueError as e:
            logger.warning("Malformed thread payload for %s: %s", owner_type.value, e)
            raise ThreadResolutionError(RESOLUTION_FAILED_MESSAGE) from e

        thread = thread.model_copy(update={
            "owner_entity_type": owner_type,
            "owner_entity_id": owner.owner_entity_id,
            "title": thread.title or self.profile.thread_title(owner),
        })
        return ResolvedThread(thread=thread, suggestions=self.suggestions_for(thread), created=created)

    def suggestions_for(self, thread: ConversationThread) -> List[str]:
        if thread.last_suggested_questions:
            return list(thread.last_suggested_questions)
        return self.profile.defaults_for(thread.owner_entity_type)


class ConversationDirectory:
    """
    Standalone conversations of the current user (the quick assistant).

    `list()` returns the conversations newest first as ordered by the backend;
    `create(title)` adds one at the front.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.conversations: List[ConversationThread] = []
        self.error: Optional[str] = None

    async def list(self) -> List[ConversationThread]:
        try:
            payload = await self.api.get("/conversations", fallback="Impossible de charger les conversations.")
        except ApiError as e:
            self.error = describe_error(e, "Impossible de charger les conversations.")
            return self.conversations
        self.conversations = [
            ConversationThread.model_validate(c).model_copy(update={"owner_entity_type": OwnerType.STANDALONE})
            for c in _thread_list(payload)
        ]
        return self.conversations

    async def create(self, title: str) -> ConversationThread:
        """
        Raises
        ------
        FormValidationError
            Blank title, no request issued.
        ApiError
            Backend failure (also recorded in `error`).
        """
        if not title or not title.strip():
            self.error = "Veuillez entrer un titre pour la conversation."
            raise FormValidationError({"title": self.error})
        try:
            payload = await self.api.post("/conversations", json={"title": title}, fallback="Impossible de créer la conversation.")
        except ApiError as e:
            self.error = describe_error(e, "Impossible de créer la conversation.")
            raise
        conversation = ConversationThread.model_validate(payload).model_copy(
            update={"owner_entity_type": OwnerType.STANDALONE}
        )
        self.conversations.insert(0, conversation)
        self.error = None
        return conversation

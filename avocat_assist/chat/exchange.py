"""
Message Exchange Loop
=====================

Purpose
-------
Send/receive cycle of one resolved thread:
- `send` appends an optimistic user message, asks the AI, then finalizes the
  user message and appends the answer (user message before AI reply).
- A failed `send` keeps the user message and appends one error-flagged AI
  message. The optimistic insert is never rolled back.
- `edit` and `delete` mutate locally first and restore the affected message
  when the backend call fails. Messages appended meanwhile (an upload
  announcement, for instance) are kept.
- After a successful answer the suggestions come from the response, or from a
  random sample of the role's fallback pool.

Key Notes
---------
- The send/edit-delete asymmetry in failure handling is kept on purpose;
  both policies are part of the observable behavior of the chat.
- One send at a time: while `is_pending` is True further sends are ignored,
  like the disabled send button of the chat view.
- Results resolving after the view scope is closed are discarded.

Endpoints
---------
- load   : GET /chats/{id}                 | GET /conversations/{id}
- send   : POST /ai/ask {question, chatId} | {question, conversationId}
- edit   : PUT  …/{id}/messages/{messageId} {content}
- delete : DELETE …/{id}/messages/{messageId}
"""

import itertools
import logging
import random
import time
from typing import List, Optional, Union

from avocat_assist.api.errors import ApiError, describe_error
from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import (
    AskResponse,
    ConversationThread,
    Message,
    OwnerType,
    Sender,
    utc_now,
)
from avocat_assist.chat.profiles import RoleProfile, sample_suggestions
from avocat_assist.chat.scope import ViewScope
from avocat_assist.config.config import settings

logger = logging.getLogger(__name__)

SEND_FAILED_MESSAGE = "Erreur lors de l'envoi du message."
LOAD_FAILED_MESSAGE = "Impossible de charger les messages."
EDIT_FAILED_MESSAGE = "Impossible d'enregistrer la modification du message."
DELETE_FAILED_MESSAGE = "Impossible de supprimer le message."


_local_ids = itertools.count(1)


def local_id(prefix: str) -> str:
    """Client-side id such as `temp-1700000000000-3`, unique within the process."""
    return f"{prefix}-{time.time_ns() // 1_000_000}-{next(_local_ids)}"


def _messages_of(payload) -> list:
    if isinstance(payload, dict):
        if isinstance(payload.get("messages"), list):
            return payload["messages"]
        for key in ("chat", "conversation"):
            nested = payload.get(key)
            if isinstance(nested, dict) and isinstance(nested.get("messages"), list):
                return nested["messages"]
    return []


class MessageExchange:
    """
    Ordered message cache and suggestion list of one thread.

    Parameters
    ----------
    api : ApiClient
        HTTP adapter.
    thread : ConversationThread
        The resolved thread (from `ConversationReconciler`).
    profile : RoleProfile
        Supplies the default suggestions and the fallback pool.
    scope : ViewScope, optional
        Lifetime of the owning view.
    suggestions : list[str], optional
        Initial suggestions (e.g. from reconciliation).
    rng : random.Random, optional
        Randomness of the fallback sample.
    """

    def __init__(
        self,
        api: ApiClient,
        thread: Optional[ConversationThread],
        profile: RoleProfile,
        scope: Optional[ViewScope] = None,
        suggestions: Optional[List[str]] = None,
        rng: Optional[random.Random] = None,
        suggestion_limit: Optional[int] = None,
    ):
        self.api = api
        self.thread = thread
        self.profile = profile
        self.scope = scope or ViewScope()
        self.rng = rng or random.Random()
        self.suggestion_limit = suggestion_limit if suggestion_limit is not None else settings.SUGGESTION_LIMIT
        owner_type = thread.owner_entity_type if thread else OwnerType.STANDALONE
        self.suggestions: List[str] = list(suggestions) if suggestions is not None else profile.defaults_for(owner_type)
        self.messages: List[Message] = []
        self.error: Optional[str] = None
        self.is_pending = False
        self.loading = False

    # ------------------------------------------------------------------
    # paths
    # ------------------------------------------------------------------

    @property
    def thread_id(self):
        return self.thread.id if self.thread else None

    @property
    def is_standalone(self) -> bool:
        return self.thread is not None and self.thread.owner_entity_type == OwnerType.STANDALONE

    @property
    def thread_path(self) -> str:
        collection = "/conversations" if self.is_standalone else "/chats"
        return f"{collection}/{self.thread_id}"

    def message_path(self, message_id) -> str:
        return f"{self.thread_path}/messages/{message_id}"

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """
        Replace the cache with the thread's stored messages.

        Returns
        -------
        bool
            False if the thread could not be loaded (`error` is set).
        """
        if self.thread_id is None:
            self.messages = []
            return False
        self.loading = True
        self.error = None
        try:
            payload = await self.api.get(self.thread_path, fallback=LOAD_FAILED_MESSAGE)
            messages = [Message.model_validate(m) for m in _messages_of(payload)]
        except (ApiError, ValueError) as e:
            if self.scope.discard("message load failure"):
                return False
            logger.warning("Error fetching messages for thread %s: %s", self.thread_id, e)
            self.error = describe_error(e, LOAD_FAILED_MESSAGE)
            self.messages = []
            return False
        finally:
            self.loading = False

        if self.scope.discard("message load"):
            return False
        self.messages = messages
        persisted = payload.get("lastSuggestedQuestions") if isinstance(payload, dict) else None
        if persisted:
            self.suggestions = list(persisted)
        elif self.messages:
            self.suggestions = self.fallback_suggestions()
        else:
            self.suggestions = self.profile.defaults_for(self.thread.owner_entity_type)
        return True

    async def send(self, content: Optional[str]) -> Optional[Message]:
        """
        Send `content` to the AI.

        Returns
        -------
        Message | None
            The AI answer, the error-flagged AI message on failure, or None
            when nothing was sent (blank content, no thread, send pending,
            view closed).
        """
        if not content or not content.strip():
            return None
        if self.thread_id is None or self.is_pending:
            return None

        user_message = Message(id=local_id("temp"), sender=Sender.USER, content=content)
        self.messages.append(user_message)
        self.is_pending = True
        self.error = None

        payload = {"question": content}
        payload["conversationId" if self.is_standalone else "chatId"] = self.thread_id

        try:
            raw = await self.api.post("/ai/ask", json=payload, fallback=SEND_FAILED_MESSAGE)
            answer = AskResponse.model_validate(raw or {})
        except (ApiError, ValueError) as e:
            if self.scope.discard("send failure"):
                return None
            reason = describe_error(e, SEND_FAILED_MESSAGE)
            logger.warning("Error sending message to thread %s: %s", self.thread_id, reason)
            self.error = reason
            error_message = Message(
                id=local_id("error"),
                sender=Sender.AI,
                content=f"Désolé, une erreur s'est produite: {reason}",
                is_error=True,
            )
            # the optimistic user message stays in place
            self.messages = [m for m in self.messages if m.id != user_message.id] + [user_message, error_message]
            return error_message
        finally:
            self.is_pending = False

        if self.scope.discard("send response"):
            return None

        final_user = user_message.model_copy(update={"id": local_id("user")})
        ai_message = Message(
            id=answer.message_id if answer.message_id is not None else local_id("ai"),
            sender=Sender.AI,
            content=answer.response,
        )
        self.messages = [m for m in self.messages if m.id != user_message.id] + [final_user, ai_message]

        if answer.suggested_questions:
            self.suggestions = list(answer.suggested_questions)
        else:
            self.suggestions = self.fallback_suggestions()
        return ai_message

    async def edit(self, message_id: Union[int, str], new_content: Optional[str]) -> bool:
        """
        Replace the content of a message, rolling back on failure.

        Returns
        -------
        bool
            True if the backend accepted the edit.
        """
        if self.thread_id is None or message_id is None:
            return False
        if not new_content or not new_content.strip():
            return False
        new_content = new_content.strip()
        original = next((m for m in self.messages if m.id == message_id), None)
        self.messages = [
            m.model_copy(update={"content": new_content, "updated_at": utc_now()}) if m.id == message_id else m
            for m in self.messages
        ]
        self.error = None
        try:
            await self.api.put(self.message_path(message_id), json={"content": new_content}, fallback=EDIT_FAILED_MESSAGE)
        except ApiError as e:
            if self.scope.discard("edit failure"):
                return False
            logger.warning("Error saving edited message %s: %s", message_id, e)
            self.error = describe_error(e, EDIT_FAILED_MESSAGE)
            if original is not None:
                self.messages = [original if m.id == message_id else m for m in self.messages]
            return False
        return True

    async def delete(self, message_id: Union[int, str]) -> bool:
        """
        Remove a message, restoring it at its original position on failure.
        """
        if self.thread_id is None or message_id is None:
            return False
        position = next((i for i, m in enumerate(self.messages) if m.id == message_id), None)
        original = self.messages[position] if position is not None else None
        self.messages = [m for m in self.messages if m.id != message_id]
        self.error = None
        try:
            await self.api.delete(self.message_path(message_id), fallback=DELETE_FAILED_MESSAGE)
        except ApiError as e:
            if self.scope.discard("delete failure"):
                return False
            logger.warning("Error deleting message %s: %s", message_id, e)
            self.error = describe_error(e, DELETE_FAILED_MESSAGE)
            if original is not None and all(m.id != message_id for m in self.messages):
                self.messages.insert(min(position, len(self.messages)), original)
            return False
        return True

    def append_system_message(self, content: str) -> Message:
        """Local announcement shown in the chat (not sent to the backend)."""
        message = Message(id=local_id("system"), sender=Sender.AI, content=content, is_system=True)
        self.messages.append(message)
        return message

    def fallback_suggestions(self) -> List[str]:
        return sample_suggestions(self.profile.fallback_pool, self.suggestion_limit, self.rng)

"""
Chat Workflow
=============

Purpose
-------
One chat page, whatever the role: the client project page, the lawyer project
page, the legal request page and the quick assistant all run this workflow.
What differs between roles lives in the `RoleProfile` it is built with.

Lifecycle
---------
1. `open()` reconciles the owner with its thread, loads the messages and,
   for projects and legal requests, the attached documents.
2. `send`, `edit`, `delete` and `upload` delegate to `MessageExchange` and
   `DocumentAttachments`.
3. `close()` ends the view scope; results arriving afterwards are dropped.

Until reconciliation succeeds `thread_id` is None, `chat_error` holds the
blocking message and sends are no-ops.
"""

import logging
import random
from pathlib import Path
from typing import List, Optional, Union

from avocat_assist.api.errors import ThreadResolutionError
from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import Document, Message, OwnerRef, OwnerType
from avocat_assist.chat.exchange import MessageExchange
from avocat_assist.chat.profiles import RoleProfile
from avocat_assist.chat.reconciliation import ConversationReconciler
from avocat_assist.chat.scope import ViewScope
from avocat_assist.documents.attachments import DocumentAttachments

logger = logging.getLogger(__name__)


class ChatWorkflow:
    """
    Chat bound to one owner entity.

    Parameters
    ----------
    api : ApiClient
        HTTP adapter.
    profile : RoleProfile
        Role variant (`CLIENT_PROFILE` or `LAWYER_PROFILE`).
    owner : OwnerRef
        Project, legal request or standalone owner.
    rng : random.Random, optional
        Randomness of the fallback suggestions.
    """

    def __init__(self, api: ApiClient, profile: RoleProfile, owner: OwnerRef, rng: Optional[random.Random] = None, **attachment_options):
        self.api = api
        self.profile = profile
        self.owner = owner
        self.rng = rng
        self.scope = ViewScope(f"{owner.owner_entity_type.value}:{owner.owner_entity_id}")
        self.reconciler = ConversationReconciler(api, profile)
        self.exchange: Optional[MessageExchange] = None
        self.attachments: Optional[DocumentAttachments] = None
        self.chat_error: Optional[str] = None
        self._attachment_options = attachment_options

    @property
    def has_documents(self) -> bool:
        return self.owner.owner_entity_type != OwnerType.STANDALONE

    @property
    def thread_id(self):
        return self.exchange.thread_id if self.exchange else None

    @property
    def messages(self) -> List[Message]:
        return self.exchange.messages if self.exchange else []

    @property
    def suggestions(self) -> List[str]:
        if self.exchange:
            return self.exchange.suggestions
        return self.profile.defaults_for(self.owner.owner_entity_type)

    @property
    def documents(self) -> List[Document]:
        return self.attachments.documents if self.attachments else []

    async def open(self) -> bool:
        """
        Resolve the thread and load its content.

        Returns
        -------
        bool
            False when no thread could be resolved (`chat_error` is set).
        """
        try:
            resolved = await self.reconciler.resolve(self.owner)
        except ThreadResolutionError as e:
            if self.scope.discard("thread resolution failure"):
                return False
            logger.warning("Could not resolve thread for %s %s: %s",
                           self.owner.owner_entity_type.value, self.owner.owner_entity_id, e)
            self.chat_error = str(e)
            return False
        if self.scope.discard("thread resolution"):
            return False

        self.chat_error = None
        self.exchange = MessageExchange(
            self.api, resolved.thread, self.profile,
            scope=self.scope, suggestions=resolved.suggestions, rng=self.rng,
        )
        if self.has_documents:
            self.attachments = DocumentAttachments(
                self.api, self.owner, scope=self.scope, exchange=self.exchange, **self._attachment_options
            )
        await self.exchange.load()
        if self.attachments is not None:
            await self.attachments.load()
        return True

    async def send(self, content: Optional[str]) -> Optional[Message]:
        if self.exchange is None:
            return None
        return await self.exchange.send(content)

    async def edit(self, message_id, new_content: Optional[str]) -> bool:
        if self.exchange is None:
            return False
        return await self.exchange.edit(message_id, new_content)

    async def delete(self, message_id) -> bool:
        if self.exchange is None:
            return False
        return await self.exchange.delete(message_id)

    async def upload(self, path: Optional[Union[str, Path]], content_type: Optional[str] = None) -> Optional[Document]:
        if self.attachments is None:
            return None
        return await self.attachments.upload(path, content_type)

    def close(self) -> None:
        self.scope.close()

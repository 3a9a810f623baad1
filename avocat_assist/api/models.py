"""
Pydantic models used for request/response validation and client-side state.

The backend speaks camelCase JSON (`fileName`, `lastSuggestedQuestions`,
`isError`...). Every API model uses a camelCase alias generator and can be
populated either from the wire payload or by field name.

Form models validate user input before any request is issued and raise
`FormValidationError` with per-field messages.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from avocat_assist.api.errors import FormValidationError

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
"""Loose e-mail shape check used by the login and registration forms."""

PASSWORD_MIN_LENGTH = 8


def utc_now() -> datetime:
    """Current time, timezone-aware (UTC)."""
    return datetime.now(timezone.utc)


class ApiModel(BaseModel):
    """Base model for payloads exchanged with the REST API."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        """Serialize with camelCase keys, dropping unset optional values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Role(str, Enum):
    """Platform roles. `support` and `manager` are the two admin roles."""
    CLIENT = "client"
    LAWYER = "lawyer"
    SUPPORT = "support"
    MANAGER = "manager"


class OwnerType(str, Enum):
    """Business entity a conversation thread belongs to."""
    PROJECT = "project"
    LEGAL_REQUEST = "legalRequest"
    STANDALONE = "standalone"


class Sender(str, Enum):
    USER = "user"
    AI = "ai"


class User(ApiModel):
    """
    Profile of the authenticated user as returned by `/auth/me` and `/auth/login`.
    """
    id: Union[int, str]
    """Backend identifier of the user."""
    name: str = ""
    """Display name."""
    email: str = ""
    """E-mail address used to log in."""
    role: Role
    """One of client, lawyer, support, manager."""


class Session(BaseModel):
    """
    Session held by the session store. Created on login/register or on a
    successful startup load; destroyed on logout or a 401.
    """
    user_id: Union[int, str]
    """Identifier of the logged-in user."""
    display_name: str
    """Name shown in the layouts."""
    role: Role
    """Role driving route guards and chat profiles."""
    token_expiry: Optional[datetime] = None
    """Expiry decoded from the token `exp` claim (None if the claim is absent)."""


class OwnerRef(BaseModel):
    """
    Reference to the entity owning a conversation thread.

    `owner_entity_id` is None for standalone conversations. `title` is the
    entity's display title when known (used by the project title template).
    """
    model_config = ConfigDict(frozen=True)

    owner_entity_type: OwnerType
    owner_entity_id: Optional[Union[int, str]] = None
    title: Optional[str] = None

    @classmethod
    def project(cls, project_id, title: Optional[str] = None) -> "OwnerRef":
        return cls(owner_entity_type=OwnerType.PROJECT, owner_entity_id=project_id, title=title)

    @classmethod
    def legal_request(cls, legal_request_id) -> "OwnerRef":
        return cls(owner_entity_type=OwnerType.LEGAL_REQUEST, owner_entity_id=legal_request_id)

    @classmethod
    def standalone(cls) -> "OwnerRef":
        return cls(owner_entity_type=OwnerType.STANDALONE)


class ConversationThread(ApiModel):
    """
    A chat thread bound to at most one owner entity.

    At most one thread exists per (owner_entity_type, owner_entity_id) pair by
    convention, enforced by find-or-create in `ConversationReconciler`.
    """
    id: Union[int, str]
    """Identifier used for message exchange."""
    owner_entity_type: OwnerType = OwnerType.STANDALONE
    """Owner kind, filled in by the reconciler (not sent by the backend)."""
    owner_entity_id: Optional[Union[int, str]] = None
    """Owner identifier, None for standalone conversations."""
    title: str = ""
    """Thread title shown in the chat header."""
    last_suggested_questions: List[str] = Field(default_factory=list)
    """Suggestions persisted with the thread by the backend."""


class Message(ApiModel):
    """
    One chat message in the client-side cache. The backend stays the source
    of truth and is re-fetched on thread selection.
    """
    id: Union[int, str]
    """Server id, or a local `temp-`, `user-`, `ai-`, `error-`, `system-` id."""
    sender: Sender
    """Who wrote the message."""
    content: str
    """Markdown content."""
    timestamp: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("timestamp", "createdAt"),
    )
    """Creation time (`createdAt` on stored messages)."""
    updated_at: Optional[datetime] = None
    """Set when the message was edited."""
    is_error: bool = False
    """True for AI-sender messages that report a failed send."""
    is_system: bool = False
    """True for local announcements (e.g. a document was attached)."""

    @field_validator("sender", mode="before")
    @classmethod
    def _normalize_sender(cls, value):
        # stored AI answers are sometimes tagged "assistant"
        return Sender.AI if value == "assistant" else value

    @property
    def is_temporary(self) -> bool:
        return isinstance(self.id, str) and self.id.startswith("temp-")


class Document(ApiModel):
    """A file attached to a project or a legal request. Never mutated locally."""
    id: Union[int, str]
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_at: Optional[datetime] = None


class AskResponse(ApiModel):
    """Payload of `POST /ai/ask`."""
    response: str = ""
    """The AI answer."""
    message_id: Optional[Union[int, str]] = None
    """Server id of the stored AI message."""
    suggested_questions: List[str] = Field(default_factory=list)
    """Follow-up questions generated with the answer."""


class UploadResult(ApiModel):
    """Payload of the two upload endpoints."""
    success: Optional[bool] = None
    document: Optional[Document] = None
    message: Optional[str] = None


class Project(ApiModel):
    id: Union[int, str]
    title: str = ""
    description: Optional[str] = None
    status: Optional[str] = None


class LegalRequest(ApiModel):
    id: Union[int, str]
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class Proposal(ApiModel):
    id: Union[int, str]
    legal_request_id: Optional[Union[int, str]] = None
    lawyer_id: Optional[Union[int, str]] = None
    status: Optional[str] = None
    price: Optional[float] = None


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

class FormModel(BaseModel):
    """Base class of forms; `validate_input` raises `FormValidationError`."""
    model_config = ConfigDict(str_strip_whitespace=False)

    def field_errors(self) -> dict[str, str]:
        return {}

    @classmethod
    def validate_input(cls, **data):
        try:
            form = cls(**data)
        except ValidationError as e:
            raise FormValidationError(
                {str(err["loc"][0]): err["msg"] for err in e.errors()}
            ) from e
        errors = form.field_errors()
        if errors:
            raise FormValidationError(errors)
        return form


def _email_error(email: str) -> Optional[str]:
    if not email:
        return "L'email est requis"
    if not EMAIL_PATTERN.search(email):
        return "L'email est invalide"
    return None


class LoginForm(FormModel):
    email: str = ""
    password: str = ""

    def field_errors(self) -> dict[str, str]:
        errors = {}
        email_error = _email_error(self.email)
        if email_error:
            errors["email"] = email_error
        if not self.password:
            errors["password"] = "Le mot de passe est requis"
        return errors


class RegistrationForm(FormModel):
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    role: Role = Role.CLIENT
    agree_terms: bool = False

    def field_errors(self) -> dict[str, str]:
        errors = {}
        if not self.name.strip():
            errors["name"] = "Le nom est requis"
        email_error = _email_error(self.email)
        if email_error:
            errors["email"] = email_error
        if not self.password:
            errors["password"] = "Le mot de passe est requis"
        elif len(self.password) < PASSWORD_MIN_LENGTH:
            errors["password"] = "Le mot de passe doit contenir au moins 8 caractères"
        if self.password != self.confirm_password:
            errors["confirm_password"] = "Les mots de passe ne correspondent pas"
        if not self.agree_terms:
            errors["agree_terms"] = "Vous devez accepter les conditions d'utilisation"
        return errors

    def to_payload(self) -> dict:
        """Fields sent to `/auth/register` (confirmation and terms stay local)."""
        return {"name": self.name, "email": self.email, "password": self.password, "role": self.role.value}


class PasswordChangeForm(FormModel):
    current_password: str = ""
    new_password: str = ""

    def field_errors(self) -> dict[str, str]:
        errors = {}
        if not self.current_password:
            errors["current_password"] = "Le mot de passe actuel est requis"
        if len(self.new_password) < PASSWORD_MIN_LENGTH:
            errors["new_password"] = "Le mot de passe doit contenir au moins 8 caractères"
        return errors


class PasswordResetForm(FormModel):
    token: str = ""
    new_password: str = ""

    def field_errors(self) -> dict[str, str]:
        errors = {}
        if not self.token:
            errors["token"] = "Le lien de réinitialisation est invalide"
        if len(self.new_password) < PASSWORD_MIN_LENGTH:
            errors["new_password"] = "Le mot de passe doit contenir au moins 8 caractères"
        return errors

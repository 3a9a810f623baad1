"""
API Package — HTTP adapter • Models • Errors • JWT utils • Resources
====================================================================

Contents
--------
- http_client
    `ApiClient`, the asynchronous httpx wrapper used for every call:
      • one `BearerTokenAuth` fed by one credential provider
      • global 401 callback (forced logout) and error callback
      • `get` / `post` / `put` / `delete` / `upload` (multipart) / `download` (bytes)

- models
    Pydantic data contracts:
      • User, Session, Role (session layer)
      • OwnerRef, OwnerType, ConversationThread, Message, AskResponse (chat)
      • Document, UploadResult (attachments)
      • Project, LegalRequest, Proposal (resources)
      • LoginForm, RegistrationForm, PasswordChangeForm, PasswordResetForm (input validation)

- errors
    Error taxonomy (validation, 401, backend, connectivity) plus
    `describe_error` and the `is_pdf_error` heuristic.

- utils
    JWT helpers (no signature check, client side):
      • decode_token_claims(token)
      • token_expiry(token)
      • is_token_expired(token)

- resources
    `ProjectsApi` and `LegalRequestsApi`, typed wrappers used by the chat
    workflow and the shells.
"""

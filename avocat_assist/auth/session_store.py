"""
Session Store — token lifecycle and current user
================================================

Purpose
-------
Owns the authenticated session of the client:
- Reads the persisted token at startup and checks its `exp` claim locally.
- Logs in / registers, persisting the returned token (the only writer of the
  credential store).
- Forces a logout on any 401, wherever the request came from.
- Exposes the role predicates used by route guards and chat workflows.

Key Notes
---------
- `forgot_password` reports success even when the backend fails, so that the
  answer never reveals whether an e-mail is registered.
- Failures are never retried. Network failures and backend errors only differ
  in the wording of the notification.
- Form input is validated before any request (see `avocat_assist.api.models`).
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from avocat_assist.api.errors import ApiError, AvocatAssistError, describe_error
from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import (
    LoginForm,
    PasswordChangeForm,
    PasswordResetForm,
    RegistrationForm,
    Role,
    Session,
    User,
)
from avocat_assist.api.utils import is_token_expired, token_expiry
from avocat_assist.auth.notifications import Notifier
from avocat_assist.database.core.token_storage import TokenStorage

logger = logging.getLogger(__name__)

ADMIN_ROLES = (Role.SUPPORT, Role.MANAGER)

FORGOT_PASSWORD_MESSAGE = "Si votre email est enregistré, vous recevrez un lien de réinitialisation"
SESSION_EXPIRED_MESSAGE = "Votre session a expiré. Veuillez vous reconnecter."


class SessionStore:
    """
    Holds the current user, the token and the loading/error flags.

    Parameters
    ----------
    storage : TokenStorage
        Durable credential store. Read once at construction.
    notifier : Notifier, optional
        Receives the success/failure notifications.
    api : ApiClient, optional
        Client to wire with `bind_client`; can also be bound later.
    clock : callable, optional
        Returns the current timezone-aware datetime (tests freeze time).

    Usage
    -----
    store = SessionStore(storage, notifier)
    api = ApiClient(settings.API_URL, credentials=store.credentials)
    store.bind_client(api)
    await store.initialize()
    """

    def __init__(
        self,
        storage: TokenStorage,
        notifier: Optional[Notifier] = None,
        api: Optional[ApiClient] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.clock = clock
        self.token: Optional[str] = storage.get()
        self.current_user: Optional[User] = None
        self.session: Optional[Session] = None
        self.loading = True
        self.ready = False
        self.error: Optional[str] = None
        self.api: Optional[ApiClient] = None
        if api is not None:
            self.bind_client(api)

    # ------------------------------------------------------------------
    # wiring
    # ------------------------------------------------------------------

    def bind_client(self, api: ApiClient) -> None:
        """Use `api` for every call and register the 401 / error listeners on it."""
        self.api = api
        api.on_unauthorized = self._handle_unauthorized
        api.on_error = self._record_error

    def credentials(self) -> Optional[str]:
        """Credential provider consumed by `BearerTokenAuth`."""
        return self.token

    def _require_api(self) -> ApiClient:
        if self.api is None:
            raise RuntimeError("SessionStore has no ApiClient bound; call bind_client() first")
        return self.api

    # ------------------------------------------------------------------
    # startup
    # ------------------------------------------------------------------

    async def initialize(self) -> Optional[User]:
        """
        Restore the session from the persisted token.

        Returns
        -------
        User | None
            The restored user, or None when there is no usable token.

        Notes
        -----
        - No token: nothing to do.
        - Expired or unreadable token: storage and state are cleared without
          any network call.
        - Otherwise one `GET /auth/me`; any failure clears the state.
        """
        try:
            if not self.token:
                return None

            now = self.clock() if self.clock else None
            if is_token_expired(self.token, now=now):
                logger.info("Stored token is expired, clearing session")
                self._clear()
                return None

            try:
                payload = await self._require_api().get("/auth/me")
                user = User.model_validate(payload["user"])
            except (AvocatAssistError, ValueError, KeyError, TypeError) as e:
                logger.warning("Error loading user: %s", e)
                self._clear()
                return None

            self._set_session(self.token, user)
            return user
        finally:
            self.loading = False
            self.ready = True

    # ------------------------------------------------------------------
    # authentication
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> dict:
        """
        Authenticate with e-mail and password.

        Returns
        -------
        dict
            The backend payload (`token`, `user`).

        Raises
        ------
        FormValidationError
            Missing or malformed input, before any request.
        ApiError
            Backend or connectivity failure (already notified).
        """
        form = LoginForm.validate_input(email=email, password=password)
        data = await self._call(
            "POST", "/auth/login",
            json={"email": form.email, "password": form.password},
            fallback="Email ou mot de passe incorrect",
        )
        self._start_session(data)
        self.notifier.success("Connexion réussie !")
        return data

    async def register(self, user_data: Union[dict, RegistrationForm]) -> dict:
        """
        Create an account and open a session for it.

        Parameters
        ----------
        user_data : dict | RegistrationForm
            name, email, password, confirm_password, role, agree_terms.
        """
        if isinstance(user_data, RegistrationForm):
            user_data = user_data.model_dump()
        form = RegistrationForm.validate_input(**user_data)
        data = await self._call(
            "POST", "/auth/register",
            json=form.to_payload(),
            fallback="Erreur lors de l'inscription",
        )
        self._start_session(data)
        self.notifier.success("Inscription réussie !")
        return data

    def logout(self) -> None:
        """Forget the token and the user. Purely local: the backend is stateless."""
        self._clear()
        self.notifier.info("Vous êtes déconnecté")

    # ------------------------------------------------------------------
    # profile and passwords
    # ------------------------------------------------------------------

    async def update_profile(self, data: dict) -> dict:
        if self.current_user is None:
            raise RuntimeError("update_profile requires an authenticated session")
        payload = await self._call(
            "PUT", f"/users/{self.current_user.id}",
            json=data,
            fallback="Erreur lors de la mise à jour du profil",
        )
        if payload and payload.get("user"):
            self.current_user = User.model_validate(payload["user"])
            self.session = self._session_for(self.token, self.current_user)
        self.notifier.success("Profil mis à jour avec succès")
        return payload

    async def change_password(self, current_password: str, new_password: str) -> dict:
        form = PasswordChangeForm.validate_input(current_password=current_password, new_password=new_password)
        payload = await self._call(
            "PUT", "/auth/change-password",
            json={"currentPassword": form.current_password, "newPassword": form.new_password},
            fallback="Erreur lors du changement de mot de passe",
        )
        self.notifier.success("Mot de passe modifié avec succès")
        return payload

    async def forgot_password(self, email: str) -> dict:
        """
        Ask for a reset link. Always reports success.

        The backend failure is logged but never surfaced, so the caller cannot
        tell a registered e-mail from an unknown one.
        """
        self.loading = True
        try:
            payload = await self._require_api().post("/auth/forgot-password", json={"email": email})
        except ApiError as e:
            logger.info("forgot-password failed (hidden from the user): %s", e)
            payload = {"message": "Email sent if registered"}
        finally:
            self.loading = False
        self.notifier.success(FORGOT_PASSWORD_MESSAGE)
        return payload

    async def reset_password(self, token: str, new_password: str) -> dict:
        form = PasswordResetForm.validate_input(token=token, new_password=new_password)
        payload = await self._call(
            "POST", "/auth/reset-password",
            json={"token": form.token, "newPassword": form.new_password},
            fallback="Erreur lors de la réinitialisation du mot de passe",
        )
        self.notifier.success("Mot de passe réinitialisé avec succès")
        return payload

    # ------------------------------------------------------------------
    # predicates
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        return bool(self.token) and self.current_user is not None

    def has_role(self, role: Union[Role, str]) -> bool:
        if self.current_user is None:
            return False
        return self.current_user.role == role

    def is_admin(self) -> bool:
        """Support and manager users share the admin area."""
        if self.current_user is None:
            return False
        return self.current_user.role in ADMIN_ROLES

    def is_manager(self) -> bool:
        return self.has_role(Role.MANAGER)

    def is_lawyer(self) -> bool:
        return self.has_role(Role.LAWYER)

    def is_client(self) -> bool:
        return self.has_role(Role.CLIENT)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    async def _call(self, method: str, path: str, json: dict, fallback: str):
        self.loading = True
        try:
            return await self._require_api().request_json(method, path, json=json, fallback=fallback)
        except ApiError as e:
            self.notifier.error(describe_error(e, fallback))
            raise
        finally:
            self.loading = False

    def _start_session(self, data: dict) -> None:
        token = data["token"]
        user = User.model_validate(data["user"])
        self.storage.set(token)
        self._set_session(token, user)

    def _set_session(self, token: str, user: User) -> None:
        self.token = token
        self.current_user = user
        self.session = self._session_for(token, user)

    @staticmethod
    def _session_for(token: Optional[str], user: User) -> Session:
        return Session(
            user_id=user.id,
            display_name=user.name,
            role=user.role,
            token_expiry=token_expiry(token) if token else None,
        )

    def _clear(self) -> None:
        self.storage.clear()
        self.token = None
        self.current_user = None
        self.session = None

    def _handle_unauthorized(self) -> None:
        if self.token is None and self.current_user is None:
            return
        self.logout()
        self.notifier.error(SESSION_EXPIRED_MESSAGE)

    def _record_error(self, message: str) -> None:
        self.error = message

"""
Route guards for the role-specific areas (admin, client/chat, lawyer, guest).

Every area answers the same question for the current session store: render
the child outlet, or redirect somewhere. A user in the wrong area is sent to
the dashboard of their own role, never to a generic "forbidden" page.
"""

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from avocat_assist.api.models import Role
from avocat_assist.auth.session_store import SessionStore

LOGIN_PATH = "/login"
HOME_PATH = "/"

DASHBOARDS = {
    Role.CLIENT: "/client/dashboard",
    Role.LAWYER: "/lawyer/dashboard",
    Role.SUPPORT: "/admin/dashboard",
    Role.MANAGER: "/admin/dashboard",
}
"""Landing page of each role."""


class GuardState(str, Enum):
    CHECKING = "checking"
    AUTHORIZED = "authenticated-authorized"
    UNAUTHORIZED = "authenticated-unauthorized"
    UNAUTHENTICATED = "unauthenticated"


class GuardDecision(BaseModel):
    """Outcome of a guard evaluation."""
    state: GuardState
    redirect_to: Optional[str] = None

    @property
    def renders_outlet(self) -> bool:
        return self.state == GuardState.AUTHORIZED


def dashboard_for(store: SessionStore) -> str:
    if store.current_user is None:
        return HOME_PATH
    return DASHBOARDS.get(store.current_user.role, HOME_PATH)


class AreaGuard:
    """
    Guard of one layout.

    Parameters
    ----------
    name : str
        Area name, for logs and debugging.
    allows : callable
        Predicate over an authenticated `SessionStore`.
    """

    def __init__(self, name: str, allows: Callable[[SessionStore], bool]):
        self.name = name
        self.allows = allows

    def evaluate(self, store: SessionStore) -> GuardDecision:
        if not store.ready:
            return GuardDecision(state=GuardState.CHECKING)
        if not store.is_authenticated():
            return GuardDecision(state=GuardState.UNAUTHENTICATED, redirect_to=LOGIN_PATH)
        if not self.allows(store):
            return GuardDecision(state=GuardState.UNAUTHORIZED, redirect_to=dashboard_for(store))
        return GuardDecision(state=GuardState.AUTHORIZED)

    def __repr__(self) -> str:
        return f"AreaGuard({self.name!r})"


class GuestGuard(AreaGuard):
    """Login/register pages: only for visitors; signed-in users go to their dashboard."""

    def __init__(self):
        super().__init__("guest", lambda store: True)

    def evaluate(self, store: SessionStore) -> GuardDecision:
        if not store.ready:
            return GuardDecision(state=GuardState.CHECKING)
        if store.is_authenticated():
            return GuardDecision(state=GuardState.UNAUTHORIZED, redirect_to=dashboard_for(store))
        return GuardDecision(state=GuardState.AUTHORIZED)


ADMIN_AREA = AreaGuard("admin", SessionStore.is_admin)
CLIENT_AREA = AreaGuard("client", SessionStore.is_client)
CHAT_AREA = CLIENT_AREA
LAWYER_AREA = AreaGuard("lawyer", SessionStore.is_lawyer)
GUEST_AREA = GuestGuard()

"""
The `auth` package owns the authenticated session of the client.

Contents
--------
- session_store
    `SessionStore`: token lifecycle (startup expiry check, login, register,
    logout, forced logout on 401), profile/password operations and the role
    predicates (`is_admin`, `is_manager`, `is_lawyer`, `is_client`).
- guards
    `AreaGuard` instances for the admin, client/chat, lawyer and guest areas;
    `evaluate(store)` returns a `GuardDecision` (render or redirect).
- notifications
    `Notifier`, the transient success/info/error messages shown to the user.
"""

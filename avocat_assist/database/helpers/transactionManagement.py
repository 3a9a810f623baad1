"""
Database Transaction Management
===============================

Utilities for running storage methods inside a managed SQLAlchemy session.

The ``@transactional`` decorator wraps methods of objects exposing a
``session_factory`` attribute. The active session is kept in a context
variable so nested calls reuse it instead of opening a second one.

Key features
~~~~~~~~~~~~
- Context variable to store the active session
- Implicit reuse of existing sessions
- Automatic commit and rollback handling
- Clean session closure after execution
"""

import contextvars
from functools import wraps

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""


def transactional(func):
    """
    Decorator to wrap storage methods in a managed SQLAlchemy transaction.

    Ensures that:
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created from ``self.session_factory``,
      committed, and closed.
    - On errors, the session is rolled back and closed.

    Parameters
    ----------
    func : callable
        The method to wrap. It must accept a `session` keyword argument.

    Example
    -------
    >>> class Store:
    ...     @transactional
    ...     def save(self, value, session=None):
    ...         session.add(value)
    """
    @wraps(func)
    def wrap_func(self, *args, **kwargs):
        session = db_session_context.get()
        if session:
            return func(self, *args, session=session, **kwargs)

        session = self.session_factory()
        context_token = db_session_context.set(session)

        try:
            result = func(self, *args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(context_token)

        return result

    return wrap_func

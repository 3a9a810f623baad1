import logging

logger = logging.getLogger(__name__)


class ViewScope:
    """
    Lifetime of one chat view.

    Requests cannot be aborted mid-flight, so every result is checked against
    the scope when it resolves: once the view is closed, late responses are
    dropped instead of being applied to whatever state is current.
    """

    def __init__(self, name: str = "view"):
        self.name = name
        self.closed = False

    @property
    def active(self) -> bool:
        return not self.closed

    def close(self) -> None:
        self.closed = True

    def discard(self, what: str) -> bool:
        """True (and logged) if a result for `what` arrived after close()."""
        if self.closed:
            logger.debug("Discarding %s: %s was closed", what, self.name)
            return True
        return False

"""Post-login redirect memory (single ephemeral key)."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

REDIRECT_KEY = "redirectPath"


class RedirectMemory:
    """
    Remembers the path to return to after login.

    Only one path is kept; ``consume`` reads and clears it.

    Example:
        >>> memory = RedirectMemory()
        >>> memory.remember("/partner")
        >>> memory.consume()
        '/partner'
        >>> memory.consume() is None
        True
    """

    def __init__(self) -> None:
        self._storage: dict = {}

    def remember(self, path: str) -> None:
        if not path or path.startswith("/login"):
            return
        self._storage[REDIRECT_KEY] = path
        logger.debug("Redirect path remembered", extra={"path": path})

    def peek(self) -> Optional[str]:
        return self._storage.get(REDIRECT_KEY)

    def consume(self) -> Optional[str]:
        return self._storage.pop(REDIRECT_KEY, None)

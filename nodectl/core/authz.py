"""Permission checks for commands run against a node."""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase

from nodectl.core.config import AuthSettings
from nodectl.core.errors import AuthorizationError

LOGGER = logging.getLogger(__name__)


def permission_for(command: str, node: str) -> str:
    return f"commands:{command}:{node}"


class Authorizer:
    """Grants a command on a node when a configured glob pattern matches.

    Permissions have the shape ``commands:<command>:<node>``; patterns such as
    ``commands:set-node-hw-info:rack1-*`` or ``commands:*`` are matched
    case-sensitively. With auth disabled every request is allowed.
    """

    def __init__(self, settings: AuthSettings) -> None:
        self.enabled = settings.enabled
        self.patterns = settings.permissions

    def is_permitted(self, command: str, node: str) -> bool:
        if not self.enabled:
            return True
        wanted = permission_for(command, node)
        return any(fnmatchcase(wanted, pattern) for pattern in self.patterns)

    def authorize(self, command: str, node: str) -> None:
        if not self.is_permitted(command, node):
            LOGGER.warning("Denied %s on node %s", command, node)
            raise AuthorizationError(
                f"Not permitted: {permission_for(command, node)}"
            )

import pytest

from nodectl.core.authz import Authorizer
from nodectl.core.config import AuthSettings
from nodectl.core.errors import AuthorizationError


def test_disabled_auth_allows_everything() -> None:
    authorizer = Authorizer(AuthSettings(enabled=False))
    authorizer.authorize("set-node-hw-info", "node1")


def test_pattern_grants_matching_nodes() -> None:
    authorizer = Authorizer(
        AuthSettings(enabled=True, permissions=("commands:set-node-hw-info:rack1-*",))
    )
    assert authorizer.is_permitted("set-node-hw-info", "rack1-n3")
    assert not authorizer.is_permitted("set-node-hw-info", "rack2-n3")
    assert not authorizer.is_permitted("delete-node", "rack1-n3")


def test_denied_request_raises() -> None:
    authorizer = Authorizer(AuthSettings(enabled=True, permissions=()))
    with pytest.raises(AuthorizationError) as exc:
        authorizer.authorize("set-node-hw-info", "node1")
    assert "commands:set-node-hw-info:node1" in str(exc.value)

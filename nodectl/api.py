"""Stable public API for building tooling on top of nodectl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from nodectl.core.config import AuthSettings, Settings, load_config
from nodectl.core.errors import (
    AuthorizationError,
    ConfigError,
    NodectlError,
    NodeExistsError,
    NodeNotFoundError,
    SchemaError,
    StoreError,
    ValidationFailure,
)
from nodectl.core.model import HardwareRecord, MatchKeySet, Node
from nodectl.core.service import NodeService
from nodectl.core.store import NodeStore

__all__ = [
    "NodectlError",
    "AuthorizationError",
    "ConfigError",
    "NodeExistsError",
    "NodeNotFoundError",
    "SchemaError",
    "StoreError",
    "ValidationFailure",
    "AuthSettings",
    "HardwareRecord",
    "MatchKeySet",
    "Node",
    "NodeStore",
    "Settings",
    "load_config",
    "Client",
]


class Client:
    """Public client for the node registry.

    A `Client` wraps configuration loading, the node store and the
    ``set-node-hw-info`` command behind a stable API intended for third-party
    tools (provisioning scripts, services, UIs).
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        store: NodeStore | None = None,
    ) -> None:
        self._service = NodeService(settings=settings, store=store)

    @property
    def match_keys(self) -> tuple[str, ...]:
        return self._service.match_keys().keys

    def list_nodes(self) -> list[Node]:
        return self._service.list_nodes()

    def get_node(self, name: str) -> Node:
        return self._service.get_node(name)

    def register_node(self, name: str, hw_info: Mapping[str, str] | None = None) -> Node:
        return self._service.register_node(name, hw_info)

    def delete_node(self, name: str) -> None:
        self._service.delete_node(name)

    def set_hw_info(self, node: str, hw_info: Mapping[str, str]) -> Node:
        return self._service.set_node_hw_info({"node": node, "hw-info": dict(hw_info)})

    def submit(self, request: Mapping[str, Any]) -> Node:
        """Run a raw ``set-node-hw-info`` request, legacy ``hw_info`` key included."""
        return self._service.set_node_hw_info(dict(request))

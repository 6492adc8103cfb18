"""Service layer used by the CLI and the public client."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from nodectl.core.authz import Authorizer
from nodectl.core.config import Settings, load_config
from nodectl.core.errors import SchemaError
from nodectl.core.hw_info import UpdateHardwareInfo
from nodectl.core.model import HardwareRecord, MatchKeySet, Node
from nodectl.core.schema import validate_document
from nodectl.core.store import NodeStore

LOGGER = logging.getLogger(__name__)


class NodeService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        store: NodeStore | None = None,
        authorizer: Authorizer | None = None,
    ) -> None:
        self.settings = settings or load_config()
        self.store = store or NodeStore(
            self.settings.database,
            busy_timeout_s=self.settings.busy_timeout_s,
        )
        self.authorizer = authorizer or Authorizer(self.settings.auth)

    def match_keys(self) -> MatchKeySet:
        return self.settings.match_keys

    def list_nodes(self) -> list[Node]:
        return self.store.list_nodes()

    def get_node(self, name: str) -> Node:
        return self.store.get_node(name)

    def register_node(self, name: str, hw_info: Mapping[str, str] | None = None) -> Node:
        if not name:
            raise SchemaError("Node name must not be empty")
        facts = dict(hw_info or {})
        if facts:
            validate_document(
                "set-node-hw-info",
                {"node": name, "hw-info": facts},
                source="register",
            )
        self.authorizer.authorize("register-node", name)
        node = self.store.add_node(name, HardwareRecord.from_payload(facts))
        LOGGER.info("Registered node %s", name)
        return node

    def delete_node(self, name: str) -> None:
        self.authorizer.authorize("delete-node", name)
        self.store.delete_node(name)

    def hw_info_command(self) -> UpdateHardwareInfo:
        return UpdateHardwareInfo(
            self.store,
            self.settings.match_keys,
            authorizer=self.authorizer,
        )

    def set_node_hw_info(self, payload: MutableMapping[str, Any]) -> Node:
        return self.hw_info_command().run(payload)

    def describe_set_node_hw_info(self) -> str:
        return self.hw_info_command().describe()

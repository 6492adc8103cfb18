"""The ``set-node-hw-info`` command.

When hardware in a node changes, for example a network card is replaced, the
registry must learn the new hardware facts so that boot requests from the node
still resolve to its existing record. This command replaces the node's
hardware record wholesale. The new record must contain at least one of the
configured match keys, otherwise the node could no longer be matched at all.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from nodectl.core.authz import Authorizer
from nodectl.core.errors import ValidationFailure
from nodectl.core.model import HardwareRecord, MatchKeySet, Node
from nodectl.core.schema import validate_document
from nodectl.core.store import NodeStore

COMMAND_NAME = "set-node-hw-info"
CANONICAL_KEY = "hw-info"
LEGACY_KEY = "hw_info"
LOGGER = logging.getLogger(__name__)

EXAMPLE = """\
{
  "node": "node172",
  "hw-info": {
    "net0":   "78:31:c1:be:c8:00",
    "net1":   "72:00:01:f2:13:f0",
    "net2":   "72:00:01:f2:13:f1",
    "serial": "xxxxxxxxxxx",
    "asset":  "Asset-1234567890",
    "uuid":   "Not Settable"
  }
}"""


def conform(payload: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Rewrite the legacy ``hw_info`` key to ``hw-info`` in place."""
    if LEGACY_KEY in payload and CANONICAL_KEY not in payload:
        LOGGER.debug("Rewriting legacy '%s' key to '%s'", LEGACY_KEY, CANONICAL_KEY)
        payload[CANONICAL_KEY] = payload.pop(LEGACY_KEY)
    return payload


def validate_match_keys(hw_info: Mapping[str, Any], match_keys: MatchKeySet) -> tuple[str, ...]:
    """Return the match keys present in ``hw_info``, failing when there are none.

    Membership is strict: hardware facts that are not configured match keys
    do not count, however many of them there are.
    """
    present = match_keys.intersection(hw_info.keys())
    if not present:
        raise ValidationFailure(
            f"hw-info must contain at least one of the match keys: {match_keys.describe()}",
            match_keys=match_keys.keys,
        )
    return present


class UpdateHardwareInfo:
    """Replace the hardware info of an existing node."""

    name = COMMAND_NAME
    summary = "Changes the hardware info on an existing node."

    def __init__(
        self,
        store: NodeStore,
        match_keys: MatchKeySet,
        *,
        authorizer: Authorizer | None = None,
    ) -> None:
        self.store = store
        self.match_keys = match_keys
        self.authorizer = authorizer

    conform = staticmethod(conform)

    def describe(self) -> str:
        keys = "\n".join(f" * {key}" for key in self.match_keys)
        return (
            f"{self.summary}\n\n"
            "Replaces the existing hardware data of a node with new data, so the\n"
            "node record can be updated before the changed machine boots on the\n"
            "network.\n\n"
            "The supplied hardware info must include at least one key that is\n"
            "configured as part of the matching process. On this server that is\n"
            f"one of the following:\n{keys}\n\n"
            f"Example:\n{EXAMPLE}"
        )

    def check_schema(self, payload: Mapping[str, Any]) -> None:
        validate_document(COMMAND_NAME, payload, source=COMMAND_NAME)

    def validate(self, hw_info: Mapping[str, Any]) -> tuple[str, ...]:
        return validate_match_keys(hw_info, self.match_keys)

    def apply(self, node: Node, hw_info: Mapping[str, str]) -> Node:
        record = node.hw_info.replace(hw_info)
        updated = self.store.replace_hw_info(node.name, record)
        LOGGER.info("Replaced hw-info of node %s (%d attributes)", node.name, len(record.facts))
        return updated

    def run(self, payload: MutableMapping[str, Any]) -> Node:
        self.conform(payload)
        self.check_schema(payload)
        node_name = payload["node"]
        if self.authorizer is not None:
            self.authorizer.authorize(COMMAND_NAME, node_name)
        node = self.store.get_node(node_name)
        hw_info = payload[CANONICAL_KEY]
        try:
            self.validate(hw_info)
        except ValidationFailure:
            LOGGER.warning("Rejected hw-info for node %s: no match key among %s", node_name, sorted(hw_info))
            raise
        return self.apply(node, hw_info)

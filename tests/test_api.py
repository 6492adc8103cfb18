from __future__ import annotations

from pathlib import Path

import pytest

from nodectl.api import Client, MatchKeySet, NodeNotFoundError, Settings, ValidationFailure


def _client(tmp_path: Path) -> Client:
    return Client(
        settings=Settings(
            match_keys=MatchKeySet(keys=("serial", "asset")),
            database=tmp_path / "nodes.db",
        )
    )


def test_public_client_match_keys(tmp_path: Path) -> None:
    assert _client(tmp_path).match_keys == ("serial", "asset")


def test_public_client_set_hw_info(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.register_node("node172", {"serial": "old", "net0": "aa:bb"})

    node = client.set_hw_info("node172", {"asset": "Asset-1234567890", "net1": "72:00:01:f2:13:f0"})
    assert node.hw_info.to_dict() == {"asset": "Asset-1234567890", "net1": "72:00:01:f2:13:f0"}
    assert [n.name for n in client.list_nodes()] == ["node172"]


def test_public_client_submit_legacy_request_does_not_mutate_input(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.register_node("node172")
    request = {"node": "node172", "hw_info": {"serial": "xxx"}}

    node = client.submit(request)
    assert node.hw_info.to_dict() == {"serial": "xxx"}
    assert "hw_info" in request


def test_public_client_errors(tmp_path: Path) -> None:
    client = _client(tmp_path)
    with pytest.raises(NodeNotFoundError):
        client.get_node("nope")

    client.register_node("node1", {"serial": "A"})
    with pytest.raises(ValidationFailure):
        client.set_hw_info("node1", {"uuid": "u"})

    client.delete_node("node1")
    assert client.list_nodes() == []

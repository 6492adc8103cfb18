from __future__ import annotations

from pathlib import Path

import pytest

from nodectl.core.errors import NodeNotFoundError, SchemaError, ValidationFailure
from nodectl.core.hw_info import UpdateHardwareInfo, conform, validate_match_keys
from nodectl.core.model import HardwareRecord, MatchKeySet
from nodectl.core.store import NodeStore


def _command(tmp_path: Path, keys: tuple[str, ...] = ("serial",)) -> UpdateHardwareInfo:
    store = NodeStore(tmp_path / "nodes.db")
    store.add_node("node172", HardwareRecord(facts={"serial": "A", "net0": "aa:bb"}))
    return UpdateHardwareInfo(store, MatchKeySet(keys=keys))


def test_conform_rewrites_legacy_key() -> None:
    payload = {"node": "n1", "hw_info": {"serial": "x"}}
    conform(payload)
    assert payload == {"node": "n1", "hw-info": {"serial": "x"}}


def test_conform_is_idempotent() -> None:
    payload = {"node": "n1", "hw-info": {"serial": "x"}}
    conform(payload)
    conform(payload)
    assert payload == {"node": "n1", "hw-info": {"serial": "x"}}


def test_conform_without_either_key_is_noop() -> None:
    payload = {"node": "n1"}
    conform(payload)
    assert payload == {"node": "n1"}


def test_conform_prefers_canonical_key() -> None:
    payload = {"node": "n1", "hw-info": {"serial": "x"}, "hw_info": {"serial": "y"}}
    conform(payload)
    assert payload["hw-info"] == {"serial": "x"}
    assert payload["hw_info"] == {"serial": "y"}


def test_validate_lists_match_keys_on_failure() -> None:
    with pytest.raises(ValidationFailure) as exc:
        validate_match_keys({"net0": "78:31:c1:be:c8:00"}, MatchKeySet(keys=("serial", "asset")))
    assert str(exc.value) == "hw-info must contain at least one of the match keys: serial, asset"
    assert exc.value.match_keys == ("serial", "asset")


def test_validate_requires_strict_membership() -> None:
    with pytest.raises(ValidationFailure):
        validate_match_keys({"net7": "aa:bb", "uuid": "u"}, MatchKeySet(keys=("serial",)))


def test_validate_accepts_any_configured_key() -> None:
    keys = MatchKeySet(keys=("serial", "net7"))
    assert validate_match_keys({"net7": "aa:bb"}, keys) == ("net7",)


def test_validate_does_not_require_other_fixed_attributes() -> None:
    assert validate_match_keys({"serial": "x"}, MatchKeySet(keys=("serial", "uuid"))) == ("serial",)


@pytest.mark.parametrize(
    "payload",
    [
        {"node": "node172"},
        {"node": "node172", "hw-info": {}},
        {"node": "node172", "hw-info": {"serial": 12}},
        {"node": "node172", "hw-info": {"netX": "aa"}},
        {"node": "node172", "hw-info": {"mac": "aa"}},
        {"node": "node172", "hw-info": {"serial": "x"}, "extra": True},
        {"hw-info": {"serial": "x"}},
    ],
)
def test_schema_rejects_malformed_payload(tmp_path: Path, payload: dict) -> None:
    command = _command(tmp_path)
    with pytest.raises(SchemaError):
        command.run(payload)
    assert command.store.get_node("node172").hw_info.to_dict() == {"serial": "A", "net0": "aa:bb"}


def test_schema_error_names_failing_path(tmp_path: Path) -> None:
    command = _command(tmp_path)
    with pytest.raises(SchemaError) as exc:
        command.run({"node": "node172", "hw-info": {"serial": 12}})
    assert "hw-info.serial" in str(exc.value)


def test_run_unknown_node(tmp_path: Path) -> None:
    command = _command(tmp_path)
    with pytest.raises(NodeNotFoundError):
        command.run({"node": "missing", "hw-info": {"serial": "x"}})


def test_run_replaces_record(tmp_path: Path) -> None:
    command = _command(tmp_path)
    node = command.run({"node": "node172", "hw-info": {"serial": "B"}})
    assert node.hw_info.to_dict() == {"serial": "B"}
    assert command.store.get_node("node172").hw_info.to_dict() == {"serial": "B"}


def test_run_accepts_legacy_key(tmp_path: Path) -> None:
    command = _command(tmp_path)
    node = command.run({"node": "node172", "hw_info": {"serial": "B", "net1": "cc:dd"}})
    assert node.hw_info.to_dict() == {"serial": "B", "net1": "cc:dd"}


def test_describe_lists_match_keys(tmp_path: Path) -> None:
    command = _command(tmp_path, keys=("serial", "asset"))
    text = command.describe()
    assert " * serial\n * asset" in text
    assert '"node": "node172"' in text

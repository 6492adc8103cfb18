"""Core data models used across the store, commands, service, and CLI."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

NET_ATTR_RE = re.compile(r"^net[0-9]+$")
FIXED_ATTRS = ("serial", "asset", "uuid")


@dataclass(frozen=True)
class MatchKeySet:
    """Configured attribute names used to correlate hardware facts with nodes."""

    keys: tuple[str, ...]

    def __contains__(self, name: object) -> bool:
        return name in self.keys

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def intersection(self, names: Iterable[str]) -> tuple[str, ...]:
        present = set(names)
        return tuple(key for key in self.keys if key in present)

    def describe(self) -> str:
        return ", ".join(self.keys)


@dataclass(frozen=True)
class HardwareRecord:
    """Hardware attribute name to value mapping owned by a node.

    Records are never edited in place: `replace` and `merge` build a new
    record, and the store swaps it in as a whole.
    """

    facts: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, str]) -> HardwareRecord:
        return cls(facts=dict(payload))

    def keys(self) -> tuple[str, ...]:
        return tuple(self.facts)

    def replace(self, payload: Mapping[str, str]) -> HardwareRecord:
        return HardwareRecord.from_payload(payload)

    def merge(self, payload: Mapping[str, str]) -> HardwareRecord:
        merged = dict(self.facts)
        merged.update(payload)
        return HardwareRecord(facts=merged)

    def net_attributes(self) -> dict[str, str]:
        return {name: value for name, value in self.facts.items() if NET_ATTR_RE.match(name)}

    def fixed_attributes(self) -> dict[str, str]:
        return {name: value for name, value in self.facts.items() if name in FIXED_ATTRS}

    def to_dict(self) -> dict[str, str]:
        return dict(self.facts)


@dataclass(frozen=True)
class Node:
    name: str
    hw_info: HardwareRecord
    created_at: str | None = None
    updated_at: str | None = None

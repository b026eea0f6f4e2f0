"""Run list values consumed by the run-converge emitter."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import overload

_ENTRY_RE = re.compile(r"^(?P<type>recipe|role)\[(?P<body>[^\[\]]+)\]$")


@dataclass(frozen=True)
class RunListItem:
    """One recipe or role entry, optionally pinned to a version."""

    name: str
    item_type: str = "recipe"
    version: str = ""

    def __str__(self) -> str:
        if self.version:
            return f"{self.item_type}[{self.name}@{self.version}]"
        return f"{self.item_type}[{self.name}]"


class RunList(Sequence[RunListItem]):
    """Ordered run list; order is execution order."""

    def __init__(self, items: Iterable[RunListItem] = ()) -> None:
        self._items = tuple(items)

    @overload
    def __getitem__(self, index: int) -> RunListItem: ...

    @overload
    def __getitem__(self, index: slice) -> RunList: ...

    def __getitem__(self, index: int | slice) -> RunListItem | RunList:
        if isinstance(index, slice):
            return RunList(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"RunList({list(self._items)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RunList):
            return NotImplemented
        return self._items == other._items

    def expanded_items(self) -> Iterator[RunListItem]:
        return iter(self._items)

    def to_string_list(self) -> list[str]:
        """Render each entry as a plain run list string."""
        return [str(item) for item in self._items]

    def with_versions(self, pins: Mapping[str, str]) -> RunList:
        """Return a copy with the named recipes pinned; unknown names raise `ValueError`."""
        recipes = {item.name for item in self._items if item.item_type == "recipe"}
        unknown = sorted(set(pins) - recipes)
        if unknown:
            raise ValueError(f"cannot pin recipes not in run list: {', '.join(unknown)}")
        return RunList(
            replace(item, version=pins[item.name])
            if item.item_type == "recipe" and item.name in pins
            else item
            for item in self._items
        )


def parse_run_list_item(entry: str) -> RunListItem:
    """Parse `recipe[name]`, `recipe[name@1.0.0]`, `role[name]` or a bare recipe name."""
    text = entry.strip()
    if not text:
        raise ValueError("run list entry must be a non-empty string")

    match = _ENTRY_RE.match(text)
    if match is not None:
        item_type = match.group("type")
        body = match.group("body")
    elif "[" in text or "]" in text:
        raise ValueError(f"invalid run list entry: {entry!r}")
    else:
        item_type = "recipe"
        body = text

    name, _, version = body.partition("@")
    if not name:
        raise ValueError(f"invalid run list entry: {entry!r}")
    if item_type == "role" and version:
        raise ValueError(f"roles cannot be version pinned: {entry!r}")
    return RunListItem(name=name, item_type=item_type, version=version)


def parse_run_list(entries: Iterable[str]) -> RunList:
    return RunList(parse_run_list_item(entry) for entry in entries)

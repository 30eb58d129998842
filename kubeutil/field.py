"""Paths from a root object to one of its fields, for error messages and diffs."""

from __future__ import annotations


class Path:
    """One element of a field path: a named field or a subscript of its parent."""

    __slots__ = ("name", "subscript", "parent")

    def __init__(self, name: str = "", subscript: str = "", parent: Path | None = None) -> None:
        self.name = name
        self.subscript = subscript
        self.parent = parent

    def root(self) -> Path:
        """Return the root element of this path."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def child(self, name: str, *more_names: str) -> Path:
        """Return a new path that descends from this one through the given names."""
        result = new_path(name, *more_names)
        result.root().parent = self
        return result

    def index(self, index: int) -> Path:
        """Return a new path that subscripts this one by an integer."""
        return Path(subscript=str(index), parent=self)

    def key(self, key: str) -> Path:
        """Return a new path that subscripts this one by a string key."""
        return Path(subscript=key, parent=self)

    def _chain(self) -> list[Path]:
        elems = []
        node: Path | None = self
        while node is not None:
            elems.append(node)
            node = node.parent
        elems.reverse()
        return elems

    def __str__(self) -> str:
        parts = []
        for node in self._chain():
            if node.name:
                if node.parent is not None:
                    parts.append(".")
                parts.append(node.name)
            else:
                parts.append(f"[{node.subscript}]")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"


def new_path(name: str, *more_names: str) -> Path:
    """Create a root path, optionally extended by further field names."""
    result = Path(name=name)
    for another in more_names:
        result = Path(name=another, parent=result)
    return result
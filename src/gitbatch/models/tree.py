"""Tree entry model for gitbatch.

A tree listing is a list of TreeEntry values for one directory level.
Listings are treated as immutable values: every edit returns a new list.
"""

from __future__ import annotations

from dataclasses import dataclass

from gitbatch.models.changes import FileMode, ObjectType


@dataclass(frozen=True)
class TreeEntry:
    """A single named entry in a tree object."""

    name: str
    mode: FileMode
    oid: str
    type: ObjectType

    @classmethod
    def blob(cls, name: str, oid: str, mode: FileMode = FileMode.REGULAR) -> TreeEntry:
        return cls(name=name, mode=mode, oid=oid, type="blob")

    @classmethod
    def tree(cls, name: str, oid: str) -> TreeEntry:
        return cls(name=name, mode=FileMode.TREE, oid=oid, type="tree")

    @classmethod
    def submodule(cls, name: str, oid: str) -> TreeEntry:
        return cls(name=name, mode=FileMode.SUBMODULE, oid=oid, type="commit")

    @property
    def is_tree(self) -> bool:
        return self.type == "tree"


TreeListing = list[TreeEntry]

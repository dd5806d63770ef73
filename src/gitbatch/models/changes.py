"""Change set model for gitbatch.

FileMode enumerates git entry modes.
FileData is the content and mode of one file in a change set.
ChangeEntry is a single path-addressed change, the unit consumed by the
batcher and the tree builder.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from typing import Literal, Optional, Union

from pydantic import BaseModel, field_validator, model_validator

from gitbatch.exceptions import InvalidPathError

ObjectType = Literal["blob", "tree", "commit"]

_COMMIT_SHA = re.compile(rb"[0-9a-f]{40}")


class FileMode(str, enum.Enum):
    """Git entry modes, as they appear in tree objects."""

    REGULAR = "100644"
    EXECUTABLE = "100755"
    SYMLINK = "120000"
    SUBMODULE = "160000"
    TREE = "040000"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

    @property
    def object_type(self) -> ObjectType:
        """Kind of object an entry with this mode points at."""
        if self is FileMode.TREE:
            return "tree"
        if self is FileMode.SUBMODULE:
            return "commit"
        return "blob"

    @classmethod
    def from_octal(cls, mode: int | str) -> FileMode:
        """Parse a mode as stored by git (``0o40000``, ``"40000"``, ``"100644"``)."""
        if isinstance(mode, int):
            mode = format(mode, "o")
        mode = mode.zfill(6)
        try:
            return cls(mode)
        except ValueError:
            raise ValueError(f"Unexpected tree entry mode: {mode}") from None

    def to_octal(self) -> int:
        return int(self.value, 8)


def _writable_mode(mode: FileMode) -> FileMode:
    if mode is FileMode.TREE:
        raise ValueError("directories cannot be written directly; change their files instead")
    return mode


def _check_submodule_target(content: Optional[bytes], mode: FileMode) -> None:
    """A submodule entry must name the commit it points at by its full hex id."""
    if mode is FileMode.SUBMODULE and content is not None:
        if not _COMMIT_SHA.fullmatch(content.strip()):
            raise ValueError(f"submodule content must be a 40-character hex commit id, got {content!r}")


class FileData(BaseModel):
    """The content and mode of a file.

    ``content=None`` marks the path as deleted. String content is stored
    as UTF-8 bytes. For submodule entries the content is the hex id of
    the commit the submodule points at.
    """

    model_config = {"frozen": True}

    content: Optional[bytes] = None
    mode: FileMode = FileMode.REGULAR

    def __init__(
        self,
        content: Union[bytes, str, None] = None,
        mode: Union[FileMode, str] = FileMode.REGULAR,
        **data: object,
    ) -> None:
        super().__init__(content=content, mode=mode, **data)

    @field_validator("content", mode="before")
    @classmethod
    def _encode_text(cls, v: object) -> object:
        if isinstance(v, str):
            return v.encode("utf-8")
        return v

    @field_validator("mode")
    @classmethod
    def _reject_tree_mode(cls, v: FileMode) -> FileMode:
        return _writable_mode(v)

    @model_validator(mode="after")
    def _check_submodule(self) -> FileData:
        _check_submodule_target(self.content, self.mode)
        return self


Changes = Mapping[str, FileData]
"""Map of repository path to its new content. Content must be the entire file."""


def normalize_path(path: str) -> str:
    """Validate a slash-delimited repository path and return it unchanged.

    Raises InvalidPathError on violation.
    """
    if not path:
        raise InvalidPathError(path, "path cannot be empty")
    if path.startswith("/") or path.endswith("/"):
        raise InvalidPathError(path, "path cannot start or end with '/'")
    for part in path.split("/"):
        if not part:
            raise InvalidPathError(path, "path has an empty segment")
        if part in (".", ".."):
            raise InvalidPathError(path, f"path segment '{part}' is not allowed")
        if part == ".git":
            raise InvalidPathError(path, "path cannot address the .git directory")
    return path


class ChangeEntry(BaseModel):
    """One path in a change set."""

    model_config = {"frozen": True}

    path: str
    content: Optional[bytes] = None
    mode: FileMode = FileMode.REGULAR

    @field_validator("path")
    @classmethod
    def _validate_path(cls, v: str) -> str:
        return normalize_path(v)

    @field_validator("content", mode="before")
    @classmethod
    def _encode_text(cls, v: object) -> object:
        if isinstance(v, str):
            return v.encode("utf-8")
        return v

    @field_validator("mode")
    @classmethod
    def _reject_tree_mode(cls, v: FileMode) -> FileMode:
        return _writable_mode(v)

    @model_validator(mode="after")
    def _check_submodule(self) -> ChangeEntry:
        _check_submodule_target(self.content, self.mode)
        return self

    @property
    def is_deletion(self) -> bool:
        return self.content is None

    @property
    def parts(self) -> list[str]:
        return self.path.split("/")

    def __repr__(self) -> str:
        if self.is_deletion:
            return f"ChangeEntry(delete {self.path})"
        return f"ChangeEntry({self.mode.value} {self.path} {len(self.content)}B)"


def generate_change_entries(changes: Changes) -> list[ChangeEntry]:
    """Flatten a change set into entries, keeping the mapping's order."""
    return [
        ChangeEntry(path=path, content=data.content, mode=data.mode)
        for path, data in changes.items()
    ]

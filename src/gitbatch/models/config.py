"""Configuration models for gitbatch.

PushOptions carries everything the push orchestrator needs beyond the
change set itself: batch size, identities, signer and an opaque
transport configuration handed through to the object store.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from gitbatch.models.commit import UserData
from gitbatch.protocols import CommitSigner

DEFAULT_FILES_PER_COMMIT = 100


class PushOptions(BaseModel):
    """Per-push configuration."""

    model_config = {"arbitrary_types_allowed": True}

    files_per_commit: int = Field(default=DEFAULT_FILES_PER_COMMIT, ge=1)
    author: Optional[UserData] = None
    committer: Optional[UserData] = None
    signer: Optional[CommitSigner] = None
    blob_workers: int = Field(default=1, ge=1)
    transport: dict[str, Any] = {}

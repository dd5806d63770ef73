"""Shared test fixtures for gitbatch.

Provides in-memory dulwich object stores seeded with a base commit, and a
fake GitHub REST API (backed by its own in-memory repository) served
through httpx.MockTransport.
"""

from __future__ import annotations

import base64
import json
import re

import httpx
import pytest

from gitbatch.engine.tree import build_tree
from gitbatch.exceptions import ObjectNotFoundError
from gitbatch.github.client import GitHubClient
from gitbatch.models.branch import BranchDomain, RepoDomain
from gitbatch.models.changes import ChangeEntry, FileMode
from gitbatch.models.commit import CommitNode, UserData
from gitbatch.models.tree import TreeEntry
from gitbatch.storage.local import DulwichObjectStore

BASE_FILES = {
    "README": "old",
    "setup.sh": ("#!/bin/sh\necho hi\n", FileMode.EXECUTABLE),
    "src/main.py": "print('hello')\n",
    "src/lib/util.py": "X = 1\n",
    "src/lib/extra.py": "Y = 2\n",
    "docs/guide.md": "# Guide\n",
}

FIXED_AUTHOR = UserData(name="Test Author", email="author@example.com")


def make_entries(files: dict) -> list[ChangeEntry]:
    entries = []
    for path, value in files.items():
        if isinstance(value, tuple):
            content, mode = value
        else:
            content, mode = value, FileMode.REGULAR
        entries.append(ChangeEntry(path=path, content=content, mode=mode))
    return entries


def seed_commit(
    store: DulwichObjectStore,
    files: dict,
    *,
    parents: list[str] | None = None,
    message: str = "base",
) -> str:
    """Write ``files`` as a fresh tree and commit it. Returns the commit id."""
    tree_id = build_tree(store, None, make_entries(files))
    return store.create_commit(
        CommitNode(tree=tree_id, parents=parents or [], message=message, author=FIXED_AUTHOR)
    )


# ------------------------------------------------------------------
# Local store fixtures
# ------------------------------------------------------------------

@pytest.fixture
def store() -> DulwichObjectStore:
    """Empty in-memory dulwich store."""
    return DulwichObjectStore.in_memory()


@pytest.fixture
def seed():
    """Return the seed_commit helper."""
    return seed_commit


@pytest.fixture
def base_commit(store: DulwichObjectStore) -> str:
    """Commit holding BASE_FILES."""
    return seed_commit(store, BASE_FILES)


@pytest.fixture
def base_tree(store: DulwichObjectStore, base_commit: str) -> str:
    return store.get_commit_tree(base_commit)


@pytest.fixture
def main_branch() -> BranchDomain:
    return BranchDomain(owner="octo", repo="demo", branch="main")


@pytest.fixture
def on_main(store: DulwichObjectStore, base_commit: str, main_branch: BranchDomain) -> str:
    """Point refs/heads/main at the base commit; returns the base commit id."""
    store.write_ref(main_branch, base_commit, force=True)
    return base_commit


# ------------------------------------------------------------------
# Fake GitHub API
# ------------------------------------------------------------------

_REPO_PATH = re.compile(r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)/(?P<rest>.+)$")


class FakeGitHub:
    """Minimal GitHub REST API over an in-memory dulwich repository.

    Serves the branch and Git Data endpoints used by gitbatch. Every
    request is recorded in ``requests`` as ``(method, path, body)``.
    ``fail(method, fragment, status)`` makes matching requests fail.
    """

    def __init__(self) -> None:
        self.store = DulwichObjectStore.in_memory()
        self.requests: list[tuple[str, str, dict | None]] = []
        self.commit_payloads: list[dict] = []
        self._failures: list[tuple[str, str, int]] = []

    def fail(self, method: str, fragment: str, status: int) -> None:
        self._failures.append((method, fragment, status))

    def branch(self, repo: RepoDomain, name: str) -> BranchDomain:
        # one object store serves every repository; refs are namespaced per repo
        return BranchDomain(owner=repo.owner, repo=repo.repo, branch=f"{repo.full_name}/{name}")

    def set_branch(self, repo: RepoDomain, name: str, sha: str) -> None:
        self.store.write_ref(self.branch(repo, name), sha, force=True)

    def head(self, repo: RepoDomain, name: str) -> str | None:
        return self.store.get_ref(self.branch(repo, name))

    def seed(self, files: dict, repo: RepoDomain, name: str = "main") -> str:
        sha = seed_commit(self.store, files)
        self.set_branch(repo, name, sha)
        return sha

    # -- transport --------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, body))

        for method, fragment, status in self._failures:
            if method == request.method and fragment in path:
                return httpx.Response(status, json={"message": "injected failure"})

        match = _REPO_PATH.match(path)
        if match is None:
            return httpx.Response(404, json={"message": "Not Found"})
        repo = RepoDomain(owner=match["owner"], repo=match["repo"])
        rest = match["rest"]

        if request.method == "GET" and rest.startswith("branches/"):
            return self._get_branch(repo, rest[len("branches/"):])
        if request.method == "GET" and rest.startswith("git/ref/heads/"):
            return self._get_ref(repo, rest[len("git/ref/heads/"):])
        if request.method == "POST" and rest == "git/refs":
            return self._create_ref(repo, body)
        if request.method == "PATCH" and rest.startswith("git/refs/heads/"):
            return self._update_ref(repo, rest[len("git/refs/heads/"):], body)
        if request.method == "GET" and rest.startswith("git/commits/"):
            return self._get_commit(rest[len("git/commits/"):])
        if request.method == "GET" and rest.startswith("git/trees/"):
            return self._get_tree(rest[len("git/trees/"):])
        if request.method == "POST" and rest == "git/blobs":
            sha = self.store.write_blob(base64.b64decode(body["content"]))
            return httpx.Response(201, json={"sha": sha})
        if request.method == "POST" and rest == "git/trees":
            return self._create_tree(body)
        if request.method == "POST" and rest == "git/commits":
            return self._create_commit(body)
        return httpx.Response(404, json={"message": "Not Found"})

    def _get_branch(self, repo: RepoDomain, name: str) -> httpx.Response:
        sha = self.head(repo, name)
        if sha is None:
            return httpx.Response(404, json={"message": "Branch not found"})
        return httpx.Response(200, json={"name": name, "commit": {"sha": sha}})

    def _get_ref(self, repo: RepoDomain, name: str) -> httpx.Response:
        sha = self.head(repo, name)
        if sha is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(
            200, json={"ref": f"refs/heads/{name}", "object": {"sha": sha, "type": "commit"}}
        )

    def _create_ref(self, repo: RepoDomain, body: dict) -> httpx.Response:
        name = body["ref"][len("refs/heads/"):]
        if self.head(repo, name) is not None:
            return httpx.Response(422, json={"message": "Reference already exists"})
        if not self._has_commit(body["sha"]):
            return httpx.Response(422, json={"message": "Object does not exist"})
        self.set_branch(repo, name, body["sha"])
        return httpx.Response(
            201,
            json={
                "ref": body["ref"],
                "object": {"sha": body["sha"], "type": "commit", "url": f"https://github.test/{body['sha']}"},
            },
        )

    def _update_ref(self, repo: RepoDomain, name: str, body: dict) -> httpx.Response:
        current = self.head(repo, name)
        if current is None:
            return httpx.Response(422, json={"message": "Reference does not exist"})
        if not self._has_commit(body["sha"]):
            return httpx.Response(422, json={"message": "Object does not exist"})
        if not body.get("force") and not self.store.is_ancestor(current, body["sha"]):
            return httpx.Response(422, json={"message": "Update is not a fast forward"})
        self.set_branch(repo, name, body["sha"])
        return httpx.Response(200, json={"ref": f"refs/heads/{name}", "object": {"sha": body["sha"]}})

    def _has_commit(self, sha: str) -> bool:
        try:
            self.store.get_commit_tree(sha)
        except ObjectNotFoundError:
            return False
        return True

    def _get_commit(self, sha: str) -> httpx.Response:
        try:
            tree = self.store.get_commit_tree(sha)
        except ObjectNotFoundError:
            return httpx.Response(404, json={"message": "Not Found"})
        commit = self.store.repo[sha.encode("ascii")]
        return httpx.Response(
            200,
            json={
                "sha": sha,
                "tree": {"sha": tree},
                "parents": [{"sha": p.decode("ascii")} for p in commit.parents],
                "message": commit.message.decode("utf-8"),
            },
        )

    def _get_tree(self, sha: str) -> httpx.Response:
        try:
            entries = self.store.read_tree(sha)
        except ObjectNotFoundError:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(
            200,
            json={
                "sha": sha,
                "tree": [
                    {"path": e.name, "mode": e.mode.value, "type": e.type, "sha": e.oid}
                    for e in entries
                ],
                "truncated": False,
            },
        )

    def _create_tree(self, body: dict) -> httpx.Response:
        entries = [
            TreeEntry(
                name=item["path"],
                mode=FileMode(item["mode"]),
                oid=item["sha"],
                type=item["type"],
            )
            for item in body["tree"]
        ]
        return httpx.Response(201, json={"sha": self.store.write_tree(entries)})

    def _create_commit(self, body: dict) -> httpx.Response:
        self.commit_payloads.append(body)
        author = body.get("author")
        sha = self.store.create_commit(
            CommitNode(
                tree=body["tree"],
                parents=body["parents"],
                message=body["message"],
                author=UserData(name=author["name"], email=author["email"]) if author else None,
                signature=body.get("signature"),
            )
        )
        return httpx.Response(201, json={"sha": sha})


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def demo_repo() -> RepoDomain:
    return RepoDomain(owner="octo", repo="demo")


def make_github_client(fake: FakeGitHub, **kwargs) -> GitHubClient:
    kwargs.setdefault("max_retries", 1)
    return GitHubClient(
        token="test-token",
        base_url="http://github.test",
        transport=httpx.MockTransport(fake.handle),
        **kwargs,
    )


@pytest.fixture
def github_client(fake_github: FakeGitHub):
    client = make_github_client(fake_github)
    yield client
    client.close()

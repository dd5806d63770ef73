"""Tests for the reference updater."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from gitbatch import (
    BranchDomain,
    NonFastForwardError,
    RefUpdateError,
    RefUpdateFailure,
    update_ref,
)


def test_fast_forward(store, on_main, main_branch, seed):
    child = seed(store, {"new.txt": "new"}, parents=[on_main], message="child")
    update_ref(store, main_branch, child)
    assert store.get_ref(main_branch) == child


def test_non_fast_forward_rejected(store, on_main, main_branch, seed):
    unrelated = seed(store, {"other.txt": "x"}, message="unrelated")
    with pytest.raises(NonFastForwardError) as exc_info:
        update_ref(store, main_branch, unrelated)

    err = exc_info.value
    assert isinstance(err, RefUpdateError)
    assert err.reason is RefUpdateFailure.NON_FAST_FORWARD
    assert err.rejected
    assert err.current == on_main
    assert err.ref == "refs/heads/main"
    assert store.get_ref(main_branch) == on_main


def test_rewind_rejected(store, on_main, main_branch, seed):
    child = seed(store, {"new.txt": "new"}, parents=[on_main], message="child")
    update_ref(store, main_branch, child)
    with pytest.raises(NonFastForwardError):
        update_ref(store, main_branch, on_main)


def test_force_overwrites(store, on_main, main_branch, seed):
    unrelated = seed(store, {"other.txt": "x"}, message="unrelated")
    update_ref(store, main_branch, unrelated, force=True)
    assert store.get_ref(main_branch) == unrelated


def test_missing_ref_is_created(store, base_commit):
    feature = BranchDomain(owner="octo", repo="demo", branch="feature/x")
    assert store.get_ref(feature) is None
    update_ref(store, feature, base_commit)
    assert store.get_ref(feature) == base_commit


def test_same_target_is_noop(store, on_main, main_branch):
    update_ref(store, main_branch, on_main)
    assert store.get_ref(main_branch) == on_main


def test_other_errors_wrapped_as_transport(store, on_main, main_branch):
    with patch.object(store, "write_ref", side_effect=ConnectionError("reset by peer")):
        with pytest.raises(RefUpdateError) as exc_info:
            update_ref(store, main_branch, on_main)

    err = exc_info.value
    assert not isinstance(err, NonFastForwardError)
    assert err.reason is RefUpdateFailure.TRANSPORT
    assert not err.rejected
    assert "reset by peer" in str(err)
    assert isinstance(err.__cause__, ConnectionError)

"""Tests for the reconciliation entry points."""

import pytest

from aurclean.cache.disposal import DisposalExecutor, OutcomeStatus
from aurclean.cache.policy import RetentionPolicy
from aurclean.cache.reconcile import (
    clean_after,
    clean_builds,
    clean_dependencies,
    purge_untracked,
    reconcile_cache,
)
from aurclean.exceptions import RemoteQueryError

KEEP_INSTALLED = RetentionPolicy(keep_installed=True, keep_current=False)
KEEP_CURRENT = RetentionPolicy(keep_installed=False, keep_current=True)
REMOVE_ALL = RetentionPolicy(keep_installed=True, keep_current=False, remove_all=True)


def statuses(outcomes):
    return {o.name: o.status for o in outcomes}


@pytest.mark.short
def test_keep_installed_scenario(make_cache, fakes, installed):
    root = make_cache(plain=["foo", "bar", "baz"])
    vcs = fakes.Vcs()
    database = fakes.Database(installed("foo"))

    outcomes = reconcile_cache(root, KEEP_INSTALLED, vcs=vcs, database=database)

    assert statuses(outcomes) == {
        "foo": OutcomeStatus.KEPT,
        "bar": OutcomeStatus.REMOVED,
        "baz": OutcomeStatus.REMOVED,
    }
    assert sorted(p.name for p in root.iterdir()) == ["foo"]


@pytest.mark.short
def test_remove_all_scenario(make_cache, fakes, installed):
    root = make_cache(plain=["foo", "baz"], git=["bar"])
    vcs = fakes.Vcs()
    database = fakes.Database(installed("foo"))
    index = fakes.Index({"bar": "bar"})

    outcomes = reconcile_cache(
        root, REMOVE_ALL, vcs=vcs, database=database, index=index
    )

    assert statuses(outcomes) == {
        "foo": OutcomeStatus.REMOVED,
        "bar": OutcomeStatus.REMOVED,
        "baz": OutcomeStatus.REMOVED,
    }
    assert list(root.iterdir()) == []
    # full purge deletes git workspaces outright
    assert vcs.calls == []
    assert index.queries == []


@pytest.mark.short
def test_git_workspace_reset_and_plain_deleted(make_cache, fakes, installed):
    root = make_cache(plain=["foo", "baz"], git=["bar"])
    vcs = fakes.Vcs()
    database = fakes.Database(installed("foo"))

    outcomes = reconcile_cache(root, KEEP_INSTALLED, vcs=vcs, database=database)

    assert statuses(outcomes)["bar"] is OutcomeStatus.REMOVED
    assert vcs.calls == [("reset", "bar"), ("clean", "bar")]
    assert (root / "bar").is_dir()
    assert not (root / "baz").exists()
    assert (root / "foo").is_dir()


@pytest.mark.short
def test_outcomes_in_inventory_order(make_cache, fakes, installed):
    root = make_cache(plain=["c", "a", "b"])

    outcomes = reconcile_cache(
        root, KEEP_INSTALLED, vcs=fakes.Vcs(), database=fakes.Database(installed("b"))
    )

    assert [o.name for o in outcomes] == ["a", "b", "c"]


@pytest.mark.short
def test_split_package_keeps_its_base(make_cache, fakes, installed):
    root = make_cache(plain=["foo", "python-foo"])
    database = fakes.Database(installed(("python-foo", "foo")))

    outcomes = reconcile_cache(root, KEEP_INSTALLED, vcs=fakes.Vcs(), database=database)

    assert statuses(outcomes) == {
        "foo": OutcomeStatus.KEPT,
        "python-foo": OutcomeStatus.REMOVED,
    }


@pytest.mark.short
def test_keep_current_queries_remote_once(make_cache, fakes, installed):
    root = make_cache(plain=["foo", "bar", "baz"])
    index = fakes.Index({"bar": "bar"})
    database = fakes.Database(installed("foo"))

    outcomes = reconcile_cache(
        root, KEEP_CURRENT, vcs=fakes.Vcs(), database=database, index=index
    )

    assert index.queries == [["bar", "baz", "foo"]]
    assert statuses(outcomes) == {
        "foo": OutcomeStatus.REMOVED,
        "bar": OutcomeStatus.KEPT,
        "baz": OutcomeStatus.REMOVED,
    }
    # installed set is irrelevant without KeepInstalled
    assert database.list_calls == 0


@pytest.mark.short
def test_remote_not_queried_without_keep_current(make_cache, fakes, installed):
    root = make_cache(plain=["foo"])
    index = fakes.Index(error="offline")

    reconcile_cache(
        root,
        KEEP_INSTALLED,
        vcs=fakes.Vcs(),
        database=fakes.Database(installed("foo")),
        index=index,
    )

    assert index.queries == []


@pytest.mark.short
def test_remote_failure_aborts_before_disposal(make_cache, fakes):
    root = make_cache(plain=["foo", "bar"], git=["baz"])
    vcs = fakes.Vcs()
    index = fakes.Index(error="timed out")

    with pytest.raises(RemoteQueryError):
        reconcile_cache(
            root, KEEP_CURRENT, vcs=vcs, database=fakes.Database(), index=index
        )

    assert sorted(p.name for p in root.iterdir()) == ["bar", "baz", "foo"]
    assert vcs.calls == []


@pytest.mark.short
def test_keep_current_requires_index(make_cache, fakes):
    root = make_cache(plain=["foo"])

    with pytest.raises(ValueError):
        reconcile_cache(root, KEEP_CURRENT, vcs=fakes.Vcs(), database=fakes.Database())

    assert (root / "foo").is_dir()


@pytest.mark.short
def test_unreadable_root_is_fatal(tmp_path, fakes):
    with pytest.raises(OSError):
        reconcile_cache(
            tmp_path / "missing",
            KEEP_INSTALLED,
            vcs=fakes.Vcs(),
            database=fakes.Database(),
        )


@pytest.mark.short
def test_empty_cache(make_cache, fakes):
    database = fakes.Database()

    assert reconcile_cache(make_cache(), KEEP_INSTALLED, vcs=fakes.Vcs(), database=database) == []
    assert database.list_calls == 0


@pytest.mark.short
@pytest.mark.parametrize("policy", [KEEP_INSTALLED, REMOVE_ALL])
def test_second_pass_removes_nothing(make_cache, fakes, installed, policy):
    root = make_cache(plain=["foo", "bar", "baz"], files=["vcs.json"])
    database = fakes.Database(installed("foo"))

    reconcile_cache(root, policy, vcs=fakes.Vcs(), database=database)
    second = reconcile_cache(root, policy, vcs=fakes.Vcs(), database=database)

    assert [o for o in second if o.status is OutcomeStatus.REMOVED] == []


@pytest.mark.short
@pytest.mark.parametrize("policy", [KEEP_INSTALLED, REMOVE_ALL])
def test_symlinked_workspace_is_left_alone(make_cache, fakes, tmp_path, policy):
    root = make_cache(plain=["foo"])
    outside = tmp_path / "outside"
    (outside / ".git").mkdir(parents=True)
    (outside / "PKGBUILD").write_text("pkgname=outside")
    (root / "linked").symlink_to(outside, target_is_directory=True)
    vcs = fakes.Vcs()

    first = reconcile_cache(root, policy, vcs=vcs, database=fakes.Database())
    second = reconcile_cache(root, policy, vcs=vcs, database=fakes.Database())

    assert statuses(first) == {"foo": OutcomeStatus.REMOVED}
    assert second == []
    assert vcs.calls == []
    assert (root / "linked").is_symlink()
    assert (outside / "PKGBUILD").exists()


@pytest.mark.short
def test_failed_entry_does_not_skip_others(make_cache, fakes):
    root = make_cache(plain=["a", "c"], git=["b"])
    vcs = fakes.Vcs(fail_reset={"b"}, fail_clean={"b"})

    outcomes = reconcile_cache(root, KEEP_INSTALLED, vcs=vcs, database=fakes.Database())

    assert [(o.name, o.status) for o in outcomes] == [
        ("a", OutcomeStatus.REMOVED),
        ("b", OutcomeStatus.FAILED),
        ("c", OutcomeStatus.REMOVED),
    ]


@pytest.mark.short
def test_parallel_executor(make_cache, fakes, installed):
    names = [f"pkg{i:02d}" for i in range(12)]
    root = make_cache(plain=names)
    vcs = fakes.Vcs()
    executor = DisposalExecutor(vcs, max_workers=3)

    outcomes = reconcile_cache(
        root,
        KEEP_INSTALLED,
        vcs=vcs,
        database=fakes.Database(installed("pkg03")),
        executor=executor,
    )

    assert [o.name for o in outcomes] == names
    assert statuses(outcomes)["pkg03"] is OutcomeStatus.KEPT
    assert sorted(p.name for p in root.iterdir()) == ["pkg03"]


@pytest.mark.short
def test_purge_untracked(make_cache, fakes):
    root = make_cache(plain=["baz"], git=["bar"])
    vcs = fakes.Vcs()

    outcomes = purge_untracked(root, vcs=vcs)

    assert statuses(outcomes) == {
        "bar": OutcomeStatus.REMOVED,
        "baz": OutcomeStatus.KEPT,
    }
    assert vcs.calls == [("clean", "bar")]
    assert (root / "baz").is_dir()


@pytest.mark.short
def test_clean_after(make_cache, fakes):
    root = make_cache(plain=["baz", "other"], git=["bar"])
    vcs = fakes.Vcs()

    outcomes = clean_after(root, ["bar", "baz"], vcs=vcs)

    assert statuses(outcomes) == {
        "bar": OutcomeStatus.REMOVED,
        "baz": OutcomeStatus.REMOVED,
    }
    assert vcs.calls == [("reset", "bar"), ("clean", "bar")]
    assert sorted(p.name for p in root.iterdir()) == ["bar", "other"]


@pytest.mark.short
def test_clean_builds_missing_base_fails_alone(make_cache, fakes):
    root = make_cache(plain=["baz"], git=["bar"])
    vcs = fakes.Vcs()

    outcomes = clean_builds(root, ["missing", "bar", "baz"], vcs=vcs)

    assert [(o.name, o.status) for o in outcomes] == [
        ("missing", OutcomeStatus.FAILED),
        ("bar", OutcomeStatus.REMOVED),
        ("baz", OutcomeStatus.REMOVED),
    ]
    assert vcs.calls == []
    assert list(root.iterdir()) == []


@pytest.mark.short
def test_clean_builds_repeated_base(make_cache, fakes):
    root = make_cache(plain=["a"])

    outcomes = clean_builds(root, ["a", "a"], vcs=fakes.Vcs())

    assert [(o.name, o.status) for o in outcomes] == [
        ("a", OutcomeStatus.REMOVED),
        ("a", OutcomeStatus.FAILED),
    ]
    assert list(root.iterdir()) == []


@pytest.mark.short
def test_clean_dependencies(fakes):
    database = fakes.Database(hanging=["libfoo", "python-bar"])

    assert clean_dependencies(database, remove_optional=False) == ["libfoo", "python-bar"]
    assert database.removed == ["libfoo", "python-bar"]


@pytest.mark.short
def test_clean_dependencies_nothing_to_do(fakes):
    database = fakes.Database()

    assert clean_dependencies(database, remove_optional=True) == []
    assert database.removed == []

import io
import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from aurclean.core.interfaces import AurPackage, InstalledPackage
from aurclean.exceptions import RemoteQueryError, VcsError


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("aurclean")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


class FakeVcs:
    """VcsBackend double: a directory is version-controlled if it has a .git dir.

    Calls are recorded as (operation, name); failures are injected per name.
    """

    def __init__(self, fail_reset=(), fail_clean=()):
        self.fail_reset = set(fail_reset)
        self.fail_clean = set(fail_clean)
        self.calls = []

    def is_version_controlled(self, path: Path) -> bool:
        return (Path(path) / ".git").is_dir()

    def reset(self, path: Path) -> None:
        self.calls.append(("reset", Path(path).name))
        if Path(path).name in self.fail_reset:
            raise VcsError(path, "reset", "fatal: unable to write new index file")

    def clean(self, path: Path) -> None:
        self.calls.append(("clean", Path(path).name))
        if Path(path).name in self.fail_clean:
            raise VcsError(path, "clean", "warning: failed to remove file")


class FakeDatabase:
    def __init__(self, foreign=(), hanging=()):
        self.foreign = list(foreign)
        self._hanging = list(hanging)
        self.removed = []
        self.list_calls = 0

    def list_foreign(self):
        self.list_calls += 1
        return list(self.foreign)

    def hanging(self, remove_optional=False):
        return list(self._hanging)

    def remove(self, names):
        self.removed.extend(names)


class FakeIndex:
    def __init__(self, bases=None, error=None):
        # name -> base
        self.bases = dict(bases or {})
        self.error = error
        self.queries = []

    def info(self, names):
        self.queries.append(list(names))
        if self.error is not None:
            raise RemoteQueryError(self.error, names)
        return [
            AurPackage(name=name, base=self.bases[name])
            for name in names
            if name in self.bases
        ]


@pytest.fixture
def fake_vcs():
    return FakeVcs()


@pytest.fixture
def fakes():
    """Collaborator doubles: fakes.Vcs, fakes.Database, fakes.Index."""
    return SimpleNamespace(Vcs=FakeVcs, Database=FakeDatabase, Index=FakeIndex)


@pytest.fixture
def make_cache(tmp_path):
    """Create a build cache with plain and git workspaces.

    Usage: make_cache(plain=["baz"], git=["bar"], files=["stray.lock"])
    """

    def _make(plain=(), git=(), files=()):
        root = tmp_path / "cache"
        root.mkdir(exist_ok=True)
        for name in plain:
            (root / name).mkdir()
            (root / name / "PKGBUILD").write_text("pkgname=" + name)
        for name in git:
            (root / name / ".git").mkdir(parents=True)
            (root / name / "PKGBUILD").write_text("pkgname=" + name)
        for name in files:
            (root / name).write_text("")
        return root

    return _make


@pytest.fixture
def installed():
    """Build InstalledPackage records from (name, base) pairs or names."""

    def _installed(*records):
        packages = []
        for record in records:
            if isinstance(record, tuple):
                packages.append(InstalledPackage(*record))
            else:
                packages.append(InstalledPackage(record))
        return packages

    return _installed


@pytest.fixture
def local_git_repo(tmp_path):
    """Create a minimal local git repo with one commit, using dulwich."""
    from dulwich import porcelain

    repo_dir = tmp_path / "cache" / "foo-git"
    repo_dir.mkdir(parents=True)
    porcelain.init(str(repo_dir))
    (repo_dir / "PKGBUILD").write_text("pkgname=foo-git\n")
    (repo_dir / ".gitignore").write_text("*.tar.gz\n")
    porcelain.add(
        str(repo_dir),
        paths=[str(repo_dir / "PKGBUILD"), str(repo_dir / ".gitignore")],
    )
    porcelain.commit(
        str(repo_dir),
        message=b"initial commit",
        author=b"Test <test@test>",
        committer=b"Test <test@test>",
    )
    return repo_dir

"""CLI commands for build cache cleanup"""

import sys
from pathlib import Path
from typing import List, Optional

import click

from aurclean.aur import AurClient
from aurclean.cache import (
    DisposalExecutor,
    DisposalOutcome,
    OutcomeStatus,
    RetentionPolicy,
    clean_after,
    clean_builds,
    clean_dependencies,
    purge_untracked,
    reconcile_cache,
)
from aurclean.cli.utils.logging import debug_option, logger
from aurclean.config import (
    get_build_dir,
    get_clean_workers,
    get_vcs_file,
    read_clean_method,
)
from aurclean.exceptions import PackageManagerError, RemoteQueryError
from aurclean.git import GitWorkspace
from aurclean.pacman import PacmanDatabase
from aurclean.vcs_store import VCSStore

build_dir_option = click.option(
    "--build-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Build cache directory (defaults to the configured one).",
)

yes_option = click.option(
    "--yes", "-y", is_flag=True, help="Do not ask for confirmation."
)


def _executor(vcs: GitWorkspace) -> DisposalExecutor:
    return DisposalExecutor(vcs, max_workers=get_clean_workers())


def _report(outcomes: List[DisposalOutcome]) -> int:
    """Log a summary of a pass and return the number of failed entries."""
    counts = {status: 0 for status in OutcomeStatus}
    for outcome in outcomes:
        counts[outcome.status] += 1
        if outcome.failed:
            for error in outcome.errors:
                logger.warning(f"  {outcome.name}: {error}")

    logger.info(
        f"Removed {counts[OutcomeStatus.REMOVED]}, kept {counts[OutcomeStatus.KEPT]}, "
        f"failed {counts[OutcomeStatus.FAILED]}"
    )
    return counts[OutcomeStatus.FAILED]


def _confirm(question: str, yes: bool) -> bool:
    return yes or click.confirm(question, default=True)


@click.command("clean")
@debug_option
@click.option(
    "--all",
    "-c",
    "remove_all",
    is_flag=True,
    help="Remove ALL cached packages, ignoring CleanMethod.",
)
@yes_option
@build_dir_option
def clean(remove_all: bool, yes: bool, build_dir: Optional[Path]):
    """Remove cached AUR packages that are no longer needed.

    Which packages are kept follows CleanMethod in pacman.conf:
    KeepInstalled keeps installed packages, KeepCurrent keeps packages
    still available on the AUR.

    Example:

      aurclean clean
    """
    build_dir = build_dir or get_build_dir()
    policy = RetentionPolicy.from_clean_method(
        read_clean_method(), remove_all=remove_all
    )
    logger.debug(f"Retention policy: {policy}")

    if remove_all:
        question = "Do you want to remove ALL AUR packages from cache?"
    else:
        question = "Do you want to remove all other AUR packages from cache?"

    logger.info(f"\nBuild directory: {build_dir}")

    vcs = GitWorkspace()
    failed = 0
    if _confirm(question, yes):
        logger.info("removing AUR packages from cache...")
        try:
            outcomes = reconcile_cache(
                build_dir,
                policy,
                vcs=vcs,
                database=PacmanDatabase.from_config(),
                index=AurClient.from_config(),
                executor=_executor(vcs),
            )
        except OSError as e:
            logger.error(f"Failed to read build directory {build_dir}: {e}")
            sys.exit(1)
        except (RemoteQueryError, PackageManagerError) as e:
            logger.error(f"Failed to clean cache: {e}")
            sys.exit(1)
        failed = _report(outcomes)

    if not remove_all and _confirm(
        "Do you want to remove ALL untracked AUR files?", yes
    ):
        logger.info("removing Untracked AUR files from cache...")
        failed += _purge(build_dir, vcs)

    if failed:
        sys.exit(1)


def _purge(build_dir: Path, vcs: GitWorkspace) -> int:
    try:
        outcomes = purge_untracked(build_dir, vcs=vcs, executor=_executor(vcs))
    except OSError as e:
        logger.error(f"Failed to read build directory {build_dir}: {e}")
        sys.exit(1)
    return _report(outcomes)


@click.command("untracked")
@debug_option
@yes_option
@build_dir_option
def untracked(yes: bool, build_dir: Optional[Path]):
    """Remove untracked files from cached git checkouts."""
    build_dir = build_dir or get_build_dir()
    if not _confirm("Do you want to remove ALL untracked AUR files?", yes):
        return

    logger.info("removing Untracked AUR files from cache...")
    if _purge(build_dir, GitWorkspace()):
        sys.exit(1)


@click.command("after")
@debug_option
@click.argument("bases", nargs=-1, required=True)
@build_dir_option
def after(bases, build_dir: Optional[Path]):
    """Reset and clean the build directories of BASES after a build.

    Git checkouts are kept and reset to their tracked state, other build
    directories are deleted.
    """
    build_dir = build_dir or get_build_dir()
    vcs = GitWorkspace()
    outcomes = clean_after(build_dir, list(bases), vcs=vcs, executor=_executor(vcs))
    if _report(outcomes):
        sys.exit(1)


@click.command("builds")
@debug_option
@click.argument("bases", nargs=-1, required=True)
@build_dir_option
def builds(bases, build_dir: Optional[Path]):
    """Delete the build directories of BASES."""
    build_dir = build_dir or get_build_dir()
    vcs = GitWorkspace()
    outcomes = clean_builds(build_dir, list(bases), vcs=vcs, executor=_executor(vcs))
    if _report(outcomes):
        sys.exit(1)


@click.command("deps")
@debug_option
@click.option(
    "--optional",
    "remove_optional",
    is_flag=True,
    help="Also remove packages that are only optional dependencies.",
)
@yes_option
def deps(remove_optional: bool, yes: bool):
    """Uninstall dependencies that no installed package needs."""
    if not _confirm("Do you want to remove all hanging dependencies?", yes):
        return

    try:
        removed = clean_dependencies(PacmanDatabase.from_config(), remove_optional)
    except PackageManagerError as e:
        logger.error(f"Failed to remove dependencies: {e}")
        sys.exit(1)

    if not removed:
        return

    store = VCSStore(get_vcs_file())
    try:
        store.load()
    except (OSError, ValueError) as e:
        logger.warning(f"Not updating VCS info: {e}")
        return
    if store.remove_packages(removed):
        store.save()
        logger.debug(f"Dropped {len(removed)} packages from {store.path}")

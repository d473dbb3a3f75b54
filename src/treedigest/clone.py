"""
Git helpers: cloning a remote repository into a local directory, and reading
basic details of a local checkout.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from treedigest.defaults import DEFAULT_TIMEOUT
from treedigest.exceptions import CloneError
from treedigest.types import RepositoryInfo

log = logging.getLogger(__name__)


@dataclass
class CloneConfig:
    """Options for `clone_repository()`. `depth=None` means a full clone."""

    branch: str | None = None
    depth: int | None = None
    sparse: bool = False
    sparse_patterns: list[str] = field(default_factory=list)
    timeout: float = DEFAULT_TIMEOUT


def _run_git(args: list[str], cwd: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Run a git command and return its stripped stdout."""
    log.debug("Running: git %s", " ".join(args))
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
        timeout=timeout,
    )
    return result.stdout.strip()


def _clone_args(url: str, target_dir: Path, config: CloneConfig) -> list[str]:
    args = ["clone"]
    if config.branch:
        args += ["--branch", config.branch]
    if config.depth:
        args += ["--depth", str(config.depth)]
    if config.sparse:
        args.append("--sparse")
    args += [url, str(target_dir)]
    return args


def clone_repository(url: str, target_dir: str | Path, config: CloneConfig | None = None) -> Path:
    """
    Clone `url` into `target_dir`, optionally restricted to a branch, a shallow
    depth, or a sparse checkout. On any failure the target directory is removed
    and `CloneError` is raised.
    """
    config = config or CloneConfig()
    target = Path(target_dir)
    target.mkdir(parents=True, exist_ok=True)

    try:
        _run_git(_clone_args(url, target, config), timeout=config.timeout)
        if config.sparse and config.sparse_patterns:
            _run_git(["sparse-checkout", "init"], cwd=target, timeout=config.timeout)
            _run_git(
                ["sparse-checkout", "set", *config.sparse_patterns],
                cwd=target,
                timeout=config.timeout,
            )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        shutil.rmtree(target, ignore_errors=True)
        detail = e.stderr.strip() if isinstance(e, subprocess.CalledProcessError) and e.stderr else e
        raise CloneError(f"Failed to clone repository: {detail}") from e

    log.info("Cloned %s into %s", url, target)
    return target


def is_git_repository(path: str | Path) -> bool:
    return (Path(path) / ".git").is_dir()


def get_current_branch(repo_path: str | Path) -> str:
    return _run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo_path)


def get_remote_url(repo_path: str | Path) -> str:
    return _run_git(["config", "--get", "remote.origin.url"], cwd=repo_path)


def get_repository_info(repo_path: str | Path) -> RepositoryInfo:
    """
    Collect git details for a local path. Failures reading the branch or remote
    are logged and leave those fields unset.
    """
    info = RepositoryInfo(path=str(repo_path), is_git=is_git_repository(repo_path))
    if not info.is_git:
        return info
    try:
        info.current_branch = get_current_branch(repo_path)
        info.remote_url = get_remote_url(repo_path)
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
        log.warning("Error getting git repository details for %s: %s", repo_path, e)
    return info

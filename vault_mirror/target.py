"""Target-side path helpers.

Handles the mirror root for every sync operation:
- Expanding the $HOME placeholder in the configured root
- Checking that the root is mounted and is a directory
- Creating parent directories below the root before writes

Nothing here caches state; callers re-check on every operation because the
target device can be unmounted or edited between events.
"""

import os
import stat
from pathlib import Path
from typing import Mapping, Optional, Union

from vault_mirror.config import HOME_PLACEHOLDER, MirrorConfig


def resolve_target_root(
    config: MirrorConfig,
    environ: Optional[Mapping[str, str]] = None
) -> str:
    """Expand the $HOME placeholder in the configured target root.

    If the environment has no HOME the configured string is returned with
    the placeholder left literal.

    Args:
        config: Mirror configuration
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The target root, otherwise unnormalized

    Example:
        >>> resolve_target_root(MirrorConfig("$HOME/notes"), {"HOME": "/home/a"})
        '/home/a/notes'
    """
    if environ is None:
        environ = os.environ

    home = environ.get("HOME")
    if isinstance(home, str):
        return config.target_root.replace(HOME_PLACEHOLDER, home, 1)
    return config.target_root


def is_target_available(target_root: Union[str, Path]) -> bool:
    """Check that the target root exists and is a directory.

    Never raises: any stat failure counts as unavailable.

    Args:
        target_root: Resolved target root

    Returns:
        True if the path is an existing directory
    """
    try:
        target_stat = os.stat(target_root)
    except (OSError, ValueError):
        return False
    return stat.S_ISDIR(target_stat.st_mode)


def target_path_for(target_root: Union[str, Path], relative_path: str) -> Path:
    """Map a slash-separated source path onto the target root."""
    return Path(target_root).joinpath(*relative_path.split("/"))


def safe_stat(path: Path) -> Optional[os.stat_result]:
    """Stat a path, returning None if it cannot be stat'ed."""
    try:
        return path.stat()
    except OSError:
        return None


def ensure_parent_directory(target_path: Path) -> Path:
    """Make sure the parent directory of target_path exists.

    Does not validate the target root itself; call is_target_available()
    first.

    Args:
        target_path: Absolute path of the item about to be written

    Returns:
        The parent directory

    Raises:
        OSError: If the directory chain cannot be created
    """
    parent = Path(target_path).parent
    if parent.is_dir():
        return parent

    parent.mkdir(parents=True, exist_ok=True)
    return parent

"""Fast file and directory hashing for the mirror status report.

Uses xxhash: speed matters here, cryptographic strength does not. Hashes are
only used to report differences; sync decisions stay mtime-based.
"""

from fnmatch import fnmatch
from pathlib import Path
from typing import Dict, List, Optional

import xxhash

# Buffer size for file reading (64KB is good for most filesystems)
BUFFER_SIZE = 65536


def fast_hash_file(file_path: Path) -> str:
    """Compute the xxh64 digest of a file.

    Args:
        file_path: Path to the file to hash

    Returns:
        Hex digest of the file contents

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the path is not a regular file
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if not file_path.is_file():
        raise ValueError(f"Not a file: {file_path}")

    hasher = xxhash.xxh64()
    with open(file_path, "rb") as f:
        while True:
            data = f.read(BUFFER_SIZE)
            if not data:
                break
            hasher.update(data)

    return hasher.hexdigest()


def _excluded(relative_path: Path, exclude_patterns: List[str]) -> bool:
    return any(
        fnmatch(part, pattern)
        for part in relative_path.parts
        for pattern in exclude_patterns
    )


def hash_directory(
    directory: Path,
    exclude_patterns: Optional[List[str]] = None
) -> Dict[str, str]:
    """Hash all files in a directory, returning relative path -> hash mapping.

    Args:
        directory: Directory to hash
        exclude_patterns: fnmatch patterns; files with any matching path
            component are skipped

    Returns:
        Dict mapping slash-separated relative paths to their hashes

    Raises:
        FileNotFoundError: If directory doesn't exist
        ValueError: If directory is not a directory
    """
    directory = Path(directory)

    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ValueError(f"Not a directory: {directory}")

    exclude_patterns = exclude_patterns or []
    result: Dict[str, str] = {}

    for file_path in sorted(directory.rglob("*")):
        relative_path = file_path.relative_to(directory)
        if _excluded(relative_path, exclude_patterns) or not file_path.is_file():
            continue
        try:
            result[relative_path.as_posix()] = fast_hash_file(file_path)
        except OSError:
            # Skip files we can't read
            pass

    return result


def compare_hashes(
    source_hashes: Dict[str, str],
    target_hashes: Dict[str, str]
) -> Dict[str, list]:
    """Compare two hash dictionaries to find differences.

    Args:
        source_hashes: Hash dict from source directory
        target_hashes: Hash dict from target directory

    Returns:
        Dict with keys:
            - "added": Files in source but not target
            - "removed": Files in target but not source
            - "modified": Files in both but with different hashes
            - "unchanged": Files identical in both
    """
    source_keys = set(source_hashes.keys())
    target_keys = set(target_hashes.keys())

    added = list(source_keys - target_keys)
    removed = list(target_keys - source_keys)

    common = source_keys & target_keys
    modified = []
    unchanged = []

    for key in common:
        if source_hashes[key] != target_hashes[key]:
            modified.append(key)
        else:
            unchanged.append(key)

    return {
        "added": sorted(added),
        "removed": sorted(removed),
        "modified": sorted(modified),
        "unchanged": sorted(unchanged),
    }

"""Utility modules for Vault Mirror.

This package provides:
- hashing: Fast file and directory hashing for mirror status reports
- logging: Configured logging with JSON/text output support
"""

from vault_mirror.utils.hashing import compare_hashes, fast_hash_file, hash_directory
from vault_mirror.utils.logging import JsonFormatter, configure_root_logger

__all__ = [
    "fast_hash_file",
    "hash_directory",
    "compare_hashes",
    "JsonFormatter",
    "configure_root_logger",
]

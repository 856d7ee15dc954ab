"""Storage key normalisation and legacy candidate derivation."""

from __future__ import annotations

from attachment_migrator.constants import KEY_SEPARATOR, LEGACY_PREFIXES
from attachment_migrator.types import NormalizedKey


def normalize_key(file_key: str) -> NormalizedKey:
    """Derive the separator-prefixed and bare views of a storage key.

    Any number of leading separators collapse, so normalising either view of
    an existing NormalizedKey yields the same NormalizedKey.

    Args:
        file_key: The ``fileKey`` value from an attachment record.

    Returns:
        NormalizedKey for the key.

    Raises:
        ValueError: If the key is empty or consists only of separators.
    """
    without_separator = file_key.lstrip(KEY_SEPARATOR)
    if not without_separator:
        raise ValueError(f"Invalid file key: {file_key!r}")
    return NormalizedKey(
        with_separator=KEY_SEPARATOR + without_separator,
        without_separator=without_separator,
    )


def file_name(key: NormalizedKey) -> str:
    """Return the final path segment of a key.

    Raises:
        ValueError: If the key ends with a separator and so names no file.
    """
    name = key.with_separator.rsplit(KEY_SEPARATOR, 1)[-1]
    if not name:
        raise ValueError(f"File key has no file name: {key.with_separator!r}")
    return name


def legacy_candidates(
    key: NormalizedKey, prefixes: tuple[str, ...] = LEGACY_PREFIXES
) -> list[str]:
    """List the legacy paths to try for a key, in lookup order."""
    name = file_name(key)
    return [f"{prefix}{KEY_SEPARATOR}{name}" for prefix in prefixes]

"""
Prefix Matching
===============
Boundary-aware longest-prefix lookup shared by models, image models and
grounding prefixes.

Versioned identifiers resolve to their base entry, e.g. ``gpt-4o-2024-08-06``
matches ``gpt-4o``. A known key only matches a longer identifier when the
next character is a separator, so ``gpt-4`` never matches ``gpt-4o``.
"""

from collections.abc import Iterable, Sequence

PREFIX_SEPARATORS = frozenset("-_/.")


def is_valid_prefix_match(identifier: str, prefix: str) -> bool:
    """Check that ``prefix`` matches ``identifier`` exactly or up to a separator."""
    if not identifier.startswith(prefix):
        return False
    if len(identifier) == len(prefix):
        return True
    return identifier[len(prefix)] in PREFIX_SEPARATORS


def sorted_keys_by_length_desc(keys: Iterable[str]) -> list[str]:
    """Sort keys longest first, alphabetically within equal lengths."""
    return sorted(keys, key=lambda k: (-len(k), k))


def find_by_prefix(identifier: str, sorted_keys: Sequence[str]) -> str | None:
    """
    Find the known key that ``identifier`` resolves to.

    Args:
        identifier: Free-form identifier, possibly with a version suffix
        sorted_keys: Keys ordered by ``sorted_keys_by_length_desc``

    Returns:
        The longest matching key, or None
    """
    for key in sorted_keys:
        if is_valid_prefix_match(identifier, key):
            return key
    return None

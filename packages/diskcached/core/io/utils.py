"""Path helpers for the filesystem layer."""

import hashlib
import re


def sanitize_path_component(component: str) -> str:
    """
    Sanitize a string for use as a filesystem path component.

    Replaces anything not alphanumeric, dash, underscore, or dot with an
    underscore.

    Example:
        >>> sanitize_path_component("users/42")
        'users_42'
        >>> sanitize_path_component("feed:v1")
        'feed_v1'
    """
    return re.sub(r"[^a-zA-Z0-9._-]", "_", component)


def key_filename(key: str, suffix: str = ".json") -> str:
    """
    Build a collision-free file name for an arbitrary string key.

    Sanitizing alone maps "a/b" and "a_b" to the same name, so a short digest
    of the raw key is appended.

    Example:
        >>> key_filename("users/42").startswith("users_42-")
        True
    """
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
    # Long keys would overflow NAME_MAX; the digest keeps them unique.
    return f"{sanitize_path_component(key)[:120]}-{digest}{suffix}"

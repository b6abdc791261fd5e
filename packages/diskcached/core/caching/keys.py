"""Storage key composition.

A cached value lives under its base key; the paired policy lives under the
base key plus POLICY_SUFFIX. The suffix is part of the on-disk format and
must not change.
"""

POLICY_SUFFIX = "_policy"


def compose_policy_key(key: str) -> str:
    """
    Derive the policy key paired with a value key.

    Example:
        >>> compose_policy_key("feed")
        'feed_policy'
    """
    return key + POLICY_SUFFIX


def is_policy_key(key: str) -> bool:
    """Check whether a stored key holds a policy rather than a value."""
    return key.endswith(POLICY_SUFFIX)

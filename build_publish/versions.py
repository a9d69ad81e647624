"""Version parsing utilities.

Handles conversion between a build tag's version prefix and semver objects,
with special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
"""

from __future__ import annotations

import re

import semver

_NUMBER = re.compile(r"\d+")


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3" → "1.2.3"
    - "" → "0.0.0"
    - "1.05" → "1.5.0"

    Only the first 3 components are used (major.minor.patch).
    Prerelease/build metadata is not supported.
    """
    parts = [str(int(p)) for p in _NUMBER.findall(version_str)]
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(".".join(parts[:3]))


def version_from_prefix(prefix: str) -> str:
    """Join the digit runs of a tag name prefix into a dotted version.

    Examples:
        "v1.0." → "1.0"
        "app-2.14.3." → "2.14.3"
        "build." → ""
    """
    return ".".join(_NUMBER.findall(prefix))

from __future__ import annotations

from typing import Optional, Sequence

from .errors import MissingLabelError
from .models import VersionEntry

FLOATING_TAG = "latest"


def resolve_label(tags: Sequence[str]) -> str:
    """Pick the tag that names a version.

    Tags are trimmed and blank ones ignored.  The first tag in document order
    that is not the floating ``latest`` alias wins; an image tagged only
    ``latest`` keeps that label.
    """
    usable = [t.strip() for t in tags if t.strip()]
    if not usable:
        raise MissingLabelError(tags)
    for tag in usable:
        if tag != FLOATING_TAG:
            return tag
    return usable[0]


def classify(entry: VersionEntry) -> Optional[str]:
    """Return the version label of a tagged entry, or None for a digest-only one."""
    if not entry.tags:
        return None
    return resolve_label(entry.tags)

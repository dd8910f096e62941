"""Pipeline slug utilities.

Pipeline slugs are the Buildkite keys derived from a repository name: lowercase
ASCII letters, digits, and single hyphens.
"""

from __future__ import annotations

import re

_DISALLOWED_RUN = re.compile(r"[^a-z0-9]+")


def pipeline_slug(name: str) -> str:
    """Normalise a repository name into a Buildkite pipeline slug.

    Case is folded, every run of characters outside ``[a-z0-9]`` collapses to
    a single ``-``, and leading or trailing hyphens are trimmed. The function
    is total: any string yields a (possibly empty) slug.

    Examples
    --------
    >>> pipeline_slug("My-Repo_1")
    'my-repo-1'
    >>> pipeline_slug("__Service  API__")
    'service-api'

    """
    return _DISALLOWED_RUN.sub("-", name.lower()).strip("-")

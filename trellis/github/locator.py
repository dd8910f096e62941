"""Locate a repository's Buildkite trigger file via the contents API."""

from __future__ import annotations

import typing as typ

from trellis.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .client import ContentLookup
    from .models import RepositoryCandidate

logger = get_logger(__name__)


class PipelineFileLocator:
    """Check candidate paths in order and report the first regular file.

    A missing candidate (GitHub 404) is not an error; the locator moves on to
    the next candidate. Any other failure raised by the contents propagates so
    the caller can fail the repository.
    """

    def __init__(self, contents: ContentLookup) -> None:
        """Configure the locator with a content contents."""
        self._contents = contents

    def locate(
        self,
        repo: RepositoryCandidate,
        *,
        ref: str,
        candidates: cabc.Sequence[str],
    ) -> str | None:
        """Return the first candidate path that is a file at ``ref``."""
        for candidate in candidates:
            entry = self._contents.get_content(repo, candidate, ref=ref)
            if entry is not None and entry.is_file:
                return candidate
            log_debug(
                logger,
                "%s: no pipeline file at %s@%s",
                repo.full_name,
                candidate,
                ref,
            )
        return None

    def has_folder(self, repo: RepositoryCandidate, *, ref: str, folder: str) -> bool:
        """Return True when ``folder`` exists as a directory at ``ref``."""
        entry = self._contents.get_content(repo, folder, ref=ref)
        return entry is not None and entry.is_dir

"""Typed GitHub REST payloads decoded at the client boundary."""

from __future__ import annotations

import msgspec


class RepositoryCandidate(msgspec.Struct, frozen=True, kw_only=True):
    """One repository from an organisation listing.

    Attributes
    ----------
    name : str
        Repository name without the owner.
    full_name : str
        Owner-qualified ``owner/name`` identifier.
    default_branch : str | None
        Default branch; GitHub reports ``None`` for empty repositories.
    clone_url : str
        HTTPS clone URL, used as the Buildkite repository URL.
    archived : bool
        Whether the repository is archived.
    fork : bool
        Whether the repository is a fork.
    html_url : str
        Web URL of the repository.

    """

    name: str
    full_name: str
    default_branch: str | None = None
    clone_url: str = ""
    archived: bool = False
    fork: bool = False
    html_url: str = ""


class ContentEntry(msgspec.Struct, frozen=True, kw_only=True):
    """Metadata for a path returned by the contents API.

    ``type`` is one of ``file``, ``dir``, ``symlink``, or ``submodule``.
    """

    type: str
    path: str
    name: str = ""

    @property
    def is_file(self) -> bool:
        """Return True for regular files."""
        return self.type == "file"

    @property
    def is_dir(self) -> bool:
        """Return True for directories."""
        return self.type == "dir"

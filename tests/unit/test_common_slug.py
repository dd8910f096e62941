"""Unit tests for pipeline slug normalisation."""

from __future__ import annotations

import pytest

from trellis.common.slug import pipeline_slug


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("widget", "widget"),
        ("My-Repo_1", "my-repo-1"),
        ("__Service  API__", "service-api"),
        ("svc.a", "svc-a"),
        ("a--b", "a-b"),
        ("Ünïcode-repo", "n-code-repo"),
        ("___", ""),
    ],
)
def test_pipeline_slug_normalises_names(name: str, expected: str) -> None:
    """pipeline_slug folds case and collapses disallowed runs to one hyphen."""
    assert pipeline_slug(name) == expected


def test_pipeline_slug_is_idempotent() -> None:
    """Slugging a slug leaves it unchanged."""
    slug = pipeline_slug("Foo_Bar--Baz")
    assert pipeline_slug(slug) == slug

"""Unit tests for environment variable parsing helpers."""

from __future__ import annotations

import pytest

from trellis.common.env import EnvVarError, env_bool, env_list, env_str


@pytest.mark.parametrize("raw", ["1", "true", "YES", " On "])
def test_env_bool_accepts_truthy_values(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    """Truthy spellings parse to True regardless of case and padding."""
    monkeypatch.setenv("TRELLIS_FLAG", raw)
    assert env_bool("TRELLIS_FLAG") is True


@pytest.mark.parametrize("raw", ["0", "false", "No", "OFF"])
def test_env_bool_accepts_falsy_values(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    """Falsy spellings parse to False."""
    monkeypatch.setenv("TRELLIS_FLAG", raw)
    assert env_bool("TRELLIS_FLAG", default=True) is False


def test_env_bool_uses_default_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset or blank variables fall back to the default."""
    monkeypatch.delenv("TRELLIS_FLAG", raising=False)
    assert env_bool("TRELLIS_FLAG") is False
    monkeypatch.setenv("TRELLIS_FLAG", "  ")
    assert env_bool("TRELLIS_FLAG", default=True) is True


def test_env_bool_rejects_unknown_values(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unrecognised values are configuration errors naming the variable."""
    monkeypatch.setenv("TRELLIS_FLAG", "maybe")
    with pytest.raises(EnvVarError, match="TRELLIS_FLAG must be a boolean"):
        env_bool("TRELLIS_FLAG")


def test_env_str_strips_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """env_str strips whitespace and substitutes the default for blanks."""
    monkeypatch.setenv("TRELLIS_VALUE", "  acme ")
    assert env_str("TRELLIS_VALUE") == "acme"
    monkeypatch.setenv("TRELLIS_VALUE", "")
    assert env_str("TRELLIS_VALUE", "fallback") == "fallback"


def test_env_list_splits_on_commas(monkeypatch: pytest.MonkeyPatch) -> None:
    """env_list drops empty items and preserves order."""
    monkeypatch.setenv("TRELLIS_ITEMS", "b.yml, ,a.yml,")
    assert env_list("TRELLIS_ITEMS", ("x",)) == ("b.yml", "a.yml")
    monkeypatch.setenv("TRELLIS_ITEMS", " , ")
    assert env_list("TRELLIS_ITEMS", ("x",)) == ("x",)

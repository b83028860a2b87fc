from pathlib import Path

import pytest

from household_ledger.core import settings


def test_read_config_file(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "\n".join(
            [
                "# comment",
                "SUPABASE_URL: https://demo.supabase.co  # inline comment",
                'SUPABASE_ANON_KEY: "key#with#hashes"',
                "SUPABASE_TIMEOUT:",
                "# DEFAULT_USER: bon",
                "not a pair",
            ]
        ),
        encoding="utf-8",
    )

    values = settings.read_config_file(str(config))

    assert values == {
        "SUPABASE_URL": "https://demo.supabase.co",
        "SUPABASE_ANON_KEY": "key#with#hashes",
    }


def test_read_missing_config_file(tmp_path: Path) -> None:
    assert settings.read_config_file(str(tmp_path / "absent.yaml")) == {}
    assert settings.read_config_file(None) == {}


@pytest.mark.parametrize(
    ("name", "value", "expected"),
    [
        ("SUPABASE_ANON_KEY", "eyJhbGciOi.payload.sig", "ey...ig"),
        ("SUPABASE_URL", "https://demo.supabase.co", "https://demo.supabase.co"),
        ("SUPABASE_TOKEN", "abc", "****"),
    ],
)
def test_mask_env_value(name: str, value: str, expected: str) -> None:
    assert settings.mask_env_value(name, value) == expected


def test_get_env_int_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    assert settings.get_env_int("PORT", 8000, min_value=1) == 8000
    monkeypatch.setenv("PORT", "0")
    assert settings.get_env_int("PORT", 8000, min_value=1) == 8000
    monkeypatch.setenv("PORT", "9000")
    assert settings.get_env_int("PORT", 8000, min_value=1) == 9000


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (" ray", "ray"),
        (" 8000   # port", "8000"),
        (" 'it\\'s # fine'", "it's # fine"),
        (' "C:\\\\ledger"', "C:\\ledger"),
        (" ", ""),
    ],
)
def test_parse_config_value(raw: str, expected: str) -> None:
    assert settings.parse_config_value(raw) == expected

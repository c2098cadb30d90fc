from __future__ import annotations

from pathlib import Path

import pytest

from cipherreg.app.main import main


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CIPHERREG_GATEWAY_URL", "CIPHERREG_RELAYER_URL", "CIPHERREG_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def test_list_prints_stats_and_filtered_rows(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--mock", "--demo", "--settings-dir", str(tmp_path), "list", "--search", "cyst"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Total: 3" in out
    assert "Chen Wei" in out
    assert "Alice Martin" not in out


def test_create_prints_banner_and_key(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--mock", "--settings-dir", str(tmp_path), "create", "Jane", "42", "Flu"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Patient case created successfully!" in out
    assert "key: case-" in out


def test_create_with_bad_age_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--mock", "--settings-dir", str(tmp_path), "create", "Jane", "old", "Flu"])

    assert code == 1
    assert "Age must be a whole number" in capsys.readouterr().out


def test_decrypt_by_numeric_id(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--mock", "--demo", "--settings-dir", str(tmp_path), "decrypt", "1700000000000"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Data decrypted successfully!" in out
    assert "age: 34 (On-chain Verified)" in out


def test_check_reports_ready(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--mock", "--settings-dir", str(tmp_path), "check"])

    assert code == 0
    assert "Encryption service is available and ready!" in capsys.readouterr().out

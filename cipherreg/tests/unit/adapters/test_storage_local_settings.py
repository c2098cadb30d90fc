from __future__ import annotations

import json
from pathlib import Path

import pytest

from cipherreg.adapters.storage_local import StorageLocal


def test_load_settings_missing_file_returns_empty(tmp_path: Path) -> None:
    assert StorageLocal(str(tmp_path)).load_settings() == {}


def test_save_settings_drops_api_key(tmp_path: Path) -> None:
    storage = StorageLocal(str(tmp_path / "conf"))

    storage.save_settings({"gateway_url": "http://gw", "api_key": "secret"})

    saved = json.loads(Path(storage.settings_path).read_text(encoding="utf-8"))
    assert saved == {"gateway_url": "http://gw"}
    assert storage.load_settings() == {"gateway_url": "http://gw"}


def test_load_settings_rejects_non_object(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        StorageLocal(str(tmp_path)).load_settings()

from __future__ import annotations

from typing import List

import pytest

from cipherreg.viewmodels.settings_vm import SettingsVM


def test_defaults_use_mock_services() -> None:
    vm = SettingsVM()

    assert vm.config.uses_mock_services()
    assert vm.config.success_dismiss_ms == 2000
    assert vm.config.error_dismiss_ms == 3000
    assert vm.config.history_limit == 10


def test_apply_dict_coerces_and_strips_urls() -> None:
    vm = SettingsVM()

    vm.apply_dict(
        {
            "gateway_url": " https://gw.test/api/ ",
            "relayer_url": "https://relayer.test",
            "request_timeout_s": "15",
            "debug_logging": "yes",
        }
    )

    assert vm.config.gateway_url == "https://gw.test/api"
    assert vm.config.request_timeout_s == 15
    assert vm.config.debug_logging is True
    assert not vm.config.uses_mock_services()


def test_apply_dict_rejects_unknown_keys_and_bad_values() -> None:
    vm = SettingsVM()

    with pytest.raises(ValueError, match="Unsupported settings keys"):
        vm.apply_dict({"poll_interval_ms": 5})
    with pytest.raises(ValueError):
        vm.apply_dict({"history_limit": 0})
    with pytest.raises(ValueError):
        vm.apply_dict({"retries": True})


def test_apply_env_overrides_persisted_values() -> None:
    vm = SettingsVM()
    vm.apply_dict({"gateway_url": "http://old"})

    vm.apply_env({"CIPHERREG_GATEWAY_URL": "http://new/", "CIPHERREG_API_KEY": "k"})

    assert vm.config.gateway_url == "http://new"
    assert vm.config.api_key == "k"


def test_cmd_save_validates_urls() -> None:
    saved: List[dict] = []
    vm = SettingsVM(on_save=saved.append)
    vm.apply_dict({"gateway_url": "ftp://gw"})

    with pytest.raises(ValueError):
        vm.cmd_save()

    vm.apply_dict({"gateway_url": "http://gw"})
    vm.cmd_save()
    assert saved[0]["gateway_url"] == "http://gw"

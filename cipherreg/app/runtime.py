"""Runtime composition for the case registry client.

This module wires settings, adapters, use cases and view models into a single
``LifecycleOrchestrator`` that entry points drive.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Any, Mapping, Optional

from cipherreg.adapters.ledger_mock import LedgerMock, build_mock_stack
from cipherreg.adapters.ledger_rest import LedgerRestAdapter
from cipherreg.adapters.relayer_rest import RelayerRestAdapter
from cipherreg.adapters.session_identity import SessionIdentity
from cipherreg.adapters.storage_local import StorageLocal
from cipherreg.app.dismiss_scheduler import DismissScheduler
from cipherreg.domain.entities import Case, CaseKey
from cipherreg.domain.ports import DecryptionPort, EncryptionPort, LedgerPort
from cipherreg.usecases.case_store import CaseStore
from cipherreg.usecases.check_availability import CheckAvailability
from cipherreg.usecases.create_case import CreateCase
from cipherreg.usecases.decrypt_case import DecryptCase
from cipherreg.usecases.lifecycle_orchestrator import LifecycleOrchestrator
from cipherreg.viewmodels.activity_log_vm import ActivityLogVM
from cipherreg.viewmodels.case_detail_vm import CaseDetailVM
from cipherreg.viewmodels.cases_vm import CasesVM
from cipherreg.viewmodels.settings_vm import SettingsConfig, SettingsVM
from cipherreg.viewmodels.status_vm import StatusVM


LOGGER = logging.getLogger(__name__)

MOCK_ACCOUNT = "0x0000000000000000000000000000000000000001"

DEMO_CASES = (
    ("case-1700000000000", "Alice Martin", 34, "Diabetes Type 2"),
    ("case-1700000100000", "Bruno Keller", 58, "Hypertension"),
    ("case-1700000200000", "Chen Wei", 21, "Ovarian cyst"),
)


@dataclass
class ServiceStack:
    """Ports selected for the current configuration."""

    ledger: LedgerPort
    encryption: EncryptionPort
    decryption: DecryptionPort
    mock: bool = False


def build_services(config: SettingsConfig, account: Optional[str], *, force_mock: bool = False) -> ServiceStack:
    """Return REST adapters when both service URLs are configured, mocks otherwise."""
    if force_mock or config.uses_mock_services():
        ledger, encryption, decryption = build_mock_stack(account or MOCK_ACCOUNT)
        LOGGER.info("Using in-memory mock services.")
        return ServiceStack(ledger=ledger, encryption=encryption, decryption=decryption, mock=True)

    ledger = LedgerRestAdapter(
        config.gateway_url,
        config.api_key or None,
        account=account,
        request_timeout_s=config.request_timeout_s,
        retries=config.retries,
        confirmation_timeout_s=config.confirmation_timeout_s or None,
        confirmation_poll_ms=config.confirmation_poll_ms,
    )
    relayer = RelayerRestAdapter(
        config.relayer_url,
        config.api_key or None,
        request_timeout_s=config.request_timeout_s,
        retries=config.retries,
    )
    LOGGER.info("Using gateway %s and relayer %s.", config.gateway_url, config.relayer_url)
    return ServiceStack(ledger=ledger, encryption=relayer, decryption=relayer)


class AppRuntime:
    """Orchestration state shared by entry points."""

    def __init__(
        self,
        *,
        account: Optional[str] = None,
        force_mock: bool = False,
        settings_dir: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        services: Optional[ServiceStack] = None,
    ) -> None:
        self.storage = StorageLocal(root_dir=settings_dir or os.environ.get("CIPHERREG_SETTINGS_DIR") or ".")
        self.settings_vm = SettingsVM(on_save=self.storage.save_settings)
        self._load_settings(environ)
        config = self.settings_vm.config

        self.services = services or build_services(config, account, force_mock=force_mock)
        if account is None and self.services.mock:
            account = getattr(self.services.ledger, "account", MOCK_ACCOUNT)
        self.identity = SessionIdentity()
        if account:
            self.identity.connect(account)

        self.scheduler = DismissScheduler()
        self.status_vm = StatusVM(
            self.scheduler,
            success_dismiss_ms=config.success_dismiss_ms,
            error_dismiss_ms=config.error_dismiss_ms,
        )
        self.history_vm = ActivityLogVM(limit=config.history_limit)
        self.store = CaseStore(self.services.ledger)
        self.cases_vm = CasesVM(lambda: self.store.cases, recent_window_days=config.recent_window_days)

        self.uc_create = CreateCase(self.services.ledger, self.services.encryption)
        self.uc_decrypt = DecryptCase(self.services.ledger, self.services.decryption)
        self.uc_check = CheckAvailability(self.services.ledger)
        self.orchestrator = LifecycleOrchestrator(
            self.store,
            self.identity,
            self.uc_create,
            self.uc_decrypt,
            self.uc_check,
            self.status_vm,
            self.history_vm,
            encryption=self.services.encryption,
        )

    def _load_settings(self, environ: Optional[Mapping[str, str]]) -> None:
        payload = self.storage.load_settings()
        if payload:
            self.settings_vm.apply_dict(payload)
        self.settings_vm.apply_env(environ)
        if not self.settings_vm.is_valid():
            raise ValueError("Service URLs must start with http:// or https://")

    def seed_demo_cases(self) -> int:
        """Fill the mock ledger with a few sample records; no-op for real services."""
        ledger: Any = self.services.ledger
        if not isinstance(ledger, LedgerMock):
            LOGGER.warning("Demo cases are only available with mock services.")
            return 0
        for key, name, age, disease in DEMO_CASES:
            ledger.seed(key, name=name, age=age, disease_type=disease)
        return len(DEMO_CASES)

    def detail_for(self, key: CaseKey | str) -> Optional[CaseDetailVM]:
        case: Optional[Case] = self.store.snapshot.find(key)
        if case is None:
            return None
        return CaseDetailVM(case, self.orchestrator.decrypt)

    def save_settings(self) -> None:
        self.settings_vm.cmd_save()

    def shutdown(self) -> None:
        self.scheduler.cancel_all()


__all__ = ["AppRuntime", "DEMO_CASES", "MOCK_ACCOUNT", "ServiceStack", "build_services"]

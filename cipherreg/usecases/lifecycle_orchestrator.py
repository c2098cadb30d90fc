"""Coordinator sequencing case creation, reloads and verifiable decryption without UI concerns."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from cipherreg.domain import errors
from cipherreg.domain.entities import Case, CaseKey
from cipherreg.domain.ports import EncryptionPort, IdentityPort, UseCaseError
from cipherreg.usecases.case_store import CaseStore
from cipherreg.usecases.check_availability import CheckAvailability
from cipherreg.usecases.create_case import (
    PHASE_ENCRYPTING,
    PHASE_SUBMITTING,
    CreateCase,
    CreateCaseRequest,
)
from cipherreg.usecases.decrypt_case import SOURCE_CONVERGED, SOURCE_STORED, DecryptCase
from cipherreg.viewmodels.activity_log_vm import ActivityLogVM
from cipherreg.viewmodels.status_vm import OperationStatus, StatusVM

LOGGER = logging.getLogger(__name__)

MSG_CONNECT_WALLET = "Please connect wallet first"
MSG_ENCRYPTING = "Encrypting patient data..."
MSG_SUBMITTING = "Storing encrypted data on ledger..."
MSG_CREATED = "Patient case created successfully!"
MSG_VERIFYING = "Decrypting and verifying..."
MSG_ALREADY_VERIFIED = "Data already verified"
MSG_CONVERGED = "Data is already verified"
MSG_DECRYPTED = "Data decrypted successfully!"
MSG_DECRYPT_FAILED = "Decryption failed"
MSG_AVAILABLE = "Encryption service is available and ready!"
MSG_INIT_FAILED = "Encryption initialization failed"

Listener = Callable[["LifecycleOrchestrator"], None]


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an orchestrator operation; operations never raise past this."""

    ok: bool
    value: Any = None
    error: Optional[UseCaseError] = None
    skipped: bool = False
    """True when the operation was a no-op (e.g. reload without an account)."""

    @property
    def code(self) -> Optional[str]:
        return self.error.code if self.error else None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: UseCaseError) -> "OperationResult":
        return cls(ok=False, error=error)

    @classmethod
    def skip(cls) -> "OperationResult":
        return cls(ok=True, skipped=True)


class LifecycleOrchestrator:
    """Owns the application state and sequences every case operation.

    State (snapshot, status banner, activity log, busy flags) is mutated only
    through the operation methods below; views read it through the
    properties and ``subscribe`` for change notifications.

    Busy guards:
      - ``create``: one in flight; further calls are rejected with
        ``OPERATION_BUSY`` until the first resolves.
      - ``reload``: coalesced by ``CaseStore``.
      - ``decrypt``: one round per key; concurrent calls for the same key
        share the in-flight result.
    """

    def __init__(
        self,
        store: CaseStore,
        identity: IdentityPort,
        uc_create: CreateCase,
        uc_decrypt: DecryptCase,
        uc_check: CheckAvailability,
        status: StatusVM,
        history: ActivityLogVM,
        encryption: Optional[EncryptionPort] = None,
    ) -> None:
        self.store = store
        self.identity = identity
        self.uc_create = uc_create
        self.uc_decrypt = uc_decrypt
        self.uc_check = uc_check
        self.status_vm = status
        self.history_vm = history
        self.encryption = encryption
        self._creating = False
        self._decrypt_tasks: Dict[str, asyncio.Future] = {}
        self._listeners: List[Listener] = []

        status.on_change = status.on_change or (lambda _status: self._notify())
        history.on_change = history.on_change or (lambda _entries: self._notify())
        store.subscribe(lambda _snapshot: self._notify())

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def cases(self) -> Tuple[Case, ...]:
        return self.store.cases

    @property
    def status(self) -> OperationStatus:
        return self.status_vm.status

    @property
    def history(self) -> Tuple[str, ...]:
        return self.history_vm.entries

    @property
    def is_refreshing(self) -> bool:
        return self.store.busy

    @property
    def is_creating(self) -> bool:
        return self._creating

    def is_decrypting(self, key: CaseKey | str) -> bool:
        return str(key) in self._decrypt_tasks

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(self) -> OperationResult:
        """Initialize the encryption provider for the connected account, then load cases."""
        if not self.identity.current_account():
            return OperationResult.skip()
        initialize = getattr(self.encryption, "initialize", None)
        if initialize is not None:
            try:
                await initialize()
            except Exception as exc:
                LOGGER.warning("Encryption provider initialization failed: %s", exc)
                return self._fail(UseCaseError(errors.INIT_FAILED, MSG_INIT_FAILED))
        return await self.reload()

    async def create(self, name: str, age: str | int, disease_type: str) -> OperationResult:
        if self._creating:
            LOGGER.info("Ignoring create for %r: another creation is in flight.", name)
            return OperationResult.failure(
                UseCaseError(errors.OPERATION_BUSY, "Case creation already in progress")
            )
        account = self.identity.current_account()
        if not account:
            return self._fail(UseCaseError(errors.UNAUTHENTICATED, MSG_CONNECT_WALLET))

        request = CreateCaseRequest(name=name, age=str(age), disease_type=disease_type)
        self._creating = True
        self._notify()
        try:
            try:
                key = await self.uc_create(request, account, on_progress=self._on_create_progress)
            except UseCaseError as err:
                return self._fail(err)
            except Exception as exc:  # pragma: no cover
                LOGGER.exception("Unexpected failure creating case %r", name)
                return self._fail(
                    UseCaseError(errors.SUBMISSION_FAILED, f"Creation failed: {exc}")
                )
            await self._reload_after_write("create")
            self.status_vm.set_success(MSG_CREATED)
            self.history_vm.append(f"New case created: {request.name.strip()}")
            return OperationResult.success(key)
        finally:
            self._creating = False
            self._notify()

    async def reload(self) -> OperationResult:
        """Refresh the snapshot; without a connected account this is a no-op."""
        if not self.identity.current_account():
            return OperationResult.skip()
        try:
            cases = await self.store.reload()
        except UseCaseError as err:
            return self._fail(err)
        except Exception:  # pragma: no cover
            LOGGER.exception("Unexpected failure reloading cases")
            return self._fail(UseCaseError(errors.LOAD_ERROR, "Failed to load data"))
        self.history_vm.append(f"Data refreshed: {len(cases)} cases loaded")
        return OperationResult.success(cases)

    async def decrypt(self, key: CaseKey | str) -> OperationResult:
        """Return the verified age for ``key``, running a decryption round when needed.

        ``value`` is ``None`` when another party verified the record first; the
        caller should then show the stored value from the refreshed snapshot.
        """
        if not self.identity.current_account():
            return self._fail(UseCaseError(errors.UNAUTHENTICATED, MSG_CONNECT_WALLET))

        token = str(key)
        task = self._decrypt_tasks.get(token)
        if task is None:
            task = asyncio.ensure_future(self._decrypt_once(token))
            task.add_done_callback(lambda done, token=token: self._forget_decrypt(token, done))
            self._decrypt_tasks[token] = task
            self._notify()
        else:
            LOGGER.info("Decrypt for %s already in flight; sharing its result.", token)
        return await asyncio.shield(task)

    async def check_availability(self) -> OperationResult:
        if not self.identity.current_account():
            return OperationResult.skip()
        try:
            await self.uc_check()
        except UseCaseError as err:
            return self._fail(err)
        except Exception:  # pragma: no cover
            LOGGER.exception("Unexpected failure checking availability")
            return self._fail(
                UseCaseError(errors.AVAILABILITY_CHECK_FAILED, "Availability check failed")
            )
        self.status_vm.set_success(MSG_AVAILABLE)
        self.history_vm.append("System availability checked: Ready")
        return OperationResult.success(True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _decrypt_once(self, token: str) -> OperationResult:
        try:
            outcome = await self.uc_decrypt(
                token, on_round_started=lambda: self.status_vm.set_pending(MSG_VERIFYING)
            )
        except UseCaseError as err:
            LOGGER.warning("Decrypt %s failed: %s %s", token, err.message, err.meta or "")
            return self._fail(UseCaseError(errors.DECRYPTION_FAILED, MSG_DECRYPT_FAILED, meta=err.meta))
        except Exception:  # pragma: no cover
            LOGGER.exception("Unexpected failure decrypting %s", token)
            return self._fail(UseCaseError(errors.DECRYPTION_FAILED, MSG_DECRYPT_FAILED))

        if outcome.source == SOURCE_STORED:
            self.status_vm.set_success(MSG_ALREADY_VERIFIED)
            self.history_vm.append(f"Data verified for case: {outcome.name}")
            return OperationResult.success(outcome.value)

        await self._reload_after_write("decrypt")
        if outcome.source == SOURCE_CONVERGED:
            self.status_vm.set_success(MSG_CONVERGED)
            self.history_vm.append(f"Data already verified for case: {outcome.name}")
            return OperationResult.success(None)

        self.status_vm.set_success(MSG_DECRYPTED)
        self.history_vm.append(f"Data decrypted for case: {outcome.name}")
        return OperationResult.success(outcome.value)

    async def _reload_after_write(self, operation: str) -> None:
        # The write is already confirmed; a failed refresh must not turn it into a failure.
        try:
            await self.store.reload()
        except UseCaseError as err:
            LOGGER.warning("Reload after %s failed: %s %s", operation, err.message, err.meta or "")
        except Exception:
            LOGGER.exception("Reload after %s failed", operation)

    def _forget_decrypt(self, token: str, task: asyncio.Future) -> None:
        if self._decrypt_tasks.get(token) is task:
            del self._decrypt_tasks[token]
            self._notify()

    def _on_create_progress(self, phase: str) -> None:
        if phase == PHASE_ENCRYPTING:
            self.status_vm.set_pending(MSG_ENCRYPTING)
        elif phase == PHASE_SUBMITTING:
            self.status_vm.set_pending(MSG_SUBMITTING)

    def _fail(self, err: UseCaseError) -> OperationResult:
        LOGGER.info("Operation failed [%s]: %s", err.code, err.message)
        self.status_vm.set_error(err.message)
        return OperationResult.failure(err)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


__all__ = ["LifecycleOrchestrator", "OperationResult"]

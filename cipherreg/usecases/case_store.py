"""Authoritative in-memory case snapshot, rebuilt by full reloads from the ledger."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional, Tuple

from cipherreg.domain import errors
from cipherreg.domain.entities import Case, CaseSnapshot
from cipherreg.domain.naming import with_unique_ids
from cipherreg.domain.ports import LedgerPort, UseCaseError
from cipherreg.usecases.error_mapping import describe_error

SnapshotListener = Callable[[CaseSnapshot], None]


class CaseStore:
    """Holds the current ``CaseSnapshot`` and serializes reload scans.

    At most one full scan runs at a time. ``reload`` calls made while a scan is
    running are queued onto a single shared follow-up scan, which starts once
    the running scan has finished.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self._ledger = ledger
        self._clock = clock
        self._snapshot = CaseSnapshot()
        self._current: Optional[asyncio.Future] = None
        self._follow_up: Optional[asyncio.Future] = None
        self._listeners: List[SnapshotListener] = []

    @property
    def snapshot(self) -> CaseSnapshot:
        return self._snapshot

    @property
    def cases(self) -> Tuple[Case, ...]:
        return self._snapshot.cases

    @property
    def busy(self) -> bool:
        running = self._current is not None and not self._current.done()
        return running or self._follow_up is not None

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register ``listener`` for snapshot replacements; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def reload(self) -> Tuple[Case, ...]:
        """Rebuild the snapshot from the ledger and return the new case tuple.

        Raises:
            UseCaseError: ``LOAD_ERROR`` when the key listing fails; the
                previous snapshot is kept in that case.
        """
        if self._follow_up is not None:
            return await asyncio.shield(self._follow_up)
        if self._current is not None and not self._current.done():
            self._log.debug("Reload requested while a scan is running; queueing follow-up.")
            self._follow_up = asyncio.ensure_future(self._scan_after(self._current))
            return await asyncio.shield(self._follow_up)
        self._current = asyncio.ensure_future(self._scan())
        return await asyncio.shield(self._current)

    async def _scan_after(self, previous: asyncio.Future) -> Tuple[Case, ...]:
        # asyncio.wait never raises the awaited future's exception; the
        # previous scan's callers receive it.
        await asyncio.wait({previous})
        self._current = self._follow_up
        self._follow_up = None
        return await self._scan()

    async def _scan(self) -> Tuple[Case, ...]:
        try:
            keys = list(await self._ledger.get_all_record_keys())
        except Exception as exc:
            self._log.warning("Loading record keys failed: %s", exc)
            raise UseCaseError(
                errors.LOAD_ERROR,
                "Failed to load data",
                meta={"cause": describe_error(exc)},
            ) from exc

        cases: List[Case] = []
        skipped = 0
        for key in keys:
            try:
                record = await self._ledger.get_record_data(key)
                cases.append(Case.from_record(key, record))
            except Exception:
                skipped += 1
                self._log.exception("Error loading case data for %s", key)

        snapshot = CaseSnapshot(cases=tuple(with_unique_ids(cases)), loaded_at=self._clock())
        self._snapshot = snapshot
        self._log.info("Loaded %d case(s) (%d skipped)", len(cases), skipped)
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot.cases


__all__ = ["CaseStore", "SnapshotListener"]

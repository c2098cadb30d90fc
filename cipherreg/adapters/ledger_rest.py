"""LedgerPort implementation over the case-registry JSON gateway.

The gateway fronts the records contract: read calls map to contract view
functions, write calls are signed by the gateway on behalf of the connected
account and return a transaction hash that is polled until confirmation.

Endpoints:
    GET  /records                      -> {"keys": [...]}
    GET  /records/{key}                -> record object
    GET  /records/{key}/handle         -> {"handle": "0x..."}
    GET  /status                       -> {"available": bool}
    GET  /contract                     -> {"address": "0x..."}
    POST /records                      -> {"tx_hash": "0x..."}
    POST /records/{key}/verify         -> {"tx_hash": "0x..."}
    GET  /transactions/{tx_hash}       -> {"status": "pending|confirmed|failed", "error": str}

Blocking ``requests`` calls run in worker threads via ``asyncio.to_thread`` so
the orchestrator's event loop keeps serving other operations.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cipherreg.adapters.api_errors import (
    ApiError,
    TransactionFailedError,
    ensure_ok,
    json_object,
)
from cipherreg.adapters.http_client import HttpConfig, RetryingSession
from cipherreg.domain.entities import CaseKey, RecordData
from cipherreg.domain.ports import LedgerPort

_CONFIRMED = {"confirmed", "success", "mined"}
_FAILED = {"failed", "reverted", "dropped", "rejected"}


@dataclass
class RestPendingTransaction:
    """Transaction handle that polls the gateway until it leaves the pending state."""

    adapter: "LedgerRestAdapter"
    tx_hash: str
    poll_interval_s: float = 1.0
    timeout_s: Optional[float] = 120.0
    receipt: Dict[str, Any] = field(default_factory=dict)

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = None if self.timeout_s is None else loop.time() + self.timeout_s
        while True:
            payload = await self.adapter.transaction_status(self.tx_hash)
            status = str(payload.get("status") or "").strip().lower()
            if status in _CONFIRMED:
                self.receipt = payload
                return
            if status in _FAILED:
                reason = str(payload.get("error") or payload.get("reason") or status)
                raise TransactionFailedError(
                    f"Transaction {self.tx_hash} {status}: {reason}",
                    tx_hash=self.tx_hash,
                    payload=payload,
                )
            if deadline is not None and loop.time() >= deadline:
                raise TransactionFailedError(
                    f"Transaction {self.tx_hash} not confirmed after {self.timeout_s:.0f}s",
                    tx_hash=self.tx_hash,
                    code="CONFIRMATION_TIMEOUT",
                )
            await asyncio.sleep(self.poll_interval_s)


class LedgerRestAdapter(LedgerPort):
    """Async ``LedgerPort`` backed by the REST gateway."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        account: Optional[str] = None,
        request_timeout_s: int = 10,
        retries: int = 2,
        confirmation_timeout_s: Optional[float] = 120.0,
        confirmation_poll_ms: int = 1000,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.http = RetryingSession(base_url, api_key, self.cfg)
        self.account = account
        self.confirmation_timeout_s = confirmation_timeout_s
        self.confirmation_poll_s = max(0.05, confirmation_poll_ms / 1000.0)

    # ---------- read path ----------

    async def get_all_record_keys(self) -> List[str]:
        data = await self._get_json("records", "List records")
        keys = data.get("keys")
        if not isinstance(keys, list):
            raise ApiError("List records: missing 'keys' list", payload=data)
        return [str(key) for key in keys]

    async def get_record_data(self, key: CaseKey | str) -> RecordData:
        data = await self._get_json(f"records/{key}", f"Get record {key}")
        try:
            return RecordData.from_mapping(data)
        except (TypeError, ValueError) as exc:
            raise ApiError(f"Get record {key}: {exc}", payload=data) from exc

    async def get_encrypted_value_handle(self, key: CaseKey | str) -> str:
        data = await self._get_json(f"records/{key}/handle", f"Get handle {key}")
        handle = data.get("handle")
        if not handle:
            raise ApiError(f"Get handle {key}: empty handle", payload=data)
        return str(handle)

    async def is_service_available(self) -> bool:
        data = await self._get_json("status", "Service status")
        return bool(data.get("available"))

    async def get_contract_address(self) -> str:
        data = await self._get_json("contract", "Contract address")
        address = data.get("address")
        if not address:
            raise ApiError("Contract address: missing 'address'", payload=data)
        return str(address)

    # ---------- signed-write path ----------

    async def create_record(
        self,
        key: CaseKey | str,
        name: str,
        ciphertext: Any,
        proof: Any,
        public_value1: int,
        public_value2: int,
        description: str,
    ) -> RestPendingTransaction:
        body = {
            "key": str(key),
            "name": name,
            "ciphertext": ciphertext,
            "proof": proof,
            "publicValue1": int(public_value1),
            "publicValue2": int(public_value2),
            "description": description,
            "from": self.account,
        }
        data = await self._post_json("records", body, f"Create record {key}")
        return self._pending(data, f"Create record {key}")

    async def submit_verified_decryption(
        self, key: CaseKey | str, clear_payload: Any, proof: Any
    ) -> RestPendingTransaction:
        body = {"clearValues": clear_payload, "proof": proof, "from": self.account}
        data = await self._post_json(f"records/{key}/verify", body, f"Verify record {key}")
        return self._pending(data, f"Verify record {key}")

    async def transaction_status(self, tx_hash: str) -> Dict[str, Any]:
        return await self._get_json(f"transactions/{tx_hash}", f"Transaction {tx_hash}")

    # ---------- helpers ----------

    def _pending(self, data: Dict[str, Any], ctx: str) -> RestPendingTransaction:
        tx_hash = data.get("tx_hash") or data.get("hash")
        if not tx_hash:
            raise ApiError(f"{ctx}: gateway returned no transaction hash", payload=data)
        self._log.info("%s submitted as %s", ctx, tx_hash)
        return RestPendingTransaction(
            adapter=self,
            tx_hash=str(tx_hash),
            poll_interval_s=self.confirmation_poll_s,
            timeout_s=self.confirmation_timeout_s,
        )

    async def _get_json(self, path: str, ctx: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._get_json_blocking, path, ctx)

    async def _post_json(self, path: str, body: Dict[str, Any], ctx: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._post_json_blocking, path, body, ctx)

    def _get_json_blocking(self, path: str, ctx: str) -> Dict[str, Any]:
        resp = self.http.get(path)
        ensure_ok(resp, ctx)
        return json_object(resp, ctx)

    def _post_json_blocking(self, path: str, body: Dict[str, Any], ctx: str) -> Dict[str, Any]:
        resp = self.http.post(path, json_body=body)
        ensure_ok(resp, ctx)
        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug("%s -> HTTP %s", ctx, resp.status_code)
        return json_object(resp, ctx)


__all__ = ["LedgerRestAdapter", "RestPendingTransaction"]

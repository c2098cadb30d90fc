"""Encryption and verifiable-decryption ports backed by a relayer REST service.

The relayer owns the homomorphic-encryption key material. This adapter only
moves opaque values: plaintext inputs go out, ciphertext handles and proofs
come back, and the decryption proof is handed to the caller's ``submit``
callback so the ledger can check it before recording the cleartext.

Endpoints:
    POST /init      -> {"ready": bool}
    POST /encrypt   {"contract", "user", "value"} -> {"ciphertext", "proof"}
    POST /decrypt   {"contract", "handles"} -> {"clearValues": {handle: int},
                                                "abiEncodedClearValues", "decryptionProof"}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

from cipherreg.adapters.api_errors import ApiError, ensure_ok, json_object
from cipherreg.adapters.http_client import HttpConfig, RetryingSession
from cipherreg.domain.entities import DecryptionResult, EncryptedInput
from cipherreg.domain.ports import DecryptionPort, EncryptionPort, Handle, SubmitFn


class RelayerRestAdapter(EncryptionPort, DecryptionPort):
    """Async client for the encryption relayer."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        request_timeout_s: int = 30,
        retries: int = 1,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.http = RetryingSession(
            base_url, api_key, HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        )
        self.ready = False

    async def initialize(self) -> None:
        data = await self._post_json("init", {}, "Relayer init")
        if not data.get("ready", True):
            raise ApiError("Relayer init: relayer reported not ready", payload=data)
        self.ready = True

    async def encrypt(self, contract_address: str, user_address: str, value: int) -> EncryptedInput:
        body = {"contract": contract_address, "user": user_address, "value": int(value)}
        data = await self._post_json("encrypt", body, "Encrypt input")
        if "ciphertext" not in data or "proof" not in data:
            raise ApiError("Encrypt input: response lacks ciphertext/proof", payload=data)
        return EncryptedInput(ciphertext=data["ciphertext"], proof=data["proof"])

    async def verify(
        self, handles: Sequence[Handle], contract_address: str, submit: SubmitFn
    ) -> DecryptionResult:
        body = {"contract": contract_address, "handles": [str(h) for h in handles]}
        data = await self._post_json("decrypt", body, "Public decrypt")
        clear_values = data.get("clearValues")
        if not isinstance(clear_values, dict):
            raise ApiError("Public decrypt: missing 'clearValues'", payload=data)
        payload = data.get("abiEncodedClearValues")
        proof = data.get("decryptionProof")
        if payload is None or proof is None:
            raise ApiError("Public decrypt: missing proof material", payload=data)

        values = {key: _clear_int(value, data) for key, value in clear_values.items()}

        tx = await submit(payload, proof)
        await tx.wait()
        self._log.info("Decryption proof for %d handle(s) confirmed in %s", len(handles), tx.tx_hash)
        return DecryptionResult(clear_values=values)

    async def _post_json(self, path: str, body: Dict[str, Any], ctx: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._post_json_blocking, path, body, ctx)

    def _post_json_blocking(self, path: str, body: Dict[str, Any], ctx: str) -> Dict[str, Any]:
        resp = self.http.post(path, json_body=body)
        ensure_ok(resp, ctx)
        return json_object(resp, ctx)


def _clear_int(value: Any, data: Dict[str, Any]) -> int:
    """Parse a relayer clear value: int, decimal string or 0x-prefixed hex."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError as exc:
            raise ApiError(f"Public decrypt: unparsable clear value {value!r}", payload=data) from exc
    raise ApiError(f"Public decrypt: unparsable clear value {value!r}", payload=data)


__all__ = ["RelayerRestAdapter"]

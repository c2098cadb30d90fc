"""Command-line entry point for the case registry client.

Each invocation builds an ``AppRuntime``, starts the orchestrator (encryption
provider initialization plus the first reload) and runs one command.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from cipherreg.app.runtime import AppRuntime
from cipherreg.domain.case_filters import FILTER_ALL, FILTER_TYPES
from cipherreg.domain.entities import Case
from cipherreg.domain.naming import key_for_case_id
from cipherreg.usecases.lifecycle_orchestrator import OperationResult
from cipherreg.utils import logging as logging_utils
from cipherreg.viewmodels.status_format import PHASE_ERROR, short_address, verification_label

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cipherreg", description="Encrypted patient case registry client.")
    parser.add_argument("--mock", action="store_true", help="Use in-memory services instead of the gateway.")
    parser.add_argument("--demo", action="store_true", help="Seed sample cases into the mock ledger.")
    parser.add_argument("--account", default=None, help="Connected wallet account address.")
    parser.add_argument("--settings-dir", default=None, help="Directory holding settings.json.")
    parser.add_argument("--log-level", default=None, help="Root log level (default WARNING).")

    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List cases with statistics.")
    list_cmd.add_argument("--search", default="")
    list_cmd.add_argument("--filter", dest="filter_type", choices=FILTER_TYPES, default=FILTER_ALL)

    create_cmd = sub.add_parser("create", help="Encrypt and register a new case.")
    create_cmd.add_argument("name")
    create_cmd.add_argument("age")
    create_cmd.add_argument("disease_type")

    decrypt_cmd = sub.add_parser("decrypt", help="Run verifiable decryption for a case.")
    decrypt_cmd.add_argument("key", help="Case key (case-<millis>) or numeric case id.")

    sub.add_parser("check", help="Check encryption service availability.")
    return parser.parse_args(argv)


def _resolve_key(raw: str, runtime: AppRuntime) -> str:
    text = raw.strip()
    if not text.isdigit():
        return text
    case_id = int(text)
    for case in runtime.store.cases:
        if case.id == case_id:
            return str(case.key)
    return str(key_for_case_id(case_id))


def _format_case(case: Case) -> str:
    age = str(case.decrypted_value) if case.is_verified else "Encrypted"
    created = datetime.fromtimestamp(case.created_at_unix).strftime("%Y-%m-%d")
    return (
        f"{case.key}  #{case.id}  {case.name}  age={age}  {case.disease_type}  "
        f"[{verification_label(case.is_verified)}]  {created}  by {short_address(case.creator_address)}"
    )


def _report(runtime: AppRuntime, result: OperationResult) -> int:
    status = runtime.orchestrator.status
    if status.visible and status.message:
        print(status.message)
    if not result.ok and result.error is not None and not status.message:
        print(result.error.message)
    return 0 if result.ok else 1


async def _run(args: argparse.Namespace, runtime: AppRuntime) -> int:
    orchestrator = runtime.orchestrator
    started = await orchestrator.start()
    if not started.ok:
        return _report(runtime, started)

    if args.command == "list":
        vm = runtime.cases_vm
        vm.search_term = args.search
        vm.filter_type = args.filter_type
        labels = vm.stat_labels()
        print(
            f"Total: {labels['total']} ({labels['recent']})  "
            f"Verified: {labels['verified']}  Avg age: {labels['average_age']}"
        )
        rows: List[Case] = vm.filtered_cases
        for case in rows:
            print(_format_case(case))
        return 0

    if args.command == "create":
        result = await orchestrator.create(args.name, args.age, args.disease_type)
        code = _report(runtime, result)
        if result.ok:
            print(f"key: {result.value}")
        return code

    if args.command == "decrypt":
        key = _resolve_key(args.key, runtime)
        detail = runtime.detail_for(key)
        if detail is None:
            result = await orchestrator.decrypt(key)
            code = _report(runtime, result)
            if result.ok and result.value is not None:
                print(f"age: {result.value}")
            return code
        await detail.request_decrypt()
        refreshed = runtime.store.snapshot.find(key)
        if refreshed is not None:
            detail.refresh(refreshed)
        _report(runtime, OperationResult.success())
        print(f"age: {detail.age_text}")
        return 1 if orchestrator.status.phase == PHASE_ERROR else 0

    if args.command == "check":
        return _report(runtime, await orchestrator.check_availability())

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    args = _parse_args(argv)
    logging_utils.configure_root(args.log_level or logging.WARNING)
    runtime = AppRuntime(account=args.account, force_mock=args.mock, settings_dir=args.settings_dir)
    if args.log_level is None and runtime.settings_vm.config.debug_logging:
        logging_utils.apply_debug_setting(True)
    if args.demo:
        runtime.seed_demo_cases()
    try:
        return asyncio.run(_run(args, runtime))
    finally:
        runtime.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""
Command line interface for the uRWA20 console.

The signing key is read from the URWA_PRIVATE_KEY environment variable; without
it the console is read-only.
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from .auditors import AuditorPermissions, DEFAULT_GRANT_DURATION
from .config import ConsoleConfig, NetworkConfig, DEFAULT_NETWORK
from .console import ContractConsole
from .decryption import DecryptionService
from .exceptions import ConfigurationError, ConsoleError
from .marshal import format_address_short, format_output_value, format_token_amount
from .preferences import PreferenceStore
from .rpc import Web3Backend
from .schema import ContractSchema
from .abi import URWA20_ABI
from .signer import WalletSession
from .signer.local import LocalSigner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="urwa-console", description="Operate a uRWA20 contract")
    parser.add_argument("--network", help="Network name (defaults to the saved selection)")
    parser.add_argument("--rpc-url", help="Override the network RPC URL")
    parser.add_argument("--contract", help="Override the contract address")
    parser.add_argument("--abi", help="Path to a JSON ABI to use instead of the bundled one")
    parser.add_argument("--origin", help="Origin URI used in SIWE messages")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("functions", help="List contract functions")

    call = sub.add_parser("call", help="Call a contract function")
    call.add_argument("function")
    call.add_argument("values", nargs="*", help="Parameter values, in order")
    call.add_argument("--value", type=int, help="Value in wei for payable functions")
    call.add_argument("--login", action="store_true", help="Authenticate with SIWE before calling")

    sub.add_parser("login", help="Authenticate with SIWE and print the token")

    events = sub.add_parser("events", help="List encrypted events")
    events.add_argument("--from-block", type=int)

    history = sub.add_parser("history", help="List contract transactions")
    history.add_argument("--from-block", type=int)
    history.add_argument("--address", help="Only show transactions involving this address")

    decrypt = sub.add_parser("decrypt", help="Decrypt an encrypted event payload")
    decrypt.add_argument("payload")
    decrypt.add_argument("--login", action="store_true", help="Authenticate with SIWE before reading back")

    sub.add_parser("clear-decrypted", help="Clear the last decrypted data")

    auditor = sub.add_parser("auditor", help="Manage auditor permissions")
    auditor_sub = auditor.add_subparsers(dest="auditor_command", required=True)
    grant = auditor_sub.add_parser("grant")
    grant.add_argument("auditor")
    grant.add_argument("--duration", type=int, default=DEFAULT_GRANT_DURATION, help="Seconds")
    grant.add_argument("--full-access", action="store_true")
    grant.add_argument("--addresses", default="", help="Comma separated address list")
    revoke = auditor_sub.add_parser("revoke")
    revoke.add_argument("auditor")
    check = auditor_sub.add_parser("check")
    check.add_argument("auditor")
    check.add_argument("target", nargs="?")

    network = sub.add_parser("network", help="Show or select the network")
    network.add_argument("name", nargs="?")

    return parser


def build_console(args: argparse.Namespace, preferences: PreferenceStore) -> ContractConsole:
    network = args.network or preferences.get_selected_network(DEFAULT_NETWORK)
    config = ConsoleConfig.for_network(
        network,
        rpc_url=args.rpc_url,
        contract_address=args.contract,
        origin_uri=args.origin,
    )

    schema = None
    if args.abi:
        try:
            with open(args.abi, "r") as f:
                schema = ContractSchema.from_abi(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Unable to load ABI from {args.abi}: {e}") from e
    schema = schema or ContractSchema.from_abi(URWA20_ABI)

    wallet = WalletSession()
    private_key = os.environ.get("URWA_PRIVATE_KEY")
    if private_key:
        wallet = WalletSession(signer=LocalSigner(private_key), chain_id=config.chain_id)

    backend = Web3Backend(config.rpc_url, config.contract_address, schema, wallet)
    return ContractConsole(config, backend, wallet, schema=schema)


def _print_functions(console: ContractConsole) -> None:
    print(f"View functions ({len(console.view_functions)}):")
    for fn in console.view_functions:
        suffix = "  [requires SIWE]" if fn.requires_auth_token else ""
        print(f"  {fn.signature}{suffix}")
    print(f"Write functions ({len(console.write_functions)}):")
    for fn in console.write_functions:
        print(f"  {fn.signature}  [{fn.mutability.value}]")


async def run_command(args: argparse.Namespace, console: ContractConsole) -> int:
    if args.command == "functions":
        _print_functions(console)

    elif args.command == "login":
        print(await console.auth.authenticate())

    elif args.command == "call":
        fn = console.describe(args.function)
        if args.login or (fn.requires_auth_token and console.wallet.is_connected):
            await console.auth.authenticate()
        if fn.is_read_only:
            print(format_output_value(await console.read(fn.name, args.values)))
        else:
            receipt = await console.write(fn.name, args.values, value=args.value)
            print(f"Transaction {receipt.tx_hash} confirmed in block {receipt.block_number}")

    elif args.command == "events":
        for event in await console.fetch_encrypted_events(args.from_block):
            print(f"{event.block_number}  {event.event_kind.value:<24} "
                  f"{format_address_short(event.transaction_hash)}  {event.payload}")

    elif args.command == "history":
        for record in await console.transaction_history(args.from_block, args.address):
            print(f"{record.block_number}  {record.event_name:<24} {record.transaction_hash}")

    elif args.command == "decrypt":
        if args.login:
            await console.auth.authenticate()
        decrypted = await DecryptionService(console).decrypt(args.payload)
        print(f"Action: {decrypted.action}")
        print(f"From:   {decrypted.from_address}")
        print(f"To:     {decrypted.to_address}")
        print(f"Amount: {format_token_amount(decrypted.amount)}")

    elif args.command == "clear-decrypted":
        receipt = await DecryptionService(console).clear()
        print(f"Cleared in transaction {receipt.tx_hash}")

    elif args.command == "auditor":
        auditors = AuditorPermissions(console)
        if args.auditor_command == "grant":
            addresses = [a for a in args.addresses.split(",") if a.strip()]
            receipt = await auditors.grant(args.auditor, args.duration, args.full_access, addresses)
            print(f"Granted in transaction {receipt.tx_hash}")
        elif args.auditor_command == "revoke":
            receipt = await auditors.revoke(args.auditor)
            print(f"Revoked in transaction {receipt.tx_hash}")
        else:
            details = await auditors.details(args.auditor)
            print(f"Expiry: {details.expiry}  Full access: {format_output_value(details.full_access)}")
            if args.target:
                allowed = await auditors.check(args.auditor, args.target)
                print(f"Permitted for {args.target}: {format_output_value(allowed)}")

    return 0


def _select_network(name: Optional[str], preferences: PreferenceStore) -> int:
    if name:
        NetworkConfig.get_network(name)
        preferences.set_selected_network(name)
    print(preferences.get_selected_network(DEFAULT_NETWORK))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    preferences = PreferenceStore()

    try:
        if args.command == "network":
            return _select_network(args.name, preferences)
        console = build_console(args, preferences)
        return asyncio.run(run_command(args, console))
    except (ConsoleError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

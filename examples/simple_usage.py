#!/usr/bin/env python3
"""
Simple example of using the uRWA20 console as a library.
"""
import asyncio
import os

from urwa_console import ConsoleConfig, ContractConsole, DecryptionService, Web3Backend, WalletSession
from urwa_console.abi import URWA20_ABI
from urwa_console.exceptions import ConsoleError
from urwa_console.marshal import format_token_amount
from urwa_console.schema import ContractSchema
from urwa_console.signer.local import LocalSigner


async def run(console: ContractConsole):
    """
    Demonstrate basic usage of the ContractConsole.

    This example shows how to:
    1. Authenticate with SIWE
    2. Read a balance that requires the SIWE token
    3. Decrypt the most recent encrypted event
    """
    token = await console.auth.authenticate()
    print(f"Authenticated, token length {len(token or '')}")

    balance = await console.read("balanceOf", [console.wallet.address])
    print(f"Balance: {format_token_amount(balance)}")

    events = await console.fetch_encrypted_events()
    print(f"Found {len(events)} encrypted events in the last {console.config.event_window_blocks} blocks")
    if events:
        latest = events[0]
        decrypted = await DecryptionService(console).decrypt(latest.payload)
        print(f"{latest.event_kind.value} in block {latest.block_number}: "
              f"{decrypted.action} {format_token_amount(decrypted.amount)} "
              f"from {decrypted.from_address} to {decrypted.to_address}")


def main():
    # Read configuration from environment
    PRIVATE_KEY = os.environ.get("URWA_PRIVATE_KEY")
    NETWORK = os.environ.get("NETWORK", "testnet")

    if not PRIVATE_KEY:
        print("ERROR: URWA_PRIVATE_KEY environment variable is required")
        return

    try:
        config = ConsoleConfig.for_network(NETWORK)
        schema = ContractSchema.from_abi(URWA20_ABI)
        wallet = WalletSession(signer=LocalSigner(PRIVATE_KEY), chain_id=config.chain_id)
        backend = Web3Backend(config.rpc_url, config.contract_address, schema, wallet)
        asyncio.run(run(ContractConsole(config, backend, wallet, schema=schema)))
    except ConsoleError as e:
        print(f"Error: {e}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Verify a wallet session against a live node before using it.

Tests:
1. Wallet derivation from COSMOS_VERIFY_MNEMONIC (or a fresh wallet)
2. Node connection (signing and query transports)
3. Balance fetch for the wallet's address
4. Bonded validator listing
5. Proposal listing

Usage:
    COSMOS_VERIFY_ENDPOINT=rest+https://cosmos-rest.publicnode.com \
        python scripts/verify_connection.py
"""

import asyncio
import os
import sys

from loguru import logger

from cosmos_wallet import WalletError, WalletSession, get_settings

DEFAULT_ENDPOINT = "rest+https://cosmos-rest.publicnode.com"


def setup_logging() -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=os.environ.get("COSMOS_VERIFY_LOG_LEVEL", "INFO"),
    )


def report(step: str, success: bool, msg: str) -> bool:
    status = "PASS" if success else "FAIL"
    print(f"\n  {step}")
    print(f"        {status}: {msg}")
    return success


async def main() -> int:
    """Run all verification tests."""
    setup_logging()

    settings = get_settings()
    endpoint = os.environ.get("COSMOS_VERIFY_ENDPOINT", DEFAULT_ENDPOINT)
    mnemonic = os.environ.get("COSMOS_VERIFY_MNEMONIC")

    print("\n" + "=" * 60)
    print("  COSMOS WALLET CONNECTION VERIFICATION")
    print("=" * 60)
    print(f"\n  Chain ID: {settings.chain.chain_id}")
    print(f"  Endpoint: {endpoint}")
    print(f"  Denom:    {settings.chain.denom}")

    session = WalletSession(settings=settings)

    try:
        info = await session.create_wallet(mnemonic)
    except WalletError as e:
        report("[1/5] Deriving wallet...", False, str(e))
        print("\n  Check COSMOS_VERIFY_MNEMONIC and COSMOS_KEY_* settings\n")
        return 1
    source = "imported" if mnemonic else "generated"
    report("[1/5] Deriving wallet...", True, f"{info.address} ({source})")

    try:
        await session.connect_to_chain(endpoint)
    except WalletError as e:
        report("[2/5] Connecting to node...", False, str(e))
        print("\n  NODE UNREACHABLE - Cannot continue\n")
        return 1
    report("[2/5] Connecting to node...", True, "signing and query clients ready")

    all_passed = True

    try:
        balance = await session.get_balance()
        all_passed &= report(
            "[3/5] Fetching balance...", True, f"{balance.amount} {balance.denom}"
        )
    except WalletError as e:
        all_passed &= report("[3/5] Fetching balance...", False, str(e))

    try:
        validators = await session.get_validators()
        all_passed &= report(
            "[4/5] Listing bonded validators...", True, f"{len(validators)} validators"
        )
    except WalletError as e:
        all_passed &= report("[4/5] Listing bonded validators...", False, str(e))

    try:
        proposals = await session.get_proposals()
        all_passed &= report(
            "[5/5] Listing proposals...", True, f"{len(proposals)} proposals"
        )
    except WalletError as e:
        all_passed &= report("[5/5] Listing proposals...", False, str(e))

    print("\n" + "=" * 60)
    if all_passed:
        print("  ALL TESTS PASSED")
    else:
        print("  SOME TESTS FAILED - Check configuration and try again")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

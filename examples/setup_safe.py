"""Deploy and approve a Polymarket Safe through the relayer.

Uses a custodial signing service for the Safe owner. The backend below
signs with a local key so the flow can be tried end to end. Replace it
with your custodian's client.

Usage:
    python setup_safe.py
"""

import asyncio
import base64
import os

from dotenv import load_dotenv

load_dotenv()


class LocalKeyBackend:
    """Stand-in custodial backend."""

    def __init__(self, private_key: str):
        from eth_account import Account

        self._account = Account.from_key(private_key)

    async def sign_raw_payload(self, sign_with: str, payload_b64: str) -> bytes:
        signed = self._account.unsafe_sign_hash(base64.b64decode(payload_b64))
        return bytes(signed.signature)


async def main():
    from polymarket_sdk import RelayClient, get_settings, setup_logging
    from polymarket_sdk.safe import RelayerTransactionState

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    key = os.environ.get("CUSTODIAN_PRIVATE_KEY")
    if not key or not settings.custodial_account or not settings.builder_credential():
        print("Set CUSTODIAN_PRIVATE_KEY, POLYMARKET_CUSTODIAL_ACCOUNT and POLYMARKET_BUILDER_*.")
        return

    async with RelayClient.from_settings(settings, backend=LocalKeyBackend(key)) as relayer:
        safe = relayer.safe_address()
        print(f"Safe: {safe}")

        if not await relayer.is_deployed(safe):
            _, response = await relayer.deploy()
            print(f"Deploying... transaction {response.transaction_id}")
            txn = await relayer.poll_until_state(
                response.transaction_id,
                [RelayerTransactionState.STATE_MINED, RelayerTransactionState.STATE_CONFIRMED],
                RelayerTransactionState.STATE_FAILED,
            )
            if txn is None:
                print("Deployment did not complete")
                return

        response = await relayer.approve_all_for_trading()
        if response is None:
            print("All approvals already in place")
        else:
            print(f"Approvals submitted: {response.transaction_id}")


if __name__ == "__main__":
    asyncio.run(main())

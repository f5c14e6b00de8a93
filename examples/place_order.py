"""Place a limit order on Polymarket.

This example bootstraps an API credential from a local private key and
posts a small limit order.

Prerequisites:
1. pip install polymarket-sdk
2. Set POLYMARKET_PRIVATE_KEY (and optionally POLYMARKET_BUILDER_*) in .env
3. Fund the wallet with USDC on Polygon and run approvals once

Usage:
    python place_order.py <token_id> [price] [size]
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()


async def main():
    from polymarket_sdk import (
        ClobClient,
        OrderArgs,
        PolymarketSDKError,
        get_settings,
        setup_logging,
    )

    if len(sys.argv) < 2:
        print("Usage: python place_order.py <token_id> [price] [size]")
        return

    token_id = sys.argv[1]
    price = sys.argv[2] if len(sys.argv) > 2 else "0.15"
    size = sys.argv[3] if len(sys.argv) > 3 else "8"

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    if not settings.private_key:
        print("Missing POLYMARKET_PRIVATE_KEY. See the settings module for variables.")
        return

    print("=" * 60)
    print("  POLYMARKET LIMIT ORDER")
    print("=" * 60)

    async with ClobClient.from_settings(settings) as client:
        try:
            if settings.api_credential() is None:
                print("\n[1] Deriving API credential...")
                client.set_api_credential(await client.create_or_derive_api_key())
                print("    API credential obtained")

            print(f"\n[2] Placing BUY {size} @ {price} on {token_id}...")
            result = await client.create_and_post_order(
                OrderArgs(token_id=token_id, price=price, size=size, side="BUY")
            )

            print("\n[3] Order placed!")
            print(f"    Order ID: {result.get('orderID', 'N/A')}")
            print(f"    Status:   {result.get('status', 'N/A')}")

        except PolymarketSDKError as e:
            print(f"\nError: {e}")
            if e.retryable:
                print("    (transient failure, safe to retry)")
            raise


if __name__ == "__main__":
    asyncio.run(main())

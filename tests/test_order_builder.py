"""Tests for order construction and signing."""

import json

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from polymarket_sdk.config import EXCHANGE_DOMAIN_NAME, ZERO_ADDRESS, get_contract_config
from polymarket_sdk.errors import PreconditionError, ValidationError
from polymarket_sdk.orders import (
    ORDER_TYPES,
    CreateOrderOptions,
    MarketOrderArgs,
    OrderArgs,
    OrderBuilder,
    OrderType,
    SignatureType,
    order_to_body,
    resolve_fee_rate,
    serialize_body,
)
from polymarket_sdk.safe import derive_safe_address


TOKEN_ID = "71321045679252212594626385532706912750332728571942532289631379312455583992563"
OPTIONS = CreateOrderOptions(tick_size="0.01", neg_risk=False)


def _typed_order(order, contracts, neg_risk=False):
    return encode_typed_data(
        full_message={
            "types": {
                "EIP712Domain": [
                    {"name": "name", "type": "string"},
                    {"name": "version", "type": "string"},
                    {"name": "chainId", "type": "uint256"},
                    {"name": "verifyingContract", "type": "address"},
                ],
                **ORDER_TYPES,
            },
            "primaryType": "Order",
            "domain": {
                "name": EXCHANGE_DOMAIN_NAME,
                "version": "1",
                "chainId": contracts.chain_id,
                "verifyingContract": contracts.exchange_for(neg_risk),
            },
            "message": order.message(),
        }
    )


class TestOrderBuilderSetup:
    """Tests for funder and signature type defaults."""

    def test_local_signer_defaults(self, local_signer, contracts):
        """Test that a local key trades from its own address."""
        builder = OrderBuilder(local_signer, contracts)

        assert builder.signature_type is SignatureType.EOA
        assert builder.funder == local_signer.address

    def test_custodial_signer_defaults(self, custodial_signer, contracts):
        """Test that a custodial account trades from its Safe."""
        builder = OrderBuilder(custodial_signer, contracts)

        assert builder.signature_type is SignatureType.POLY_GNOSIS_SAFE
        assert builder.funder == derive_safe_address(
            custodial_signer.address, contracts.safe_factory
        )

    def test_missing_signer(self, contracts):
        """Test that a builder needs a signer."""
        with pytest.raises(PreconditionError, match="private key is needed"):
            OrderBuilder(None, contracts)

    def test_rounding_profile_lookup(self, local_signer, contracts):
        """Test that tick sizes are matched numerically."""
        builder = OrderBuilder(local_signer, contracts)

        assert builder.rounding_profile("0.010").price == 2
        with pytest.raises(PreconditionError, match="no rounding profile"):
            builder.rounding_profile("0.05")
        with pytest.raises(PreconditionError, match="tick size is required"):
            builder.rounding_profile(None)


class TestCreateOrder:
    """Tests for limit order signing."""

    async def test_signature_recovers(self, local_signer, contracts):
        """Test that the order signature verifies against the exchange domain."""
        builder = OrderBuilder(local_signer, contracts)

        order = await builder.create_order(
            OrderArgs(token_id=TOKEN_ID, price="0.15", size="8", side="BUY"), OPTIONS
        )

        assert order.maker_amount == 1_200_000
        assert order.taker_amount == 8_000_000
        assert order.side == 0
        assert order.token_id == int(TOKEN_ID)
        recovered = Account.recover_message(
            _typed_order(order, contracts), signature=order.signature
        )
        assert recovered == local_signer.address

    async def test_neg_risk_domain(self, local_signer, contracts):
        """Test that neg-risk orders are signed for the neg-risk exchange."""
        builder = OrderBuilder(local_signer, contracts)

        order = await builder.create_order(
            OrderArgs(token_id=TOKEN_ID, price="0.15", size="8", side="SELL"),
            CreateOrderOptions(tick_size="0.01", neg_risk=True),
        )

        assert (
            Account.recover_message(
                _typed_order(order, contracts, neg_risk=True), signature=order.signature
            )
            == local_signer.address
        )
        assert (
            Account.recover_message(
                _typed_order(order, contracts, neg_risk=False), signature=order.signature
            )
            != local_signer.address
        )

    def test_digest_is_stable(self, local_signer, contracts):
        """Test that the digest depends only on the order and domain."""
        builder = OrderBuilder(local_signer, contracts)
        fields = dict(
            token_id=TOKEN_ID,
            side=0,
            maker_amount=1_200_000,
            taker_amount=8_000_000,
            salt=12345,
        )

        order = builder.build_order(**fields)

        assert builder.order_digest(order, False) == builder.order_digest(
            builder.build_order(**fields), False
        )
        assert builder.order_digest(order, False) != builder.order_digest(order, True)
        assert builder.order_digest(order, False) != builder.order_digest(
            builder.build_order(**fields, fee_rate_bps=100), False
        )
        assert builder.order_digest(order, False) != get_amoy_digest(local_signer, fields)

    async def test_custodial_order(self, custodial_signer, contracts):
        """Test that a Safe order names the Safe as maker and the owner as signer."""
        builder = OrderBuilder(custodial_signer, contracts)

        order = await builder.create_order(
            OrderArgs(token_id=TOKEN_ID, price="0.5", size="10", side="BUY"), OPTIONS
        )

        assert order.maker == builder.funder
        assert order.signer == custodial_signer.address
        assert order.signature_type == 2
        assert (
            Account.recover_message(_typed_order(order, contracts), signature=order.signature)
            == custodial_signer.address
        )

    @pytest.mark.parametrize("price", ["0.005", "0.995", "1", "0"])
    async def test_price_out_of_bounds(self, local_signer, contracts, price):
        """Test that prices outside the tick bounds are rejected."""
        builder = OrderBuilder(local_signer, contracts)

        with pytest.raises(ValidationError, match="invalid price"):
            await builder.create_order(
                OrderArgs(token_id=TOKEN_ID, price=price, size="8", side="BUY"), OPTIONS
            )

    async def test_missing_neg_risk(self, local_signer, contracts):
        """Test that the neg-risk flag is required."""
        builder = OrderBuilder(local_signer, contracts)

        with pytest.raises(PreconditionError, match="neg_risk"):
            await builder.create_order(
                OrderArgs(token_id=TOKEN_ID, price="0.5", size="8", side="BUY"),
                CreateOrderOptions(tick_size="0.01"),
            )

    async def test_invalid_side(self, local_signer, contracts):
        """Test that sides other than BUY/SELL are rejected."""
        builder = OrderBuilder(local_signer, contracts)

        with pytest.raises(ValidationError):
            await builder.create_order(
                OrderArgs(token_id=TOKEN_ID, price="0.5", size="8", side="HOLD"), OPTIONS
            )

    def test_non_numeric_fields(self, local_signer, contracts):
        """Test that nonce, expiration and fee must be non-negative integers."""
        builder = OrderBuilder(local_signer, contracts)
        base = dict(token_id=TOKEN_ID, side=0, maker_amount=1, taker_amount=1)

        for field in ("nonce", "expiration", "fee_rate_bps"):
            with pytest.raises(ValidationError):
                builder.build_order(**base, **{field: "abc"})
            with pytest.raises(ValidationError):
                builder.build_order(**base, **{field: -1})
        with pytest.raises(ValidationError, match="side"):
            builder.build_order(**{**base, "side": 2})


class TestCreateMarketOrder:
    """Tests for market order signing."""

    async def test_market_buy(self, local_signer, contracts):
        """Test amounts and zero expiration for a market BUY."""
        builder = OrderBuilder(local_signer, contracts)

        order = await builder.create_market_order(
            MarketOrderArgs(token_id=TOKEN_ID, amount="100", side="BUY", price="0.5"),
            OPTIONS,
        )

        assert order.maker_amount == 100_000_000
        assert order.taker_amount == 200_000_000
        assert order.expiration == 0


class TestOrderPayload:
    """Tests for the submission body."""

    async def test_body_shape(self, local_signer, contracts):
        """Test the wire format of a signed order."""
        builder = OrderBuilder(local_signer, contracts)
        order = await builder.create_order(
            OrderArgs(token_id=TOKEN_ID, price="0.15", size="8", side="BUY"), OPTIONS
        )

        body = order_to_body(order, "api-key", OrderType.FOK)
        payload = body["order"]

        assert body["owner"] == "api-key"
        assert body["orderType"] == "FOK"
        assert payload["side"] == "BUY"
        assert payload["tokenId"] == TOKEN_ID
        assert payload["makerAmount"] == "1200000"
        assert payload["takerAmount"] == "8000000"
        assert payload["taker"] == ZERO_ADDRESS
        assert isinstance(payload["salt"], int)
        assert payload["signatureType"] == 0
        assert payload["signature"] == order.signature

    def test_serialize_body_is_compact(self):
        """Test that serialization has no whitespace and round-trips."""
        body = {"order": {"a": 1}, "owner": "k", "orderType": "GTC"}

        serialized = serialize_body(body)

        assert " " not in serialized
        assert json.loads(serialized) == body


class TestResolveFeeRate:
    """Tests for fee reconciliation."""

    def test_market_fee_wins(self):
        """Test that a zero user fee takes the market's rate."""
        assert resolve_fee_rate(100, 0) == 100
        assert resolve_fee_rate(0, 50) == 0
        assert resolve_fee_rate(100, 100) == 100

    def test_conflict(self):
        """Test that conflicting non-zero fees are rejected."""
        with pytest.raises(ValidationError, match="fee rate for the market must be 100"):
            resolve_fee_rate(100, 50)


def get_amoy_digest(signer, fields):
    builder = OrderBuilder(signer, get_contract_config(80002))
    return builder.order_digest(builder.build_order(**fields), False)

"""Order construction and signing.

Turns a trade intent into a ``SignedOrder``:

1. Resolve the rounding profile from the market's tick size
2. Validate the price against the tick bounds
3. Compute maker/taker base-unit amounts
4. Assemble the canonical order with a fresh salt
5. Hash it against the (neg-risk or standard) exchange domain
6. Sign the digest with the configured ``Signer``
"""

import random
import time
from typing import Any, Mapping, Optional

import structlog
from eth_utils import to_checksum_address

from ..config import EXCHANGE_DOMAIN_NAME, ZERO_ADDRESS, ContractConfig
from ..encoding import EIP712Domain, EIP712Struct, eip712_digest, to_hex
from ..encoding.utils import checksum
from ..errors import EncodingError, PreconditionError, ValidationError
from ..safe.derive import derive_safe_address
from ..signer import Signer
from .rounding import (
    DEFAULT_ROUNDING_PROFILES,
    get_market_order_amounts,
    get_order_amounts,
    parse_side,
    price_valid,
    to_decimal,
)
from .types import (
    ORDER_TYPES,
    CanonicalOrder,
    CreateOrderOptions,
    MarketOrderArgs,
    OrderArgs,
    RoundingProfile,
    SignatureType,
    SignedOrder,
)


logger = structlog.get_logger("polymarket_sdk.orders.builder")

ORDER_STRUCT = EIP712Struct.from_types("Order", ORDER_TYPES["Order"])


def generate_salt() -> int:
    """Time-derived salt with a random multiplier."""
    return round(time.time_ns() * random.random())


def _parse_uint(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a non-negative integer, got bool")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.strip().isdigit():
        result = int(value.strip())
    else:
        raise ValidationError(f"{name} must be a non-negative integer, got {value!r}")
    if result < 0:
        raise ValidationError(f"{name} must be a non-negative integer, got {value!r}")
    return result


class OrderBuilder:
    """Builds and signs exchange orders for one signer.

    The funder (``maker``) defaults to the signer's derived Safe for signers
    that act through a Safe, and to the signer's own address otherwise.

    Example:
        ```python
        builder = OrderBuilder(signer, get_contract_config(137))
        order = await builder.create_order(
            OrderArgs(token_id="123", price="0.15", size="8", side="BUY"),
            CreateOrderOptions(tick_size="0.01", neg_risk=False),
        )
        ```
    """

    def __init__(
        self,
        signer: Signer,
        contract_config: ContractConfig,
        signature_type: Optional[SignatureType] = None,
        funder: Optional[str] = None,
        rounding_profiles: Optional[Mapping[str, RoundingProfile]] = None,
    ):
        if signer is None:
            raise PreconditionError(
                "a private key is needed to interact with this endpoint!"
            )
        self._signer = signer
        self._contracts = contract_config
        self._rounding_profiles = rounding_profiles or DEFAULT_ROUNDING_PROFILES

        if signature_type is None:
            signature_type = (
                SignatureType.POLY_GNOSIS_SAFE
                if signer.supports_safe_transactions
                else SignatureType.EOA
            )
        self.signature_type = SignatureType(signature_type)

        if funder is None:
            if self.signature_type is SignatureType.POLY_GNOSIS_SAFE:
                funder = derive_safe_address(signer.address, contract_config.safe_factory)
            else:
                funder = signer.address
        self.funder = to_checksum_address(funder)

    @property
    def signer(self) -> Signer:
        return self._signer

    def rounding_profile(self, tick_size: Optional[str]) -> RoundingProfile:
        """Look up the rounding profile for a tick size.

        Raises:
            PreconditionError: If the tick size is missing or has no profile
        """
        if tick_size is None:
            raise PreconditionError("tick size is required to build an order")
        key = str(to_decimal(tick_size, "tick_size").normalize())
        profile = self._rounding_profiles.get(key)
        if profile is None:
            raise PreconditionError(f"no rounding profile for tick size {tick_size}")
        return profile

    def order_domain(self, neg_risk: bool) -> EIP712Domain:
        return EIP712Domain(
            name=EXCHANGE_DOMAIN_NAME,
            version="1",
            chain_id=self._contracts.chain_id,
            verifying_contract=self._contracts.exchange_for(neg_risk),
        )

    def build_order(
        self,
        *,
        token_id: Any,
        side: int,
        maker_amount: int,
        taker_amount: int,
        fee_rate_bps: Any = 0,
        nonce: Any = 0,
        expiration: Any = 0,
        taker: str = ZERO_ADDRESS,
        salt: Optional[int] = None,
    ) -> CanonicalOrder:
        """Validate inputs and assemble a canonical order.

        Raises:
            ValidationError: On an invalid side or non-numeric fields
        """
        if side not in (0, 1):
            raise ValidationError("side must be 0(BUY) or 1(SELL)")
        if self.funder == ZERO_ADDRESS:
            raise ValidationError("maker is required")
        try:
            taker = checksum(taker)
        except EncodingError as exc:
            raise ValidationError(f"invalid taker: {taker}") from exc

        return CanonicalOrder(
            salt=generate_salt() if salt is None else salt,
            maker=self.funder,
            signer=self._signer.address,
            taker=taker,
            token_id=_parse_uint("tokenId", token_id),
            maker_amount=_parse_uint("makerAmount", maker_amount),
            taker_amount=_parse_uint("takerAmount", taker_amount),
            expiration=_parse_uint("expiration", expiration),
            nonce=_parse_uint("nonce", nonce),
            fee_rate_bps=_parse_uint("feeRateBps", fee_rate_bps),
            side=side,
            signature_type=int(self.signature_type),
        )

    def order_digest(self, order: CanonicalOrder, neg_risk: bool) -> bytes:
        """EIP-712 digest of an order against the matching exchange domain."""
        struct_hash = ORDER_STRUCT.hash_struct(order.message())
        return eip712_digest(self.order_domain(neg_risk).separator(), struct_hash)

    async def sign_order(self, order: CanonicalOrder, neg_risk: bool) -> SignedOrder:
        """Sign a canonical order."""
        signature = await self._signer.sign_digest(self.order_digest(order, neg_risk))
        logger.debug(
            "order_builder.order_signed",
            maker=order.maker,
            token_id=str(order.token_id),
            side=order.side,
            neg_risk=neg_risk,
        )
        return SignedOrder(**vars(order), signature=to_hex(signature))

    def _check_options(self, price, options: CreateOrderOptions) -> RoundingProfile:
        if options.neg_risk is None:
            raise PreconditionError("neg_risk is required to build an order")
        profile = self.rounding_profile(options.tick_size)
        if not price_valid(price, options.tick_size):
            tick = to_decimal(options.tick_size, "tick_size")
            raise ValidationError(
                f"invalid price ({price}), min: {tick} - max: {1 - tick}"
            )
        return profile

    async def create_order(
        self, args: OrderArgs, options: CreateOrderOptions
    ) -> SignedOrder:
        """Build and sign a limit order.

        Args:
            args: Limit order intent
            options: Tick size and neg-risk flag for the market

        Returns:
            SignedOrder ready for submission

        Raises:
            PreconditionError: If tick size or neg-risk is missing
            ValidationError: If price, side or numeric fields are invalid
        """
        profile = self._check_options(args.price, options)
        side, maker_amount, taker_amount = get_order_amounts(
            parse_side(args.side), args.size, args.price, profile
        )
        order = self.build_order(
            token_id=args.token_id,
            side=side,
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            fee_rate_bps=args.fee_rate_bps,
            nonce=args.nonce,
            expiration=args.expiration,
            taker=args.taker,
        )
        return await self.sign_order(order, options.neg_risk)

    async def create_market_order(
        self, args: MarketOrderArgs, options: CreateOrderOptions
    ) -> SignedOrder:
        """Build and sign a market order. Expiration is always 0."""
        profile = self._check_options(args.price, options)
        side, maker_amount, taker_amount = get_market_order_amounts(
            parse_side(args.side), args.amount, args.price, profile
        )
        order = self.build_order(
            token_id=args.token_id,
            side=side,
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            fee_rate_bps=args.fee_rate_bps,
            nonce=args.nonce,
            expiration=0,
            taker=args.taker,
        )
        return await self.sign_order(order, options.neg_risk)


def resolve_fee_rate(market_fee_rate_bps: int, user_fee_rate_bps: int) -> int:
    """Reconcile a caller-supplied fee rate with the market's.

    Raises:
        ValidationError: If both are non-zero and they differ
    """
    if (
        market_fee_rate_bps > 0
        and user_fee_rate_bps > 0
        and market_fee_rate_bps != user_fee_rate_bps
    ):
        raise ValidationError(
            f"invalid user provided fee rate: ({user_fee_rate_bps}), "
            f"fee rate for the market must be {market_fee_rate_bps}"
        )
    return market_fee_rate_bps


__all__ = [
    "ORDER_STRUCT",
    "OrderBuilder",
    "generate_salt",
    "resolve_fee_rate",
]

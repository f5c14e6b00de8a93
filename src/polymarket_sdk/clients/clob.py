"""CLOB client: credential bootstrap and order submission.

Market-state lookups (tick size, neg-risk flag, fee rate) are included
because the order builder needs them. Other market-data endpoints are not.
"""

import dataclasses
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Union

import httpx
import structlog

from ..auth import (
    L1_AUTH_UNAVAILABLE,
    L2_AUTH_UNAVAILABLE,
    ApiKeyCredential,
    BuilderCredential,
    create_builder_headers,
    create_l1_headers,
    create_l2_headers,
    inject_builder_headers,
)
from ..config import POLYGON, ContractConfig, get_contract_config
from ..errors import PreconditionError, ServerRejectedError, ValidationError
from ..orders import (
    CreateOrderOptions,
    MarketOrderArgs,
    OrderArgs,
    OrderBuilder,
    OrderType,
    RoundingProfile,
    SignatureType,
    SignedOrder,
    order_to_body,
    resolve_fee_rate,
    serialize_body,
    to_decimal,
)
from ..signer import CustodialSigningBackend, Signer, signer_from_settings
from .http import BaseHTTPClient


logger = structlog.get_logger("polymarket_sdk.clients.clob")

# Endpoints
TIME = "/time"
CREATE_API_KEY = "/auth/api-key"
DERIVE_API_KEY = "/auth/derive-api-key"
GET_TICK_SIZE = "/tick-size"
GET_NEG_RISK = "/neg-risk"
GET_FEE_RATE = "/fee-rate"
POST_ORDER = "/order"
CANCEL_ORDER = "/order"


class AccessLevel(IntEnum):
    """What the client is able to authenticate."""

    L0 = 0
    """No signer: public endpoints only."""

    L1 = 1
    """Signer available: can create or derive API credentials and sign orders."""

    L2 = 2
    """Signer and API credential: can trade."""


class ClobClient(BaseHTTPClient):
    """Async client for the CLOB order endpoints.

    Example:
        ```python
        async with ClobClient(
            "https://clob.polymarket.com",
            chain_id=137,
            signer=LocalKeySigner("0x..."),
        ) as client:
            client.set_api_credential(await client.create_or_derive_api_key())
            result = await client.create_and_post_order(
                OrderArgs(token_id="1234", price="0.15", size="8", side="BUY")
            )
        ```
    """

    def __init__(
        self,
        host: str,
        chain_id: int = POLYGON,
        signer: Optional[Signer] = None,
        creds: Optional[ApiKeyCredential] = None,
        builder_creds: Optional[BuilderCredential] = None,
        signature_type: Optional[SignatureType] = None,
        funder: Optional[str] = None,
        rounding_profiles: Optional[Mapping[str, RoundingProfile]] = None,
        use_server_time: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        super().__init__(host, http_client=http_client, timeout=timeout)
        self.chain_id = chain_id
        self._contracts: ContractConfig = get_contract_config(chain_id)
        self._signer = signer
        self._creds = creds
        self._builder_creds = (
            builder_creds if builder_creds is not None and builder_creds.is_valid() else None
        )
        self._use_server_time = use_server_time
        self._order_builder = (
            OrderBuilder(
                signer,
                self._contracts,
                signature_type=signature_type,
                funder=funder,
                rounding_profiles=rounding_profiles,
            )
            if signer is not None
            else None
        )

        self._tick_sizes: Dict[str, str] = {}
        self._neg_risk: Dict[str, bool] = {}

    @classmethod
    def from_settings(
        cls,
        settings,
        backend: Optional[CustodialSigningBackend] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "ClobClient":
        """Build a client from ``Settings``. A signer is optional here."""
        signer = None
        if settings.private_key or settings.custodial_account:
            signer = signer_from_settings(settings, backend)
        return cls(
            settings.clob_host,
            chain_id=settings.chain_id,
            signer=signer,
            creds=settings.api_credential(),
            builder_creds=settings.builder_credential(),
            http_client=http_client,
            timeout=settings.http_timeout,
        )

    # ── Auth state ──────────────────────────────────────────────────

    @property
    def contracts(self) -> ContractConfig:
        return self._contracts

    @property
    def order_builder(self) -> Optional[OrderBuilder]:
        return self._order_builder

    def set_api_credential(self, creds: ApiKeyCredential) -> None:
        self._creds = creds

    def get_access_level(self) -> AccessLevel:
        if self._signer is not None and self._creds is not None:
            return AccessLevel.L2
        if self._signer is not None:
            return AccessLevel.L1
        return AccessLevel.L0

    def assert_l1_auth(self) -> None:
        if self.get_access_level() < AccessLevel.L1:
            raise PreconditionError(L1_AUTH_UNAVAILABLE)

    def assert_l2_auth(self) -> None:
        if self.get_access_level() < AccessLevel.L2:
            raise PreconditionError(L2_AUTH_UNAVAILABLE)

    def can_builder_auth(self) -> bool:
        return self._builder_creds is not None

    # ── Public endpoints ────────────────────────────────────────────

    async def get_server_time(self) -> int:
        """Server clock in Unix seconds."""
        return int(await self._request("GET", TIME))

    async def _timestamp(self) -> Optional[str]:
        if self._use_server_time:
            return str(await self.get_server_time())
        return None

    async def get_tick_size(self, token_id: str) -> str:
        if token_id not in self._tick_sizes:
            result = await self._request("GET", GET_TICK_SIZE, params={"token_id": token_id})
            self._tick_sizes[token_id] = str(result["minimum_tick_size"])
        return self._tick_sizes[token_id]

    async def get_neg_risk(self, token_id: str) -> bool:
        if token_id not in self._neg_risk:
            result = await self._request("GET", GET_NEG_RISK, params={"token_id": token_id})
            self._neg_risk[token_id] = bool(result["neg_risk"])
        return self._neg_risk[token_id]

    async def get_fee_rate_bps(self, token_id: str) -> int:
        # Not cached; the fee can change between orders
        result = await self._request("GET", GET_FEE_RATE, params={"token_id": token_id})
        return int(result.get("base_fee") or 0)

    async def resolve_fee_rate_bps(self, token_id: str, user_fee_rate_bps: int = 0) -> int:
        """Market fee rate, rejecting a conflicting caller-supplied one."""
        market_fee = await self.get_fee_rate_bps(token_id)
        return resolve_fee_rate(market_fee, user_fee_rate_bps)

    # ── L1: credential bootstrap ────────────────────────────────────

    async def create_api_key(self, nonce: Optional[int] = None) -> ApiKeyCredential:
        """Create a new API credential for the signer."""
        self.assert_l1_auth()
        headers = await create_l1_headers(
            self._signer, self.chain_id, nonce, await self._timestamp()
        )
        result = await self._request("POST", CREATE_API_KEY, headers=headers)
        logger.info("clob_client.api_key_created", address=self._signer.address)
        return ApiKeyCredential.from_response(result)

    async def derive_api_key(self, nonce: Optional[int] = None) -> ApiKeyCredential:
        """Recover the existing API credential for the signer and nonce."""
        self.assert_l1_auth()
        headers = await create_l1_headers(
            self._signer, self.chain_id, nonce, await self._timestamp()
        )
        result = await self._request("GET", DERIVE_API_KEY, headers=headers)
        return ApiKeyCredential.from_response(result)

    async def create_or_derive_api_key(self, nonce: Optional[int] = None) -> ApiKeyCredential:
        """Create a credential, falling back to deriving the existing one."""
        try:
            return await self.create_api_key(nonce)
        except ServerRejectedError as exc:
            logger.info(
                "clob_client.api_key_create_rejected", status_code=exc.status_code
            )
            return await self.derive_api_key(nonce)

    # ── Orders ──────────────────────────────────────────────────────

    async def _resolve_options(
        self, token_id: str, options: Optional[CreateOrderOptions]
    ) -> CreateOrderOptions:
        options = options or CreateOrderOptions()
        market_tick = await self.get_tick_size(token_id)
        tick_size = options.tick_size
        if tick_size is None:
            tick_size = market_tick
        elif to_decimal(tick_size, "tick_size") < to_decimal(market_tick, "tick_size"):
            raise ValidationError(
                f"invalid tick size ({tick_size}), minimum for the market is {market_tick}"
            )
        neg_risk = options.neg_risk
        if neg_risk is None:
            neg_risk = await self.get_neg_risk(token_id)
        return CreateOrderOptions(tick_size=tick_size, neg_risk=neg_risk)

    def _require_builder(self) -> OrderBuilder:
        self.assert_l1_auth()
        return self._order_builder

    async def create_order(
        self, args: OrderArgs, options: Optional[CreateOrderOptions] = None
    ) -> SignedOrder:
        """Build and sign a limit order, fetching missing market state."""
        builder = self._require_builder()
        resolved = await self._resolve_options(args.token_id, options)
        fee = await self.resolve_fee_rate_bps(args.token_id, args.fee_rate_bps)
        return await builder.create_order(
            dataclasses.replace(args, fee_rate_bps=fee), resolved
        )

    async def create_market_order(
        self, args: MarketOrderArgs, options: Optional[CreateOrderOptions] = None
    ) -> SignedOrder:
        """Build and sign a market order, fetching missing market state."""
        builder = self._require_builder()
        resolved = await self._resolve_options(args.token_id, options)
        fee = await self.resolve_fee_rate_bps(args.token_id, args.fee_rate_bps)
        return await builder.create_market_order(
            dataclasses.replace(args, fee_rate_bps=fee), resolved
        )

    async def _post_l2(self, method: str, path: str, body: str) -> Any:
        timestamp = await self._timestamp()
        headers = create_l2_headers(
            self._signer.address, self._creds, method, path, body, timestamp
        )
        if self.can_builder_auth():
            headers = inject_builder_headers(
                headers,
                create_builder_headers(self._builder_creds, method, path, body),
            )
        return await self._request(method, path, headers=headers, content=body)

    async def post_order(
        self,
        order: SignedOrder,
        order_type: Union[OrderType, str] = OrderType.GTC,
    ) -> Dict[str, Any]:
        """Submit a signed order. The body is serialized once and signed as sent."""
        self.assert_l2_auth()
        body = serialize_body(order_to_body(order, self._creds.key, order_type))
        result = await self._post_l2("POST", POST_ORDER, body)
        logger.info(
            "clob_client.order_posted",
            order_type=OrderType(order_type).value,
            side=order.side_label,
            token_id=str(order.token_id),
            order_id=(result or {}).get("orderID"),
        )
        return result

    async def create_and_post_order(
        self,
        args: OrderArgs,
        options: Optional[CreateOrderOptions] = None,
        order_type: Union[OrderType, str] = OrderType.GTC,
    ) -> Dict[str, Any]:
        self.assert_l2_auth()
        order = await self.create_order(args, options)
        return await self.post_order(order, order_type)

    async def create_and_post_market_order(
        self, args: MarketOrderArgs, options: Optional[CreateOrderOptions] = None
    ) -> Dict[str, Any]:
        self.assert_l2_auth()
        order = await self.create_market_order(args, options)
        return await self.post_order(order, args.order_type)

    async def cancel_order(self, order_id: str) -> Dict[str, Any]:
        """Cancel a resting order by ID."""
        self.assert_l2_auth()
        body = serialize_body({"orderID": order_id})
        return await self._post_l2("DELETE", CANCEL_ORDER, body)


__all__ = ["AccessLevel", "ClobClient"]

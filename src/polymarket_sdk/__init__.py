"""Polymarket SDK.

Order signing, API authentication headers and Safe meta-transactions for
the Polymarket CLOB and relayer.

Example usage:
    ```python
    from polymarket_sdk import ClobClient, LocalKeySigner, OrderArgs

    async with ClobClient(
        "https://clob.polymarket.com",
        chain_id=137,
        signer=LocalKeySigner("0x..."),
    ) as client:
        client.set_api_credential(await client.create_or_derive_api_key())
        await client.create_and_post_order(
            OrderArgs(token_id="1234", price="0.15", size="8", side="BUY")
        )
    ```
"""

from .auth import ApiKeyCredential, BuilderCredential
from .clients import AccessLevel, ChainReader, ClobClient, RelayClient
from .config import AMOY, POLYGON, ContractConfig, get_contract_config
from .errors import (
    ChainReadError,
    ConfigurationError,
    EncodingError,
    PolymarketSDKError,
    PreconditionError,
    RelayerError,
    RemoteError,
    RemoteSigningError,
    ServerRejectedError,
    SignatureError,
    UnsupportedSignerError,
    ValidationError,
)
from .logger import get_logger, setup_logging
from .orders import (
    CreateOrderOptions,
    MarketOrderArgs,
    OrderArgs,
    OrderBuilder,
    OrderType,
    RoundingProfile,
    Side,
    SignatureType,
    SignedOrder,
)
from .safe import SafeTransaction, derive_safe_address
from .settings import Settings, get_settings
from .signer import LocalKeySigner, RemoteCustodialSigner, Signer

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Clients
    "AccessLevel",
    "ChainReader",
    "ClobClient",
    "RelayClient",
    # Credentials
    "ApiKeyCredential",
    "BuilderCredential",
    # Config
    "AMOY",
    "POLYGON",
    "ContractConfig",
    "get_contract_config",
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    # Orders
    "CreateOrderOptions",
    "MarketOrderArgs",
    "OrderArgs",
    "OrderBuilder",
    "OrderType",
    "RoundingProfile",
    "Side",
    "SignatureType",
    "SignedOrder",
    # Safe
    "SafeTransaction",
    "derive_safe_address",
    # Signers
    "LocalKeySigner",
    "RemoteCustodialSigner",
    "Signer",
    # Errors
    "ChainReadError",
    "ConfigurationError",
    "EncodingError",
    "PolymarketSDKError",
    "PreconditionError",
    "RelayerError",
    "RemoteError",
    "RemoteSigningError",
    "ServerRejectedError",
    "SignatureError",
    "UnsupportedSignerError",
    "ValidationError",
]

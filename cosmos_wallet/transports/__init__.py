"""Chain transport implementations.

The cosmpy-backed transport lives in cosmos_wallet.transports.cosmpy_transport
and is imported on first connect, so cosmpy stays an optional dependency.
"""

from types import ModuleType
from typing import TYPE_CHECKING

from cosmos_wallet.exceptions import TransportUnavailableError
from cosmos_wallet.interfaces.transport import QueryTransport, SigningTransport

if TYPE_CHECKING:
    from cosmos_wallet.config import Settings
    from cosmos_wallet.wallet.keys import KeyMaterial

__all__ = ["default_query_connector", "default_signing_connector"]


def _load_cosmpy_transport() -> ModuleType:
    try:
        from cosmos_wallet.transports import cosmpy_transport
    except ImportError as e:
        hint = ImportError(
            "cosmpy package required for the default chain transport "
            "(pip install 'cosmos-wallet[cosmpy]')"
        )
        raise TransportUnavailableError(hint) from e
    return cosmpy_transport


async def default_signing_connector(
    endpoint: str, key: "KeyMaterial", settings: "Settings"
) -> SigningTransport:
    """Connect the cosmpy signing transport."""
    transport = _load_cosmpy_transport()
    signer: SigningTransport = await transport.connect_signing(endpoint, key, settings)
    return signer


async def default_query_connector(endpoint: str, settings: "Settings") -> QueryTransport:
    """Connect the cosmpy query transport."""
    transport = _load_cosmpy_transport()
    query: QueryTransport = await transport.connect_query(endpoint, settings)
    return query

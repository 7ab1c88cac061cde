"""Asset and network validation utilities."""

from ledger_core.config.constants import (
    NETWORK_ASSETS,
    SUPPORTED_ASSETS,
    SUPPORTED_NETWORKS,
)
from ledger_core.utils.exceptions import InvalidNetwork, UnsupportedAsset


def normalize_asset(asset: str | None) -> str:
    """
    Upper-cased supported asset symbol.

    Raises:
        UnsupportedAsset: Empty or unknown asset
    """
    symbol = (asset or "").strip().upper()
    if symbol not in SUPPORTED_ASSETS:
        raise UnsupportedAsset(
            f"Unsupported asset {asset!r}, expected one of "
            f"{', '.join(SUPPORTED_ASSETS)}"
        )
    return symbol


def normalize_network(asset: str, network: str | None) -> str | None:
    """
    Network for an already-normalised asset.

    USDT requires one of TRC20/BEP20/ERC20; other assets have no network
    and any value passed for them is ignored.

    Raises:
        InvalidNetwork: Missing or unknown network for USDT
    """
    if asset not in NETWORK_ASSETS:
        return None

    value = (network or "").strip().upper()
    if value not in SUPPORTED_NETWORKS:
        raise InvalidNetwork(
            f"{asset} network is required "
            f"({'/'.join(SUPPORTED_NETWORKS)}), got {network!r}"
        )
    return value

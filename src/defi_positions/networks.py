"""Supported networks and their price platform slugs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Network:
    """A chain positions can live on.

    EVM chains carry their positive chain id. Non-EVM chains and the
    off-chain asset registry use negative ids so they are never batched
    as address-keyed networks.
    """

    id: int
    name: str
    shortname: str
    price_platform: str | None = None  # CoinGecko asset platform slug

    @property
    def is_evm(self) -> bool:
        return self.id > 0


ETH = Network(1, "Ethereum", "eth", "ethereum")
BSC = Network(56, "BinanceSmartChain", "bsc", "binance-smart-chain")
POLY = Network(137, "Polygon", "poly", "polygon-pos")
ARB = Network(42161, "Arbitrum", "arb", "arbitrum-one")
AVAX = Network(43114, "Avalanche", "avax", "avalanche")
OETH = Network(10, "Optimism", "oeth", "optimistic-ethereum")
FTM = Network(250, "Fantom", "ftm", "fantom")
EGLD = Network(-1, "Elrond", "egld")
SOL = Network(-2, "Solana", "sol")
OFF = Network(-3, "OffChain", "off")

NETWORKS: dict[str, Network] = {
    network.shortname: network
    for network in (ETH, BSC, POLY, ARB, AVAX, OETH, FTM, EGLD, SOL, OFF)
}

NETWORKS_BY_ID: dict[int, Network] = {network.id: network for network in NETWORKS.values()}


def get_network(shortname: str) -> Network:
    """Get a network by short name (case-insensitive).

    Raises:
        ValueError: If the short name is not recognized
    """
    network = NETWORKS.get(shortname.lower())
    if network is None:
        raise ValueError(
            f"Unknown network '{shortname}'. Available: {', '.join(NETWORKS)}"
        )
    return network


def network_name(network_id: int) -> str:
    network = NETWORKS_BY_ID.get(network_id)
    return network.name if network else str(network_id)

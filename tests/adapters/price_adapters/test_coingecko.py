from unittest.mock import MagicMock

import pytest
import requests

from defi_positions.adapters.price_adapters.base import UnsupportedNetworkError
from defi_positions.adapters.price_adapters.coingecko import (
    CoinGeckoPriceSource,
    CoinGeckoTokenPriceSource,
)
from defi_positions.networks import ARB, SOL, Network
from defi_positions.settings import TrackerSettings

USDC_ARB = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"
WETH_ARB = "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"


@pytest.fixture
def config():
    return TrackerSettings(coingecko_api_url="https://cg.example/api/v3/")


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


@pytest.mark.asyncio
async def test_token_prices_request_and_checksum_keys(monkeypatch, config):
    source = CoinGeckoTokenPriceSource(config)
    calls = []

    async def _fake_get(url, *, params=None):
        calls.append((url, params))
        return _response(
            {
                USDC_ARB.lower(): {"usd": 1.0},
                WETH_ARB.lower(): {"usd": 3012.45},
            }
        )

    monkeypatch.setattr(source, "_http_get", _fake_get)

    prices = await source.fetch_prices([USDC_ARB, WETH_ARB], ARB)

    assert calls == [
        (
            "https://cg.example/api/v3/simple/token_price/arbitrum-one",
            {
                "contract_addresses": f"{USDC_ARB},{WETH_ARB}",
                "vs_currencies": "usd",
            },
        )
    ]
    assert prices == {
        USDC_ARB: 10**18,
        WETH_ARB: 301245 * 10**16,
    }


@pytest.mark.asyncio
async def test_token_prices_skip_entries_without_usd(monkeypatch, config):
    source = CoinGeckoTokenPriceSource(config)

    async def _fake_get(url, *, params=None):
        return _response({USDC_ARB.lower(): {}, WETH_ARB.lower(): {"usd": 2}})

    monkeypatch.setattr(source, "_http_get", _fake_get)

    assert await source.fetch_prices([USDC_ARB, WETH_ARB], ARB) == {WETH_ARB: 2 * 10**18}


@pytest.mark.asyncio
async def test_token_prices_unconfigured_network_raises_before_request(monkeypatch, config):
    source = CoinGeckoTokenPriceSource(config)

    async def _fail_get(url, *, params=None):
        raise AssertionError("no request expected")

    monkeypatch.setattr(source, "_http_get", _fail_get)

    with pytest.raises(UnsupportedNetworkError, match="No price platform configured"):
        await source.fetch_prices([USDC_ARB], Network(1101, "zkEVM", "zkevm"))


def test_platform_override_from_settings():
    source = CoinGeckoTokenPriceSource(
        TrackerSettings(price_platforms={1101: "polygon-zkevm", 42161: "arbitrum"})
    )

    assert source.platform_for(Network(1101, "zkEVM", "zkevm")) == "polygon-zkevm"
    assert source.platform_for(ARB) == "arbitrum"


@pytest.mark.asyncio
async def test_http_errors_propagate(monkeypatch, config):
    source = CoinGeckoTokenPriceSource(config)
    response = _response({})
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("429 Too Many Requests")

    async def _fake_get(url, *, params=None):
        return response

    monkeypatch.setattr(source, "_http_get", _fake_get)

    with pytest.raises(requests.exceptions.HTTPError, match="429"):
        await source.fetch_prices([USDC_ARB], ARB)


@pytest.mark.asyncio
async def test_catalog_prices(monkeypatch, config):
    source = CoinGeckoPriceSource(config)
    calls = []

    async def _fake_get(url, *, params=None):
        calls.append((url, params))
        return _response({"solana": {"usd": 142.17}, "raydium": {"usd": 1.8}})

    monkeypatch.setattr(source, "_http_get", _fake_get)

    prices = await source.fetch_prices(["solana", "raydium"], SOL)

    assert calls == [
        (
            "https://cg.example/api/v3/simple/price",
            {"ids": "solana,raydium", "vs_currencies": "usd"},
        )
    ]
    assert prices == {"solana": 14217 * 10**16, "raydium": 18 * 10**17}


@pytest.mark.asyncio
async def test_catalog_prices_invalid_payload(monkeypatch, config):
    source = CoinGeckoPriceSource(config)

    async def _fake_get(url, *, params=None):
        return _response(["not", "a", "dict"])

    monkeypatch.setattr(source, "_http_get", _fake_get)

    with pytest.raises(ValueError, match="Invalid response structure"):
        await source.fetch_prices(["solana"], SOL)


def test_api_key_header():
    source = CoinGeckoPriceSource(TrackerSettings(coingecko_api_key="cg-key"))
    assert source._headers() == {"x-cg-pro-api-key": "cg-key"}
    assert source.api_base_url == "https://pro-api.coingecko.com/api/v3"

    assert CoinGeckoPriceSource(TrackerSettings(coingecko_api_key=None))._headers() == {}

import pytest

from defi_positions.networks import ARB, EGLD, NETWORKS_BY_ID, OFF, SOL, get_network, network_name


def test_evm_networks_have_price_platforms():
    for network in NETWORKS_BY_ID.values():
        if network.is_evm:
            assert network.price_platform
        else:
            assert network.price_platform is None


def test_non_evm_networks_use_non_positive_ids():
    assert not EGLD.is_evm
    assert not SOL.is_evm
    assert not OFF.is_evm


def test_get_network_is_case_insensitive():
    assert get_network("ARB") is ARB


def test_get_network_unknown():
    with pytest.raises(ValueError, match="Unknown network 'moon'"):
        get_network("moon")


def test_network_name_falls_back_to_id():
    assert network_name(42161) == "Arbitrum"
    assert network_name(999) == "999"

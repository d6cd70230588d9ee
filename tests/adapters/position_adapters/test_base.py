import pytest

from defi_positions.adapters.position_adapters import BasePosition, PositionArgs
from defi_positions.networks import ETH


class _NoRewards(BasePosition):
    @property
    def position_type(self) -> str:
        return "eth:Partial:Pool"

    def get_network(self):
        return ETH

    def get_assets(self):
        return []

    def get_amounts(self):
        return []

    async def load(self):
        pass


def test_reward_assets_must_be_declared():
    with pytest.raises(TypeError, match="get_reward_assets"):
        _NoRewards(PositionArgs(type="eth:Partial:Pool"), None)


def test_defaults_for_optional_views():
    class Pool(_NoRewards):
        def get_reward_assets(self):
            return []

    pool = Pool(PositionArgs(type="eth:Partial:Pool"), None)

    assert pool.get_name() == ""
    assert pool.get_pending_rewards() == []
    assert pool.get_tvl() == 0
    assert pool.loaded is False

import pytest

from defi_positions.adapters.position_adapters import (
    POSITION_REGISTRY,
    OffChainHolding,
    PositionArgs,
    create_position,
    get_position_builder,
    register_position,
)


def test_offchain_holding_is_registered():
    assert get_position_builder("off:OffChain:Holding") is OffChainHolding


def test_unknown_type_lists_available_types():
    with pytest.raises(ValueError, match="Unknown position type 'eth:Nope:Farm'") as exc:
        get_position_builder("eth:Nope:Farm")

    assert "off:OffChain:Holding" in str(exc.value)


def test_create_position_assigns_id():
    first = create_position(PositionArgs(type=OffChainHolding.TYPE, input="EUR:1"), None)
    second = create_position(PositionArgs(type=OffChainHolding.TYPE, input="EUR:1"), None)

    assert len(first.get_args().id) == 32
    assert first.get_args().id != second.get_args().id


def test_create_position_keeps_existing_id():
    position = create_position(
        PositionArgs(id="cash", type=OffChainHolding.TYPE, input="EUR:1"), None
    )

    assert position.get_args().id == "cash"


def test_register_position(monkeypatch):
    monkeypatch.setattr(
        "defi_positions.adapters.position_adapters.POSITION_REGISTRY", dict(POSITION_REGISTRY)
    )
    built = []

    def builder(args, oracle):
        built.append(args)
        return OffChainHolding(args.model_copy(update={"input": "USD:1"}), oracle)

    register_position("eth:Custom:Vault", builder)
    position = create_position(PositionArgs(type="eth:Custom:Vault"), None)

    assert built[0].type == "eth:Custom:Vault"
    assert position.get_args().input == "USD:1"
    assert "eth:Custom:Vault" not in POSITION_REGISTRY

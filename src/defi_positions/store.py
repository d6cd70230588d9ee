"""Position persistence and the dashboard state built on top of it."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .adapters.position_adapters import BasePosition, PositionArgs, create_position
from .oracle import PriceOracle
from .processors import load_positions
from .settings import TrackerSettings

logger = logging.getLogger(__name__)

_ARGS_BY_ID = TypeAdapter(dict[str, PositionArgs])


class StoreError(Exception):
    """The positions file exists but cannot be read."""


class PositionStore:
    """Keeps position arguments in a JSON file keyed by position id."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> dict[str, PositionArgs]:
        if not self.path.exists():
            return {}
        try:
            return _ARGS_BY_ID.validate_json(self.path.read_bytes())
        except ValidationError as e:
            raise StoreError(f"Invalid positions file {self.path}: {e}") from e

    def save(self, data: dict[str, PositionArgs]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {pid: args.model_dump() for pid, args in data.items()}
        self.path.write_text(json.dumps(payload, indent=2) + "\n")


class Dashboard:
    """All tracked positions, rebuilt from the store and valued by one oracle."""

    def __init__(
        self,
        config: TrackerSettings,
        oracle: PriceOracle | None = None,
        store: PositionStore | None = None,
    ):
        self.config = config
        self.oracle = oracle or PriceOracle(config)
        self.store = store or PositionStore(config.positions_file)
        self.positions: dict[str, BasePosition] = {}

    async def load(self) -> dict[str, BasePosition]:
        """Rebuild positions from stored args and load them.

        Instances already built for an id are reused. Stored entries with an
        unknown type are skipped with a warning.
        """
        logger.info("Loading positions from %s", self.store.path)
        positions: dict[str, BasePosition] = {}
        for position_id, args in self.store.load().items():
            args = args if args.id else args.model_copy(update={"id": position_id})
            current = self.positions.get(position_id)
            if current is not None and current.get_args() == args:
                positions[position_id] = current
                continue
            try:
                positions[position_id] = create_position(args, self.oracle)
            except ValueError as e:
                logger.warning("Skipping position %s: %s", position_id, e)

        await load_positions(self.oracle, list(positions.values()))
        self.positions = positions
        return positions

    def _stored_args(self) -> dict[str, PositionArgs]:
        data = self.store.load()
        data.update({pid: p.get_args() for pid, p in self.positions.items()})
        return data

    async def add_position(
        self, position_type: str, address: str, input: str = "", name: str = ""
    ) -> BasePosition:
        """Create, persist and load a new position.

        Raises:
            ValueError: If the type is unknown or its input is invalid
        """
        position = create_position(
            PositionArgs(type=position_type, address=address, input=input, name=name),
            self.oracle,
        )
        data = self._stored_args()
        data[position.get_args().id] = position.get_args()
        self.store.save(data)
        await self.load()
        return self.positions.get(position.get_args().id, position)

    async def update(self, position_id: str, args: PositionArgs) -> None:
        data = self._stored_args()
        if position_id not in data:
            raise KeyError(position_id)
        data[position_id] = args.model_copy(update={"id": position_id})
        self.store.save(data)
        await self.load()

    async def delete(self, position_id: str) -> None:
        data = self._stored_args()
        if data.pop(position_id, None) is None:
            raise KeyError(position_id)
        self.positions.pop(position_id, None)
        self.store.save(data)
        await self.load()

from __future__ import annotations

from typing import Protocol


class BlockHeaderLike(Protocol):
    timestamp: int


class BlockLike(Protocol):
    header: BlockHeaderLike


class NodeInterface(Protocol):
    """
    Interface của node mà EvmModule cần:
    đọc block mới nhất, điều khiển thời gian, mine block rỗng, snapshot/revert.
    """

    def get_latest_block(self) -> BlockLike:
        ...

    def set_next_block_timestamp(self, timestamp: int) -> None:
        ...

    def increase_time(self, increment: int) -> None:
        ...

    def get_time_increment(self) -> int:
        ...

    def mine_empty_block(self, timestamp: int) -> None:
        ...

    def take_snapshot(self) -> int:
        ...

    def revert_to_snapshot(self, snapshot_id: int) -> bool:
        ...

from dataclasses import dataclass
from typing import Callable, List, Optional
import math
import time

from blocklayer.block import Block, build_block, validate_block
from blocklayer.ledger import Ledger
from core.crypto_layer import KeyPair
from core.logging_utils import JsonLinesLogger


@dataclass
class Snapshot:
    """Những gì cần để quay lại đúng trạng thái node tại thời điểm snapshot."""
    snapshot_id: int
    taken_at: float
    head_height: int
    time_increment: int
    next_block_timestamp: int


class DevNode:
    """
    Node mô phỏng cho môi trường dev/test:
    - Ledger các block rỗng, mỗi block được miner ký.
    - Time offset cộng dồn cho timestamp của block sau.
    - Timestamp cố định cho block kế tiếp (0 = chưa đặt).
    - Stack snapshot để revert.
    """

    def __init__(
        self,
        keypair: KeyPair,
        genesis_timestamp: Optional[int] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[JsonLinesLogger] = None,
        node_id: str = "devnode",
    ):
        self.node_id = node_id
        self.keypair = keypair
        self.clock = clock
        self.logger = logger

        self.ledger = Ledger()
        self.time_increment = 0
        self.next_block_timestamp = 0

        self._snapshots: List[Snapshot] = []
        self._next_snapshot_id = 1

        if genesis_timestamp is None:
            genesis_timestamp = self._now()
        genesis = build_block(None, genesis_timestamp, self.keypair)
        self.ledger.add_block(genesis)

    def _now(self) -> int:
        return int(self.clock())

    def _log(self, event: str, height: Optional[int] = None, **extra) -> None:
        if self.logger is None:
            return
        self.logger.log_event(
            time=self.clock(),
            source=self.node_id,
            event=event,
            height=height,
            extra=extra or None,
        )

    # Blocks

    def get_latest_block(self) -> Block:
        return self.ledger.latest()

    def mine_empty_block(self, timestamp: int) -> Block:
        """
        Mine 1 block rỗng.

        timestamp = 0: dùng next_block_timestamp nếu đã đặt, nếu không thì
        now + time_increment. Khi dùng timestamp chỉ định (hoặc đã đặt trước),
        time_increment được chỉnh để các block sau tiếp tục từ timestamp đó.
        """
        parent = self.ledger.latest()

        offset_should_change = True
        if timestamp == 0:
            if self.next_block_timestamp == 0:
                block_timestamp = self._now() + self.time_increment
                offset_should_change = False
            else:
                block_timestamp = self.next_block_timestamp
        else:
            block_timestamp = timestamp

        if not offset_should_change and block_timestamp <= parent.header.timestamp:
            block_timestamp = parent.header.timestamp + 1

        block = build_block(parent, block_timestamp, self.keypair)
        if not validate_block(block, parent):
            raise ValueError(
                f"Can't mine block at height {block.header.height} with timestamp "
                f"{block_timestamp}, previous block's timestamp is {parent.header.timestamp}"
            )
        self.ledger.add_block(block)

        if offset_should_change:
            self.time_increment = block_timestamp - self._now()
        self.next_block_timestamp = 0

        self._log(
            "block_mined",
            height=block.header.height,
            timestamp=block.header.timestamp,
            block_hash=block.block_hash(),
        )
        return block

    @property
    def blockchain(self) -> List[Block]:
        return self.ledger.blocks_in_order()

    # Time

    def set_next_block_timestamp(self, timestamp: int) -> None:
        self.next_block_timestamp = timestamp

    def get_next_block_timestamp(self) -> int:
        return self.next_block_timestamp

    def increase_time(self, increment: int) -> None:
        self.time_increment += increment

    def set_time_increment(self, increment: int) -> None:
        self.time_increment = increment

    def get_time_increment(self) -> int:
        return self.time_increment

    # Snapshots

    def take_snapshot(self) -> int:
        snapshot = Snapshot(
            snapshot_id=self._next_snapshot_id,
            taken_at=self.clock(),
            head_height=self.ledger.get_height(),
            time_increment=self.time_increment,
            next_block_timestamp=self.next_block_timestamp,
        )
        self._snapshots.append(snapshot)
        self._next_snapshot_id += 1

        self._log(
            "snapshot_taken",
            height=snapshot.head_height,
            snapshot_id=snapshot.snapshot_id,
        )
        return snapshot.snapshot_id

    def revert_to_snapshot(self, snapshot_id: int) -> bool:
        """
        Quay về snapshot. Snapshot này và mọi snapshot sau nó bị huỷ,
        mỗi id chỉ dùng được 1 lần. Trả về False nếu id không tồn tại.
        """
        index = self._find_snapshot(snapshot_id)
        if index is None:
            return False
        snapshot = self._snapshots[index]

        # now + new_offset == snapshot_time + old_offset
        offset_to_snapshot = math.ceil(snapshot.taken_at - self.clock())
        removed = self.ledger.truncate(snapshot.head_height)

        self.time_increment = snapshot.time_increment + offset_to_snapshot
        self.next_block_timestamp = snapshot.next_block_timestamp
        del self._snapshots[index:]

        self._log(
            "snapshot_reverted",
            height=snapshot.head_height,
            snapshot_id=snapshot_id,
            removed_blocks=removed,
        )
        return True

    def _find_snapshot(self, snapshot_id: int) -> Optional[int]:
        for index, snapshot in enumerate(self._snapshots):
            if snapshot.snapshot_id == snapshot_id:
                return index
        return None

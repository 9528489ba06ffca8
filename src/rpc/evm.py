"""
EvmModule: các RPC method evm_* để điều khiển thời gian, mine block và snapshot
trên dev node.

Mỗi method gồm 2 bước:
1. *_params: decode list tham số thành request có kiểu (raise InvalidArgumentsError).
2. *_action: kiểm tra các ràng buộc về timestamp rồi mới gọi node.

Mọi kiểm tra đều chạy xong trước lần gọi node đầu tiên làm thay đổi state.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import InvalidInputError, MethodNotFoundError
from .input import rpc_number, rpc_number_list, rpc_quantity, validate_params
from .interface import NodeInterface
from .output import number_to_rpc_quantity


@dataclass(frozen=True)
class IncreaseTimeRequest:
    seconds: int


@dataclass(frozen=True)
class SetNextBlockTimestampRequest:
    timestamp: int


@dataclass(frozen=True)
class MineRequest:
    # 0: node tự chọn timestamp
    timestamp: int = 0


@dataclass(frozen=True)
class MineMultipleRequest:
    iterations: int = 0
    timestamps: Tuple[int, ...] = ()


@dataclass(frozen=True)
class RevertRequest:
    snapshot_id: int


@dataclass(frozen=True)
class SnapshotRequest:
    pass


class EvmModule:
    def __init__(self, node: NodeInterface):
        self._node = node
        self._methods: Dict[str, Tuple[Callable[[Sequence[Any]], Any], Callable[[Any], Any]]] = {
            "evm_increaseTime": (self._increase_time_params, self._increase_time_action),
            "evm_setNextBlockTimestamp": (
                self._set_next_block_timestamp_params,
                self._set_next_block_timestamp_action,
            ),
            "evm_mine": (self._mine_params, self._mine_action),
            "evm_mineMultiple": (self._mine_multiple_params, self._mine_multiple_action),
            "evm_revert": (self._revert_params, self._revert_action),
            "evm_snapshot": (self._snapshot_params, self._snapshot_action),
        }

    def supported_methods(self) -> List[str]:
        return list(self._methods.keys())

    def process_request(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        handlers = self._methods.get(method)
        if handlers is None:
            raise MethodNotFoundError(f"Method {method} not found")

        decode, action = handlers
        request = decode([] if params is None else params)
        return action(request)

    def _assert_after_latest_block(self, timestamp: int) -> None:
        latest_timestamp = self._node.get_latest_block().header.timestamp
        if timestamp - latest_timestamp <= 0:
            raise InvalidInputError(
                f"Timestamp {timestamp} is lower than or equal to previous block's "
                f"timestamp {latest_timestamp}"
            )

    # evm_setNextBlockTimestamp

    def _set_next_block_timestamp_params(self, params: Sequence[Any]) -> SetNextBlockTimestampRequest:
        (timestamp,) = validate_params("evm_setNextBlockTimestamp", params, rpc_number)
        return SetNextBlockTimestampRequest(timestamp)

    def _set_next_block_timestamp_action(self, request: SetNextBlockTimestampRequest) -> str:
        self._assert_after_latest_block(request.timestamp)
        self._node.set_next_block_timestamp(request.timestamp)
        return str(request.timestamp)

    # evm_increaseTime

    def _increase_time_params(self, params: Sequence[Any]) -> IncreaseTimeRequest:
        (seconds,) = validate_params("evm_increaseTime", params, rpc_number)
        return IncreaseTimeRequest(seconds)

    def _increase_time_action(self, request: IncreaseTimeRequest) -> str:
        self._node.increase_time(request.seconds)
        total_increment = self._node.get_time_increment()
        # The one result that is a decimal string, not a hex quantity
        return str(total_increment)

    # evm_mine

    def _mine_params(self, params: Sequence[Any]) -> MineRequest:
        return MineRequest(*validate_params("evm_mine", params, rpc_number, optional=1))

    def _mine_action(self, request: MineRequest) -> str:
        if request.timestamp != 0:
            self._assert_after_latest_block(request.timestamp)
        self._node.mine_empty_block(request.timestamp)
        return number_to_rpc_quantity(0)

    # evm_mineMultiple

    def _mine_multiple_params(self, params: Sequence[Any]) -> MineMultipleRequest:
        return MineMultipleRequest(
            *validate_params(
                "evm_mineMultiple", params, rpc_number, rpc_number_list, optional=2
            )
        )

    def _mine_multiple_action(self, request: MineMultipleRequest) -> str:
        iterations = request.iterations
        timestamps = request.timestamps

        if timestamps:
            if len(timestamps) > iterations:
                raise InvalidInputError(
                    f"Timestamps array size {len(timestamps)} must be lower than or "
                    f"equal to the number of iterations specified {iterations}."
                )
            latest_timestamp = self._node.get_latest_block().header.timestamp
            if timestamps[0] <= latest_timestamp:
                raise InvalidInputError(
                    f"First timestamp specified {timestamps[0]} should be greater "
                    f"than latest block's timestamp {latest_timestamp}"
                )
            if any(prev >= nxt for prev, nxt in zip(timestamps, timestamps[1:])):
                raise InvalidInputError(
                    "Timestamps specified must be an increasing sequence"
                )

        if iterations <= 0:
            raise InvalidInputError(
                f"Invalid iterations number {iterations}, it must be greater than 0"
            )

        for index in range(iterations):
            timestamp = timestamps[index] if index < len(timestamps) else 0
            self._node.mine_empty_block(timestamp)
        return number_to_rpc_quantity(0)

    # evm_revert

    def _revert_params(self, params: Sequence[Any]) -> RevertRequest:
        (snapshot_id,) = validate_params("evm_revert", params, rpc_quantity)
        return RevertRequest(snapshot_id)

    def _revert_action(self, request: RevertRequest) -> bool:
        return self._node.revert_to_snapshot(request.snapshot_id)

    # evm_snapshot

    def _snapshot_params(self, params: Sequence[Any]) -> SnapshotRequest:
        validate_params("evm_snapshot", params)
        return SnapshotRequest()

    def _snapshot_action(self, request: SnapshotRequest) -> str:
        snapshot_id = self._node.take_snapshot()
        return number_to_rpc_quantity(snapshot_id)

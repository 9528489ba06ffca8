import sys
import os
from types import SimpleNamespace

import pytest

# Add src to path
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from rpc.errors import InvalidArgumentsError, InvalidInputError, MethodNotFoundError
from rpc.evm import EvmModule

HEAD_TS = 1000


class FakeNode:
    """
    Node giả: ghi lại mọi lời gọi để kiểm tra EvmModule
    gọi node đúng thứ tự và không gọi gì khi input sai.
    """

    def __init__(self, head_timestamp=HEAD_TS):
        self.head_timestamp = head_timestamp
        self.calls = []
        self.mined = []
        self.next_block_timestamp = 0
        self.time_increment = 0
        self.snapshot_ids = []
        self.revert_result = True

    def get_latest_block(self):
        self.calls.append(("get_latest_block",))
        return SimpleNamespace(header=SimpleNamespace(timestamp=self.head_timestamp))

    def set_next_block_timestamp(self, timestamp):
        self.calls.append(("set_next_block_timestamp", timestamp))
        self.next_block_timestamp = timestamp

    def increase_time(self, increment):
        self.calls.append(("increase_time", increment))
        self.time_increment += increment

    def get_time_increment(self):
        self.calls.append(("get_time_increment",))
        return self.time_increment

    def mine_empty_block(self, timestamp):
        self.calls.append(("mine_empty_block", timestamp))
        self.mined.append(timestamp)

    def take_snapshot(self):
        self.calls.append(("take_snapshot",))
        snapshot_id = len(self.snapshot_ids) + 1
        self.snapshot_ids.append(snapshot_id)
        return snapshot_id

    def revert_to_snapshot(self, snapshot_id):
        self.calls.append(("revert_to_snapshot", snapshot_id))
        return self.revert_result

    def mutating_calls(self):
        readonly = {"get_latest_block", "get_time_increment"}
        return [c for c in self.calls if c[0] not in readonly]


@pytest.fixture
def node():
    return FakeNode()


@pytest.fixture
def evm(node):
    return EvmModule(node)


# dispatcher

def test_unknown_method_not_found(evm, node):
    with pytest.raises(MethodNotFoundError) as exc_info:
        evm.process_request("evm_bogus", [])
    assert "evm_bogus" in exc_info.value.message
    assert exc_info.value.code == -32601
    assert node.calls == []


def test_method_names_are_case_sensitive(evm, node):
    with pytest.raises(MethodNotFoundError):
        evm.process_request("evm_Mine", [])
    assert node.calls == []


def test_supported_methods(evm):
    assert sorted(evm.supported_methods()) == sorted([
        "evm_increaseTime",
        "evm_setNextBlockTimestamp",
        "evm_mine",
        "evm_mineMultiple",
        "evm_revert",
        "evm_snapshot",
    ])


def test_params_none_is_empty_list(evm, node):
    assert evm.process_request("evm_mine") == "0x0"
    assert node.mined == [0]


# evm_setNextBlockTimestamp

@pytest.mark.parametrize("timestamp", [HEAD_TS, HEAD_TS - 1, 0])
def test_set_next_block_timestamp_not_after_head(evm, node, timestamp):
    with pytest.raises(InvalidInputError) as exc_info:
        evm.process_request("evm_setNextBlockTimestamp", [timestamp])
    assert str(timestamp) in exc_info.value.message
    assert str(HEAD_TS) in exc_info.value.message
    assert node.mutating_calls() == []


def test_set_next_block_timestamp(evm, node):
    result = evm.process_request("evm_setNextBlockTimestamp", [HEAD_TS + 1])
    assert result == str(HEAD_TS + 1)
    assert node.next_block_timestamp == HEAD_TS + 1


@pytest.mark.parametrize("params", [[], [1, 2], ["1001"], [None], [True]])
def test_set_next_block_timestamp_bad_params(evm, node, params):
    with pytest.raises(InvalidArgumentsError, match="evm_setNextBlockTimestamp"):
        evm.process_request("evm_setNextBlockTimestamp", params)
    assert node.calls == []


# evm_increaseTime

def test_increase_time_returns_decimal_total(evm, node):
    assert evm.process_request("evm_increaseTime", [5]) == "5"
    assert evm.process_request("evm_increaseTime", [10]) == "15"
    assert node.time_increment == 15


def test_increase_time_large_value_is_not_hex(evm):
    assert evm.process_request("evm_increaseTime", [3600]) == "3600"


@pytest.mark.parametrize("params", [[], [1, 2], ["5"], [1.5]])
def test_increase_time_bad_params(evm, node, params):
    with pytest.raises(InvalidInputError):
        evm.process_request("evm_increaseTime", params)
    assert node.calls == []


# evm_mine

def test_mine_without_timestamp(evm, node):
    assert evm.process_request("evm_mine", []) == "0x0"
    assert node.mined == [0]
    # no head check when timestamp is the 0 sentinel
    assert ("get_latest_block",) not in node.calls


def test_mine_explicit_zero_is_sentinel(evm, node):
    assert evm.process_request("evm_mine", [0]) == "0x0"
    assert node.mined == [0]


def test_mine_with_timestamp(evm, node):
    assert evm.process_request("evm_mine", [HEAD_TS + 10]) == "0x0"
    assert node.mined == [HEAD_TS + 10]


@pytest.mark.parametrize("timestamp", [HEAD_TS, HEAD_TS - 100, -1])
def test_mine_timestamp_not_after_head(evm, node, timestamp):
    with pytest.raises(InvalidInputError, match="previous block's timestamp"):
        evm.process_request("evm_mine", [timestamp])
    assert node.mined == []


def test_mine_too_many_params(evm, node):
    with pytest.raises(InvalidArgumentsError):
        evm.process_request("evm_mine", [HEAD_TS + 1, HEAD_TS + 2])
    assert node.calls == []


# evm_mineMultiple

def test_mine_multiple_without_timestamps(evm, node):
    assert evm.process_request("evm_mineMultiple", [4]) == "0x0"
    assert node.mined == [0, 0, 0, 0]


def test_mine_multiple_with_timestamps(evm, node):
    result = evm.process_request("evm_mineMultiple", [5, [HEAD_TS + 1, HEAD_TS + 5, HEAD_TS + 9]])
    assert result == "0x0"
    assert node.mined == [HEAD_TS + 1, HEAD_TS + 5, HEAD_TS + 9, 0, 0]


def test_mine_multiple_timestamps_fill_all_iterations(evm, node):
    evm.process_request("evm_mineMultiple", [2, [HEAD_TS + 1, HEAD_TS + 2]])
    assert node.mined == [HEAD_TS + 1, HEAD_TS + 2]


def test_mine_multiple_empty_timestamps_list(evm, node):
    evm.process_request("evm_mineMultiple", [2, []])
    assert node.mined == [0, 0]


@pytest.mark.parametrize("params", [[], [0], [-1], [0, []]])
def test_mine_multiple_non_positive_iterations(evm, node, params):
    with pytest.raises(InvalidInputError, match="iterations"):
        evm.process_request("evm_mineMultiple", params)
    assert node.mined == []


def test_mine_multiple_more_timestamps_than_iterations(evm, node):
    with pytest.raises(InvalidInputError, match="Timestamps array size 3"):
        evm.process_request("evm_mineMultiple", [2, [HEAD_TS + 1, HEAD_TS + 2, HEAD_TS + 3]])
    assert node.mined == []


@pytest.mark.parametrize("first", [HEAD_TS, HEAD_TS - 1])
def test_mine_multiple_first_timestamp_not_after_head(evm, node, first):
    with pytest.raises(InvalidInputError, match="First timestamp specified"):
        evm.process_request("evm_mineMultiple", [3, [first, HEAD_TS + 10]])
    assert node.mined == []


@pytest.mark.parametrize("timestamps", [
    [HEAD_TS + 5, HEAD_TS + 5],
    [HEAD_TS + 5, HEAD_TS + 4],
    [HEAD_TS + 1, HEAD_TS + 3, HEAD_TS + 2],
])
def test_mine_multiple_not_increasing(evm, node, timestamps):
    with pytest.raises(InvalidInputError, match="increasing sequence"):
        evm.process_request("evm_mineMultiple", [5, timestamps])
    assert node.mined == []


def test_mine_multiple_timestamps_checked_before_iterations(evm, node):
    # a non-empty timestamps list with 0 iterations fails on the size check
    with pytest.raises(InvalidInputError, match="Timestamps array size 1"):
        evm.process_request("evm_mineMultiple", [0, [HEAD_TS + 1]])


@pytest.mark.parametrize("params", [["3"], [3, 4], [3, [1, "x"]], [3, [], 1]])
def test_mine_multiple_bad_params(evm, node, params):
    with pytest.raises(InvalidArgumentsError, match="evm_mineMultiple"):
        evm.process_request("evm_mineMultiple", params)
    assert node.calls == []


def test_mine_multiple_node_failure_propagates_without_rollback(node):
    class FailingNode(FakeNode):
        def mine_empty_block(self, timestamp):
            if len(self.mined) == 2:
                raise RuntimeError("block construction failed")
            super().mine_empty_block(timestamp)

    failing = FailingNode()
    with pytest.raises(RuntimeError, match="block construction failed"):
        EvmModule(failing).process_request("evm_mineMultiple", [5])
    assert failing.mined == [0, 0]


# evm_snapshot / evm_revert

def test_snapshot_returns_hex_ids(evm, node):
    assert evm.process_request("evm_snapshot", []) == "0x1"
    assert evm.process_request("evm_snapshot", []) == "0x2"


def test_snapshot_rejects_params(evm, node):
    with pytest.raises(InvalidArgumentsError):
        evm.process_request("evm_snapshot", [1])
    assert node.calls == []


def test_revert_passes_result_through(evm, node):
    assert evm.process_request("evm_revert", ["0x1"]) is True
    assert node.calls == [("revert_to_snapshot", 1)]

    node.revert_result = False
    assert evm.process_request("evm_revert", ["0x1f"]) is False
    assert node.calls[-1] == ("revert_to_snapshot", 31)


@pytest.mark.parametrize("params", [[], [1], ["1"], ["0x01"], ["0x1", "0x2"]])
def test_revert_bad_params(evm, node, params):
    with pytest.raises(InvalidArgumentsError, match="evm_revert"):
        evm.process_request("evm_revert", params)
    assert node.calls == []


def test_node_errors_propagate_unmodified(node):
    class BrokenNode(FakeNode):
        def take_snapshot(self):
            raise OSError("snapshot storage failed")

    with pytest.raises(OSError, match="snapshot storage failed"):
        EvmModule(BrokenNode()).process_request("evm_snapshot", [])

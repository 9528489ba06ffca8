import sys
import threading
from typing import Any, Optional, Sequence, TextIO

import yaml

from core.crypto_layer import KeyPair
from core.logging_utils import JsonLinesLogger
from node_sim.node import DevNode
from rpc.errors import RpcError
from rpc.evm import EvmModule

DEFAULT_CONFIG = {
    "chain": {"genesis_timestamp": None, "miner_seed": None},
    "logging": {"output": None},
}


class DevProvider:
    """
    Nhận request (method, params) từ client và chuyển cho EvmModule.
    Mỗi lần chỉ xử lý 1 request: các method evm_* đều thay đổi state của node,
    nên không được chạy xen kẽ.

    Nếu config có logging.output thì event log được ghi vào file đó
    (provider tự mở và đóng), nếu không thì ghi vào output_file.
    """

    def __init__(self, config_path="config/default_config.yaml", output_file: TextIO = sys.stdout, clock=None):
        self.config = {}
        self.load_config(config_path)

        # Initialize Logger
        self._log_file: Optional[TextIO] = None
        log_path = (self.config.get("logging") or {}).get("output")
        if log_path:
            self._log_file = open(log_path, "w")
            output_file = self._log_file
        self.logger = JsonLinesLogger(output_file)

        chain_config = self.config.get("chain") or {}
        keypair = KeyPair.from_hex_seed(chain_config.get("miner_seed"))

        node_kwargs = {}
        if clock is not None:
            node_kwargs["clock"] = clock
        self.node = DevNode(
            keypair=keypair,
            genesis_timestamp=chain_config.get("genesis_timestamp"),
            logger=self.logger,
            **node_kwargs,
        )
        self.evm = EvmModule(self.node)
        self._lock = threading.Lock()

    def load_config(self, path):
        try:
            with open(path, "r") as f:
                self.config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            print(f"Config file not found at {path}, using defaults.", file=sys.stderr)
            self.config = dict(DEFAULT_CONFIG)

    def close(self) -> None:
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    def __enter__(self) -> "DevProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        with self._lock:
            # logged as received; EvmModule rejects malformed params
            self._log("rpc_request", method=method, params=params if params is not None else [])
            try:
                return self.evm.process_request(method, params)
            except RpcError as e:
                self._log("rpc_error", method=method, **e.to_dict())
                raise

    def _log(self, event: str, **extra) -> None:
        self.logger.log_event(
            time=self.node.clock(),
            source="provider",
            event=event,
            height=self.node.ledger.get_height(),
            extra=extra,
        )

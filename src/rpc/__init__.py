from .errors import RpcError, MethodNotFoundError, InvalidInputError, InvalidArgumentsError
from .evm import EvmModule
from .interface import NodeInterface
from .output import number_to_rpc_quantity, rpc_quantity_to_number

__all__ = [
    "RpcError",
    "MethodNotFoundError",
    "InvalidInputError",
    "InvalidArgumentsError",
    "EvmModule",
    "NodeInterface",
    "number_to_rpc_quantity",
    "rpc_quantity_to_number",
]

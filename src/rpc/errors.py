"""
Lỗi RPC trả về cho client. Mỗi lỗi mang một JSON-RPC error code.
"""

from typing import Any, Dict


class RpcError(Exception):
    """Raised when an RPC request cannot be satisfied."""

    code = -32603

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class MethodNotFoundError(RpcError):
    code = -32601


class InvalidInputError(RpcError):
    """Bad parameter values or a violated block/timestamp ordering rule."""

    code = -32000


class InvalidArgumentsError(InvalidInputError):
    """Wrong number of params, or a param of the wrong type."""

    code = -32602

"""
Decode tham số RPC (list các giá trị không có kiểu) thành giá trị có kiểu.

Mỗi decoder nhận một giá trị thô và trả về giá trị đã decode,
hoặc raise ValueError mô tả lỗi. validate_params kiểm tra số lượng
tham số và gói lỗi decode thành InvalidArgumentsError.
"""

import re
from typing import Any, Callable, List, Sequence, Tuple

from .errors import InvalidArgumentsError

Decoder = Callable[[Any], Any]

# Không cho phép số 0 ở đầu, giống quy ước QUANTITY của Ethereum JSON-RPC
_QUANTITY_RE = re.compile(r"^0x(?:0|[1-9a-fA-F][0-9a-fA-F]*)$")


def rpc_number(value: Any) -> int:
    # bool is a subclass of int
    if isinstance(value, bool):
        raise ValueError(f"Invalid value {value!r} supplied to : number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"Invalid value {value!r} supplied to : number")


def rpc_number_list(value: Any) -> Tuple[int, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid value {value!r} supplied to : Array<number>")
    decoded = []
    for index, item in enumerate(value):
        try:
            decoded.append(rpc_number(item))
        except ValueError as exc:
            raise ValueError(f"element {index}: {exc}") from exc
    return tuple(decoded)


def rpc_quantity(value: Any) -> int:
    if not isinstance(value, str) or not _QUANTITY_RE.match(value):
        raise ValueError(f"Invalid value {value!r} supplied to : QUANTITY")
    return int(value, 16)


def validate_params(
    method: str,
    params: Sequence[Any],
    *decoders: Decoder,
    optional: int = 0,
) -> List[Any]:
    """
    Kiểm tra số lượng và decode từng tham số theo vị trí.

    `optional` là số decoder cuối cùng có thể bị bỏ trống; chỉ các tham số
    thực sự được truyền mới được decode, phần còn lại để request type
    tự điền giá trị mặc định.
    """
    if not isinstance(params, (list, tuple)):
        raise InvalidArgumentsError(
            f"Invalid params for {method}: expected a list, got {type(params).__name__}"
        )

    expected = len(decoders)
    required = expected - optional

    if not decoders and params:
        raise InvalidArgumentsError(
            f"Invalid params for {method}: no argument was expected and got {len(params)}"
        )
    if optional == 0 and len(params) != expected:
        raise InvalidArgumentsError(
            f"Invalid params for {method}: expected exactly {expected} "
            f"arguments and got {len(params)}"
        )
    if len(params) > expected or len(params) < required:
        raise InvalidArgumentsError(
            f"Invalid params for {method}: expected between {required} and "
            f"{expected} arguments and got {len(params)}"
        )

    decoded = []
    for index, (decoder, param) in enumerate(zip(decoders, params)):
        try:
            decoded.append(decoder(param))
        except ValueError as exc:
            raise InvalidArgumentsError(
                f"Errors encountered in param {index} of {method}: {exc}"
            ) from exc
    return decoded

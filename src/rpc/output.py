def number_to_rpc_quantity(n: int) -> str:
    if n < 0:
        raise ValueError(f"Quantity can't be negative, got {n}")
    return hex(n)


def rpc_quantity_to_number(quantity: str) -> int:
    return int(quantity, 16)

"""
Node mô phỏng (DevNode) và provider nhận request evm_*
"""

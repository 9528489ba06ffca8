"""
Blocklayer module - Block, BlockHeader, Validation, and Ledger
"""

from .block import BlockHeader, Block, build_block, validate_block, GENESIS_PARENT_HASH
from .ledger import Ledger

__all__ = [
    "BlockHeader",
    "Block",
    "build_block",
    "validate_block",
    "GENESIS_PARENT_HASH",
    "Ledger",
]

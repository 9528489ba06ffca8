"""
Module Block - BlockHeader, Block, tạo block và validation cho dev chain
"""

from dataclasses import dataclass, asdict
from typing import Optional
import binascii

from core.crypto_layer import KeyPair, sign_struct, verify_struct, blake2b_hash
from core.encoding import canonical_json


GENESIS_PARENT_HASH = "0" * 64


@dataclass
class BlockHeader:
    """Block header chứa metadata, timestamp tính bằng giây (unix)"""
    height: int
    parent_hash: str
    timestamp: int
    miner_pubkey_hex: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Block:
    """Block rỗng (không có transaction): header và chữ ký header của miner"""
    header: BlockHeader
    header_signature: str
    pubkey: str
    context: str

    def block_hash(self) -> str:
        """Tính block hash từ header"""
        header_bytes = canonical_json(self.header.to_dict())
        return binascii.hexlify(blake2b_hash(header_bytes)).decode()

    def _signed_header_dict(self) -> dict:
        signed_header_dict = self.header.to_dict()
        signed_header_dict.update({
            "signature": self.header_signature,
            "pubkey": self.pubkey,
            "context": self.context
        })
        return signed_header_dict

    def verify_signature(self) -> bool:
        """Kiểm tra chữ ký header"""
        return verify_struct("HEADER:", self._signed_header_dict())


def build_block(
    parent_block: Optional[Block],
    timestamp: int,
    keypair: KeyPair
) -> Block:
    """
    Tạo block mới nối tiếp parent block, với timestamp cho trước.

    Args:
        parent_block: Block trước đó (None nếu là genesis block)
        timestamp: Timestamp của block mới (giây)
        keypair: Keypair của miner để ký header

    Returns:
        Block mới với header đã được miner ký
    """
    if parent_block is None:
        height = 0
        parent_hash = GENESIS_PARENT_HASH
    else:
        height = parent_block.header.height + 1
        parent_hash = parent_block.block_hash()

    header = BlockHeader(
        height=height,
        parent_hash=parent_hash,
        timestamp=int(timestamp),
        miner_pubkey_hex=keypair.pubkey()
    )

    signed_header = sign_struct("HEADER:", keypair, header.to_dict())

    return Block(
        header=header,
        header_signature=signed_header["signature"],
        pubkey=signed_header["pubkey"],
        context=signed_header["context"]
    )


def validate_block(block: Block, parent_block: Optional[Block]) -> bool:
    """
    Validate block bằng cách kiểm tra:
    1. Chữ ký header hợp lệ và miner khớp với pubkey
    2. Height đúng (parent_height + 1)
    3. Parent hash khớp
    4. Timestamp tăng nghiêm ngặt so với parent

    Returns:
        True nếu block hợp lệ, False nếu không
    """
    if not block.verify_signature():
        return False

    if block.header.miner_pubkey_hex != block.pubkey:
        return False

    if parent_block is None:
        return (
            block.header.height == 0
            and block.header.parent_hash == GENESIS_PARENT_HASH
        )

    if block.header.height != parent_block.header.height + 1:
        return False

    if block.header.parent_hash != parent_block.block_hash():
        return False

    if block.header.timestamp <= parent_block.header.timestamp:
        return False

    return True

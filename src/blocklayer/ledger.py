"""
Module Ledger - Quản lý blocks theo height, hỗ trợ cắt bớt khi revert snapshot
"""

from typing import List, Optional
from blocklayer.block import Block


class Ledger:
    """
    Ledger lưu trữ blocks theo index là height.
    Height luôn liên tục từ 0 (genesis) tới block mới nhất.
    """

    def __init__(self):
        self.blocks: dict[int, Block] = {}

    def add_block(self, block: Block) -> None:
        """
        Thêm block vào ledger. Block phải nối tiếp block mới nhất.
        """
        height = block.header.height
        if height != self.get_height() + 1:
            raise ValueError(
                f"Block height {height} does not extend ledger height {self.get_height()}"
            )
        self.blocks[height] = block

    def get_block(self, height: int) -> Optional[Block]:
        return self.blocks.get(height)

    def latest(self) -> Optional[Block]:
        """
        Lấy block mới nhất (head).

        Returns:
            Block ở height cao nhất, hoặc None nếu ledger rỗng
        """
        if not self.blocks:
            return None
        return self.blocks[self.get_height()]

    def get_height(self) -> int:
        """
        Returns:
            Block height cao nhất, hoặc -1 nếu ledger rỗng
        """
        if not self.blocks:
            return -1
        return max(self.blocks.keys())

    def truncate(self, height: int) -> int:
        """
        Xoá tất cả blocks có height > height. Trả về số block đã xoá.
        """
        removed = [h for h in self.blocks if h > height]
        for h in removed:
            del self.blocks[h]
        return len(removed)

    def blocks_in_order(self) -> List[Block]:
        return [self.blocks[h] for h in sorted(self.blocks.keys())]

# src/retro_6502/loader/dump.py
"""
バッファをアドレス付きの16進リストとして出力するデバッグ補助。
"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)

BYTES_PER_LINE = 16


# @intent:responsibility 指定範囲 [start, end] を1行16バイトの16進リストに整形します。
# 形式: "0x0000: 00 01 02 ... 0f "
def format_hex_dump(data: bytes, start: int = 0, end: Optional[int] = None) -> str:
    if end is None:
        end = len(data) - 1
    end = min(end, len(data) - 1)

    lines = []
    for addr in range(start, end + 1, BYTES_PER_LINE):
        row = data[addr:min(addr + BYTES_PER_LINE, end + 1)]
        hex_bytes = "".join(f"{b:02x} " for b in row)
        lines.append(f"0x{addr:04x}: {hex_bytes}")
    return "\n".join(lines) + ("\n" if lines else "")


# @intent:responsibility 16進リストをファイルへ書き出します。
def dump_to_file(data: bytes, path: str, start: int = 0, end: Optional[int] = None) -> None:
    with open(path, "w") as f:
        f.write(format_hex_dump(data, start, end))
    logger.info("Memory dumped to file: %s", path)

# src/retro_6502/loader/ines.py
"""
カートリッジ (iNES形式) ローダーモジュール。

ファイルレイアウト:
    0x0-0x3  magic ("NES" + 0x1A)
    0x4      16KiB PRG-ROMバンク数
    0x5      8KiB CHR-ROMバンク数
    0x6      Control 1: bit0=ミラーリング, bit1=バッテリー, bit2=トレーナー, bit3=4画面, bit4-7=マッパー下位
    0x7      Control 2: bit0-3=予約, bit4-7=マッパー上位
    0x8      8KiB RAMバンク数 (0の場合は互換性のため1とみなす)
    0x9-0xF  予約 (0)
ヘッダの後に512バイトのトレーナー（存在する場合）、PRGデータ、CHRデータが続く。

ロードはアドレス空間に一切書き込まない。マッピングは loader.mapper が別途行うため、
ロードに失敗してもアドレス空間が部分的に書き換わることはない。
"""
import logging
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from retro_6502.errors import ImageIOError, InvalidHeaderError, TruncatedImageError

logger = logging.getLogger(__name__)

INES_MAGIC = b"NES\x1a"
HEADER_SIZE = 16
TRAINER_SIZE = 512
PRG_BANK_SIZE = 16 * 1024
CHR_BANK_SIZE = 8 * 1024

_HEADER_STRUCT = struct.Struct("<4sBBBBB7s")


class Mirroring(Enum):
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"
    FOUR_SCREEN = "FOUR_SCREEN"


# @intent:responsibility 16バイト固定長ヘッダの内容を保持します。
@dataclass(frozen=True)
class Header:
    magic: bytes
    prg_banks: int
    chr_banks: int
    control1: int
    control2: int
    ram_banks_raw: int
    reserved: bytes

    # @intent:responsibility バイト列からヘッダを復元します。
    @classmethod
    def from_bytes(cls, data: bytes) -> "Header":
        if len(data) < HEADER_SIZE:
            raise TruncatedImageError("header", HEADER_SIZE, len(data))
        return cls(*_HEADER_STRUCT.unpack(data[:HEADER_SIZE]))

    def to_bytes(self) -> bytes:
        return _HEADER_STRUCT.pack(self.magic, self.prg_banks, self.chr_banks,
                                   self.control1, self.control2, self.ram_banks_raw, self.reserved)

    @property
    def has_valid_magic(self) -> bool:
        return self.magic == INES_MAGIC

    @property
    def has_trainer(self) -> bool:
        return bool(self.control1 & 0b00000100)

    @property
    def has_battery(self) -> bool:
        return bool(self.control1 & 0b00000010)

    @property
    def four_screen(self) -> bool:
        return bool(self.control1 & 0b00001000)

    @property
    def mirroring(self) -> Mirroring:
        # bit3 overrides bit0
        if self.four_screen:
            return Mirroring.FOUR_SCREEN
        return Mirroring.VERTICAL if self.control1 & 0b00000001 else Mirroring.HORIZONTAL

    @property
    def mapper(self) -> int:
        return (self.control2 & 0xF0) | (self.control1 >> 4)

    @property
    def ram_banks(self) -> int:
        return self.ram_banks_raw or 1

    @property
    def prg_size(self) -> int:
        return self.prg_banks * PRG_BANK_SIZE

    @property
    def chr_size(self) -> int:
        return self.chr_banks * CHR_BANK_SIZE


# @intent:responsibility ロード済みのカートリッジイメージ。
@dataclass(frozen=True)
class LoadedImage:
    header: Header
    trainer: Optional[bytes]
    prg: bytes
    chr: bytes
    path: Optional[str] = None


# @intent:responsibility iNES形式のイメージを解析し、PRG/CHRバッファを取り出すローダー。
class CartridgeLoader:
    """
    strict=True の場合、マジックナンバーが不正なイメージは InvalidHeaderError になります。
    strict=False の場合はマジックナンバーを記録するのみで、警告ログを出して続行します。
    """
    def __init__(self, strict: bool = True):
        self.strict = strict

    # @intent:responsibility ファイルを開いてイメージ全体を読み込み、解析します。
    def load(self, path: str) -> LoadedImage:
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise ImageIOError(e.errno, f"Unable to open image file: {path}", str(path)) from e

        image = self.parse(data, path=str(path))
        logger.info("Image loaded: %s (%d bytes, PRG=%d, CHR=%d, mapper=%d)",
                    path, len(data), len(image.prg), len(image.chr), image.header.mapper)
        return image

    # @intent:responsibility メモリ上のイメージを解析します。
    # @intent:post-condition 宣言されたセクションが不足していれば TruncatedImageError。
    def parse(self, data: bytes, path: Optional[str] = None) -> LoadedImage:
        header = Header.from_bytes(data)

        if not header.has_valid_magic:
            if self.strict:
                raise InvalidHeaderError(f"Bad iNES magic number: {header.magic!r}")
            logger.warning("Unexpected magic number %r; continuing", header.magic)
        if any(header.reserved):
            logger.warning("Reserved header bytes are not zero: %s", header.reserved.hex())

        offset = HEADER_SIZE
        trainer = None
        if header.has_trainer:
            logger.info("Reading trainer")
            trainer = self._read_section(data, offset, TRAINER_SIZE, "trainer")
            offset += TRAINER_SIZE

        prg = self._read_section(data, offset, header.prg_size, "PRG")
        offset += header.prg_size

        chr_data = self._read_section(data, offset, header.chr_size, "CHR")

        return LoadedImage(header=header, trainer=trainer, prg=prg, chr=chr_data, path=path)

    def _read_section(self, data: bytes, offset: int, size: int, section: str) -> bytes:
        chunk = data[offset:offset + size]
        if len(chunk) < size:
            raise TruncatedImageError(section, size, len(chunk))
        return bytes(chunk)

# tests/loader/conftest.py
import pytest

from retro_6502.loader.ines import INES_MAGIC, PRG_BANK_SIZE, CHR_BANK_SIZE, TRAINER_SIZE


def build_image(prg_banks=1, chr_banks=1, control1=0x00, control2=0x00, ram_banks=0,
                magic=INES_MAGIC, trainer=False, truncate=0):
    """
    テスト用のiNESイメージを組み立てる。PRG/CHRは位置ごとに異なるパターンで埋める。
    戻り値: (data, trainer_bytes, prg_bytes, chr_bytes)
    """
    if trainer:
        control1 |= 0x04
    header = magic + bytes([prg_banks, chr_banks, control1, control2, ram_banks]) + bytes(7)
    trainer_bytes = bytes((i * 3) & 0xFF for i in range(TRAINER_SIZE)) if trainer else b""
    prg = bytes((i + (i >> 8)) & 0xFF for i in range(prg_banks * PRG_BANK_SIZE))
    chr_data = bytes((i * 5 + 1) & 0xFF for i in range(chr_banks * CHR_BANK_SIZE))
    data = header + trainer_bytes + prg + chr_data
    if truncate:
        data = data[:-truncate]
    return data, trainer_bytes, prg, chr_data


@pytest.fixture
def image_file(tmp_path):
    def _write(name="game.nes", **kwargs):
        data, trainer, prg, chr_data = build_image(**kwargs)
        path = tmp_path / name
        path.write_bytes(data)
        return str(path), trainer, prg, chr_data
    return _write


@pytest.fixture
def make_image():
    return build_image

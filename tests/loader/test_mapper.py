# tests/loader/test_mapper.py
import pytest

from retro_6502.config.models import CartridgeMapping
from retro_6502.loader.ines import CartridgeLoader
from retro_6502.loader.mapper import map_image
from retro_6502.transport.address_space import AddressSpace


@pytest.fixture
def load_image(make_image):
    def _load(**kwargs):
        data, _, _, _ = make_image(**kwargs)
        return CartridgeLoader().parse(data)
    return _load


# @intent:test_case 16KiBのPRGは$8000と$C000の両方に見える（NROM-128）。
def test_single_bank_is_mirrored(load_image):
    image = load_image(prg_banks=1)
    space = AddressSpace()

    map_image(image, space, CartridgeMapping())

    assert space.dump(0x8000, 0x4000) == image.prg
    assert space.dump(0xC000, 0x4000) == image.prg


def test_reset_vector_comes_from_prg(make_image):
    data, _, _, _ = make_image(prg_banks=1)
    prg = bytearray(data[16:16 + 0x4000])
    prg[0x3FFC] = 0x00
    prg[0x3FFD] = 0x80
    image = CartridgeLoader().parse(data[:16] + bytes(prg) + data[16 + 0x4000:])
    space = AddressSpace()

    map_image(image, space, CartridgeMapping())

    assert space.reset_vector == 0x8000


def test_two_banks_fill_window(load_image):
    image = load_image(prg_banks=2)
    space = AddressSpace()

    map_image(image, space, CartridgeMapping())

    assert space.dump(0x8000, 0x8000) == image.prg


def test_without_mirroring_only_one_copy(load_image):
    image = load_image(prg_banks=1)
    space = AddressSpace(reset_vector=0x0000)
    mapping = CartridgeMapping(prg_base=0x8000, prg_window=0x8000, mirror_prg=False)

    map_image(image, space, mapping)

    assert space.dump(0x8000, 0x4000) == image.prg
    assert space.dump(0xC000, 0x4000) == bytes(0x4000)


def test_prg_larger_than_window_is_truncated(load_image, caplog):
    image = load_image(prg_banks=2)
    space = AddressSpace(reset_vector=0x0000)
    mapping = CartridgeMapping(prg_base=0x8000, prg_window=0x4000, mirror_prg=False)

    map_image(image, space, mapping)

    assert space.dump(0x8000, 0x4000) == image.prg[:0x4000]
    assert space.dump(0xC000, 0x4000) == bytes(0x4000)
    assert "truncating" in caplog.text


def test_trainer_is_mapped(load_image):
    image = load_image(trainer=True)
    space = AddressSpace()

    map_image(image, space, CartridgeMapping(trainer_base=0x7000, map_trainer=True))

    assert space.dump(0x7000, 512) == image.trainer


def test_trainer_can_be_skipped(load_image):
    image = load_image(trainer=True)
    space = AddressSpace()

    map_image(image, space, CartridgeMapping(map_trainer=False))

    assert space.dump(0x7000, 512) == bytes(512)


def test_chr_is_not_mapped(load_image):
    image = load_image(prg_banks=1, chr_banks=1)
    space = AddressSpace(reset_vector=0x0000)
    mapping = CartridgeMapping(prg_base=0x8000, prg_window=0x4000, mirror_prg=False)

    map_image(image, space, mapping)

    assert space.dump(0x0000, 0x8000) == bytes(0x8000)
    assert space.dump(0xC000, 0x4000) == bytes(0x4000)

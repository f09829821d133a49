# tests/transport/test_address_space.py
import random

import pytest

from retro_6502.transport.address_space import (
    ADDRESS_SPACE_SIZE,
    DEFAULT_RESET_VECTOR,
    AddressSpace,
    BusAccess,
    BusAccessType,
)


@pytest.fixture
def space():
    return AddressSpace()


def test_size(space):
    assert space.get_size() == ADDRESS_SPACE_SIZE == 65536


def test_initial_contents(space):
    assert space.peek(0x0000) == 0
    assert space.peek(0x8000) == 0
    assert space.peek(0xFFFC) == 0xE2
    assert space.peek(0xFFFD) == 0xFC
    assert space.reset_vector == DEFAULT_RESET_VECTOR == 0xFCE2


def test_custom_reset_vector():
    space = AddressSpace(reset_vector=0x8000)
    assert space.peek(0xFFFC) == 0x00
    assert space.peek(0xFFFD) == 0x80
    space.reset_vector = 0xC123
    assert space.peek(0xFFFC) == 0x23
    assert space.peek(0xFFFD) == 0xC1


# @intent:test_case 任意のアドレスへの書き込みが直後の読み出しで返ること。
@pytest.mark.parametrize("address", [0x0000, 0x00FF, 0x0100, 0x7FFF, 0x8000, 0xFFFF]
                         + random.Random(42).sample(range(0x10000), 10))
def test_write_then_read(space, address):
    value = (address * 7 + 3) & 0xFF
    space.write(address, value)
    assert space.read(address) == value


def test_address_wraps_modulo_64k(space):
    space.write(0x10005, 0xAB)
    assert space.read(0x0005) == 0xAB
    assert space.read(0x10005) == 0xAB
    assert space.read(-1) == space.read(0xFFFF)


def test_write_masks_value(space):
    space.write(0x0010, 0x1FF)
    assert space.read(0x0010) == 0xFF


def test_activity_log(space):
    space.write(0x1234, 0x56)
    space.read(0x1234)
    space.peek(0x1234)

    log = space.get_and_clear_activity_log()

    assert log == [
        BusAccess(0x1234, 0x56, BusAccessType.WRITE),
        BusAccess(0x1234, 0x56, BusAccessType.READ),
    ]
    assert space.get_and_clear_activity_log() == []


def test_load_is_not_logged(space):
    space.load(0x8000, b"\x01\x02\x03")
    assert space.dump(0x8000, 3) == b"\x01\x02\x03"
    assert space.get_and_clear_activity_log() == []


def test_load_wraps_past_end(space):
    space.load(0xFFFE, [0xAA, 0xBB, 0xCC, 0xDD])
    assert space.peek(0xFFFE) == 0xAA
    assert space.peek(0xFFFF) == 0xBB
    assert space.peek(0x0000) == 0xCC
    assert space.peek(0x0001) == 0xDD


def test_load_overwrites_reset_vector(space):
    space.load(0xFFFC, [0x00, 0xC0])
    assert space.reset_vector == 0xC000

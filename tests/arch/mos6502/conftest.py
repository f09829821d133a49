# tests/arch/mos6502/conftest.py
import pytest

from retro_6502.transport.address_space import AddressSpace
from retro_6502.arch.mos6502.cpu import Mos6502Cpu


@pytest.fixture
def space():
    return AddressSpace()


@pytest.fixture
def cpu(space):
    cpu = Mos6502Cpu(space)
    cpu.reset()
    return cpu


# @intent:utility_function プログラムを配置し、PCをその先頭に設定するヘルパー。
@pytest.fixture
def program(cpu, space):
    def _load(code, origin=0x0200):
        space.load(origin, code)
        cpu.set_state(pc=origin)
        return cpu
    return _load

# src/retro_6502/arch/mos6502/instructions/load.py
"""
MOS 6502 転送系命令 (Load/Store/Transfer)。
"""
from retro_6502.transport.address_space import Device
from retro_6502.arch.mos6502.state import Mos6502CpuState
from retro_6502.arch.mos6502.instructions.base import AddressingResult


# @intent:responsibility フラグ更新ヘルパー (N, Z)
def update_nz(state: Mos6502CpuState, value: int) -> Mos6502CpuState:
    return state.update_flags(n=(value & 0x80) != 0, z=(value == 0))


# @intent:responsibility オペランド値を取得する。Immediateなら値そのもの、それ以外は実効アドレスから読む。
def read_operand(bus: Device, addr_res: AddressingResult) -> int:
    if addr_res.value is not None:
        return addr_res.value
    return bus.read(addr_res.address)


# --- LDA / LDX / LDY ---
# @intent:responsibility メモリからレジスタへロードし、N, Zフラグを更新。
def lda(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = read_operand(bus, addr_res)
    return update_nz(state.replace(a=val), val)


def ldx(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = read_operand(bus, addr_res)
    return update_nz(state.replace(x=val), val)


def ldy(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = read_operand(bus, addr_res)
    return update_nz(state.replace(y=val), val)


# --- STA / STX / STY ---
# @intent:responsibility レジスタの内容をメモリへストア。フラグ変化なし。
def sta(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    bus.write(addr_res.address, state.a)
    return state


def stx(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    bus.write(addr_res.address, state.x)
    return state


def sty(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    bus.write(addr_res.address, state.y)
    return state


# --- Register Transfers (TAX, TAY, TXA, TYA, TSX, TXS) ---

def tax(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return update_nz(state.replace(x=state.a), state.a)


def tay(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return update_nz(state.replace(y=state.a), state.a)


def txa(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return update_nz(state.replace(a=state.x), state.x)


def tya(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return update_nz(state.replace(a=state.y), state.y)


def tsx(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = state.sp & 0xFF
    return update_nz(state.replace(x=val), val)


# @intent:note TXSはN, Zフラグを更新 *しない*。
def txs(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.replace(sp=state.x)

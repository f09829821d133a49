# src/retro_6502/arch/mos6502/instructions/alu.py
"""
MOS 6502 算術論理演算命令 (ALU)。
NMOS 6502のBCDモードを含む。BCDを持たない派生CPU向けにバイナリ専用のADC/SBCも提供する。
"""
from retro_6502.transport.address_space import Device
from retro_6502.arch.mos6502.state import Mos6502CpuState
from retro_6502.arch.mos6502.instructions.base import AddressingResult
from retro_6502.arch.mos6502.instructions.load import read_operand, update_nz


# --- Logical Operations (AND, ORA, EOR, BIT) ---

def and_(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = state.a & read_operand(bus, addr_res)
    return update_nz(state.replace(a=res), res)


def ora(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = state.a | read_operand(bus, addr_res)
    return update_nz(state.replace(a=res), res)


def eor(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = state.a ^ read_operand(bus, addr_res)
    return update_nz(state.replace(a=res), res)


# @intent:note BIT命令はメモリの値のビット6, 7をそれぞれV, Nフラグにコピーし、A & Mの結果でZフラグを設定する。
def bit(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = read_operand(bus, addr_res)
    return state.update_flags(z=(state.a & val) == 0, v=(val & 0x40) != 0, n=(val & 0x80) != 0)


# --- Arithmetic Operations (ADC, SBC) ---

# @intent:responsibility 標準バイナリ加算ロジック
def _adc_binary(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    c = 1 if state.flag_c else 0

    res_wide = a + val + c
    res = res_wide & 0xFF
    # V: 両オペランドの符号が同じで、結果の符号が異なる場合にセット
    v = (~(a ^ val) & (a ^ res) & 0x80) != 0

    return state.replace(a=res).update_flags(c=res_wide > 0xFF, z=(res == 0), n=(res & 0x80) != 0, v=v)


# @intent:responsibility NMOS 6502のBCD加算。
# @intent:note Zはバイナリ加算結果から、N, Vは上位桁補正前の中間値から決まる（NMOSの挙動）。
def _adc_bcd(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    c = 1 if state.flag_c else 0

    lo = (a & 0x0F) + (val & 0x0F) + c
    if lo > 9:
        lo += 6
    hi = (a >> 4) + (val >> 4) + (1 if lo > 0x0F else 0)

    binary = (a + val + c) & 0xFF
    intermediate = ((hi << 4) | (lo & 0x0F)) & 0xFF
    n = (intermediate & 0x80) != 0
    v = (~(a ^ val) & (a ^ intermediate) & 0x80) != 0

    if hi > 9:
        hi += 6
    c_out = hi > 0x0F
    res = ((hi << 4) | (lo & 0x0F)) & 0xFF

    return state.replace(a=res).update_flags(c=c_out, z=(binary == 0), n=n, v=v)


# @intent:responsibility NMOS 6502のBCD減算。フラグはバイナリ減算と同一。
def _sbc_bcd(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    c = 1 if state.flag_c else 0

    lo = (a & 0x0F) - (val & 0x0F) + c - 1
    if lo < 0:
        lo = ((lo - 0x06) & 0x0F) - 0x10
    res = (a & 0xF0) - (val & 0xF0) + lo
    if res < 0:
        res -= 0x60

    flags_state = _adc_binary(state, val ^ 0xFF)
    return flags_state.replace(a=res & 0xFF)


def adc(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = read_operand(bus, addr_res)
    if state.flag_d:
        return _adc_bcd(state, val)
    return _adc_binary(state, val)


# SBC A, M => ADC A, ~M
def sbc(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    val = read_operand(bus, addr_res)
    if state.flag_d:
        return _sbc_bcd(state, val)
    return _adc_binary(state, val ^ 0xFF)


# @intent:responsibility Dフラグを無視するADC/SBC（2A03など、BCD回路を持たない構成用）。
def adc_binary(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _adc_binary(state, read_operand(bus, addr_res))


def sbc_binary(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _adc_binary(state, read_operand(bus, addr_res) ^ 0xFF)


# --- Compare Operations (CMP, CPX, CPY) ---
# C is set if Reg >= Val (No borrow).

def _compare(state: Mos6502CpuState, reg_val: int, mem_val: int) -> Mos6502CpuState:
    diff = reg_val - mem_val
    res = diff & 0xFF
    return state.update_flags(c=diff >= 0, z=(res == 0), n=(res & 0x80) != 0)


def cmp(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _compare(state, state.a, read_operand(bus, addr_res))


def cpx(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _compare(state, state.x, read_operand(bus, addr_res))


def cpy(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _compare(state, state.y, read_operand(bus, addr_res))


# --- Shift / Rotate Operations (ASL, LSR, ROL, ROR) ---
# @intent:note Accumulatorモード (address is None) またはメモリモード。

def _shift(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult, op) -> Mos6502CpuState:
    is_acc = addr_res.address is None
    val = state.a if is_acc else bus.read(addr_res.address)

    res, carry = op(val, 1 if state.flag_c else 0)
    new_state = state.update_flags(c=carry, z=(res == 0), n=(res & 0x80) != 0)

    if is_acc:
        return new_state.replace(a=res)
    bus.write(addr_res.address, res)
    return new_state


def asl(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _shift(state, bus, addr_res, lambda v, c: ((v << 1) & 0xFF, (v & 0x80) != 0))


# N is always 0 for LSR
def lsr(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _shift(state, bus, addr_res, lambda v, c: (v >> 1, (v & 0x01) != 0))


def rol(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _shift(state, bus, addr_res, lambda v, c: (((v << 1) | c) & 0xFF, (v & 0x80) != 0))


def ror(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _shift(state, bus, addr_res, lambda v, c: ((v >> 1) | (c << 7), (v & 0x01) != 0))


# --- Increment / Decrement (INC, DEC, INX, DEX, INY, DEY) ---

def inc(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = (bus.read(addr_res.address) + 1) & 0xFF
    bus.write(addr_res.address, res)
    return update_nz(state, res)


def dec(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = (bus.read(addr_res.address) - 1) & 0xFF
    bus.write(addr_res.address, res)
    return update_nz(state, res)


def inx(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = (state.x + 1) & 0xFF
    return update_nz(state.replace(x=res), res)


def dex(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = (state.x - 1) & 0xFF
    return update_nz(state.replace(x=res), res)


def iny(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = (state.y + 1) & 0xFF
    return update_nz(state.replace(y=res), res)


def dey(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    res = (state.y - 1) & 0xFF
    return update_nz(state.replace(y=res), res)

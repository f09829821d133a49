# src/retro_6502/arch/mos6502/instructions/control.py
"""
MOS 6502 制御系命令 (Branch, Jump, Stack, Flags, NOP)。

実行関数に渡される state.pc は、既に命令長分進められた「次の命令の先頭」を指す。
"""
from typing import Callable, Dict, Tuple

from retro_6502.transport.address_space import Device
from retro_6502.arch.mos6502.state import Mos6502CpuState
from retro_6502.arch.mos6502.instructions.base import AddressingResult, is_page_crossed
from retro_6502.arch.mos6502.instructions.load import update_nz

STACK_PAGE = 0x0100
IRQ_VECTOR = 0xFFFE


# --- Stack helpers ---

def _push(state: Mos6502CpuState, bus: Device, value: int) -> Mos6502CpuState:
    bus.write(STACK_PAGE | state.sp, value & 0xFF)
    return state.replace(sp=(state.sp - 1) & 0xFF)


def _pull(state: Mos6502CpuState, bus: Device) -> Tuple[Mos6502CpuState, int]:
    sp = (state.sp + 1) & 0xFF
    return state.replace(sp=sp), bus.read(STACK_PAGE | sp)


def _push_word(state: Mos6502CpuState, bus: Device, value: int) -> Mos6502CpuState:
    # Push Hi, then Lo
    state = _push(state, bus, value >> 8)
    return _push(state, bus, value)


def _pull_word(state: Mos6502CpuState, bus: Device) -> Tuple[Mos6502CpuState, int]:
    state, lo = _pull(state, bus)
    state, hi = _pull(state, bus)
    return state, (hi << 8) | lo


# --- Branch Instructions ---

BRANCH_CONDITIONS: Dict[str, Callable[[Mos6502CpuState], bool]] = {
    "BCC": lambda s: not s.flag_c,
    "BCS": lambda s: s.flag_c,
    "BEQ": lambda s: s.flag_z,
    "BNE": lambda s: not s.flag_z,
    "BMI": lambda s: s.flag_n,
    "BPL": lambda s: not s.flag_n,
    "BVC": lambda s: not s.flag_v,
    "BVS": lambda s: s.flag_v,
}


# @intent:responsibility 分岐命令の追加サイクルを計算する。
# @intent:note 成立で+1、分岐先が次の命令と異なるページなら更に+1。不成立は0。
def branch_cycles(mnemonic: str, state: Mos6502CpuState, addr_res: AddressingResult) -> int:
    if not BRANCH_CONDITIONS[mnemonic](state):
        return 0
    return 2 if is_page_crossed(state.pc, addr_res.address) else 1


def _branch(state: Mos6502CpuState, addr_res: AddressingResult, condition: bool) -> Mos6502CpuState:
    # 不成立時は何もしない（PCは既に次の命令を指している）
    if condition:
        return state.replace(pc=addr_res.address)
    return state


def bcc(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BCC"](state))


def bcs(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BCS"](state))


def beq(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BEQ"](state))


def bne(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BNE"](state))


def bmi(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BMI"](state))


def bpl(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BPL"](state))


def bvc(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BVC"](state))


def bvs(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _branch(state, addr_res, BRANCH_CONDITIONS["BVS"](state))


# --- Jump Instructions ---

def jmp(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.replace(pc=addr_res.address)


# @intent:note スタックに積むのは「JSR命令の最後のバイトのアドレス」、つまり現在のPC - 1。
def jsr(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    state = _push_word(state, bus, (state.pc - 1) & 0xFFFF)
    return state.replace(pc=addr_res.address)


# Pulled address is the last byte of JSR, so +1 to reach the next opcode.
def rts(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    state, ret_addr = _pull_word(state, bus)
    return state.replace(pc=(ret_addr + 1) & 0xFFFF)


# --- Stack Operations (PHA, PHP, PLA, PLP) ---

def pha(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _push(state, bus, state.a)


# PHP pushes status with Break(B) and Reserved(R) set to 1.
def php(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return _push(state, bus, state.status_byte(brk=True))


def pla(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    state, val = _pull(state, bus)
    return update_nz(state.replace(a=val), val)


# @intent:note Bフラグはスタック上にのみ存在するため破棄し、Reservedビットは1に保つ。
def plp(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    state, val = _pull(state, bus)
    return state.replace(p=(val & ~state.B_FLAG) | state.R_FLAG)


# --- Flag Operations ---

def clc(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(c=False)


def sec(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(c=True)


def cli(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(i=False)


def sei(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(i=True)


def clv(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(v=False)


def cld(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(d=False)


def sed(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state.update_flags(d=True)


# --- System / Other ---

def nop(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    return state


# @intent:note BRKは1バイト命令だがパディングバイトを読み飛ばすため、戻りアドレスは命令先頭 + 2。
def brk(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    state = _push_word(state, bus, (state.pc + 1) & 0xFFFF)
    state = _push(state, bus, state.status_byte(brk=True))

    vec_lo = bus.read(IRQ_VECTOR)
    vec_hi = bus.read(IRQ_VECTOR + 1)
    return state.update_flags(i=True).replace(pc=(vec_hi << 8) | vec_lo)


def rti(state: Mos6502CpuState, bus: Device, addr_res: AddressingResult) -> Mos6502CpuState:
    state, p_val = _pull(state, bus)
    state, ret_addr = _pull_word(state, bus)
    return state.replace(p=(p_val & ~state.B_FLAG) | state.R_FLAG, pc=ret_addr)

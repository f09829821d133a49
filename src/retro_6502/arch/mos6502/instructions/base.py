# src/retro_6502/arch/mos6502/instructions/base.py
"""
MOS 6502 アドレッシングモード解決ロジック。

各関数は命令先頭アドレス `pc` を受け取り、オペランドを解決します。
"""
from typing import List, NamedTuple, Optional

from retro_6502.transport.address_space import Device
from retro_6502.arch.mos6502.state import Mos6502CpuState


# @intent:responsibility アドレッシングモードの解決結果。
class AddressingResult(NamedTuple):
    address: Optional[int]  # 実効アドレス (Immediate/Impliedの場合はNone)
    value: Optional[int]  # Immediateの場合の値
    page_crossed: bool  # インデックス加算でページ境界を越えたか
    operand_str: str  # 逆アセンブリ用のオペランド文字列
    operand_bytes: List[int]  # オペランドとしてフェッチされたバイト列


# @intent:responsibility ページ境界交差判定。
def is_page_crossed(addr1: int, addr2: int) -> bool:
    return (addr1 & 0xFF00) != (addr2 & 0xFF00)


def _read_word(bus: Device, addr: int) -> int:
    lo = bus.read(addr & 0xFFFF)
    hi = bus.read((addr + 1) & 0xFFFF)
    return (hi << 8) | lo


# --- Addressing Modes ---

def addr_implied(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    return AddressingResult(None, None, False, "", [])


# @intent:note シフト/ローテート命令のAレジスタ対象モード。
def addr_accumulator(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    return AddressingResult(None, None, False, "A", [])


# Immediate (#$xx)
def addr_immediate(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    val = bus.read((pc + 1) & 0xFFFF)
    return AddressingResult(None, val, False, f"#${val:02X}", [val])


# Zero Page ($xx)
def addr_zeropage(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    addr = bus.read((pc + 1) & 0xFFFF)
    return AddressingResult(addr, None, False, f"${addr:02X}", [addr])


# @intent:note ゼロページ内でラップアラウンド (0xFF + 1 -> 0x00)
def addr_zeropage_x(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    base = bus.read((pc + 1) & 0xFFFF)
    addr = (base + state.x) & 0xFF
    return AddressingResult(addr, None, False, f"${base:02X},X", [base])


# @intent:note LDX, STX 専用。ラップアラウンドあり。
def addr_zeropage_y(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    base = bus.read((pc + 1) & 0xFFFF)
    addr = (base + state.y) & 0xFF
    return AddressingResult(addr, None, False, f"${base:02X},Y", [base])


# Absolute ($xxxx)
def addr_absolute(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    lo = bus.read((pc + 1) & 0xFFFF)
    hi = bus.read((pc + 2) & 0xFFFF)
    addr = (hi << 8) | lo
    return AddressingResult(addr, None, False, f"${addr:04X}", [lo, hi])


# @intent:note ページ交差の有無のみを返す。追加サイクルを課すかは命令テーブル側で決定する。
def addr_absolute_x(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    lo = bus.read((pc + 1) & 0xFFFF)
    hi = bus.read((pc + 2) & 0xFFFF)
    base_addr = (hi << 8) | lo
    addr = (base_addr + state.x) & 0xFFFF
    return AddressingResult(addr, None, is_page_crossed(base_addr, addr), f"${base_addr:04X},X", [lo, hi])


def addr_absolute_y(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    lo = bus.read((pc + 1) & 0xFFFF)
    hi = bus.read((pc + 2) & 0xFFFF)
    base_addr = (hi << 8) | lo
    addr = (base_addr + state.y) & 0xFFFF
    return AddressingResult(addr, None, is_page_crossed(base_addr, addr), f"${base_addr:04X},Y", [lo, hi])


# @intent:responsibility Indirect ($xxxx) - JMP専用
# @intent:note 実機のページ境界バグを再現する: ポインタ下位が$FFの場合、上位バイトは同じページの$xx00から読む。
def addr_indirect(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    ptr_lo = bus.read((pc + 1) & 0xFFFF)
    ptr_hi = bus.read((pc + 2) & 0xFFFF)
    ptr = (ptr_hi << 8) | ptr_lo

    eff_lo = bus.read(ptr)
    if ptr_lo == 0xFF:
        eff_hi = bus.read(ptr & 0xFF00)
    else:
        eff_hi = bus.read(ptr + 1)

    addr = (eff_hi << 8) | eff_lo
    return AddressingResult(addr, None, False, f"(${ptr:04X})", [ptr_lo, ptr_hi])


# @intent:responsibility Indexed Indirect ($xx,X) - "Pre-indexed"
# @intent:note ゼロページ内でXを加算(ラップアラウンド)し、そこにあるポインタを読む。
def addr_indexed_indirect(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    base = bus.read((pc + 1) & 0xFFFF)
    ptr_addr = (base + state.x) & 0xFF

    lo = bus.read(ptr_addr)
    hi = bus.read((ptr_addr + 1) & 0xFF)

    addr = (hi << 8) | lo
    return AddressingResult(addr, None, False, f"(${base:02X},X)", [base])


# @intent:responsibility Indirect Indexed ($xx),Y - "Post-indexed"
# @intent:note ゼロページのポインタを読み、ベースアドレスを得てからYを加算。
def addr_indirect_indexed(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    ptr_addr = bus.read((pc + 1) & 0xFFFF)

    lo = bus.read(ptr_addr)
    hi = bus.read((ptr_addr + 1) & 0xFF)
    base_addr = (hi << 8) | lo

    addr = (base_addr + state.y) & 0xFFFF
    return AddressingResult(addr, None, is_page_crossed(base_addr, addr), f"(${ptr_addr:02X}),Y", [ptr_addr])


# @intent:responsibility Relative (Branch)
# @intent:note 戻り値のアドレスは分岐先の絶対アドレス。基点は次の命令の先頭 (PC + 2)。
def addr_relative(pc: int, bus: Device, state: Mos6502CpuState) -> AddressingResult:
    offset = bus.read((pc + 1) & 0xFFFF)
    displacement = offset - 0x100 if offset >= 0x80 else offset

    dest_addr = (pc + 2 + displacement) & 0xFFFF
    return AddressingResult(dest_addr, None, False, f"${dest_addr:04X}", [offset])

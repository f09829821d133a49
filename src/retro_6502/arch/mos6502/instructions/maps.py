# src/retro_6502/arch/mos6502/instructions/maps.py
"""
MOS 6502 命令マップとデコード/実行ロジック。

デコードは256エントリの網羅的なテーブルで行う。空のエントリ (None) が未実装オペコードであり、
オペコードを追加してもフォールスルーで黙って無視されることはない。
"""
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from retro_6502.transport.address_space import Device
from retro_6502.core.snapshot import Operation
from retro_6502.arch.mos6502.state import Mos6502CpuState
from retro_6502.arch.mos6502.instructions import base, load, alu, control

# Addressing Mode Function Type
AddrFunc = Callable[[int, Device, Mos6502CpuState], base.AddressingResult]
# Execution Function Type
ExecFunc = Callable[[Mos6502CpuState, Device, base.AddressingResult], Mos6502CpuState]


# @intent:data_structure オペコード1つ分の定義。
# page_penalty: インデックス加算でページを跨いだ場合に+1サイクルするか（読み出し系のみTrue）。
class OpcodeEntry(NamedTuple):
    mnemonic: str
    addr_func: AddrFunc
    exec_func: ExecFunc
    base_cycles: int
    page_penalty: bool = False


OPCODE_MAP: Dict[int, OpcodeEntry] = {
    # --- Load/Store/Transfer ---
    0xA9: OpcodeEntry("LDA", base.addr_immediate, load.lda, 2),
    0xA5: OpcodeEntry("LDA", base.addr_zeropage, load.lda, 3),
    0xB5: OpcodeEntry("LDA", base.addr_zeropage_x, load.lda, 4),
    0xAD: OpcodeEntry("LDA", base.addr_absolute, load.lda, 4),
    0xBD: OpcodeEntry("LDA", base.addr_absolute_x, load.lda, 4, True),
    0xB9: OpcodeEntry("LDA", base.addr_absolute_y, load.lda, 4, True),
    0xA1: OpcodeEntry("LDA", base.addr_indexed_indirect, load.lda, 6),
    0xB1: OpcodeEntry("LDA", base.addr_indirect_indexed, load.lda, 5, True),

    0xA2: OpcodeEntry("LDX", base.addr_immediate, load.ldx, 2),
    0xA6: OpcodeEntry("LDX", base.addr_zeropage, load.ldx, 3),
    0xB6: OpcodeEntry("LDX", base.addr_zeropage_y, load.ldx, 4),
    0xAE: OpcodeEntry("LDX", base.addr_absolute, load.ldx, 4),
    0xBE: OpcodeEntry("LDX", base.addr_absolute_y, load.ldx, 4, True),

    0xA0: OpcodeEntry("LDY", base.addr_immediate, load.ldy, 2),
    0xA4: OpcodeEntry("LDY", base.addr_zeropage, load.ldy, 3),
    0xB4: OpcodeEntry("LDY", base.addr_zeropage_x, load.ldy, 4),
    0xAC: OpcodeEntry("LDY", base.addr_absolute, load.ldy, 4),
    0xBC: OpcodeEntry("LDY", base.addr_absolute_x, load.ldy, 4, True),

    # Stores always pay the indexed cycle, so no page penalty.
    0x85: OpcodeEntry("STA", base.addr_zeropage, load.sta, 3),
    0x95: OpcodeEntry("STA", base.addr_zeropage_x, load.sta, 4),
    0x8D: OpcodeEntry("STA", base.addr_absolute, load.sta, 4),
    0x9D: OpcodeEntry("STA", base.addr_absolute_x, load.sta, 5),
    0x99: OpcodeEntry("STA", base.addr_absolute_y, load.sta, 5),
    0x81: OpcodeEntry("STA", base.addr_indexed_indirect, load.sta, 6),
    0x91: OpcodeEntry("STA", base.addr_indirect_indexed, load.sta, 6),

    0x86: OpcodeEntry("STX", base.addr_zeropage, load.stx, 3),
    0x96: OpcodeEntry("STX", base.addr_zeropage_y, load.stx, 4),
    0x8E: OpcodeEntry("STX", base.addr_absolute, load.stx, 4),

    0x84: OpcodeEntry("STY", base.addr_zeropage, load.sty, 3),
    0x94: OpcodeEntry("STY", base.addr_zeropage_x, load.sty, 4),
    0x8C: OpcodeEntry("STY", base.addr_absolute, load.sty, 4),

    0xAA: OpcodeEntry("TAX", base.addr_implied, load.tax, 2),
    0xA8: OpcodeEntry("TAY", base.addr_implied, load.tay, 2),
    0x8A: OpcodeEntry("TXA", base.addr_implied, load.txa, 2),
    0x98: OpcodeEntry("TYA", base.addr_implied, load.tya, 2),
    0x9A: OpcodeEntry("TXS", base.addr_implied, load.txs, 2),
    0xBA: OpcodeEntry("TSX", base.addr_implied, load.tsx, 2),

    # --- ALU Operations ---
    0x69: OpcodeEntry("ADC", base.addr_immediate, alu.adc, 2),
    0x65: OpcodeEntry("ADC", base.addr_zeropage, alu.adc, 3),
    0x75: OpcodeEntry("ADC", base.addr_zeropage_x, alu.adc, 4),
    0x6D: OpcodeEntry("ADC", base.addr_absolute, alu.adc, 4),
    0x7D: OpcodeEntry("ADC", base.addr_absolute_x, alu.adc, 4, True),
    0x79: OpcodeEntry("ADC", base.addr_absolute_y, alu.adc, 4, True),
    0x61: OpcodeEntry("ADC", base.addr_indexed_indirect, alu.adc, 6),
    0x71: OpcodeEntry("ADC", base.addr_indirect_indexed, alu.adc, 5, True),

    0xE9: OpcodeEntry("SBC", base.addr_immediate, alu.sbc, 2),
    0xE5: OpcodeEntry("SBC", base.addr_zeropage, alu.sbc, 3),
    0xF5: OpcodeEntry("SBC", base.addr_zeropage_x, alu.sbc, 4),
    0xED: OpcodeEntry("SBC", base.addr_absolute, alu.sbc, 4),
    0xFD: OpcodeEntry("SBC", base.addr_absolute_x, alu.sbc, 4, True),
    0xF9: OpcodeEntry("SBC", base.addr_absolute_y, alu.sbc, 4, True),
    0xE1: OpcodeEntry("SBC", base.addr_indexed_indirect, alu.sbc, 6),
    0xF1: OpcodeEntry("SBC", base.addr_indirect_indexed, alu.sbc, 5, True),

    0xC9: OpcodeEntry("CMP", base.addr_immediate, alu.cmp, 2),
    0xC5: OpcodeEntry("CMP", base.addr_zeropage, alu.cmp, 3),
    0xD5: OpcodeEntry("CMP", base.addr_zeropage_x, alu.cmp, 4),
    0xCD: OpcodeEntry("CMP", base.addr_absolute, alu.cmp, 4),
    0xDD: OpcodeEntry("CMP", base.addr_absolute_x, alu.cmp, 4, True),
    0xD9: OpcodeEntry("CMP", base.addr_absolute_y, alu.cmp, 4, True),
    0xC1: OpcodeEntry("CMP", base.addr_indexed_indirect, alu.cmp, 6),
    0xD1: OpcodeEntry("CMP", base.addr_indirect_indexed, alu.cmp, 5, True),

    0xE0: OpcodeEntry("CPX", base.addr_immediate, alu.cpx, 2),
    0xE4: OpcodeEntry("CPX", base.addr_zeropage, alu.cpx, 3),
    0xEC: OpcodeEntry("CPX", base.addr_absolute, alu.cpx, 4),

    0xC0: OpcodeEntry("CPY", base.addr_immediate, alu.cpy, 2),
    0xC4: OpcodeEntry("CPY", base.addr_zeropage, alu.cpy, 3),
    0xCC: OpcodeEntry("CPY", base.addr_absolute, alu.cpy, 4),

    0x29: OpcodeEntry("AND", base.addr_immediate, alu.and_, 2),
    0x25: OpcodeEntry("AND", base.addr_zeropage, alu.and_, 3),
    0x35: OpcodeEntry("AND", base.addr_zeropage_x, alu.and_, 4),
    0x2D: OpcodeEntry("AND", base.addr_absolute, alu.and_, 4),
    0x3D: OpcodeEntry("AND", base.addr_absolute_x, alu.and_, 4, True),
    0x39: OpcodeEntry("AND", base.addr_absolute_y, alu.and_, 4, True),
    0x21: OpcodeEntry("AND", base.addr_indexed_indirect, alu.and_, 6),
    0x31: OpcodeEntry("AND", base.addr_indirect_indexed, alu.and_, 5, True),

    0x09: OpcodeEntry("ORA", base.addr_immediate, alu.ora, 2),
    0x05: OpcodeEntry("ORA", base.addr_zeropage, alu.ora, 3),
    0x15: OpcodeEntry("ORA", base.addr_zeropage_x, alu.ora, 4),
    0x0D: OpcodeEntry("ORA", base.addr_absolute, alu.ora, 4),
    0x1D: OpcodeEntry("ORA", base.addr_absolute_x, alu.ora, 4, True),
    0x19: OpcodeEntry("ORA", base.addr_absolute_y, alu.ora, 4, True),
    0x01: OpcodeEntry("ORA", base.addr_indexed_indirect, alu.ora, 6),
    0x11: OpcodeEntry("ORA", base.addr_indirect_indexed, alu.ora, 5, True),

    0x49: OpcodeEntry("EOR", base.addr_immediate, alu.eor, 2),
    0x45: OpcodeEntry("EOR", base.addr_zeropage, alu.eor, 3),
    0x55: OpcodeEntry("EOR", base.addr_zeropage_x, alu.eor, 4),
    0x4D: OpcodeEntry("EOR", base.addr_absolute, alu.eor, 4),
    0x5D: OpcodeEntry("EOR", base.addr_absolute_x, alu.eor, 4, True),
    0x59: OpcodeEntry("EOR", base.addr_absolute_y, alu.eor, 4, True),
    0x41: OpcodeEntry("EOR", base.addr_indexed_indirect, alu.eor, 6),
    0x51: OpcodeEntry("EOR", base.addr_indirect_indexed, alu.eor, 5, True),

    0x24: OpcodeEntry("BIT", base.addr_zeropage, alu.bit, 3),
    0x2C: OpcodeEntry("BIT", base.addr_absolute, alu.bit, 4),

    # Shift / Rotate (read-modify-write: no page penalty)
    0x0A: OpcodeEntry("ASL", base.addr_accumulator, alu.asl, 2),
    0x06: OpcodeEntry("ASL", base.addr_zeropage, alu.asl, 5),
    0x16: OpcodeEntry("ASL", base.addr_zeropage_x, alu.asl, 6),
    0x0E: OpcodeEntry("ASL", base.addr_absolute, alu.asl, 6),
    0x1E: OpcodeEntry("ASL", base.addr_absolute_x, alu.asl, 7),

    0x4A: OpcodeEntry("LSR", base.addr_accumulator, alu.lsr, 2),
    0x46: OpcodeEntry("LSR", base.addr_zeropage, alu.lsr, 5),
    0x56: OpcodeEntry("LSR", base.addr_zeropage_x, alu.lsr, 6),
    0x4E: OpcodeEntry("LSR", base.addr_absolute, alu.lsr, 6),
    0x5E: OpcodeEntry("LSR", base.addr_absolute_x, alu.lsr, 7),

    0x2A: OpcodeEntry("ROL", base.addr_accumulator, alu.rol, 2),
    0x26: OpcodeEntry("ROL", base.addr_zeropage, alu.rol, 5),
    0x36: OpcodeEntry("ROL", base.addr_zeropage_x, alu.rol, 6),
    0x2E: OpcodeEntry("ROL", base.addr_absolute, alu.rol, 6),
    0x3E: OpcodeEntry("ROL", base.addr_absolute_x, alu.rol, 7),

    0x6A: OpcodeEntry("ROR", base.addr_accumulator, alu.ror, 2),
    0x66: OpcodeEntry("ROR", base.addr_zeropage, alu.ror, 5),
    0x76: OpcodeEntry("ROR", base.addr_zeropage_x, alu.ror, 6),
    0x6E: OpcodeEntry("ROR", base.addr_absolute, alu.ror, 6),
    0x7E: OpcodeEntry("ROR", base.addr_absolute_x, alu.ror, 7),

    0xE6: OpcodeEntry("INC", base.addr_zeropage, alu.inc, 5),
    0xF6: OpcodeEntry("INC", base.addr_zeropage_x, alu.inc, 6),
    0xEE: OpcodeEntry("INC", base.addr_absolute, alu.inc, 6),
    0xFE: OpcodeEntry("INC", base.addr_absolute_x, alu.inc, 7),

    0xC6: OpcodeEntry("DEC", base.addr_zeropage, alu.dec, 5),
    0xD6: OpcodeEntry("DEC", base.addr_zeropage_x, alu.dec, 6),
    0xCE: OpcodeEntry("DEC", base.addr_absolute, alu.dec, 6),
    0xDE: OpcodeEntry("DEC", base.addr_absolute_x, alu.dec, 7),

    0xE8: OpcodeEntry("INX", base.addr_implied, alu.inx, 2),
    0xCA: OpcodeEntry("DEX", base.addr_implied, alu.dex, 2),
    0xC8: OpcodeEntry("INY", base.addr_implied, alu.iny, 2),
    0x88: OpcodeEntry("DEY", base.addr_implied, alu.dey, 2),

    # --- Control Instructions ---
    # Branch: +1 if taken, +2 if taken across a page (see control.branch_cycles)
    0x90: OpcodeEntry("BCC", base.addr_relative, control.bcc, 2),
    0xB0: OpcodeEntry("BCS", base.addr_relative, control.bcs, 2),
    0xF0: OpcodeEntry("BEQ", base.addr_relative, control.beq, 2),
    0xD0: OpcodeEntry("BNE", base.addr_relative, control.bne, 2),
    0x30: OpcodeEntry("BMI", base.addr_relative, control.bmi, 2),
    0x10: OpcodeEntry("BPL", base.addr_relative, control.bpl, 2),
    0x50: OpcodeEntry("BVC", base.addr_relative, control.bvc, 2),
    0x70: OpcodeEntry("BVS", base.addr_relative, control.bvs, 2),

    0x4C: OpcodeEntry("JMP", base.addr_absolute, control.jmp, 3),
    0x6C: OpcodeEntry("JMP", base.addr_indirect, control.jmp, 5),
    0x20: OpcodeEntry("JSR", base.addr_absolute, control.jsr, 6),
    0x60: OpcodeEntry("RTS", base.addr_implied, control.rts, 6),

    0x48: OpcodeEntry("PHA", base.addr_implied, control.pha, 3),
    0x08: OpcodeEntry("PHP", base.addr_implied, control.php, 3),
    0x68: OpcodeEntry("PLA", base.addr_implied, control.pla, 4),
    0x28: OpcodeEntry("PLP", base.addr_implied, control.plp, 4),

    0x18: OpcodeEntry("CLC", base.addr_implied, control.clc, 2),
    0x38: OpcodeEntry("SEC", base.addr_implied, control.sec, 2),
    0x58: OpcodeEntry("CLI", base.addr_implied, control.cli, 2),
    0x78: OpcodeEntry("SEI", base.addr_implied, control.sei, 2),
    0xB8: OpcodeEntry("CLV", base.addr_implied, control.clv, 2),
    0xD8: OpcodeEntry("CLD", base.addr_implied, control.cld, 2),
    0xF8: OpcodeEntry("SED", base.addr_implied, control.sed, 2),

    0xEA: OpcodeEntry("NOP", base.addr_implied, control.nop, 2),
    0x00: OpcodeEntry("BRK", base.addr_implied, control.brk, 7),
    0x40: OpcodeEntry("RTI", base.addr_implied, control.rti, 6),
}

DecodeTable = Sequence[Optional[OpcodeEntry]]

# BCD回路を持たない構成ではADC/SBCをバイナリ専用の実装に差し替える。
_BINARY_ONLY = {alu.adc: alu.adc_binary, alu.sbc: alu.sbc_binary}


# @intent:responsibility 256エントリの網羅的なデコードテーブルを構築する。
def build_decode_table(decimal_mode: bool = True) -> Tuple[Optional[OpcodeEntry], ...]:
    table: List[Optional[OpcodeEntry]] = [None] * 256
    for opcode, entry in OPCODE_MAP.items():
        if not decimal_mode and entry.exec_func in _BINARY_ONLY:
            entry = entry._replace(exec_func=_BINARY_ONLY[entry.exec_func])
        table[opcode] = entry
    return tuple(table)


DECODE_TABLE = build_decode_table(decimal_mode=True)


def decode_opcode(opcode: int, bus: Device, pc: int, state: Mos6502CpuState,
                  table: DecodeTable = DECODE_TABLE) -> Operation:
    entry = table[opcode & 0xFF]
    if entry is None:
        return Operation(f"{opcode:02X}", "???", [], [], cycle_count=1, length=1, implemented=False)

    addr_res = entry.addr_func(pc, bus, state)
    extra_cycles = 1 if entry.page_penalty and addr_res.page_crossed else 0

    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=entry.mnemonic,
        operands=[addr_res.operand_str] if addr_res.operand_str else [],
        operand_bytes=addr_res.operand_bytes,
        cycle_count=entry.base_cycles + extra_cycles,
        length=1 + len(addr_res.operand_bytes),
        resolved=addr_res,
    )


# @intent:responsibility デコード済みの命令を実行し、(新しい状態, 追加サイクル) を返す。
# @intent:pre-condition state.pc は命令長分進められた「次の命令の先頭」を指していること。
def execute_instruction(operation: Operation, state: Mos6502CpuState, bus: Device,
                        table: DecodeTable = DECODE_TABLE) -> Tuple[Mos6502CpuState, int]:
    entry = table[int(operation.opcode_hex, 16)]
    if entry is None:
        return state, 0

    addr_res = operation.resolved
    extra_cycles = 0
    if entry.addr_func is base.addr_relative:
        extra_cycles = control.branch_cycles(entry.mnemonic, state, addr_res)

    return entry.exec_func(state, bus, addr_res), extra_cycles

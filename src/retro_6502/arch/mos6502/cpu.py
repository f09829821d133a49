# src/retro_6502/arch/mos6502/cpu.py
"""
MOS 6502 CPUエミュレーションの中心モジュール。
"""
from typing import Dict

from retro_6502.core.cpu import AbstractCpu
from retro_6502.core.snapshot import Operation
from retro_6502.transport.address_space import Device, RESET_VECTOR_ADDR
from retro_6502.arch.mos6502.state import Mos6502CpuState
from retro_6502.arch.mos6502.instructions.maps import build_decode_table, decode_opcode, execute_instruction


# @intent:responsibility MOS 6502 CPUの具体的なエミュレーションロジックを提供する。
class Mos6502Cpu(AbstractCpu):
    """
    MOS 6502 CPUをエミュレートするクラス。

    decimal_mode=False の場合、Dフラグは保持されるがADC/SBCはバイナリ演算のみを行う（2A03互換）。
    """
    def __init__(self, bus: Device, decimal_mode: bool = True):
        self._decimal_mode = decimal_mode
        self._decode_table = build_decode_table(decimal_mode)
        super().__init__(bus)

    @property
    def decimal_mode(self) -> bool:
        return self._decimal_mode

    # @intent:responsibility 電源投入直後の正準状態を生成する。
    # SP: 0xFD, P: 0x24 (R=1, I=1), A/X/Y: 0
    def _create_initial_state(self) -> Mos6502CpuState:
        return Mos6502CpuState(sp=0xFD)

    # @intent:responsibility リセット処理。レジスタを正準状態に戻し、PCをリセットベクトルから読み込む。
    # @intent:note A/X/Y/SP/Pは実機では不定だが、テストの再現性のため常に正準値に揃える。
    def reset(self) -> None:
        super().reset()
        lo = self._bus.read(RESET_VECTOR_ADDR)
        hi = self._bus.read(RESET_VECTOR_ADDR + 1)
        self._state.pc = (hi << 8) | lo
        self._bus.get_and_clear_activity_log()

    # @intent:responsibility 外部公開用のStateを取得する際、SPを物理アドレス ($0100 + SP) に補正する。
    # @intent:note 補正した新しいStateを返すが、_stateそのものは変更しない。
    def get_state(self) -> Mos6502CpuState:
        return self._state.replace(sp=0x0100 | (self._state.sp & 0xFF))

    # @intent:responsibility テストやローダーから初期レジスタ値を設定する。
    def set_state(self, **registers) -> None:
        masked = {name: value & (0xFFFF if name == "pc" else 0xFF) for name, value in registers.items()}
        self._state = self._state.replace(**masked)

    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._bus, self._state.pc, self._state, self._decode_table)

    def _execute(self, operation: Operation) -> int:
        self._state, extra_cycles = execute_instruction(operation, self._state, self._bus, self._decode_table)
        return extra_cycles

    # @intent:responsibility レジスタマップ（表示用）を返す。
    def get_register_map(self) -> Dict[str, int]:
        state = self.get_state()
        return {
            "A": state.a,
            "X": state.x,
            "Y": state.y,
            "PC": state.pc,
            "S": state.sp,  # $01xx
            "P": state.p
        }

    def get_flag_state(self) -> Dict[str, bool]:
        state = self._state
        return {
            "N": state.flag_n,
            "V": state.flag_v,
            "B": state.flag_b,
            "D": state.flag_d,
            "I": state.flag_i,
            "Z": state.flag_z,
            "C": state.flag_c
        }

# src/retro_6502/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクル（フェッチ・デコード・実行）の駆動、
およびサイクル予算に基づく実行ループを提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional

from retro_6502.core.snapshot import Metadata, Operation, RunResult, Snapshot
from retro_6502.core.state import CpuState
from retro_6502.errors import UnimplementedOpcode
from retro_6502.transport.address_space import Device

logger = logging.getLogger(__name__)


# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    メモリバックエンドとのインターフェース、状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`はread/writeを持つDeviceである必要があります。
    # @intent:rationale CPUとメモリは明示的に生成・所有されるインスタンスであり、
    #                  グローバル状態を持たないため、複数の独立したマシンを同時に扱えます。
    def __init__(self, bus: Device):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()

    def get_state(self) -> CpuState:
        return self._state

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCからオペコードをフェッチし、その値を返します。
        """
        pass

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        オペコードを解析し、Operationオブジェクトとして返します。
        デコードできない場合は implemented=False、長さ1、1サイクルのOperationを返します。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> int:
        """
        デコードされた命令を実行し、CPUの状態を更新します。
        実行時に確定する追加サイクル数（分岐成立ペナルティなど）を返します。
        """
        pass

    # @intent:responsibility 命令実行前にPCを命令長分進めます。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility CPUを1命令進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターン（ログクリア→フェッチ→デコード→PC更新→実行→Snapshot生成）。
    def step(self) -> Snapshot:
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        opcode = self._fetch()
        operation = self._decode(opcode)
        self._update_pc(operation)

        diagnostic: Optional[UnimplementedOpcode] = None
        if operation.implemented:
            extra_cycles = self._execute(operation)
            if extra_cycles:
                operation = replace(operation, cycle_count=operation.cycle_count + extra_cycles)
        else:
            # 未定義オペコードは致命的ではない。1サイクルのNOPとして扱う。
            diagnostic = UnimplementedOpcode(address=initial_pc, opcode=opcode)
            logger.warning("%s", diagnostic)

        return self._create_snapshot(initial_pc, operation, diagnostic)

    def _create_snapshot(self, initial_pc: int, operation: Operation,
                         diagnostic: Optional[UnimplementedOpcode]) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        self._cycle_count += operation.cycle_count

        disassembly = f"${initial_pc:04X}: {operation.text}"
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s  (%d cycles)", disassembly, operation.cycle_count)

        return Snapshot(
            state=self.get_state(),
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, disassembly=disassembly),
            bus_activity=bus_activity,
            diagnostic=diagnostic,
        )

    # @intent:responsibility サイクル予算が尽きるまで命令を実行します。
    # @intent:post-condition 最後の命令は予算を超過する場合がある（"約Nサイクル実行"の歴史的な意味論）。
    def run(self, cycle_budget: int) -> RunResult:
        """
        cycle_budget が正である間、step() を繰り返します。
        0以下の予算では1命令も実行しません。
        """
        remaining = cycle_budget
        cycles = 0
        instructions = 0
        unimplemented: List[UnimplementedOpcode] = []

        while remaining > 0:
            snapshot = self.step()
            remaining -= snapshot.operation.cycle_count
            cycles += snapshot.operation.cycle_count
            instructions += 1
            if snapshot.diagnostic is not None:
                unimplemented.append(snapshot.diagnostic)

        return RunResult(
            cycles=cycles,
            instructions=instructions,
            remaining=remaining,
            unimplemented=unimplemented,
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグ（ステータスレジスタ）の各ビットの状態を辞書形式で返す。
        """
        pass

# src/retro_6502/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとバスの状態、および run() の集計結果を
記録する不変のデータ構造を定義します。
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from retro_6502.core.state import CpuState
from retro_6502.errors import UnimplementedOpcode
from retro_6502.transport.address_space import BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    命令の詳細（HEX、ニーモニック、オペランド、サイクル数、長さ）を記録するデータクラス。
    """
    opcode_hex: str  # 例: "A9"
    mnemonic: str  # 例: "LDA"
    operands: List[str] = field(default_factory=list)  # 例: ["#$10"]
    operand_bytes: List[int] = field(default_factory=list)  # 生のオペランドバイト
    cycle_count: int = 0  # オペコードフェッチを含む命令全体のサイクル数
    length: int = 1  # 命令のバイト長
    resolved: Any = None  # デコード時に解決したアドレッシング結果
    implemented: bool = True

    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic


# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    cycle_count: int  # 累計サイクル数
    disassembly: Optional[str] = None  # 例: "$8000: LDA #$10"


# @intent:responsibility 1命令実行後のCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
    diagnostic: Optional[UnimplementedOpcode] = None


# @intent:responsibility run() の実行結果を集計します。
@dataclass(frozen=True)
class RunResult:
    """
    cycles: 実際に消費したサイクル数（最後の命令による予算超過を含む）
    remaining: 残り予算（実行した場合は0以下）
    """
    cycles: int
    instructions: int
    remaining: int
    unimplemented: List[UnimplementedOpcode] = field(default_factory=list)

# src/retro_6502/config/models.py
from dataclasses import dataclass, field


# @intent:data_structure カートリッジのPRG/トレーナーをCPUアドレス空間のどこに配置するか。
@dataclass
class CartridgeMapping:
    prg_base: int = 0x8000
    prg_window: int = 0x8000  # $8000-$FFFF
    mirror_prg: bool = True  # 16KiBのPRGをウィンドウ全体に繰り返す
    trainer_base: int = 0x7000
    map_trainer: bool = True


@dataclass
class CpuOptions:
    decimal_mode: bool = True


@dataclass
class CpuInitialState:
    use_reset_vector: bool = True
    pc: int = 0x0000
    sp: int = 0xFD
    registers: dict = field(default_factory=dict)


# @intent:data_structure マシンプロファイル（メモリマップ + カートリッジ形式 + CPUオプション）。
@dataclass
class SystemConfig:
    name: str = "nes"
    reset_vector: int = 0xFCE2  # アドレス空間生成時に $FFFC/$FFFD へ書き込む既定値
    cycle_budget: int = 10000
    cpu: CpuOptions = field(default_factory=CpuOptions)
    cartridge: CartridgeMapping = field(default_factory=CartridgeMapping)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)

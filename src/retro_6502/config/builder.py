# src/retro_6502/config/builder.py
import logging
from typing import Optional, Tuple

from retro_6502.arch.mos6502.cpu import Mos6502Cpu
from retro_6502.loader.ines import LoadedImage
from retro_6502.loader.mapper import map_image
from retro_6502.transport.address_space import AddressSpace
from .models import CpuInitialState, SystemConfig

logger = logging.getLogger(__name__)


# @intent:responsibility システム構成（Config）に基づいて、アドレス空間とCPUを生成・接続し、初期状態を適用します。
# @intent:flow アドレス空間生成 → イメージ配置 → CPU生成 → reset() (リセットベクトル読み込み) → 初期状態の上書き
class SystemBuilder:
    def build_system(self, config: SystemConfig,
                     image: Optional[LoadedImage] = None) -> Tuple[Mos6502Cpu, AddressSpace]:
        space = AddressSpace(reset_vector=config.reset_vector)

        if image is not None:
            map_image(image, space, config.cartridge)
        else:
            logger.info("No image loaded; running against an empty address space")

        cpu = Mos6502Cpu(space, decimal_mode=config.cpu.decimal_mode)
        self.apply_initial_state(cpu, config.initial_state)

        logger.info("System '%s' ready: PC=$%04X", config.name, cpu.get_state().pc)
        return cpu, space

    # @intent:responsibility CPUをリセットし、Configから指定された初期値を適用します。
    def apply_initial_state(self, cpu: Mos6502Cpu, config_state: CpuInitialState) -> None:
        cpu.reset()

        registers = {}
        for name, value in config_state.registers.items():
            if name.lower() not in _REGISTER_NAMES:
                logger.warning("Ignoring unknown register in initial_state: %s", name)
                continue
            registers[name.lower()] = value
        registers["sp"] = config_state.sp
        if not config_state.use_reset_vector:
            registers["pc"] = config_state.pc

        cpu.set_state(**registers)


_REGISTER_NAMES = ("a", "x", "y", "p")

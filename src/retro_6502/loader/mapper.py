# src/retro_6502/loader/mapper.py
"""
ロード済みカートリッジイメージをアドレス空間へ配置するモジュール。

バンク切り替えは扱わない。PRGはウィンドウ先頭から配置し、ウィンドウより小さい場合は
16KiBバンク単位で繰り返してウィンドウを埋める（NROMのミラーリング）。
"""
import logging

from retro_6502.config.models import CartridgeMapping
from retro_6502.loader.ines import LoadedImage, PRG_BANK_SIZE
from retro_6502.transport.address_space import AddressSpace

logger = logging.getLogger(__name__)


# @intent:responsibility トレーナーとPRGデータをマシン構成に従ってアドレス空間へコピーします。
# @intent:note CHRはグラフィックバス側のデータであり、CPUアドレス空間には配置しない。
def map_image(image: LoadedImage, space: AddressSpace, mapping: CartridgeMapping) -> None:
    if image.trainer is not None and mapping.map_trainer:
        space.load(mapping.trainer_base, image.trainer)
        logger.info("Trainer mapped at $%04X", mapping.trainer_base)

    prg = image.prg
    if not prg or mapping.prg_window <= 0:
        return

    if len(prg) > mapping.prg_window:
        logger.warning("PRG (%d bytes) exceeds the %d byte window; truncating",
                       len(prg), mapping.prg_window)
        prg = prg[:mapping.prg_window]

    offset = 0
    while offset < mapping.prg_window:
        chunk = prg[:mapping.prg_window - offset]
        space.load(mapping.prg_base + offset, chunk)
        offset += len(chunk)
        if not mapping.mirror_prg:
            break

    mirrored = mapping.mirror_prg and len(prg) < mapping.prg_window
    logger.info("PRG mapped at $%04X-$%04X (%d banks%s)",
                mapping.prg_base, (mapping.prg_base + offset - 1) & 0xFFFF,
                max(1, len(prg) // PRG_BANK_SIZE), ", mirrored" if mirrored else "")

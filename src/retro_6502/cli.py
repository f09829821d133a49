# src/retro_6502/cli.py
"""
コマンドラインのエントリポイント。

Usage:
  retro-6502 [IMAGE] [--profile NAME | --config FILE] [--cycles N]
             [--dump-prg FILE] [--dump-chr FILE] [-v]

IMAGEを省略した場合はロードを行わず、ほぼゼロで埋められたアドレス空間に対してCPUを実行します。
"""
import argparse
import logging
import sys
from typing import List, Optional

from retro_6502 import __version__
from retro_6502.config.builder import SystemBuilder
from retro_6502.config.loader import DEFAULT_PROFILE, ConfigLoader
from retro_6502.errors import ConfigError, LoadError
from retro_6502.loader.dump import dump_to_file
from retro_6502.loader.ines import CartridgeLoader

logger = logging.getLogger("retro_6502")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retro-6502",
        description="MOS 6502 emulator: load a cartridge image and run the CPU for a cycle budget.",
    )
    parser.add_argument("image", nargs="?", default=None,
                        help="iNES cartridge image to load before reset")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--profile", default=None,
                        help=f"built-in machine profile (default: {DEFAULT_PROFILE})")
    source.add_argument("--config", default=None,
                        help="YAML machine configuration file")
    parser.add_argument("--cycles", type=int, default=None,
                        help="cycle budget (default: taken from the machine profile)")
    parser.add_argument("--lenient", action="store_true",
                        help="accept images with a bad magic number")
    parser.add_argument("--dump-prg", metavar="FILE", default=None,
                        help="write a hex listing of the PRG data")
    parser.add_argument("--dump-chr", metavar="FILE", default=None,
                        help="write a hex listing of the CHR data")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="trace every executed instruction")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    logger.info("Booting up 6502")
    config_loader = ConfigLoader()
    try:
        if args.config:
            config = config_loader.load_from_file(args.config)
        else:
            config = config_loader.load_profile(args.profile or DEFAULT_PROFILE)
    except (ConfigError, OSError) as e:
        logger.error("Configuration error: %s", e)
        return 2

    image = None
    if args.image:
        try:
            image = CartridgeLoader(strict=not args.lenient).load(args.image)
        except LoadError as e:
            logger.error("Load failed: %s", e)
            return 1
        try:
            if args.dump_prg:
                dump_to_file(image.prg, args.dump_prg)
            if args.dump_chr:
                dump_to_file(image.chr, args.dump_chr)
        except OSError as e:
            logger.error("Dump failed: %s", e)
            return 1

    cpu, _ = SystemBuilder().build_system(config, image)

    budget = args.cycles if args.cycles is not None else config.cycle_budget
    result = cpu.run(budget)

    registers = " ".join(f"{name}=${value:0{4 if name in ('PC', 'S') else 2}X}"
                         for name, value in cpu.get_register_map().items())
    flags = "".join(name if value else "-" for name, value in cpu.get_flag_state().items())
    print(f"Executed {result.instructions} instructions in {result.cycles} cycles")
    print(f"{registers} [{flags}]")
    if result.unimplemented:
        opcodes = sorted({report.opcode for report in result.unimplemented})
        print(f"Unimplemented opcodes encountered: {', '.join(f'${op:02X}' for op in opcodes)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

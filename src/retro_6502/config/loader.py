# src/retro_6502/config/loader.py
from importlib import resources
from typing import Any, Dict, List

import yaml

from retro_6502.errors import ConfigError
from .models import CartridgeMapping, CpuInitialState, CpuOptions, SystemConfig

DEFAULT_PROFILE = "nes"


# @intent:responsibility YAMLのマシンプロファイルを読み込み、SystemConfigへ変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data or {})

    # @intent:responsibility パッケージ同梱のプロファイル (profiles/<name>.yaml) を読み込みます。
    def load_profile(self, name: str = DEFAULT_PROFILE) -> SystemConfig:
        resource = resources.files("retro_6502.config").joinpath("profiles").joinpath(f"{name}.yaml")
        if not resource.is_file():
            raise ConfigError(f"Unknown machine profile: {name} (available: {', '.join(self.list_profiles())})")
        data = yaml.safe_load(resource.read_text(encoding="utf-8"))
        return self._parse_config(data or {})

    def list_profiles(self) -> List[str]:
        profiles = resources.files("retro_6502.config").joinpath("profiles")
        return sorted(p.name[:-len(".yaml")] for p in profiles.iterdir() if p.name.endswith(".yaml"))

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Machine configuration must be a mapping.")

        cpu_data = data.get("cpu", {})
        cpu = CpuOptions(decimal_mode=bool(cpu_data.get("decimal_mode", True)))

        cart_data = data.get("cartridge", {})
        cartridge = CartridgeMapping(
            prg_base=self._parse_int(cart_data.get("prg_base", 0x8000)),
            prg_window=self._parse_int(cart_data.get("prg_window", 0x8000)),
            mirror_prg=bool(cart_data.get("mirror_prg", True)),
            trainer_base=self._parse_int(cart_data.get("trainer_base", 0x7000)),
            map_trainer=bool(cart_data.get("map_trainer", True)),
        )
        if cartridge.prg_base + cartridge.prg_window > 0x10000:
            raise ConfigError(
                f"PRG window ${cartridge.prg_base:04X}+{cartridge.prg_window:#x} exceeds the 64KiB address space."
            )

        initial_state_data = data.get("initial_state", {})
        initial_state = CpuInitialState(
            use_reset_vector=bool(initial_state_data.get("use_reset_vector", True)),
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            sp=self._parse_int(initial_state_data.get("sp", 0xFD)),
            registers={k: self._parse_int(v) for k, v in initial_state_data.get("registers", {}).items()},
        )

        return SystemConfig(
            name=data.get("name", DEFAULT_PROFILE),
            reset_vector=self._parse_int(data.get("reset_vector", 0xFCE2)),
            cycle_budget=self._parse_int(data.get("cycle_budget", 10000)),
            cpu=cpu,
            cartridge=cartridge,
            initial_state=initial_state,
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                if text.startswith("$"):
                    return int(text[1:], 16)
                if text.lower().startswith("0x"):
                    return int(text, 16)
                return int(text)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")

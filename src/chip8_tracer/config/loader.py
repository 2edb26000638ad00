import os
import yaml
from typing import Any, Dict, List

from chip8_tracer.common.errors import ConfigError
from .models import BUILTIN_PALETTES, Palette, SystemConfig

KNOWN_KEYS = {"cpu_hz", "timer_hz", "volume", "palette", "palettes", "key_map", "rom_dir", "seed"}

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return self.parse_config(data or {})

    def parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping")
        unknown = set(data) - KNOWN_KEYS
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        defaults = SystemConfig()
        cpu_hz = self._parse_int(data.get("cpu_hz", defaults.cpu_hz), "cpu_hz")
        timer_hz = self._parse_int(data.get("timer_hz", defaults.timer_hz), "timer_hz")
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ConfigError("cpu_hz and timer_hz must be positive")

        volume = data.get("volume", defaults.volume)
        if not isinstance(volume, (int, float)) or isinstance(volume, bool):
            raise ConfigError(f"Invalid volume: {volume!r}")
        volume = min(max(0.0, float(volume)), 1.0)

        palettes = list(BUILTIN_PALETTES) + self._parse_palettes(data.get("palettes") or [])
        palette_id = str(data.get("palette", defaults.palette))
        if palette_id not in {p.id for p in palettes}:
            raise ConfigError(f"Unknown palette: {palette_id}")

        key_map = {}
        for name, key in (data.get("key_map") or {}).items():
            value = self._parse_int(key, f"key_map.{name}")
            if not 0 <= value <= 0xF:
                raise ConfigError(f"key_map.{name} must be in 0x0-0xF, got {value:#x}")
            key_map[str(name).lower()] = value

        rom_dir = data.get("rom_dir")
        if rom_dir is not None:
            rom_dir = os.path.expanduser(str(rom_dir))

        seed = data.get("seed")
        if seed is not None:
            seed = self._parse_int(seed, "seed")

        return SystemConfig(
            cpu_hz=cpu_hz,
            timer_hz=timer_hz,
            volume=volume,
            palette=palette_id,
            palettes=palettes,
            key_map=key_map,
            rom_dir=rom_dir,
            seed=seed,
        )

    def _parse_palettes(self, entries: Any) -> List[Palette]:
        if not isinstance(entries, list):
            raise ConfigError("palettes must be a list")
        palettes = []
        for entry in entries:
            try:
                palettes.append(Palette(
                    id=str(entry["id"]),
                    name=str(entry.get("name", entry["id"])),
                    on=self._parse_color(entry["foreground"]),
                    off=self._parse_color(entry["background"]),
                ))
            except (KeyError, TypeError, AttributeError) as e:
                raise ConfigError(f"Invalid palette entry {entry!r}: {e}") from e
        return palettes

    def _parse_color(self, value: Any) -> str:
        text = str(value)
        if len(text) != 7 or not text.startswith("#"):
            raise ConfigError(f"Invalid color: {value!r}")
        try:
            int(text[1:], 16)
        except ValueError as e:
            raise ConfigError(f"Invalid color: {value!r}") from e
        return text.upper()

    def _parse_int(self, value: Any, name: str = "value") -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format for {name}: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError as e:
                raise ConfigError(f"Invalid integer format for {name}: {value}") from e
        raise ConfigError(f"Invalid integer format for {name}: {value}")

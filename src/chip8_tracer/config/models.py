from dataclasses import dataclass, field
from typing import Dict, List, Optional

# @intent:data_structure 表示色の組。色は "#RRGGBB" 形式。
@dataclass(frozen=True)
class Palette:
    id: str
    name: str
    on: str   # 点灯ピクセル
    off: str  # 消灯ピクセル

NOT_SO_BLACK = "#282828"

BUILTIN_PALETTES: List[Palette] = [
    Palette("1_bw", "Black & White", "#FFFFFF", "#000000"),
    Palette("2_amber", "Amber", "#FFB000", NOT_SO_BLACK),
    Palette("3_amber_2", "Light Amber", "#FFCC00", NOT_SO_BLACK),
    Palette("4_green", "Apple ][", "#33FF33", NOT_SO_BLACK),
]

DEFAULT_PALETTE_ID = "1_bw"

@dataclass
class SystemConfig:
    cpu_hz: int = 500
    timer_hz: int = 60
    volume: float = 0.5
    palette: str = DEFAULT_PALETTE_ID
    palettes: List[Palette] = field(default_factory=lambda: list(BUILTIN_PALETTES))
    key_map: Dict[str, int] = field(default_factory=dict)  # 物理キー名 -> CHIP-8キーの上書き
    rom_dir: Optional[str] = None
    seed: Optional[int] = None

    # @intent:utility_function 選択中のパレットを返します。見つからない場合は先頭のパレットです。
    def get_palette(self) -> Palette:
        for palette in self.palettes:
            if palette.id == self.palette:
                return palette
        return self.palettes[0]

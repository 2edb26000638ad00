# src/chip8_tracer/arch/chip8/state.py
"""
CHIP-8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from chip8_tracer.common.bytemath import RegisterFile
from chip8_tracer.common.types import FrameBuffer
from chip8_tracer.core.state import CpuState

# @intent:constant CHIP-8 のメモリ構成。
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START

# @intent:constant 表示とスタックの寸法。
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
STACK_SIZE = 16

# @intent:constant 16進数字 0-F のフォントスプライト（各5バイト）。リセット毎にアドレス0へ配置されます。
FONT_GLYPH_SIZE = 5
FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def blank_framebuffer() -> List[List[bool]]:
    return [[False] * DISPLAY_WIDTH for _ in range(DISPLAY_HEIGHT)]


# @intent:responsibility Debugger Listener に渡す、凍結されたCPU状態のコピー。
@dataclass(frozen=True)
class Chip8StateSnapshot:
    pc: int
    sp: int
    i: int
    v: Tuple[int, ...]
    stack: Tuple[int, ...]
    delay_timer: int
    sound_timer: int

    # @intent:accessor デバッガのレジスタ条件から名前で参照できるようにします（例: "v3", "i", "pc"）。
    def get_register(self, name: str) -> Optional[int]:
        key = name.lower()
        if len(key) == 2 and key[0] == "v":
            try:
                return self.v[int(key[1], 16)]
            except ValueError:
                return None
        value = getattr(self, key, None)
        return value if isinstance(value, int) else None


# @intent:responsibility CHIP-8 CPUの全てのレジスタ（V0-VF, I, PC, SP）、スタック、タイマー、フレームバッファを保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 CPUの状態を保持するデータクラス。
    メモリ本体は Bus 上の RAM が保持します。
    """
    pc: int = PROGRAM_START
    i: int = 0x000       # Index Register
    v: RegisterFile = field(default_factory=RegisterFile)
    stack: List[int] = field(default_factory=lambda: [0] * STACK_SIZE)
    delay_timer: int = 0
    sound_timer: int = 0
    framebuffer: List[List[bool]] = field(default_factory=blank_framebuffer)
    # 1サイクル限りのフラグ
    render_needed: bool = False
    key_wait_register: Optional[int] = None

    # @intent:responsibility ライブの状態を共有しない凍結コピーを生成します。
    def snapshot(self) -> Chip8StateSnapshot:
        return Chip8StateSnapshot(
            pc=self.pc,
            sp=self.sp,
            i=self.i,
            v=tuple(self.v),
            stack=tuple(self.stack),
            delay_timer=self.delay_timer,
            sound_timer=self.sound_timer,
        )

    def copy_framebuffer(self) -> FrameBuffer:
        return tuple(tuple(row) for row in self.framebuffer)

    def clear_framebuffer(self) -> None:
        self.framebuffer = blank_framebuffer()

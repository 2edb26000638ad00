# src/chip8_tracer/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通ユーティリティ。

OperationState は1サイクル毎に memory[PC], memory[PC+1] から生成される、
現在の命令のデコード済みビューです。
"""
import random
from dataclasses import dataclass, field
from typing import Optional

from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.hardware.keyboard import Keyboard

# @intent:responsibility 16ビット命令語を各フィールドに分解した不変のビューを提供します。
@dataclass(frozen=True)
class OperationState:
    """
    現在の命令のデコード結果。

    - ``nnn``: 12ビットアドレス (op & 0x0FFF)
    - ``nn``: 8ビット即値 (下位バイト)
    - ``n``: 4ビット即値 (op & 0x000F)
    - ``x``, ``y``: レジスタ番号
    - ``next_opcode``: 次の命令語（デバッガ表示用の先読み。実行には使用しません）
    """
    pc: int
    high_byte: int
    low_byte: int
    next_opcode: Optional[int] = None

    @property
    def opcode(self) -> int:
        return (self.high_byte << 8) | self.low_byte

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF

    @property
    def nn(self) -> int:
        return self.low_byte

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def x(self) -> int:
        return self.high_byte & 0x0F

    @property
    def y(self) -> int:
        return (self.low_byte & 0xF0) >> 4

    @property
    def high_nibble(self) -> int:
        return (self.high_byte & 0xF0) >> 4

    # @intent:responsibility 16ビット命令語から OperationState を生成します（アドレスは任意）。
    @classmethod
    def from_opcode(cls, opcode: int, pc: int = 0, next_opcode: Optional[int] = None) -> "OperationState":
        return cls(pc=pc, high_byte=(opcode >> 8) & 0xFF, low_byte=opcode & 0xFF, next_opcode=next_opcode)

    # @intent:responsibility バスから現在の命令語を読み込み、先読みの次命令語は peek で取得します。
    # @intent:pre-condition pc + 1 はバスのアドレス空間内である必要があります。
    @classmethod
    def fetch(cls, bus: Bus, pc: int) -> "OperationState":
        high = bus.read(pc)
        low = bus.read(pc + 1)
        next_opcode = None
        if pc + 3 < bus.get_address_space_size():
            next_opcode = (bus.peek(pc + 2) << 8) | bus.peek(pc + 3)
        return cls(pc=pc, high_byte=high, low_byte=low, next_opcode=next_opcode)

    def __str__(self) -> str:
        return f"0x{self.opcode:04X} ({self.opcode:016b})"

# @intent:responsibility 命令実行時に参照される周辺機器（キーボード、乱数源）をまとめます。
@dataclass
class Peripherals:
    keyboard: Keyboard
    rng: random.Random = field(default_factory=random.Random)

    def random_byte(self) -> int:
        return self.rng.randrange(256)

# @intent:utility_function 次の命令をスキップします（PCを2進める）。
def skip_next(state: Chip8CpuState) -> None:
    state.pc = (state.pc + 2) & 0xFFFF

# @intent:utility_function デコード結果から表示用の Operation を生成します。
def make_operation(op: OperationState, mnemonic: str, *operands: str) -> Operation:
    return Operation(f"{op.opcode:04X}", mnemonic, tuple(operands))

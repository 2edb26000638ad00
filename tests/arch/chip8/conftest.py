# tests/arch/chip8/conftest.py
"""
CHIP-8 命令テスト用の共通フィクスチャ。
"""
import random

import pytest

from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.hardware.keyboard import Keyboard
from chip8_tracer.arch.chip8.state import Chip8CpuState, FONT_SET
from chip8_tracer.arch.chip8.instructions import execute_instruction
from chip8_tracer.arch.chip8.instructions.base import OperationState, Peripherals

class InstructionHarness:
    """
    CPUを介さずに1命令ずつ実行するためのハーネス。
    実行前に PC を2進める点は CPU の命令サイクルと同じです。
    """
    def __init__(self):
        self.bus = Bus()
        self.bus.register_device(0x000, 0xFFF, RAM(0x1000))
        self.bus.load(0x000, FONT_SET)
        self.state = Chip8CpuState()
        self.keyboard = Keyboard()
        self.io = Peripherals(self.keyboard, random.Random(1234))

    def execute(self, opcode: int) -> None:
        op = OperationState.from_opcode(opcode, pc=self.state.pc)
        self.state.pc += 2
        execute_instruction(op, self.state, self.bus, self.io)

@pytest.fixture
def harness():
    return InstructionHarness()

# src/chip8_tracer/arch/chip8/instructions/display.py
"""
表示命令 (00E0 CLS, Dxyn DRW) の実装。
"""
from chip8_tracer.common import bytemath
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, DISPLAY_HEIGHT, DISPLAY_WIDTH
from .base import OperationState, Peripherals, make_operation

# --- 00E0 CLS ---
def decode_cls(op: OperationState) -> Operation:
    return make_operation(op, "CLS")

def execute_cls(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.clear_framebuffer()
    state.render_needed = True

# --- Dxyn DRW Vx, Vy, n ---
def decode_drw(op: OperationState) -> Operation:
    return make_operation(op, "DRW", f"V{op.x:X}", f"V{op.y:X}", f"{op.n}")

# @intent:responsibility memory[I..I+n] の n 行スプライトを (Vx mod 64, Vy mod 32) に XOR 合成します。
# @intent:rationale 画面外にはみ出したピクセルは折り返さずに破棄します（クリッピング）。
#                  既に点灯しているピクセルにスプライトのビットが重なると消灯し、VF = 1（衝突）とします。
def execute_drw(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    origin_x = state.v[op.x] % DISPLAY_WIDTH
    origin_y = state.v[op.y] % DISPLAY_HEIGHT
    collision = False

    for row in range(op.n):
        sprite_line = bus.read(state.i + row)
        y = origin_y + row
        if y >= DISPLAY_HEIGHT:
            continue
        pixels = state.framebuffer[y]
        for col, bit in enumerate(bytemath.bits_msb_first(sprite_line)):
            x = origin_x + col
            if x >= DISPLAY_WIDTH or not bit:
                continue
            if pixels[x]:
                pixels[x] = False
                collision = True
            else:
                pixels[x] = True

    state.v[0xF] = 1 if collision else 0
    state.render_needed = True

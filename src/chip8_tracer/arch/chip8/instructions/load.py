# src/chip8_tracer/arch/chip8/instructions/load.py
"""
ロード/ストア命令、タイマー、インデックスレジスタ操作の実装。
"""
from chip8_tracer.common import bytemath
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, FONT_GLYPH_SIZE
from .base import OperationState, Peripherals, make_operation

# --- 6xnn LD Vx, byte ---
def decode_ld_byte(op: OperationState) -> Operation:
    return make_operation(op, "LD", f"V{op.x:X}", f"#${op.nn:02X}")

def execute_ld_byte(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = op.nn

# --- 7xnn ADD Vx, byte ---
def decode_add_byte(op: OperationState) -> Operation:
    return make_operation(op, "ADD", f"V{op.x:X}", f"#${op.nn:02X}")

# @intent:responsibility Vx += nn (mod 256)。VF は変更しません。
def execute_add_byte(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = bytemath.add(state.v[op.x], op.nn)

# --- Annn LD I, addr ---
def decode_ld_i(op: OperationState) -> Operation:
    return make_operation(op, "LD", "I", f"${op.nnn:03X}")

def execute_ld_i(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.i = op.nnn

# --- Cxnn RND Vx, byte ---
def decode_rnd(op: OperationState) -> Operation:
    return make_operation(op, "RND", f"V{op.x:X}", f"#${op.nn:02X}")

def execute_rnd(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = io.random_byte() & op.nn

# --- Fx07 LD Vx, DT ---
def decode_ld_vx_dt(op: OperationState) -> Operation:
    return make_operation(op, "LD", f"V{op.x:X}", "DT")

def execute_ld_vx_dt(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = state.delay_timer

# --- Fx0A LD Vx, K ---
def decode_ld_key(op: OperationState) -> Operation:
    return make_operation(op, "LD", f"V{op.x:X}", "K")

# @intent:responsibility キー入力待ちを要求します。
# @intent:rationale 実際の待機はCPUがロックを解放してから行うため、ここでは待機先のレジスタを記録するだけです。
def execute_ld_key(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.key_wait_register = op.x

# --- Fx15 LD DT, Vx ---
def decode_ld_dt(op: OperationState) -> Operation:
    return make_operation(op, "LD", "DT", f"V{op.x:X}")

def execute_ld_dt(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.delay_timer = state.v[op.x]

# --- Fx18 LD ST, Vx ---
def decode_ld_st(op: OperationState) -> Operation:
    return make_operation(op, "LD", "ST", f"V{op.x:X}")

def execute_ld_st(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.sound_timer = state.v[op.x]

# --- Fx1E ADD I, Vx ---
def decode_add_i(op: OperationState) -> Operation:
    return make_operation(op, "ADD", "I", f"V{op.x:X}")

def execute_add_i(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.i = bytemath.u16(state.i + state.v[op.x])

# --- Fx29 LD F, Vx ---
def decode_ld_font(op: OperationState) -> Operation:
    return make_operation(op, "LD", "F", f"V{op.x:X}")

# @intent:responsibility I を Vx 番目のフォントグリフの先頭アドレス（各5バイト）に設定します。
def execute_ld_font(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.i = state.v[op.x] * FONT_GLYPH_SIZE

# --- Fx33 LD B, Vx ---
def decode_ld_bcd(op: OperationState) -> Operation:
    return make_operation(op, "LD", "B", f"V{op.x:X}")

# @intent:responsibility Vx の10進3桁（百、十、一の位）を memory[I], [I+1], [I+2] に格納します。
def execute_ld_bcd(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    value = state.v[op.x]
    bus.write(state.i, value // 100)
    bus.write(state.i + 1, (value // 10) % 10)
    bus.write(state.i + 2, value % 10)

# --- Fx55 LD [I], Vx ---
def decode_store_regs(op: OperationState) -> Operation:
    return make_operation(op, "LD", "[I]", f"V{op.x:X}")

# @intent:responsibility V0..Vx（両端を含む）を memory[I..I+x] に格納します。I は変更しません。
def execute_store_regs(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    for index in range(op.x + 1):
        bus.write(state.i + index, state.v[index])

# --- Fx65 LD Vx, [I] ---
def decode_load_regs(op: OperationState) -> Operation:
    return make_operation(op, "LD", f"V{op.x:X}", "[I]")

def execute_load_regs(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    for index in range(op.x + 1):
        state.v[index] = bus.read(state.i + index)

# src/chip8_tracer/arch/chip8/instructions/alu.py
"""
算術論理演算命令 (8xyN) の実装。

VF はキャリー/ボロー/シフトアウトのフラグとして使用されます。フラグを先に書き込み、
その後の Vx の計算は書き込み後のレジスタ値を使います (x や y が F の場合に結果へ影響します)。
"""
from chip8_tracer.common import bytemath
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from .base import OperationState, Peripherals, make_operation

FLAG = 0xF

def _decode_xy(op: OperationState, mnemonic: str) -> Operation:
    return make_operation(op, mnemonic, f"V{op.x:X}", f"V{op.y:X}")

# --- 8xy0 LD Vx, Vy ---
def decode_ld_reg(op: OperationState) -> Operation:
    return _decode_xy(op, "LD")

def execute_ld_reg(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = state.v[op.y]

# --- 8xy1 OR ---
def decode_or(op: OperationState) -> Operation:
    return _decode_xy(op, "OR")

def execute_or(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = state.v[op.x] | state.v[op.y]

# --- 8xy2 AND ---
def decode_and(op: OperationState) -> Operation:
    return _decode_xy(op, "AND")

def execute_and(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = state.v[op.x] & state.v[op.y]

# --- 8xy3 XOR ---
def decode_xor(op: OperationState) -> Operation:
    return _decode_xy(op, "XOR")

def execute_xor(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[op.x] = state.v[op.x] ^ state.v[op.y]

# --- 8xy4 ADD Vx, Vy ---
def decode_add_reg(op: OperationState) -> Operation:
    return _decode_xy(op, "ADD")

# @intent:responsibility 9ビットの和を求め、VF = キャリー、Vx = 下位8ビットとします。
def execute_add_reg(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    result = bytemath.add_with_overflow(state.v[op.x], state.v[op.y])
    state.v[FLAG] = 1 if result > 0xFF else 0
    state.v[op.x] = result

# --- 8xy5 SUB Vx, Vy ---
def decode_sub(op: OperationState) -> Operation:
    return _decode_xy(op, "SUB")

# @intent:responsibility VF = (Vx > Vy)（符号なし比較）, Vx = Vx - Vy (mod 256)。
def execute_sub(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[FLAG] = 1 if bytemath.gt(state.v[op.x], state.v[op.y]) else 0
    state.v[op.x] = bytemath.subtract(state.v[op.x], state.v[op.y])

# --- 8xy6 SHR Vx ---
def decode_shr(op: OperationState) -> Operation:
    return make_operation(op, "SHR", f"V{op.x:X}")

def execute_shr(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[FLAG] = state.v[op.x] & 0x01
    state.v[op.x] = state.v[op.x] >> 1

# --- 8xy7 SUBN Vx, Vy ---
def decode_subn(op: OperationState) -> Operation:
    return _decode_xy(op, "SUBN")

# @intent:responsibility VF = (Vy > Vx)（符号なし比較）, Vx = Vy - Vx (mod 256)。
def execute_subn(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[FLAG] = 1 if bytemath.gt(state.v[op.y], state.v[op.x]) else 0
    state.v[op.x] = bytemath.subtract(state.v[op.y], state.v[op.x])

# --- 8xyE SHL Vx ---
def decode_shl(op: OperationState) -> Operation:
    return make_operation(op, "SHL", f"V{op.x:X}")

def execute_shl(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.v[FLAG] = (state.v[op.x] >> 7) & 0x01
    state.v[op.x] = state.v[op.x] << 1

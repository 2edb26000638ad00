# src/chip8_tracer/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。

実行関数が呼ばれる時点で PC は既に次の命令（現在の命令 + 2）を指しています。
"""
import logging

from chip8_tracer.common import bytemath
from chip8_tracer.common.errors import StackOverflowError, StackUnderflowError
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, STACK_SIZE
from .base import OperationState, Peripherals, make_operation as _op, skip_next

logger = logging.getLogger(__name__)

# --- 00EE RET ---
def decode_ret(op: OperationState) -> Operation:
    return _op(op, "RET")

# @intent:responsibility サブルーチンから復帰します。空のスタックからの復帰は StackUnderflowError です。
def execute_ret(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if state.sp <= 0:
        raise StackUnderflowError("Return with empty call stack", pc=op.pc, opcode=op.opcode)
    state.sp -= 1
    state.pc = state.stack[state.sp]

# --- 0nnn SYS ---
def decode_sys(op: OperationState) -> Operation:
    return _op(op, "SYS", f"${op.nnn:03X}")

# @intent:responsibility RCA 1802 マシン語ルーチンの呼び出し。現代のインタプリタと同様に無視します。
def execute_sys(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    logger.debug("0NNN called at 0x%04X: ignoring", op.pc)

# --- 1nnn JP ---
def decode_jp(op: OperationState) -> Operation:
    return _op(op, "JP", f"${op.nnn:03X}")

def execute_jp(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.pc = op.nnn

# --- 2nnn CALL ---
def decode_call(op: OperationState) -> Operation:
    return _op(op, "CALL", f"${op.nnn:03X}")

# @intent:responsibility 戻りアドレスをスタックに積み、サブルーチンへジャンプします。
# @intent:pre-condition スタックの深さは16まで。17段目の呼び出しは StackOverflowError です。
def execute_call(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if state.sp >= STACK_SIZE:
        raise StackOverflowError(
            f"Call stack overflow (depth {STACK_SIZE})", pc=op.pc, opcode=op.opcode
        )
    state.stack[state.sp] = state.pc
    state.sp += 1
    state.pc = op.nnn

# --- 3xnn SE Vx, byte ---
def decode_se_byte(op: OperationState) -> Operation:
    return _op(op, "SE", f"V{op.x:X}", f"#${op.nn:02X}")

def execute_se_byte(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if bytemath.equal(state.v[op.x], op.nn):
        skip_next(state)

# --- 4xnn SNE Vx, byte ---
def decode_sne_byte(op: OperationState) -> Operation:
    return _op(op, "SNE", f"V{op.x:X}", f"#${op.nn:02X}")

def execute_sne_byte(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if not bytemath.equal(state.v[op.x], op.nn):
        skip_next(state)

# --- 5xy0 SE Vx, Vy ---
def decode_se_reg(op: OperationState) -> Operation:
    return _op(op, "SE", f"V{op.x:X}", f"V{op.y:X}")

def execute_se_reg(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if bytemath.equal(state.v[op.x], state.v[op.y]):
        skip_next(state)

# --- 9xy0 SNE Vx, Vy ---
def decode_sne_reg(op: OperationState) -> Operation:
    return _op(op, "SNE", f"V{op.x:X}", f"V{op.y:X}")

def execute_sne_reg(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if not bytemath.equal(state.v[op.x], state.v[op.y]):
        skip_next(state)

# --- Bnnn JP V0, addr ---
def decode_jp_v0(op: OperationState) -> Operation:
    return _op(op, "JP", "V0", f"${op.nnn:03X}")

def execute_jp_v0(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    state.pc = bytemath.u16(op.nnn + state.v[0x0])

# --- Ex9E SKP Vx ---
def decode_skp(op: OperationState) -> Operation:
    return _op(op, "SKP", f"V{op.x:X}")

def execute_skp(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if io.keyboard.is_pressed(state.v[op.x]):
        skip_next(state)

# --- ExA1 SKNP Vx ---
def decode_sknp(op: OperationState) -> Operation:
    return _op(op, "SKNP", f"V{op.x:X}")

def execute_sknp(state: Chip8CpuState, bus: Bus, op: OperationState, io: Peripherals) -> None:
    if not io.keyboard.is_pressed(state.v[op.x]):
        skip_next(state)

"""
CHIP-8命令セット実装パッケージ。
"""
from chip8_tracer.common.errors import InvalidOpcodeError
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from .base import OperationState, Peripherals
from .maps import DECODE_MAP, EXECUTE_MAP, instruction_key

# @intent:responsibility 命令語をデコードし、表示用の Operation を返します。
# @intent:pre-condition 対応表に存在しない命令語は InvalidOpcodeError となります。
def decode_opcode(op: OperationState) -> Operation:
    decoder = DECODE_MAP.get(instruction_key(op.opcode))
    if decoder is None:
        raise InvalidOpcodeError("Unknown opcode", pc=op.pc, opcode=op.opcode)
    return decoder(op)

# @intent:responsibility デコード済みの命令を実行し、CPUの状態を変更します。
def execute_instruction(op: OperationState, state: Chip8CpuState, bus: Bus, io: Peripherals) -> None:
    """
    命令語に対応する実行関数を呼び出します。
    呼び出し時点で PC は既に次の命令を指している必要があります。
    """
    executor = EXECUTE_MAP.get(instruction_key(op.opcode))
    if executor is None:
        raise InvalidOpcodeError("Unknown opcode", pc=op.pc, opcode=op.opcode)
    executor(state, bus, op, io)

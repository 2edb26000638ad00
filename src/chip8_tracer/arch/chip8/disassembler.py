"""
CHIP-8逆アセンブラモジュール。

メモリ上のバイナリデータを解析し、CHIP-8アセンブリ言語のニーモニック形式に変換します。
"""
from typing import List, Tuple

from chip8_tracer.common.errors import InvalidOpcodeError
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.instructions import decode_opcode
from chip8_tracer.arch.chip8.instructions.base import OperationState, make_operation

# @intent:responsibility 命令語を Operation に変換します。未知の命令語はデータ (DW) として表示します。
def describe(op: OperationState) -> Operation:
    try:
        return decode_opcode(op)
    except InvalidOpcodeError:
        return make_operation(op, "DW", f"#${op.opcode:04X}")

# @intent:responsibility 指定されたメモリ範囲のバイナリデータを解析し、アドレスとニーモニックのリストを返します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    メモリ上のデータを読み取り、(アドレス, 16進ダンプ, ニーモニック) のタプルのリストを返します。
    全ての命令は2バイト長です。アドレス空間の末尾に1バイトだけ残った場合は "??" を返します。
    """
    result = []
    address_space = bus.get_address_space_size()
    current_addr = start_addr
    end_addr = min(start_addr + length, address_space)

    while current_addr < end_addr:
        if current_addr + 1 >= address_space:
            # ログを汚さないためにpeekを使用
            result.append((current_addr, f"{bus.peek(current_addr):02X}", "??"))
            break

        high = bus.peek(current_addr)
        low = bus.peek(current_addr + 1)
        op = OperationState(pc=current_addr, high_byte=high, low_byte=low)
        result.append((current_addr, f"{high:02X} {low:02X}", describe(op).to_assembly()))
        current_addr += 2

    return result

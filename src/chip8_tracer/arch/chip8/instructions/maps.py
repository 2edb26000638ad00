"""
CHIP-8 命令マッピング定義。
各命令モジュールから関数をインポートし、命令キーと関数の対応表を構築します。

命令キーはオペコードから可変フィールド (x, y, n, nn, nnn) をマスクした値です。
"""
from .alu import (
    decode_ld_reg, decode_or, decode_and, decode_xor, decode_add_reg, decode_sub,
    decode_shr, decode_subn, decode_shl,
    execute_ld_reg, execute_or, execute_and, execute_xor, execute_add_reg, execute_sub,
    execute_shr, execute_subn, execute_shl
)
from .load import (
    decode_ld_byte, decode_add_byte, decode_ld_i, decode_rnd, decode_ld_vx_dt, decode_ld_key,
    decode_ld_dt, decode_ld_st, decode_add_i, decode_ld_font, decode_ld_bcd,
    decode_store_regs, decode_load_regs,
    execute_ld_byte, execute_add_byte, execute_ld_i, execute_rnd, execute_ld_vx_dt, execute_ld_key,
    execute_ld_dt, execute_ld_st, execute_add_i, execute_ld_font, execute_ld_bcd,
    execute_store_regs, execute_load_regs
)
from .control import (
    decode_ret, decode_sys, decode_jp, decode_call, decode_se_byte, decode_sne_byte,
    decode_se_reg, decode_sne_reg, decode_jp_v0, decode_skp, decode_sknp,
    execute_ret, execute_sys, execute_jp, execute_call, execute_se_byte, execute_sne_byte,
    execute_se_reg, execute_sne_reg, execute_jp_v0, execute_skp, execute_sknp
)
from .display import decode_cls, decode_drw, execute_cls, execute_drw

# @intent:utility_function オペコードから対応表の検索キーを求めます。
def instruction_key(opcode: int) -> int:
    family = opcode & 0xF000
    if family == 0x0000:
        if opcode in (0x00E0, 0x00EE):
            return opcode
        return 0x0000
    if family in (0x5000, 0x8000, 0x9000):
        return opcode & 0xF00F
    if family in (0xE000, 0xF000):
        return opcode & 0xF0FF
    return family

DECODE_MAP = {
    0x0000: decode_sys,
    0x00E0: decode_cls,
    0x00EE: decode_ret,
    0x1000: decode_jp,
    0x2000: decode_call,
    0x3000: decode_se_byte,
    0x4000: decode_sne_byte,
    0x5000: decode_se_reg,
    0x6000: decode_ld_byte,
    0x7000: decode_add_byte,
    0x8000: decode_ld_reg,
    0x8001: decode_or,
    0x8002: decode_and,
    0x8003: decode_xor,
    0x8004: decode_add_reg,
    0x8005: decode_sub,
    0x8006: decode_shr,
    0x8007: decode_subn,
    0x800E: decode_shl,
    0x9000: decode_sne_reg,
    0xA000: decode_ld_i,
    0xB000: decode_jp_v0,
    0xC000: decode_rnd,
    0xD000: decode_drw,
    0xE09E: decode_skp,
    0xE0A1: decode_sknp,
    0xF007: decode_ld_vx_dt,
    0xF00A: decode_ld_key,
    0xF015: decode_ld_dt,
    0xF018: decode_ld_st,
    0xF01E: decode_add_i,
    0xF029: decode_ld_font,
    0xF033: decode_ld_bcd,
    0xF055: decode_store_regs,
    0xF065: decode_load_regs,
}

EXECUTE_MAP = {
    0x0000: execute_sys,
    0x00E0: execute_cls,
    0x00EE: execute_ret,
    0x1000: execute_jp,
    0x2000: execute_call,
    0x3000: execute_se_byte,
    0x4000: execute_sne_byte,
    0x5000: execute_se_reg,
    0x6000: execute_ld_byte,
    0x7000: execute_add_byte,
    0x8000: execute_ld_reg,
    0x8001: execute_or,
    0x8002: execute_and,
    0x8003: execute_xor,
    0x8004: execute_add_reg,
    0x8005: execute_sub,
    0x8006: execute_shr,
    0x8007: execute_subn,
    0x800E: execute_shl,
    0x9000: execute_sne_reg,
    0xA000: execute_ld_i,
    0xB000: execute_jp_v0,
    0xC000: execute_rnd,
    0xD000: execute_drw,
    0xE09E: execute_skp,
    0xE0A1: execute_sknp,
    0xF007: execute_ld_vx_dt,
    0xF00A: execute_ld_key,
    0xF015: execute_ld_dt,
    0xF018: execute_ld_st,
    0xF01E: execute_add_i,
    0xF029: execute_ld_font,
    0xF033: execute_ld_bcd,
    0xF055: execute_store_regs,
    0xF065: execute_load_regs,
}

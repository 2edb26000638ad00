"""
符号なし8ビット演算ユーティリティ。

CHIP-8のレジスタは全て符号なし8ビットです。比較や桁あふれ判定の前に必ず
0xFFでマスクし、符号付き比較による誤判定を防ぎます。
"""
from typing import Iterator, List

BYTE_MASK = 0xFF
WORD_MASK = 0xFFFF

# @intent:utility_function 任意の整数を符号なし8ビットに切り詰めます。
def u8(value: int) -> int:
    return value & BYTE_MASK

# @intent:utility_function 任意の整数を符号なし16ビットに切り詰めます。
def u16(value: int) -> int:
    return value & WORD_MASK

def equal(x: int, y: int) -> bool:
    return u8(x) == u8(y)

def gt(x: int, y: int) -> bool:
    """符号なし8ビットとして x > y を判定します。"""
    return u8(x) > u8(y)

def add(x: int, y: int) -> int:
    return u8(u8(x) + u8(y))

def subtract(x: int, y: int) -> int:
    return u8(u8(x) - u8(y))

# @intent:utility_function 9ビットの加算結果を返します。キャリー判定（> 0xFF）に使用します。
def add_with_overflow(x: int, y: int) -> int:
    return u8(x) + u8(y)

# @intent:utility_function 8ビット値を最上位ビットから順にビット列へ展開します。
def bits_msb_first(value: int) -> List[bool]:
    """
    例: 0xA0 -> [True, False, True, False, False, False, False, False]
    """
    value = u8(value)
    return [bool((value >> (7 - i)) & 1) for i in range(8)]

# @intent:responsibility 書き込み時に必ず8ビットへマスクするレジスタファイル。
# @intent:rationale VFはキャリー/ボロー/衝突フラグとしても使われますが、通常のスロットとして扱います。
class RegisterFile:
    """
    V0..VF の16本の符号なし8ビットレジスタ。
    インデックスアクセスで読み書きでき、書き込まれた値は自動的に mod 256 されます。
    """
    SIZE = 16

    def __init__(self, values=None):
        self._values = [0] * self.SIZE
        if values is not None:
            for i, v in enumerate(values):
                self[i] = v

    def _check(self, index: int) -> None:
        if not 0 <= index < self.SIZE:
            raise IndexError(f"Register V{index:X} does not exist.")

    def __getitem__(self, index: int) -> int:
        self._check(index)
        return self._values[index]

    def __setitem__(self, index: int, value: int) -> None:
        self._check(index)
        self._values[index] = u8(value)

    def __len__(self) -> int:
        return self.SIZE

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, RegisterFile):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        return "RegisterFile([" + ", ".join(f"0x{v:02X}" for v in self._values) + "])"

    def clear(self) -> None:
        self._values = [0] * self.SIZE

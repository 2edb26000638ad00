"""
例外階層の定義。

全ての例外は Chip8Error を継承します。ROMロード時の例外は回復可能なエラーとして
ドライバに返され、実行時の例外は CPU の step() 内で FATAL に変換されます。

Chip8Error
├── RomLoadError
│   ├── RomNotFoundError   (FileNotFoundError)
│   ├── RomOverflowError   (ValueError)
│   └── RomIOError         (OSError)
├── ExecutionError
│   ├── InvalidOpcodeError
│   ├── StackOverflowError
│   ├── StackUnderflowError
│   └── MemoryAccessError  (IndexError)
└── ConfigError            (ValueError)
"""
from typing import Optional


class Chip8Error(Exception):
    """パッケージ内の全ての例外の基底クラス。"""
    pass


# --- ROM Load ---

class RomLoadError(Chip8Error):
    """ROMファイルのロードに失敗した場合の基底例外。"""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RomNotFoundError(RomLoadError, FileNotFoundError):
    pass


class RomOverflowError(RomLoadError, ValueError):
    """ROMのサイズがプログラム領域（4096 - 512 バイト）を超えている。"""
    def __init__(self, message: str, path: Optional[str] = None, size: int = 0, limit: int = 0):
        super().__init__(message, path)
        self.size = size
        self.limit = limit


class RomIOError(RomLoadError, OSError):
    pass


# --- Execution ---

# @intent:responsibility 命令実行中の致命的なエラー。失敗したPCとオペコードを保持します。
class ExecutionError(Chip8Error):
    def __init__(self, message: str, pc: Optional[int] = None, opcode: Optional[int] = None):
        super().__init__(message)
        self.pc = pc
        self.opcode = opcode

    def __str__(self) -> str:
        base = super().__str__()
        if self.pc is None or self.opcode is None:
            return base
        return f"{base} (PC=0x{self.pc:04X}, opcode=0x{self.opcode:04X})"


class InvalidOpcodeError(ExecutionError):
    pass


class StackOverflowError(ExecutionError):
    pass


class StackUnderflowError(ExecutionError):
    pass


class MemoryAccessError(ExecutionError, IndexError):
    pass


# --- Config ---

class ConfigError(Chip8Error, ValueError):
    pass

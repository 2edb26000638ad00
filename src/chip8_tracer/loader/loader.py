# chip8_tracer/loader/loader.py
"""
ROMローダーモジュール。

CHIP-8のROMはヘッダもメタデータも持たない生のバイナリで、そのままアドレス 0x200 に配置されます。
"""
import logging
import os
from typing import Union

from chip8_tracer.common.errors import RomIOError, RomNotFoundError, RomOverflowError
from chip8_tracer.arch.chip8.state import MAX_ROM_SIZE

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

class RomLoader:
    """
    ROMファイルを読み込み、サイズを検証してバイト列を返すローダー。
    """
    def __init__(self, limit: int = MAX_ROM_SIZE):
        self._limit = limit

    # @intent:responsibility ROMファイルを読み込みます。
    # @intent:post-condition 戻り値の長さはプログラム領域のサイズ以下です。
    def load_rom(self, path: PathLike) -> bytes:
        path_str = os.fspath(path)
        try:
            with open(path_str, 'rb') as f:
                data = f.read()
        except FileNotFoundError as e:
            raise RomNotFoundError(f"ROM file not found: {path_str}", path=path_str) from e
        except IsADirectoryError as e:
            raise RomNotFoundError(f"ROM path is a directory: {path_str}", path=path_str) from e
        except OSError as e:
            raise RomIOError(f"Failed to read ROM file {path_str}: {e}", path=path_str) from e

        self.check_size(data, path_str)
        logger.info("Loaded ROM %s (%d bytes)", path_str, len(data))
        return data

    # @intent:responsibility ROMがプログラム領域に収まるかを検証します。
    def check_size(self, data: bytes, path: str = None) -> None:
        if len(data) > self._limit:
            raise RomOverflowError(
                f"ROM is too large: {len(data)} bytes (limit {self._limit} bytes)",
                path=path, size=len(data), limit=self._limit,
            )

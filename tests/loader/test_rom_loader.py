# tests/loader/test_rom_loader.py
"""
chip8_tracer.loader.loaderモジュールの単体テスト。
"""
import pytest

from chip8_tracer.common.errors import RomLoadError, RomNotFoundError, RomOverflowError
from chip8_tracer.arch.chip8.state import MAX_ROM_SIZE
from chip8_tracer.loader.loader import RomLoader

# @intent:test_suite ROMファイルの読み込み、サイズ検証、エラー変換を検証します。

class TestRomLoader:
    def test_load_rom(self, tmp_path):
        path = tmp_path / "test.ch8"
        path.write_bytes(bytes([0x00, 0xE0, 0x12, 0x00]))
        assert RomLoader().load_rom(path) == bytes([0x00, 0xE0, 0x12, 0x00])
        assert RomLoader().load_rom(str(path)) == bytes([0x00, 0xE0, 0x12, 0x00])

    def test_empty_rom(self, tmp_path):
        path = tmp_path / "empty.ch8"
        path.write_bytes(b"")
        assert RomLoader().load_rom(path) == b""

    # @intent:test_case_limit プログラム領域ちょうどのROMは受け入れ、1バイトでも超えると拒否することを検証します。
    def test_size_limit(self, tmp_path):
        fits = tmp_path / "fits.ch8"
        fits.write_bytes(bytes(MAX_ROM_SIZE))
        assert len(RomLoader().load_rom(fits)) == MAX_ROM_SIZE

        too_big = tmp_path / "big.ch8"
        too_big.write_bytes(bytes(MAX_ROM_SIZE + 1))
        with pytest.raises(RomOverflowError) as excinfo:
            RomLoader().load_rom(too_big)
        assert excinfo.value.size == MAX_ROM_SIZE + 1
        assert excinfo.value.limit == MAX_ROM_SIZE
        assert excinfo.value.path == str(too_big)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RomNotFoundError) as excinfo:
            RomLoader().load_rom(tmp_path / "missing.ch8")
        assert isinstance(excinfo.value, RomLoadError)

    def test_directory(self, tmp_path):
        with pytest.raises(RomLoadError):
            RomLoader().load_rom(tmp_path)

    def test_custom_limit(self):
        loader = RomLoader(limit=4)
        loader.check_size(bytes(4))
        with pytest.raises(RomOverflowError):
            loader.check_size(bytes(5))

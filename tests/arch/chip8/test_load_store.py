# tests/arch/chip8/test_load_store.py
"""
ロード/ストア、タイマー、インデックスレジスタ命令の単体テスト。
"""
import random

import pytest

from chip8_tracer.arch.chip8.state import FONT_GLYPH_SIZE

# @intent:test_suite メモリとレジスタ間の転送、BCD、タイマー命令の検証。

class TestImmediate:
    def test_ld_byte(self, harness):
        harness.execute(0x6A42)
        assert harness.state.v[0xA] == 0x42

    def test_ld_i(self, harness):
        harness.execute(0xA20A)
        assert harness.state.i == 0x20A

    # @intent:test_case_rnd 乱数は nn でマスクされることを検証します。
    def test_rnd_is_masked(self, harness):
        for _ in range(50):
            harness.execute(0xC30F)
            assert 0 <= harness.state.v[3] <= 0x0F
        harness.execute(0xC300)
        assert harness.state.v[3] == 0

    # @intent:test_case_rnd 同じシードでは同じ乱数列になることを検証します。
    def test_rnd_is_seeded(self, harness):
        expected = random.Random(1234).randrange(256) & 0xFF
        harness.execute(0xC5FF)
        assert harness.state.v[5] == expected

class TestTimers:
    def test_delay_and_sound_timer(self, harness):
        harness.state.v[1] = 30
        harness.execute(0xF115)
        assert harness.state.delay_timer == 30
        harness.execute(0xF118)
        assert harness.state.sound_timer == 30

        harness.state.delay_timer = 7
        harness.execute(0xF207)
        assert harness.state.v[2] == 7

    # @intent:test_case_key_wait Fx0A は待機先のレジスタを記録するだけで、ブロックしないことを検証します。
    def test_ld_key_records_register(self, harness):
        harness.execute(0xF40A)
        assert harness.state.key_wait_register == 4

class TestIndex:
    def test_add_i(self, harness):
        harness.state.i = 0x100
        harness.state.v[0] = 0xFF
        harness.execute(0xF01E)
        assert harness.state.i == 0x1FF

    def test_add_i_wraps_at_16_bits(self, harness):
        harness.state.i = 0xFFFF
        harness.state.v[0] = 0x02
        harness.execute(0xF01E)
        assert harness.state.i == 0x0001

    @pytest.mark.parametrize("digit", range(16))
    def test_font_address(self, harness, digit):
        harness.state.v[7] = digit
        harness.execute(0xF729)
        assert harness.state.i == digit * FONT_GLYPH_SIZE

    # @intent:test_case_font フォントの '0' のグリフがアドレス0にあることを検証します。
    def test_font_glyph_zero_in_memory(self, harness):
        harness.state.v[0] = 0
        harness.execute(0xF029)
        glyph = [harness.bus.read(harness.state.i + n) for n in range(5)]
        assert glyph == [0xF0, 0x90, 0x90, 0x90, 0xF0]

class TestBcd:
    # @intent:test_case_round_trip 全ての値について BCD の3桁を再結合すると元の値に戻ることを検証します。
    def test_bcd_round_trip(self, harness):
        harness.state.i = 0x300
        for value in range(256):
            harness.state.v[6] = value
            harness.execute(0xF633)
            d0, d1, d2 = (harness.bus.read(0x300 + n) for n in range(3))
            assert 100 * d0 + 10 * d1 + d2 == value
            assert all(0 <= d <= 9 for d in (d0, d1, d2))

    def test_bcd_digits(self, harness):
        harness.state.i = 0x300
        harness.state.v[6] = 254
        harness.execute(0xF633)
        assert [harness.bus.read(0x300 + n) for n in range(3)] == [2, 5, 4]

class TestRegisterBlock:
    # @intent:test_case_round_trip V0..Vx を保存し、ゼロにしたレジスタへ読み戻すと元の値になることを検証します。
    @pytest.mark.parametrize("x", range(16))
    def test_store_load_round_trip(self, harness, x):
        original = [(n * 17 + 3) & 0xFF for n in range(16)]
        for n, value in enumerate(original):
            harness.state.v[n] = value
        harness.state.i = 0x400

        harness.execute(0xF055 | (x << 8))
        harness.state.v.clear()
        harness.execute(0xF065 | (x << 8))

        assert list(harness.state.v)[:x + 1] == original[:x + 1]
        assert all(v == 0 for v in list(harness.state.v)[x + 1:])
        # I は変更されない
        assert harness.state.i == 0x400

    def test_store_only_touches_range(self, harness):
        harness.state.i = 0x400
        for n in range(16):
            harness.state.v[n] = 0xAA
        harness.execute(0xF255)
        assert [harness.bus.read(0x400 + n) for n in range(4)] == [0xAA, 0xAA, 0xAA, 0x00]

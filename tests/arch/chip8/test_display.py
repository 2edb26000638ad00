# tests/arch/chip8/test_display.py
"""
表示命令 (00E0, Dxyn) の単体テスト。
"""
from chip8_tracer.arch.chip8.state import DISPLAY_HEIGHT, DISPLAY_WIDTH

# @intent:test_suite スプライトの XOR 合成、衝突判定、クリッピングの検証。

def lit_pixels(state):
    return {(x, y) for y, row in enumerate(state.framebuffer) for x, lit in enumerate(row) if lit}

class TestClear:
    def test_cls(self, harness):
        harness.state.framebuffer[3][4] = True
        harness.execute(0x00E0)
        assert lit_pixels(harness.state) == set()
        assert harness.state.render_needed

class TestDraw:
    def _sprite(self, harness, address, rows):
        harness.bus.load(address, bytes(rows))
        harness.state.i = address

    def test_draw_font_glyph(self, harness):
        harness.state.i = 0  # '0'
        harness.execute(0xD005)
        fb = harness.state.framebuffer
        assert fb[0][:8] == [True, True, True, True, False, False, False, False]
        assert fb[1][:8] == [True, False, False, True, False, False, False, False]
        assert fb[4][:8] == [True, True, True, True, False, False, False, False]
        assert harness.state.v[0xF] == 0
        assert harness.state.render_needed

    # @intent:test_case_xor_erase 同じスプライトを同じ位置に2回描くと全て消え、VF=1 となることを検証します。
    def test_draw_twice_erases(self, harness):
        self._sprite(harness, 0x300, [0xFF, 0x81, 0xFF])
        harness.state.v[1] = 10
        harness.state.v[2] = 5
        harness.execute(0xD123)
        assert len(lit_pixels(harness.state)) == 8 + 2 + 8
        assert harness.state.v[0xF] == 0

        harness.execute(0xD123)
        assert lit_pixels(harness.state) == set()
        assert harness.state.v[0xF] == 1

    def test_partial_overlap_sets_collision(self, harness):
        self._sprite(harness, 0x300, [0x80])
        harness.execute(0xD001)
        self._sprite(harness, 0x301, [0xC0])
        harness.execute(0xD001)
        assert lit_pixels(harness.state) == {(1, 0)}
        assert harness.state.v[0xF] == 1

    # @intent:test_case_vf_reset 衝突がない描画では以前の VF が 0 に戻ることを検証します。
    def test_vf_cleared_without_collision(self, harness):
        harness.state.v[0xF] = 1
        self._sprite(harness, 0x300, [0x80])
        harness.execute(0xD001)
        assert harness.state.v[0xF] == 0

    # @intent:test_case_clipping 画面外にはみ出したピクセルは折り返さずに破棄されることを検証します。
    def test_clipping_right_and_bottom(self, harness):
        self._sprite(harness, 0x300, [0xFF, 0xFF])
        harness.state.v[1] = DISPLAY_WIDTH - 4
        harness.state.v[2] = DISPLAY_HEIGHT - 1
        harness.execute(0xD122)
        assert lit_pixels(harness.state) == {(x, DISPLAY_HEIGHT - 1) for x in range(DISPLAY_WIDTH - 4, DISPLAY_WIDTH)}
        assert not any(harness.state.framebuffer[0])
        assert not any(row[0] for row in harness.state.framebuffer)

    # @intent:test_case_origin_wrap 開始座標は画面サイズで剰余を取ることを検証します。
    def test_origin_wraps(self, harness):
        self._sprite(harness, 0x300, [0x80])
        harness.state.v[1] = DISPLAY_WIDTH + 3
        harness.state.v[2] = DISPLAY_HEIGHT + 2
        harness.execute(0xD121)
        assert lit_pixels(harness.state) == {(3, 2)}

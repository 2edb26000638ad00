# tests/hardware/test_keyboard.py
"""
chip8_tracer.hardware.keyboardモジュールの単体テスト。
"""
import threading
import time

import pytest

from chip8_tracer.hardware.keyboard import KEY_MAP, Keyboard

# @intent:test_suite キーパッドの押下状態、物理キーのマッピング、ブロッキング待機を検証します。

class TestKeyboard:
    def test_press_release_idempotent(self):
        keyboard = Keyboard()
        keyboard.press(0xA)
        keyboard.press(0xA)
        assert keyboard.is_pressed(0xA)
        assert keyboard.pressed_keys() == [0xA]
        keyboard.release(0xA)
        keyboard.release(0xA)
        assert not keyboard.is_pressed(0xA)

    def test_invalid_key(self):
        keyboard = Keyboard()
        with pytest.raises(ValueError):
            keyboard.press(0x10)
        assert keyboard.is_pressed(0x10) is False

    def test_default_map_covers_all_keys(self):
        assert sorted(KEY_MAP.values()) == list(range(16))

    # @intent:test_case_physical 物理キー名（大文字小文字を区別しない）から CHIP-8 キーへ変換されることを検証します。
    def test_physical_keys(self):
        keyboard = Keyboard()
        assert keyboard.press_physical("W")
        assert keyboard.is_pressed(0x5)
        assert keyboard.release_physical("w")
        assert not keyboard.is_pressed(0x5)
        assert keyboard.press_physical("p") is False

    def test_custom_key_map(self):
        keyboard = Keyboard({"P": 0x5})
        keyboard.press_physical("p")
        assert keyboard.is_pressed(0x5)
        assert keyboard.get_key_map()["p"] == 0x5
        with pytest.raises(ValueError):
            Keyboard({"p": 0x10})

    def test_wait_returns_lowest_pressed(self):
        keyboard = Keyboard()
        keyboard.press(0x9)
        keyboard.press(0x3)
        assert keyboard.wait_for_key_press() == 0x3
        # 待機はキーを解放しない
        assert keyboard.is_pressed(0x3)

    # @intent:test_case_blocking キーが押されるまで呼び出し元をブロックすることを検証します。
    def test_wait_blocks_until_press(self):
        keyboard = Keyboard()
        results = []
        worker = threading.Thread(target=lambda: results.append(keyboard.wait_for_key_press()), daemon=True)
        worker.start()
        worker.join(0.1)
        assert worker.is_alive()

        keyboard.press(0x7)
        worker.join(2.0)
        assert results == [0x7]

    # @intent:test_case_waiter 待機中は停止点に入り、解放操作では再開せず、押下でのみ再開することを検証します。
    def test_wait_parks_until_press(self):
        keyboard = Keyboard()
        results = []
        worker = threading.Thread(target=lambda: results.append(keyboard.wait_for_key_press()), daemon=True)
        worker.start()
        deadline = time.monotonic() + 2.0
        while not keyboard.is_waiting() and time.monotonic() < deadline:
            time.sleep(0.005)
        assert keyboard.is_waiting()

        keyboard.release(0x2)
        worker.join(0.1)
        assert worker.is_alive()

        keyboard.press(0xA)
        worker.join(2.0)
        assert results == [0xA]
        assert not keyboard.is_waiting()

    def test_release_all(self):
        keyboard = Keyboard()
        keyboard.press(1)
        keyboard.press(2)
        keyboard.release_all()
        assert keyboard.pressed_keys() == []

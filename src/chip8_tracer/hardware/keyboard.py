# chip8_tracer/hardware/keyboard.py
"""
CHIP-8 16キー・キーパッド。

ホストの入力イベント（別スレッド）から press/release され、CPU の実行スレッドから
is_pressed / wait_for_key_press で参照されます。CPU のロックとは独立した専用のロックを
使用し、「CPUがキー入力を待つ」と「入力スレッドがCPUのロックを待つ」の循環待ちを防ぎます。
キー入力待ちのブロッキングは Breakpointer で行い、押下時に解放されます。
"""
import logging
import threading
from typing import Dict, List, Mapping, Optional

from chip8_tracer.core.breakpointer import Breakpointer

logger = logging.getLogger(__name__)

KEY_COUNT = 16

# @intent:constant 物理キー（小文字の文字）から CHIP-8 キー番号への既定マッピング。
#                  左上の 4x4 ブロック (1234 / QWER / ASDF / ZXCV) を COSMAC VIP の配列に対応付けます。
KEY_MAP: Dict[str, int] = {
    "x": 0x0,
    "1": 0x1,
    "2": 0x2,
    "3": 0x3,
    "q": 0x4,
    "w": 0x5,
    "e": 0x6,
    "a": 0x7,
    "s": 0x8,
    "d": 0x9,
    "z": 0xA,
    "c": 0xB,
    "4": 0xC,
    "r": 0xD,
    "f": 0xE,
    "v": 0xF,
}

# @intent:responsibility 16キーの押下状態をスレッドセーフに管理します。
class Keyboard:
    """
    16キーの状態テーブル。

    press/release は冪等です。wait_for_key_press() はいずれかのキーが押されるまで
    呼び出し元をブロックし、押されているキーのうち最小の番号を返します（キーは解放しません）。
    """
    def __init__(self, key_map: Optional[Mapping[str, int]] = None):
        self._lock = threading.Lock()
        # キー入力待ちの停止点。押下で解放されます。
        self._waiter = Breakpointer()
        self._key_state: List[bool] = [False] * KEY_COUNT
        mapping = dict(KEY_MAP)
        if key_map:
            mapping.update({k.lower(): v for k, v in key_map.items()})
        for index in mapping.values():
            self._check_key(index)
        self._key_map = mapping

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key {key} is not a CHIP-8 key (0x0-0xF).")

    def get_key_map(self) -> Dict[str, int]:
        return dict(self._key_map)

    def press(self, key: int) -> None:
        self._check_key(key)
        with self._lock:
            if not self._key_state[key]:
                logger.debug("Key pressed: 0x%X", key)
            self._key_state[key] = True
            self._waiter.set_should_wait(False)
            self._waiter.end_wait()

    def release(self, key: int) -> None:
        self._check_key(key)
        with self._lock:
            if self._key_state[key]:
                logger.debug("Key released: 0x%X", key)
            self._key_state[key] = False

    # @intent:responsibility 物理キー名で押下を通知します。マッピングされていないキーは無視します。
    # @intent:return キーがマッピングされていれば True。
    def press_physical(self, name: str) -> bool:
        key = self._key_map.get(name.lower())
        if key is None:
            return False
        self.press(key)
        return True

    def release_physical(self, name: str) -> bool:
        key = self._key_map.get(name.lower())
        if key is None:
            return False
        self.release(key)
        return True

    # @intent:responsibility キーが押されているかをブロックせずに返します。範囲外のキーは False です。
    def is_pressed(self, key: int) -> bool:
        if not 0 <= key < KEY_COUNT:
            return False
        with self._lock:
            return self._key_state[key]

    def pressed_keys(self) -> List[int]:
        with self._lock:
            return [i for i, pressed in enumerate(self._key_state) if pressed]

    # @intent:responsibility いずれかのキーが押されるまでブロックし、そのキー番号を返します。
    # @intent:rationale タイムアウトは設けません。再開はキー押下のみによって行われます。
    # @intent:pre-condition 待機ポリシーはキー状態の確認と同じロック下で設定されるため、
    #                       確認から待機までの間の押下は取りこぼしません。
    def wait_for_key_press(self) -> int:
        while True:
            with self._lock:
                key = self._first_key_pressed()
                if key is not None:
                    return key
                self._waiter.set_should_wait(True)
            self._waiter.wait_for_signal()

    def is_waiting(self) -> bool:
        return self._waiter.is_waiting

    def _first_key_pressed(self) -> Optional[int]:
        for i, pressed in enumerate(self._key_state):
            if pressed:
                return i
        return None

    def release_all(self) -> None:
        with self._lock:
            self._key_state = [False] * KEY_COUNT

# chip8_tracer/core/breakpointer.py
"""
Breakpointer (協調的な一時停止ポイント)

モニタ（ミューテックス + 条件変数）に基づく待機/解放プリミティブです。
CPUはステップ実行の直前にこの待機ポイントを通過し、デバッガからの再開を待ちます。
"""
import logging
import threading

logger = logging.getLogger(__name__)

# @intent:responsibility 「次の待機ポイントで停止すべきか」のポリシーと、現在停止中かどうかを管理します。
# @intent:rationale should_wait の変更は次回の wait_for_signal() から有効になり、
#                  待機中でないときに False にしても過去に遡って再開することはありません。
class Breakpointer:
    """
    協調的な一時停止ポイント。

    - ``set_should_wait(flag)``: 次の待機ポイントで停止するかどうかを設定します。
    - ``wait_for_signal()``: should_wait が False なら即座に戻り、True なら ``end_wait()`` が
      別スレッドから呼ばれるまでブロックします。
    - ``end_wait()``: 停止中のスレッドを再開させます。停止中でなければ何もしません。
    """
    def __init__(self, start_wait: bool = False):
        self._condition = threading.Condition(threading.Lock())
        self._should_wait = start_wait
        self._is_waiting = False

    @property
    def should_wait(self) -> bool:
        with self._condition:
            return self._should_wait

    @property
    def is_waiting(self) -> bool:
        with self._condition:
            return self._is_waiting

    def set_should_wait(self, should_wait: bool) -> None:
        with self._condition:
            self._should_wait = should_wait

    # @intent:responsibility 停止中であれば待機を終了させます。
    def end_wait(self) -> None:
        with self._condition:
            if not self._is_waiting:
                return
            self._is_waiting = False
            self._condition.notify_all()

    # @intent:responsibility should_wait が True の場合、end_wait() が呼ばれるまで呼び出し元をブロックします。
    # @intent:return 実際に停止した場合は True。
    def wait_for_signal(self) -> bool:
        with self._condition:
            if not self._should_wait:
                return False
            self._is_waiting = True
            # wait_until_paused() で待っているスレッドを起こす
            self._condition.notify_all()
            logger.debug("Paused at breakpoint")
            while self._is_waiting:
                self._condition.wait()
            return True

    # @intent:responsibility 指定時間内に停止状態へ入るまで待ちます。UIやテストの同期用。
    def wait_until_paused(self, timeout: float) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: self._is_waiting, timeout)

# chip8_tracer/hardware/clock.py
"""
ClockSimulator (周期実行スケジューラ)

指定された周波数（Hz）で作業単位を繰り返し呼び出します。
作業は単一のワーカースレッド上で直列に実行されるため、周期を超過しても再入はしません。
"""
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# @intent:responsibility 作業関数を一定周期で呼び出し、作業が False を返すか cancel() されるまで続けます。
# @intent:rationale 周期を超過した場合は遅れを取り戻すための連続実行（バースト）は行わず、
#                  現在時刻を基準にスケジュールをやり直します。
class ClockSimulator:
    """
    周期実行スケジューラ。

    Example::

        clock = ClockSimulator(60)
        clock.with_clock_regulation(lambda: cpu.tick_timers() or True)
        ...
        clock.cancel()
    """
    def __init__(self, hz: int, name: Optional[str] = None):
        if hz <= 0:
            raise ValueError(f"Clock frequency must be positive, got {hz}.")
        self._hz = hz
        self._period = 1.0 / hz
        self._name = name or f"{hz}hz Timer"
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._tick_count = 0

    @property
    def hz(self) -> int:
        return self._hz

    # @intent:responsibility 周波数を変更します。次の周期から有効になります。
    @hz.setter
    def hz(self, hz: int) -> None:
        if hz <= 0:
            raise ValueError(f"Clock frequency must be positive, got {hz}.")
        self._hz = hz
        self._period = 1.0 / hz

    @property
    def period_ms(self) -> float:
        return 1000.0 / self._hz

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # @intent:responsibility 作業関数の周期実行をバックグラウンドスレッドで開始します。
    # @intent:pre-condition 1つの ClockSimulator は一度だけ開始できます。
    def with_clock_regulation(self, work: Callable[[], bool]) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Clock '{self._name}' has already been started.")
        self._thread = threading.Thread(target=self._run, args=(work,), name=self._name, daemon=True)
        self._thread.start()
        logger.debug("Clock '%s' started (period %.3f ms)", self._name, self.period_ms)

    def _run(self, work: Callable[[], bool]) -> None:
        next_tick = time.monotonic()
        while not self._cancelled.is_set():
            try:
                keep_going = work()
            except Exception:
                logger.exception("Clock '%s' work raised; stopping", self._name)
                raise
            self._tick_count += 1
            if not keep_going:
                logger.debug("Clock '%s' stopped by its work", self._name)
                return

            next_tick += self._period
            delay = next_tick - time.monotonic()
            if delay > 0:
                self._cancelled.wait(delay)
            else:
                # 周期超過: 遅れは取り戻さない
                next_tick = time.monotonic()
        logger.debug("Clock '%s' cancelled", self._name)

    # @intent:responsibility 次の周期以降の呼び出しを停止します。実行中の作業は最後まで実行されます。
    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """スレッドの終了を待ちます。終了していれば True を返します。"""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

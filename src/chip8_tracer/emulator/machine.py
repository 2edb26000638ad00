# chip8_tracer/emulator/machine.py
"""
エミュレータのドライバ。

命令クロック（既定 500Hz）と 60Hz のタイマークロックの2つの ClockSimulator で
CPU を駆動します。CPU が HALTED または FATAL を返した時点で両方のクロックを停止します。
"""
import logging
import threading
from typing import Callable, List, Optional

from chip8_tracer.core.cpu import ExecutionResult
from chip8_tracer.hardware.clock import ClockSimulator
from chip8_tracer.hardware.keyboard import Keyboard
from chip8_tracer.hardware.speaker import Speaker
from chip8_tracer.loader.loader import PathLike
from chip8_tracer.arch.chip8.cpu import Chip8Cpu

logger = logging.getLogger(__name__)

DEFAULT_CPU_HZ = 500
DEFAULT_TIMER_HZ = 60

FinishListener = Callable[[ExecutionResult], None]

# @intent:responsibility CPU とクロックを束ね、ROM のロードから実行、一時停止、停止までを制御します。
class Chip8Machine:
    """
    CHIP-8 マシン全体。UI や CLI はこのクラスを介してエミュレータを操作します。
    """
    def __init__(self, cpu: Chip8Cpu, speaker: Optional[Speaker] = None,
                 cpu_hz: int = DEFAULT_CPU_HZ, timer_hz: int = DEFAULT_TIMER_HZ):
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ValueError("Clock frequencies must be positive.")
        self._cpu = cpu
        self._speaker = speaker
        self._cpu_hz = cpu_hz
        self._timer_hz = timer_hz
        self._cpu_clock: Optional[ClockSimulator] = None
        self._timer_clock: Optional[ClockSimulator] = None
        self._result: Optional[ExecutionResult] = None
        self._finished = threading.Event()
        self._finish_listeners: List[FinishListener] = []

    @property
    def cpu(self) -> Chip8Cpu:
        return self._cpu

    @property
    def keyboard(self) -> Keyboard:
        return self._cpu.get_keyboard()

    @property
    def speaker(self) -> Optional[Speaker]:
        return self._speaker

    @property
    def cpu_hz(self) -> int:
        return self._cpu_hz

    @property
    def timer_hz(self) -> int:
        return self._timer_hz

    def add_finish_listener(self, listener: FinishListener) -> None:
        self._finish_listeners.append(listener)

    # @intent:responsibility 最後の実行が HALTED/FATAL で終了した場合、その結果を返します。実行中は None です。
    def get_result(self) -> Optional[ExecutionResult]:
        return self._result

    def is_running(self) -> bool:
        return self._cpu_clock is not None and self._cpu_clock.is_running()

    # @intent:responsibility 命令クロックの周波数を変更します。実行中であれば次の周期から有効です。
    def set_cpu_hz(self, hz: int) -> None:
        if hz <= 0:
            raise ValueError(f"Clock frequency must be positive, got {hz}.")
        self._cpu_hz = hz
        if self._cpu_clock is not None:
            self._cpu_clock.hz = hz

    def set_volume(self, volume: float) -> None:
        if self._speaker is not None:
            self._speaker.set_volume(volume)

    # --- Run Control ---

    # @intent:responsibility 実行中のプログラムを停止し、ROMをロードして実行を開始します。
    # @intent:pre-condition ROMのロードに失敗した場合は例外を送出し、クロックは開始しません。
    def load_and_run(self, path: PathLike) -> None:
        self.stop()
        self._cpu.load_rom(path)
        self.start()

    # @intent:responsibility 現在ロードされているプログラムの実行を開始します。
    def start(self) -> None:
        if self.is_running():
            return
        self._result = None
        self._finished.clear()
        self._cpu_clock = ClockSimulator(self._cpu_hz, name="CPU Clock")
        self._timer_clock = ClockSimulator(self._timer_hz, name="Timer Clock")
        self._timer_clock.with_clock_regulation(self._cpu.tick_timers)
        self._cpu_clock.with_clock_regulation(self._cycle)
        logger.info("Machine started (cpu %d Hz, timers %d Hz)", self._cpu_hz, self._timer_hz)

    # @intent:responsibility 命令クロックの作業関数。CONTINUE 以外でクロックを止めます。
    def _cycle(self) -> bool:
        result = self._cpu.step()
        if result == ExecutionResult.CONTINUE:
            return True
        self._finish(result)
        return False

    def _finish(self, result: ExecutionResult) -> None:
        self._result = result
        if self._timer_clock is not None:
            self._timer_clock.cancel()
        if self._speaker is not None:
            self._speaker.end_beep()
        if result == ExecutionResult.FATAL:
            logger.warning("Machine stopped: %s", self._cpu.get_last_fault())
        else:
            logger.info("Machine stopped: %s", result.value)
        self._finished.set()
        for listener in list(self._finish_listeners):
            listener(result)

    # @intent:responsibility 両方のクロックを停止します。ブレークポイントで停止中のCPUは解放されます。
    # @intent:rationale キー入力待ち (Fx0A) でブロックしているスレッドは解放できません。クロックはデーモンスレッドのため、プロセス終了は妨げません。
    def stop(self, timeout: float = 1.0) -> None:
        cpu_clock, timer_clock = self._cpu_clock, self._timer_clock
        if cpu_clock is None:
            return
        cpu_clock.cancel()
        if timer_clock is not None:
            timer_clock.cancel()
        self._cpu.set_should_wait(False)
        self._cpu.end_wait()
        if not cpu_clock.join(timeout):
            logger.warning("CPU clock did not stop within %.1f s (waiting for a key?)", timeout)
        if timer_clock is not None:
            timer_clock.join(timeout)
        if self._speaker is not None:
            self._speaker.end_beep()
        self._cpu_clock = None
        self._timer_clock = None

    # @intent:responsibility HALTED/FATAL で終了するまで待ちます。
    def wait_until_finished(self, timeout: Optional[float] = None) -> bool:
        return self._finished.wait(timeout)

    # --- Debug Control ---

    def pause(self) -> None:
        self._cpu.set_should_wait(True)

    def resume(self) -> None:
        self._cpu.set_should_wait(False)
        self._cpu.end_wait()

    def is_paused(self) -> bool:
        return self._cpu.get_breakpointer().is_waiting

    # @intent:responsibility 一時停止中のCPUを1命令だけ進めます。
    # @intent:return 停止中でなかった場合は False。
    def step_instruction(self) -> bool:
        breakpointer = self._cpu.get_breakpointer()
        if not breakpointer.is_waiting:
            return False
        breakpointer.end_wait()
        return True

# chip8_tracer/debugger/debugger.py
"""
デバッガモジュール。

CPUのデバッガリスナーとして各サイクルの Snapshot を受け取り、ユーザーが指定した条件
（ブレークポイント）に一致した場合に Breakpointer を有効化して実行を中断させる責務を負います。
中断は次の step() の先頭（命令実行前）で発生します。
"""
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from chip8_tracer.core.cpu import AbstractCpu, ExecutionResult
from chip8_tracer.core.snapshot import Snapshot
from chip8_tracer.transport.bus import BusAccessType

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1000

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    レジスタ名は "v0".."vf", "i", "pc", "sp", "delay_timer", "sound_timer" です（大文字小文字を区別しません）。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用
    enabled: bool = True                  # 有効/無効状態

# @intent:responsibility CPUの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントと実行履歴の管理を行うクラス。
    """
    def __init__(self, cpu: AbstractCpu, history_size: int = DEFAULT_HISTORY_SIZE):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_state = None
        self._last_snapshot: Optional[Snapshot] = None
        self._hit: Optional[BreakpointCondition] = None
        # @intent:responsibility 直近の実行履歴を上限付きで保持します。
        self._history: Deque[Snapshot] = deque(maxlen=history_size)
        cpu.add_debugger_listener(self.on_snapshot)

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    # @intent:responsibility 最後にヒットしたブレークポイントを返します。再開時にクリアされます。
    def get_hit_breakpoint(self) -> Optional[BreakpointCondition]:
        return self._hit

    # @intent:responsibility CPUからのスナップショット通知を受け取り、履歴の記録とブレークポイント判定を行います。
    def on_snapshot(self, snapshot: Snapshot) -> None:
        if snapshot.operation is None:
            # リセット通知: 履歴を破棄して基準状態のみ更新する
            self._history.clear()
            self._previous_state = snapshot.state
            self._last_snapshot = snapshot
            return

        self._history.append(snapshot)
        self._last_snapshot = snapshot
        hit = self._check_breakpoints(snapshot)
        self._previous_state = snapshot.state
        if hit is not None:
            self._hit = hit
            logger.info("Breakpoint hit (%s) at PC: %#06x", hit.condition_type.value, snapshot.state.pc)
            self._cpu.set_should_wait(True)

    def _check_breakpoints(self, snapshot: Snapshot) -> Optional[BreakpointCondition]:
        """
        Snapshotに基づいて全てのブレークポイントをチェックし、最初にヒットした条件を返します。
        """
        current_state = snapshot.state

        for bp in list(self._breakpoints):
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.PC_MATCH:
                if current_state.pc == bp.value:
                    return bp
            elif bp.condition_type == BreakpointConditionType.MEMORY_READ:
                if bp.address in snapshot.accessed_addresses(BusAccessType.READ):
                    return bp
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                if bp.address in snapshot.accessed_addresses(BusAccessType.WRITE):
                    return bp
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name and current_state.get_register(bp.register_name) == bp.value:
                    return bp
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name and self._previous_state is not None:
                    current = current_state.get_register(bp.register_name)
                    previous = self._previous_state.get_register(bp.register_name)
                    if current is not None and current != previous:
                        return bp
        return None

    # --- Execution Control ---

    # @intent:responsibility 次の命令の実行前で停止するよう要求します。
    def pause(self) -> None:
        self._cpu.set_should_wait(True)

    # @intent:responsibility 停止を解除し、連続実行を再開します。
    def resume(self) -> None:
        self._hit = None
        self._cpu.set_should_wait(False)
        self._cpu.end_wait()

    # @intent:responsibility 1命令だけ実行します。
    def step_instruction(self) -> Optional[ExecutionResult]:
        """
        CPUがブレークポイントで停止中であれば1命令分だけ解放し、None を返します（停止状態は維持されます）。
        停止中でなければ呼び出し元のスレッドで直接1命令を実行し、その結果を返します。
        """
        breakpointer = self._cpu.get_breakpointer()
        if breakpointer.is_waiting:
            breakpointer.end_wait()
            return None

        armed = breakpointer.should_wait
        breakpointer.set_should_wait(False)
        try:
            return self._cpu.step()
        finally:
            if armed:
                breakpointer.set_should_wait(True)

    # @intent:responsibility 呼び出し元のスレッドでCPUを連続実行します。
    def run(self, max_steps: Optional[int] = None) -> ExecutionResult:
        """
        ブレークポイントにヒットするか、HALTED/FATAL になるか、stop() が呼ばれるまで実行を継続します。
        クロックを使わない実行（テストやバッチ実行）用です。
        """
        self._running = True
        self._hit = None
        self._cpu.set_should_wait(False)
        result = ExecutionResult.CONTINUE
        steps = 0

        while self._running:
            result = self._cpu.step()
            steps += 1
            if result != ExecutionResult.CONTINUE or self._hit is not None:
                break
            if max_steps is not None and steps >= max_steps:
                break

        self._running = False
        return result

    def stop(self) -> None:
        self._running = False

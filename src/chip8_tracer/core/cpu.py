# chip8_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。

全ての状態変更は1つのロック (``_lock``) の内側で行われます。ブレークポイントでの待機と
リスナーへの通知はロックの外側で行われるため、待機中もタイマーの更新は継続します。
"""
import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from chip8_tracer.common.errors import ExecutionError
from chip8_tracer.common.types import FrameBuffer, RegisterLayoutInfo, RenderListener
from chip8_tracer.core.breakpointer import Breakpointer
from chip8_tracer.core.snapshot import Snapshot, Operation, Metadata
from chip8_tracer.core.state import CpuState
from chip8_tracer.transport.bus import Bus

logger = logging.getLogger(__name__)

DebuggerListener = Callable[[Snapshot], None]

# @intent:responsibility 1命令サイクルの実行結果を表します。
class ExecutionResult(Enum):
    CONTINUE = "CONTINUE"  # 次のサイクルへ進める
    HALTED = "HALTED"      # 正常終了（PCがメモリ外、または 0x0000 の終端命令）
    FATAL = "FATAL"        # 回復不能なエラー。ドライバはクロックを停止する

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化、
    およびリスナーへの通知を提供します。
    """
    # @intent:responsibility CPUの状態とバスへの参照を初期化します。
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus, breakpointer: Optional[Breakpointer] = None):
        self._bus = bus
        self._lock = threading.Lock()
        self._breakpointer = breakpointer if breakpointer is not None else Breakpointer()
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        self._last_fault: Optional[ExecutionError] = None
        self._debugger_listeners: List[DebuggerListener] = []
        self._render_listeners: List[RenderListener] = []
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`または`get_snapshot()`を介して行う。

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        具体的なCPUアーキテクチャはこのメソッドを実装し、
        そのアーキテクチャに特化したCpuStateのサブクラスを返します。
        """
        pass

    # --- Listener ---

    def add_debugger_listener(self, listener: DebuggerListener) -> None:
        self._debugger_listeners.append(listener)

    def remove_debugger_listener(self, listener: DebuggerListener) -> None:
        if listener in self._debugger_listeners:
            self._debugger_listeners.remove(listener)

    def add_render_listener(self, listener: RenderListener) -> None:
        self._render_listeners.append(listener)

    def remove_render_listener(self, listener: RenderListener) -> None:
        if listener in self._render_listeners:
            self._render_listeners.remove(listener)

    # @intent:responsibility 凍結されたスナップショットとフレームを登録済みのリスナーへ同期的に配信します。
    # @intent:pre-condition CPUのロックを保持していない状態で呼び出す必要があります。
    def _notify(self, snapshot: Optional[Snapshot], frame: Optional[FrameBuffer]) -> None:
        if frame is not None:
            for listener in list(self._render_listeners):
                listener(frame)
        if snapshot is not None:
            for listener in list(self._debugger_listeners):
                listener(snapshot)

    # --- Breakpoint ---

    def get_breakpointer(self) -> Breakpointer:
        return self._breakpointer

    def set_should_wait(self, should_wait: bool) -> None:
        self._breakpointer.set_should_wait(should_wait)

    def end_wait(self) -> None:
        self._breakpointer.end_wait()

    # --- State ---

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        """
        CPUの全ての状態とメモリを初期値にリセットし、リスナーへ通知します。
        """
        with self._lock:
            self._reset_locked()
            snapshot = self._create_snapshot(None)
            frame = self._take_frame(force=True)
        self._notify(snapshot, frame)

    # @intent:responsibility ロック保持中にリセット処理を行います。サブクラスはメモリ初期化などを追加します。
    def _reset_locked(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0
        self._last_fault = None
        self._bus.get_and_clear_activity_log()

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        """
        現在のCPUの状態（ライブオブジェクト）を返します。
        別スレッドから参照する場合は get_snapshot() を使用してください。
        """
        return self._state

    # @intent:responsibility 現在の状態の凍結コピーをロック下で取得します。
    def get_snapshot(self) -> Snapshot:
        with self._lock:
            return self._create_snapshot(None)

    def get_bus(self) -> Bus:
        return self._bus

    def get_cycle_count(self) -> int:
        return self._cycle_count

    # @intent:responsibility 直近の FATAL の原因となった例外を返します。
    def get_last_fault(self) -> Optional[ExecutionError]:
        return self._last_fault

    # --- Instruction Cycle ---

    # @intent:responsibility メモリから次の命令をフェッチします。
    @abstractmethod
    def _fetch(self) -> Any:
        """
        現在のPCからメモリの次の命令をフェッチし、デコード可能な形で返します。
        PCの更新は _update_pc() で行います。
        """
        pass

    # @intent:responsibility フェッチした命令を解析し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, fetched: Any) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, fetched: Any, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果を返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー
    #                  （ブレークポイント待機→フェッチ→デコード→PC更新→実行→待機解決→通知）を定義します。
    #                  アーキテクチャ固有の振る舞い（終端判定、入力待ちなど）はフックメソッドで対応します。
    def step(self) -> ExecutionResult:
        """
        CPUを1命令サイクル進めます。
        サイクル終了時にデバッガリスナーへ Snapshot を、描画が必要であればレンダーリスナーへ
        フレームバッファのコピーを通知します。
        """
        # 1. ブレークポイント（ロックの外で待機）
        self._breakpointer.wait_for_signal()

        with self._lock:
            # 2. 前処理: 前サイクルまでの残存ログを破棄
            self._bus.get_and_clear_activity_log()
            initial_pc = self._state.pc

            # 3. HALT判定 (Hook)
            if self._handle_halt(initial_pc):
                return self._halt(initial_pc)

            try:
                # 4. フェッチ
                fetched = self._fetch()
                if self._is_end_of_program(fetched):
                    return self._halt(initial_pc)

                # 5. デコード
                operation = self._decode(fetched)

                # 6. PC更新 (Hook)
                self._update_pc(operation)

                # 7. 実行
                self._execute(fetched, operation)
            except ExecutionError as e:
                return self._fault(e)

            self._cycle_count += operation.cycle_count
            suspended = self._needs_suspension()

        # 8. ロックを解放した状態での待機 (Hook)
        if suspended:
            self._suspend()

        # 9. 後処理 & Snapshot生成
        with self._lock:
            snapshot = self._create_snapshot(operation, fetched)
            frame = self._take_frame()
        self._notify(snapshot, frame)
        return ExecutionResult.CONTINUE

    # @intent:responsibility 命令フェッチ前にHALT状態かどうかを判定します。
    def _handle_halt(self, current_pc: int) -> bool:
        """
        デフォルトは、PCがバスのアドレス空間の外にある場合にHALTとします。
        """
        return current_pc + 1 >= self._bus.get_address_space_size()

    # @intent:responsibility フェッチした命令がプログラムの終端を示すかどうかを判定します。
    def _is_end_of_program(self, fetched: Any) -> bool:
        return False

    # @intent:responsibility 命令実行前にPCを更新します。
    def _update_pc(self, operation: Operation) -> None:
        """
        命令実行前のPC更新。デフォルトは命令長分進める。
        """
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility 実行後、ロックを解放して待機する必要があるかどうかを返します。
    def _needs_suspension(self) -> bool:
        return False

    # @intent:responsibility ロックを保持しない状態で行うブロッキング待機。サブクラスが必要に応じて実装します。
    def _suspend(self) -> None:
        pass

    def _halt(self, pc: int) -> ExecutionResult:
        logger.info("Program halted at PC=0x%04X", pc)
        return ExecutionResult.HALTED

    def _fault(self, error: ExecutionError) -> ExecutionResult:
        self._last_fault = error
        logger.warning("Fatal execution error: %s", error)
        return ExecutionResult.FATAL

    # @intent:responsibility 現在の状態から通知用のスナップショットを生成します。
    # @intent:pre-condition ロック保持中に呼び出す必要があります。
    def _create_snapshot(self, operation: Optional[Operation], fetched: Any = None) -> Snapshot:
        bus_activity = tuple(self._bus.get_and_clear_activity_log())
        symbol_info = operation.to_assembly() if operation is not None else None
        return Snapshot(
            state=self._freeze_state(),
            operation=operation,
            metadata=Metadata(
                cycle_count=self._cycle_count,
                symbol_info=symbol_info,
                render_needed=self._is_render_needed(),
            ),
            next_operation=self._lookahead(fetched),
            bus_activity=bus_activity,
        )

    # @intent:responsibility ライブの状態を共有しない凍結コピーを返します。
    @abstractmethod
    def _freeze_state(self) -> Any:
        pass

    def _lookahead(self, fetched: Any) -> Optional[Operation]:
        return None

    def _is_render_needed(self) -> bool:
        return False

    # @intent:responsibility 描画が必要であればフレームバッファのコピーを取り出し、描画フラグを下ろします。
    def _take_frame(self, force: bool = False) -> Optional[FrameBuffer]:
        return None

    # --- Inspection ---

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        UIがCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """
        レジスタをUI上でどのように配置・グループ化すべきかの定義を返す。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass

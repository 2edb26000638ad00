# src/chip8_tracer/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。
"""
import logging
import random
from typing import Dict, List, Optional, Tuple

from chip8_tracer.common.errors import MemoryAccessError
from chip8_tracer.common.types import FrameBuffer, RegisterInfo, RegisterLayoutInfo
from chip8_tracer.core.breakpointer import Breakpointer
from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.hardware.keyboard import Keyboard
from chip8_tracer.hardware.speaker import Speaker
from chip8_tracer.loader.loader import PathLike, RomLoader
from chip8_tracer.arch.chip8.state import Chip8CpuState, Chip8StateSnapshot, FONT_SET, PROGRAM_START
from chip8_tracer.arch.chip8.instructions import decode_opcode, execute_instruction
from chip8_tracer.arch.chip8.instructions.base import OperationState, Peripherals
from chip8_tracer.arch.chip8 import disassembler

logger = logging.getLogger(__name__)

# @intent:responsibility CHIP-8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 CPUをエミュレートするクラス。

    命令クロックから ``step()`` が、60Hzのタイマークロックから ``tick_timers()`` が
    それぞれ別スレッドで呼び出されることを想定しています。
    """
    # @intent:responsibility Chip8Cpuを初期化します。
    def __init__(self, bus: Bus, keyboard: Keyboard, speaker: Optional[Speaker] = None,
                 rng: Optional[random.Random] = None, breakpointer: Optional[Breakpointer] = None,
                 rom_loader: Optional[RomLoader] = None):
        super().__init__(bus, breakpointer)
        self._keyboard = keyboard
        self._speaker = speaker
        self._io = Peripherals(keyboard, rng if rng is not None else random.Random())
        self._rom_loader = rom_loader if rom_loader is not None else RomLoader()

    # @intent:responsibility CHIP-8の初期状態を生成します。
    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    def get_keyboard(self) -> Keyboard:
        return self._keyboard

    # --- ROM Load / Reset ---

    # @intent:responsibility ROMファイルを読み込み、CPUをリセットしてプログラム領域へ配置します。
    # @intent:pre-condition ファイルが存在しない、または大きすぎる場合は例外を送出し、現在の状態は変更しません。
    def load_rom(self, path: PathLike) -> None:
        data = self._rom_loader.load_rom(path)
        self.load_program(data)

    # @intent:responsibility バイト列をプログラムとしてロードします。
    def load_program(self, data: bytes) -> None:
        """
        全ての状態をリセットし、フォントをアドレス0に、プログラムを 0x200 に配置します。
        """
        self._rom_loader.check_size(data)
        with self._lock:
            self._reset_locked()
            self._bus.load(PROGRAM_START, bytes(data))
            snapshot = self._create_snapshot(None)
            frame = self._take_frame(force=True)
        self._notify(snapshot, frame)

    # @intent:responsibility メモリをクリアし、フォントセットを再配置します。
    def _reset_locked(self) -> None:
        super()._reset_locked()
        self._bus.clear()
        self._bus.load(0x000, FONT_SET)
        if self._speaker is not None:
            self._speaker.end_beep()

    # --- Instruction Cycle ---

    # @intent:responsibility メモリから次の命令語をフェッチします。
    def _fetch(self) -> OperationState:
        return OperationState.fetch(self._bus, self._state.pc)

    # @intent:responsibility 0x0000 はプログラム終端とみなします（CHIP-8の命令ではありません）。
    def _is_end_of_program(self, fetched: OperationState) -> bool:
        return fetched.opcode == 0x0000

    def _decode(self, fetched: OperationState) -> Operation:
        return decode_opcode(fetched)

    # @intent:responsibility 命令を実行します。バス範囲外へのアクセスは MemoryAccessError に変換します。
    def _execute(self, fetched: OperationState, operation: Operation) -> None:
        self._state.render_needed = False
        try:
            execute_instruction(fetched, self._state, self._bus, self._io)
        except MemoryAccessError:
            raise
        except IndexError as e:
            raise MemoryAccessError(str(e), pc=fetched.pc, opcode=fetched.opcode) from e

    def _needs_suspension(self) -> bool:
        return self._state.key_wait_register is not None

    # @intent:responsibility Fx0A のキー入力待ち。CPUのロックを解放したまま待機し、押下後にロックを取り直して Vx へ書き込みます。
    # @intent:rationale 待機中も 60Hz のタイマー更新を止めないためです。
    def _suspend(self) -> None:
        key = self._keyboard.wait_for_key_press()
        with self._lock:
            register = self._state.key_wait_register
            # 待機中にリセットされた場合は破棄する
            if register is not None:
                self._state.v[register] = key
                self._state.key_wait_register = None

    # --- Timer ---

    # @intent:responsibility 遅延タイマーとサウンドタイマーを1つ減らし（下限0）、スピーカーのトーン要求を更新します。
    # @intent:return ClockSimulator の作業関数として使えるよう、常に True を返します。
    def tick_timers(self) -> bool:
        with self._lock:
            state = self._state
            if state.delay_timer > 0:
                state.delay_timer -= 1
            if state.sound_timer > 0:
                state.sound_timer -= 1
            beeping = state.sound_timer > 0
        if self._speaker is not None:
            if beeping:
                self._speaker.start_beep_if_not_started()
            else:
                self._speaker.end_beep()
        return True

    # --- Snapshot ---

    def _freeze_state(self) -> Chip8StateSnapshot:
        return self._state.snapshot()

    def _is_render_needed(self) -> bool:
        return self._state.render_needed

    def _lookahead(self, fetched: Optional[OperationState]) -> Optional[Operation]:
        if fetched is None or fetched.next_opcode is None:
            return None
        next_op = OperationState.from_opcode(fetched.next_opcode, pc=fetched.pc + 2)
        return disassembler.describe(next_op)

    def _take_frame(self, force: bool = False) -> Optional[FrameBuffer]:
        if not (force or self._state.render_needed):
            return None
        self._state.render_needed = False
        return self._state.copy_framebuffer()

    # --- Inspection ---

    # @intent:responsibility UI表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        with self._lock:
            s = self._state
            registers = {f"V{i:X}": value for i, value in enumerate(s.v)}
            registers.update({
                "I": s.i, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer
            })
        return registers

    # @intent:responsibility UIのレジスタ表示レイアウト（グループ化）を定義します。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General Purpose", [RegisterInfo(f"V{i:X}", 8) for i in range(16)]),
            RegisterLayoutInfo("Index/Pointers", [
                RegisterInfo("I", 16), RegisterInfo("PC", 16), RegisterInfo("SP", 8)
            ]),
            RegisterLayoutInfo("Timers", [
                RegisterInfo("DT", 8), RegisterInfo("ST", 8)
            ]),
        ]

    # @intent:responsibility 現在のフレームバッファのコピーを返します。
    def get_framebuffer(self) -> FrameBuffer:
        with self._lock:
            return self._state.copy_framebuffer()

    # @intent:responsibility 指定範囲のメモリを逆アセンブルします。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        with self._lock:
            return disassembler.disassemble(self._bus, start_addr, length)

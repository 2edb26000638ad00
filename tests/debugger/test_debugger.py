# tests/debugger/test_debugger.py
"""
chip8_tracer.debugger.debuggerモジュールの単体テスト。
Debuggerの実行制御、ブレークポイント管理、および条件チェック機能を検証します。
"""
import pytest

from chip8_tracer.core.cpu import ExecutionResult
from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.hardware.keyboard import Keyboard
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.debugger.debugger import BreakpointCondition, BreakpointConditionType, Debugger

# @intent:test_suite デバッガのブレークポイントと実行制御機能の検証。

def program(*opcodes: int) -> bytes:
    return b"".join(bytes([(op >> 8) & 0xFF, op & 0xFF]) for op in opcodes)

# V0..V2 を設定し、0x300 へ保存してから I を変更して無限ループする
TEST_PROGRAM = program(0x6001, 0x6142, 0x6203, 0xA300, 0xF255, 0xF065, 0xA400, 0x120E)

class TestDebugger:
    """
    Debuggerの単体テスト。
    """
    @pytest.fixture
    def setup_debugger(self):
        bus = Bus()
        bus.register_device(0x000, 0xFFF, RAM(0x1000))
        cpu = Chip8Cpu(bus, Keyboard())
        debugger = Debugger(cpu)
        cpu.load_program(TEST_PROGRAM)
        return debugger, cpu

    # @intent:test_case_add_remove_breakpoint ブレークポイントの追加と削除が正しく行われることを検証します。
    def test_add_remove_breakpoint(self, setup_debugger):
        debugger, _ = setup_debugger
        bp1 = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204)
        bp2 = BreakpointCondition(BreakpointConditionType.MEMORY_WRITE, address=0x300)

        debugger.add_breakpoint(bp1)
        debugger.add_breakpoint(bp2)
        debugger.add_breakpoint(bp1)  # 重複追加は無視される
        assert debugger.get_breakpoints() == [bp1, bp2]

        debugger.remove_breakpoint(bp1)
        debugger.remove_breakpoint(bp1)  # 存在しないブレークポイントの削除はエラーにならない
        assert debugger.get_breakpoints() == [bp2]

    def test_update_breakpoint(self, setup_debugger):
        debugger, _ = setup_debugger
        bp = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204)
        disabled = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204, enabled=False)
        debugger.add_breakpoint(bp)
        debugger.update_breakpoint(bp, disabled)
        assert debugger.get_breakpoints() == [disabled]

    # @intent:test_case_pc_match PCが指定アドレスに到達した時点で実行が中断されることを検証します。
    def test_pc_match(self, setup_debugger):
        debugger, cpu = setup_debugger
        bp = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204)
        debugger.add_breakpoint(bp)

        assert debugger.run(max_steps=100) == ExecutionResult.CONTINUE
        assert debugger.get_hit_breakpoint() == bp
        assert cpu.get_state().pc == 0x204
        assert cpu.get_breakpointer().should_wait
        assert len(debugger.get_history()) == 2

    def test_memory_write(self, setup_debugger):
        debugger, cpu = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.MEMORY_WRITE, address=0x301))
        debugger.run(max_steps=100)
        assert debugger.get_last_snapshot().operation.to_assembly() == "LD [I], V2"
        assert cpu.get_bus().peek(0x301) == 0x42

    def test_memory_read(self, setup_debugger):
        debugger, _ = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.MEMORY_READ, address=0x300))
        debugger.run(max_steps=100)
        assert debugger.get_last_snapshot().operation.to_assembly() == "LD V0, [I]"

    def test_register_value(self, setup_debugger):
        debugger, cpu = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(
            BreakpointConditionType.REGISTER_VALUE, value=0x42, register_name="V1"))
        debugger.run(max_steps=100)
        assert cpu.get_state().pc == 0x204

    # @intent:test_case_register_change レジスタの値が前回のスナップショットから変化した時に中断することを検証します。
    def test_register_change(self, setup_debugger):
        debugger, cpu = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.REGISTER_CHANGE, register_name="i"))
        debugger.run(max_steps=100)
        assert cpu.get_state().i == 0x300
        assert cpu.get_state().pc == 0x208

        debugger.resume()
        debugger.run(max_steps=100)
        assert cpu.get_state().i == 0x400

    def test_disabled_breakpoint_is_ignored(self, setup_debugger):
        debugger, _ = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204, enabled=False))
        debugger.run(max_steps=10)
        assert debugger.get_hit_breakpoint() is None
        assert len(debugger.get_history()) == 10

    # @intent:test_case_step 停止中でなければ呼び出し元のスレッドで1命令実行し、停止要求は維持されることを検証します。
    def test_step_instruction_after_hit(self, setup_debugger):
        debugger, cpu = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204))
        debugger.run()

        assert debugger.step_instruction() == ExecutionResult.CONTINUE
        assert cpu.get_state().pc == 0x206
        assert cpu.get_breakpointer().should_wait

        debugger.resume()
        assert debugger.get_hit_breakpoint() is None
        assert not cpu.get_breakpointer().should_wait

    def test_run_until_halt(self):
        bus = Bus()
        bus.register_device(0x000, 0xFFF, RAM(0x1000))
        cpu = Chip8Cpu(bus, Keyboard())
        debugger = Debugger(cpu)
        cpu.load_program(program(0x6001, 0x7001))
        assert debugger.run() == ExecutionResult.HALTED
        assert cpu.get_state().v[0] == 2

    # @intent:test_case_history リセット通知で履歴が破棄され、履歴の長さは上限を超えないことを検証します。
    def test_history(self, setup_debugger):
        debugger, cpu = setup_debugger
        debugger.run(max_steps=5)
        assert len(debugger.get_history()) == 5
        assert debugger.get_history()[0].operation.to_assembly() == "LD V0, #$01"

        cpu.reset()
        assert debugger.get_history() == []
        assert debugger.get_last_snapshot().operation is None

        bounded = Debugger(cpu, history_size=3)
        cpu.load_program(TEST_PROGRAM)
        bounded.run(max_steps=5)
        assert len(bounded.get_history()) == 3

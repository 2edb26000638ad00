# tests/arch/chip8/test_operation_state.py
"""
chip8_tracer.arch.chip8.instructions.base.OperationState の単体テスト。
"""
import pytest

from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.arch.chip8.instructions.base import OperationState

# @intent:test_suite 16ビット命令語のフィールド分解とフェッチ処理の検証。

class TestOperationStateFields:
    # @intent:test_case_fields 各フィールドが正しいマスクとシフトで取り出されることを検証します。
    def test_fields_of_dxyn(self):
        op = OperationState.from_opcode(0xD125)
        assert op.opcode == 0xD125
        assert op.high_byte == 0xD1
        assert op.low_byte == 0x25
        assert op.high_nibble == 0xD
        assert op.x == 0x1
        assert op.y == 0x2
        assert op.n == 0x5
        assert op.nn == 0x25
        assert op.nnn == 0x125

    @pytest.mark.parametrize("opcode, nnn", [(0x1000, 0x000), (0x1FFF, 0xFFF), (0xA20A, 0x20A)])
    def test_nnn(self, opcode, nnn):
        assert OperationState.from_opcode(opcode).nnn == nnn

    # @intent:test_case_str 文字列表現に16進と2進が含まれることを検証します。
    def test_str(self):
        assert str(OperationState.from_opcode(0x00E0)) == "0x00E0 (0000000011100000)"

    def test_immutable(self):
        op = OperationState.from_opcode(0x6A01)
        with pytest.raises(AttributeError):
            op.high_byte = 0

class TestOperationStateFetch:
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x000, 0xFFF, RAM(0x1000))
        return bus

    # @intent:test_case_fetch フェッチはログ付きで2バイトを読み、次の命令語は先読みされることを検証します。
    def test_fetch_with_lookahead(self, bus):
        bus.load(0x200, bytes([0xA2, 0x0A, 0xD0, 0x05]))
        op = OperationState.fetch(bus, 0x200)
        assert op.pc == 0x200
        assert op.opcode == 0xA20A
        assert op.next_opcode == 0xD005
        # 先読みは peek のため、ログには現在の命令の2バイトのみ
        log = bus.get_and_clear_activity_log()
        assert [a.address for a in log] == [0x200, 0x201]

    # @intent:test_case_boundary メモリ末尾では先読みを行わないことを検証します。
    def test_fetch_at_end_of_memory(self, bus):
        bus.load(0xFFE, bytes([0x12, 0x00]))
        op = OperationState.fetch(bus, 0xFFE)
        assert op.opcode == 0x1200
        assert op.next_opcode is None

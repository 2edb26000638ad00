# tests/transport/test_bus.py
"""
chip8_tracer.transport.busモジュールの単体テスト。
"""
import pytest
from chip8_tracer.transport.bus import Bus, BusAccess, BusAccessType, RAM

# @intent:test_suite 共通バスとRAMデバイスの基本的な機能、アクセスログ、エラーハンドリングを検証します。

class TestRAM:
    """
    RAMデバイスの単体テスト。
    """
    # @intent:test_case_init 無効なサイズでRAMを初期化するとValueErrorが発生することを検証します。
    def test_ram_init_invalid_size(self):
        for size in (0, -1, 1.5):
            with pytest.raises(ValueError, match="RAM size must be a positive integer."):
                RAM(size)

    # @intent:test_case_oob 境界外アドレスへのアクセス時にIndexErrorが発生することを検証します。
    def test_ram_read_write_out_of_bounds(self):
        ram = RAM(4)
        with pytest.raises(IndexError, match="Address 4 out of bounds for RAM of size 4."):
            ram.read(4)
        with pytest.raises(IndexError, match="Address -1 out of bounds for RAM of size 4."):
            ram.write(-1, 0x00)

    def test_ram_write_invalid_data(self):
        ram = RAM(1)
        with pytest.raises(ValueError, match="Data 256 is not an 8-bit value."):
            ram.write(0, 0x100)

    def test_load_data_and_clear(self):
        ram = RAM(8)
        ram.load_data(2, bytes([1, 2, 3]))
        assert [ram.read(a) for a in range(8)] == [0, 0, 1, 2, 3, 0, 0, 0]
        with pytest.raises(IndexError):
            ram.load_data(6, bytes([1, 2, 3]))
        ram.clear()
        assert all(ram.read(a) == 0 for a in range(8))

class TestBus:
    """
    Busの単体テスト。
    """
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x000, 0xFFF, RAM(0x1000))
        return bus

    def test_address_space_size(self, bus):
        assert Bus().get_address_space_size() == 0
        assert bus.get_address_space_size() == 0x1000

    # @intent:test_case_register 複数のデバイスにまたがる読み書きでオフセットが正しく計算されることを検証します。
    def test_bus_read_write_multiple_devices(self):
        bus = Bus()
        ram_a = RAM(16)
        ram_b = RAM(16)
        bus.register_device(0x0000, 0x000F, ram_a)
        bus.register_device(0x0010, 0x001F, ram_b)

        bus.write(0x001A, 0xBB)
        assert bus.read(0x001A) == 0xBB
        assert ram_b.read(0x0A) == 0xBB

    # @intent:test_case_unmapped マップされていないアドレスへのアクセス時にIndexErrorが発生することを検証します。
    def test_bus_access_unmapped_address(self, bus):
        with pytest.raises(IndexError, match="Address 0x1000 not mapped to any device."):
            bus.read(0x1000)
        with pytest.raises(IndexError, match="Address 0x1000 not mapped to any device."):
            bus.write(0x1000, 0xCC)

    def test_bus_register_invalid_address_range(self):
        bus = Bus()
        with pytest.raises(ValueError, match="Invalid address range"):
            bus.register_device(0x0010, 0x000F, RAM(16))

    def test_bus_register_ram_size_mismatch(self):
        bus = Bus()
        with pytest.raises(ValueError, match=r"Registered RAM device size \(10 bytes\)"):
            bus.register_device(0x0000, 0x000F, RAM(10))

    def test_bus_register_invalid_device_type(self):
        bus = Bus()
        class NotADevice: pass
        with pytest.raises(TypeError, match="Device must be an instance of a class derived from Device."):
            bus.register_device(0x0000, 0x000F, NotADevice())

    # @intent:test_case_activity_log read/write は記録され、peek/load は記録されないことを検証します。
    def test_activity_log(self, bus):
        bus.load(0x200, bytes([0xA2, 0x0A]))
        assert bus.peek(0x200) == 0xA2
        assert bus.get_and_clear_activity_log() == []

        bus.read(0x201)
        bus.write(0x300, 0x42)
        log = bus.get_and_clear_activity_log()
        assert log == [
            BusAccess(0x201, 0x0A, BusAccessType.READ),
            BusAccess(0x300, 0x42, BusAccessType.WRITE),
        ]
        assert bus.get_and_clear_activity_log() == []

    # @intent:test_case_load_across_devices 一括ロードがデバイス境界をまたいでも正しく配置されることを検証します。
    def test_load_across_devices(self):
        bus = Bus()
        bus.register_device(0x00, 0x03, RAM(4))
        bus.register_device(0x04, 0x07, RAM(4))
        bus.load(0x02, bytes([1, 2, 3, 4]))
        assert [bus.peek(a) for a in range(8)] == [0, 0, 1, 2, 3, 4, 0, 0]

    def test_load_out_of_range(self, bus):
        with pytest.raises(IndexError):
            bus.load(0xFFF, bytes([1, 2]))

    def test_clear(self, bus):
        bus.write(0x10, 0xFF)
        bus.clear()
        assert bus.peek(0x10) == 0
        assert bus.get_and_clear_activity_log() == []

# chip8_tracer/transport/bus.py
"""
Transport Layer (メモリバス)

CHIP-8 の 4KB アドレス空間をデバイスへ振り分けます。
命令実行中の read/write は全てアクセスログに残り、1サイクル分のログが Snapshot に添付されます。
ローダーやインスペクタ向けの load/peek はログに残りません。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Tuple

# @intent:responsibility アクセスの方向。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 1回分のバスアクセスの記録。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int
    access_type: BusAccessType

# @intent:responsibility バスに接続できるデバイスのインターフェース。アドレスはデバイス先頭からのオフセットです。
class Device(ABC):
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

    # @intent:responsibility 電源投入直後の内容（ゼロ）に戻します。既定では何もしません。
    def clear(self) -> None:
        pass

# @intent:responsibility ゼロ初期化されたバイト配列によるメインメモリ。
class RAM(Device):
    """
    固定長のRAM。範囲外のアドレスは IndexError、8ビットに収まらない値は ValueError です。
    """
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._size = size
        self._cells = bytearray(size)

    def _check(self, address: int) -> None:
        if address < 0 or address >= self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")

    def read(self, address: int) -> int:
        self._check(address)
        return self._cells[address]

    def write(self, address: int, data: int) -> None:
        self._check(address)
        if data < 0 or data > 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._cells[address] = data

    # @intent:responsibility フォントやROMを連続領域へまとめて配置します。
    def load_data(self, address: int, data: bytes) -> None:
        end = address + len(data)
        if address < 0 or end > self._size:
            raise IndexError(f"Block {address}..{end - 1} out of bounds for RAM of size {self._size}.")
        self._cells[address:end] = data

    def clear(self) -> None:
        self._cells = bytearray(self._size)

    def get_size(self) -> int:
        return self._size

class _Mapping(NamedTuple):
    start: int
    end: int  # 終端アドレス（この値を含む）
    device: Device

# @intent:responsibility アドレスからデバイスを解決し、アクセスを委譲してログに記録します。
class Bus:
    """
    デバイスのアドレスマップとアクセスログを保持します。
    範囲の重複は検査しません（先に登録されたデバイスが優先されます）。
    """
    def __init__(self):
        self._mappings: List[_Mapping] = []
        self._activity: List[BusAccess] = []

    # @intent:pre-condition 0 <= start <= end。RAM の場合はサイズと範囲の長さが一致している必要があります。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if start_address < 0 or start_address > end_address:
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")
        span = end_address - start_address + 1
        if isinstance(device, RAM) and device.get_size() != span:
            raise ValueError(
                f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                f"the specified address range size ({span} bytes)."
            )
        self._mappings.append(_Mapping(start_address, end_address, device))

    # @intent:responsibility 最も高い終端アドレス + 1 を返します。デバイスが無ければ 0 です。
    def get_address_space_size(self) -> int:
        return max((m.end + 1 for m in self._mappings), default=0)

    def _resolve(self, address: int) -> Tuple[Device, int]:
        for mapping in self._mappings:
            if mapping.start <= address <= mapping.end:
                return mapping.device, address - mapping.start
        raise IndexError(f"Address {address:#06x} not mapped to any device.")

    def read(self, address: int) -> int:
        device, offset = self._resolve(address)
        data = device.read(offset)
        self._activity.append(BusAccess(address, data, BusAccessType.READ))
        return data

    def write(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        device.write(offset, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE))

    # @intent:responsibility ログに残さない読み出し。逆アセンブラや先読みで使用します。
    def peek(self, address: int) -> int:
        device, offset = self._resolve(address)
        return device.read(offset)

    # @intent:responsibility ログに残さない一括書き込み。同一RAM内に収まる場合はまとめて転送します。
    def load(self, address: int, data: bytes) -> None:
        if not data:
            return
        first, offset = self._resolve(address)
        last, _ = self._resolve(address + len(data) - 1)
        if first is last and isinstance(first, RAM):
            first.load_data(offset, bytes(data))
            return
        for i, value in enumerate(data):
            device, device_offset = self._resolve(address + i)
            device.write(device_offset, value)

    def get_and_clear_activity_log(self) -> List[BusAccess]:
        activity, self._activity = self._activity, []
        return activity

    # @intent:responsibility 全デバイスをゼロクリアし、ログも破棄します。
    def clear(self) -> None:
        for mapping in self._mappings:
            mapping.device.clear()
        self._activity = []

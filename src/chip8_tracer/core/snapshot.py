# chip8_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1サイクル実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
Debugger Listener への通知と、デバッガの実行履歴に用いる責務を負います。
"""
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from chip8_tracer.transport.bus import BusAccessType, BusAccess


# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "A20A"
    mnemonic: str # 例: "LD"
    operands: Tuple[str, ...] = () # 例: ("I", "$20A")
    cycle_count: int = 1 # 命令実行に必要なサイクル数（CHIP-8では常に1）
    length: int = 2 # 命令のバイト長

    # @intent:responsibility 表示用のアセンブリ表記を返します。
    def to_assembly(self) -> str:
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic} " + ", ".join(self.operands)

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、シンボル情報など）を記録するデータクラス。
    """
    cycle_count: int
    symbol_info: Optional[str] = None # 例: "DRW V0, V0, 5"
    render_needed: bool = False

# @intent:responsibility ある一時点におけるCPUとバスの完全な状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    ある一時点における、CPUとバスの状態を記録した不変のデータ構造。
    state にはライブの状態ではなく、凍結されたコピーが格納されます。
    """
    state: Any
    operation: Optional[Operation]  # リセット直後は None
    metadata: Metadata
    next_operation: Optional[Operation] = None
    bus_activity: Tuple[BusAccess, ...] = ()

    # @intent:utility_function このサイクルで指定された種類のバスアクセスがあったアドレス一覧を返します。
    def accessed_addresses(self, access_type: BusAccessType) -> Tuple[int, ...]:
        return tuple(a.address for a in self.bus_activity if a.access_type == access_type)

"""
逆アセンブルコードを表示するウィジェット。
"""
from typing import List, Tuple

from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem, QHeaderView
from PySide6.QtGui import QColor

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.ui.theme import get_monospace_font

HIGHLIGHT = QColor("#404000")
NORMAL = QColor("#101010")

# @intent:responsibility 逆アセンブルされたコードを表形式で表示し、現在のPCをハイライトするUIウィジェットを提供します。
class CodeView(QWidget):
    """
    逆アセンブルコードを表示するウィジェット。
    """
    WINDOW_BYTES = 512  # 一度に逆アセンブルする範囲
    SCROLL_MARGIN = 5   # ハイライト行の下に常に確保する行数

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Address", "Bytes", "Mnemonic"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.Stretch)
        self.table.setFont(get_monospace_font(10))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setShowGrid(False)
        self.table.setStyleSheet("background-color: #101010; color: #BBBBBB; gridline-color: #303030;")
        layout.addWidget(self.table)

        # 現在表示している逆アセンブルデータ [(addr, hex, mnemonic), ...]
        self.disassembled_data: List[Tuple[int, str, str]] = []
        self._highlighted_row = -1

    # @intent:responsibility 指定されたPC周辺のメモリを逆アセンブルして表示を更新します。
    def update_code(self, cpu: AbstractCpu, pc: int):
        """
        PCが現在の表示範囲内にあれば、再描画せずにハイライト移動のみ行います。
        """
        row_index = self._row_of(pc)
        if row_index == -1:
            self.disassembled_data = cpu.disassemble(pc, self.WINDOW_BYTES)
            self.table.setRowCount(len(self.disassembled_data))
            for row, (addr, hex_dump, mnemonic) in enumerate(self.disassembled_data):
                self.table.setItem(row, 0, QTableWidgetItem(f"{addr:04X}"))
                self.table.setItem(row, 1, QTableWidgetItem(hex_dump))
                self.table.setItem(row, 2, QTableWidgetItem(mnemonic))
            self._highlighted_row = -1
            row_index = self._row_of(pc)

        self._set_row_color(self._highlighted_row, NORMAL)
        self._set_row_color(row_index, HIGHLIGHT)
        self._highlighted_row = row_index

        if row_index != -1:
            self.table.scrollToItem(self.table.item(row_index, 0), QTableWidget.EnsureVisible)
            look_ahead_index = min(row_index + self.SCROLL_MARGIN, self.table.rowCount() - 1)
            if look_ahead_index > row_index:
                self.table.scrollToItem(self.table.item(look_ahead_index, 0), QTableWidget.EnsureVisible)

    def _row_of(self, pc: int) -> int:
        for i, (addr, _, _) in enumerate(self.disassembled_data):
            if addr == pc:
                return i
        return -1

    def _set_row_color(self, row: int, color: QColor) -> None:
        if not 0 <= row < self.table.rowCount():
            return
        for column in range(3):
            item = self.table.item(row, column)
            if item is not None:
                item.setBackground(color)

    # @intent:responsibility 内部キャッシュをクリアし、強制的な再描画を準備します。
    def reset_cache(self):
        """
        メモリ内容が変更された場合（例：新しいROMのロード）に呼び出してください。
        """
        self.disassembled_data = []
        self._highlighted_row = -1
        self.table.setRowCount(0)

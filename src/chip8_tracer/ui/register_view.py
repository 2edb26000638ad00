# src/chip8_tracer/ui/register_view.py
"""
レジスタ表示ウィジェット。
CPU が提供するレイアウト定義 (get_register_layout) からグループごとの欄を組み立てます。
"""
from typing import Dict, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.ui.theme import get_monospace_font_family

GROUP_STYLE = """
    QGroupBox { font-weight: bold; border: 1px solid #222; border-radius: 4px;
                margin-top: 20px; color: #EEE; background-color: #121212; }
    QGroupBox::title { subcontrol-origin: margin; left: 10px; padding: 0 5px; color: #00AAAA; }
"""

# @intent:responsibility V0-VF、I、PC、SP、タイマーを16進で表示します。
class RegisterView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(5, 5, 5, 5)
        self._value_style = f"font-family: '{get_monospace_font_family()}', monospace; color: #FFD700;"
        # レジスタ名 -> (表示ラベル, 16進桁数)
        self._fields: Dict[str, tuple] = {}
        self._cpu: Optional[AbstractCpu] = None

    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._rebuild()

    def _rebuild(self) -> None:
        while self._layout.count():
            widget = self._layout.takeAt(0).widget()
            if widget is not None:
                widget.deleteLater()
        self._fields.clear()

        for group in self._cpu.get_register_layout():
            box = QGroupBox(group.group_name)
            box.setStyleSheet(GROUP_STYLE)
            form = QFormLayout(box)
            form.setContentsMargins(10, 15, 10, 10)
            for reg in group.registers:
                digits = (reg.width + 3) // 4
                value = QLabel("0x" + "0" * digits)
                value.setStyleSheet(self._value_style)
                value.setAlignment(Qt.AlignRight)
                form.addRow(QLabel(f"{reg.name}:"), value)
                self._fields[reg.name] = (value, digits)
            self._layout.addWidget(box)
        self._layout.addStretch()

    # @intent:responsibility CPU から現在値を取得して表示を更新します。
    def update_registers(self) -> None:
        if self._cpu is None:
            return
        for name, value in self._cpu.get_register_map().items():
            field = self._fields.get(name)
            if field is not None:
                label, digits = field
                label.setText(f"0x{value:0{digits}X}")

    def get_displayed_value(self, name: str) -> Optional[str]:
        field = self._fields.get(name)
        return field[0].text() if field is not None else None

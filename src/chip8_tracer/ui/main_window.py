# src/chip8_tracer/ui/main_window.py
"""
メインウィンドウの実装。
アプリケーションの主要なUIコンポーネントを保持し、レイアウトを管理します。

CPU と タイマーは ClockSimulator のスレッド上で動作するため、CPUからの通知は
シグナル (CpuSignalBridge) を経由してUIスレッドへ渡されます。
"""
import logging
import os
from typing import Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal, Slot
from PySide6.QtGui import QAction, QCloseEvent, QColor, QKeyEvent, QPalette
from PySide6.QtWidgets import (
    QApplication, QDockWidget, QFileDialog, QLabel, QMainWindow, QMessageBox, QSlider, QSpinBox,
    QTabWidget, QToolBar
)

from chip8_tracer.common.errors import RomLoadError
from chip8_tracer.config.models import Palette, SystemConfig
from chip8_tracer.core.cpu import ExecutionResult
from chip8_tracer.debugger.debugger import Debugger
from chip8_tracer.emulator.machine import Chip8Machine
from chip8_tracer.hardware.speaker import ToneSpeaker
from .code_view import CodeView
from .display_view import DisplayView
from .register_view import RegisterView
from .theme import get_monospace_font_family

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_MS = 100
MAX_CPU_HZ = 5000

# @intent:responsibility CPU/クロックのスレッドからの通知をUIスレッドへ中継します。
class CpuSignalBridge(QObject):
    frame_ready = Signal(object)
    finished = Signal(object)
    tone_changed = Signal(bool)

# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    """
    アプリケーションのメインウィンドウクラス。
    """
    def __init__(self, machine: Chip8Machine, config: SystemConfig, parent=None):
        super(MainWindow, self).__init__(parent)
        self.setWindowTitle("CHIP-8 Tracer")
        self.setDockNestingEnabled(True)

        self.machine = machine
        self.config = config
        self.debugger = Debugger(machine.cpu)
        self._rom_path: Optional[str] = None

        self._bridge = CpuSignalBridge(self)
        self._set_dark_theme()
        self._create_display()
        self._create_toolbar()
        self._create_status_inspector()
        self._create_menus()
        self._connect_backend()

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setInterval(REFRESH_INTERVAL_MS)
        self._refresh_timer.timeout.connect(self._refresh_inspector)
        self._refresh_timer.start()

        self._update_ui_state()

    # --- Setup ---

    def _create_display(self):
        self.display_view = DisplayView(self.config.get_palette())
        self.setCentralWidget(self.display_view)
        self.status_label = QLabel("Load a ROM to start")
        self.statusBar().addWidget(self.status_label, 1)
        self.next_op_label = QLabel("Next: -")
        self.statusBar().addPermanentWidget(self.next_op_label)
        self.tone_label = QLabel("BEEP")
        self.tone_label.setStyleSheet("color: #303030; font-weight: bold;")
        self.statusBar().addPermanentWidget(self.tone_label)

    # @intent:responsibility 実行制御用のツールバーを作成します。
    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        self.addToolBar(toolbar)

        self.load_action = QAction("Load ROM", self)
        self.load_action.setShortcut("Ctrl+O")
        self.load_action.triggered.connect(self._load_rom_dialog)
        toolbar.addAction(self.load_action)

        self.run_action = QAction("Pause", self)
        self.run_action.triggered.connect(self._toggle_pause)
        toolbar.addAction(self.run_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self._step)
        toolbar.addAction(self.step_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self._stop)
        toolbar.addAction(self.stop_action)

        toolbar.addSeparator()
        toolbar.addWidget(QLabel(" Hz: "))
        self.hz_spin = QSpinBox()
        self.hz_spin.setRange(1, MAX_CPU_HZ)
        self.hz_spin.setValue(min(self.machine.cpu_hz, MAX_CPU_HZ))
        self.hz_spin.valueChanged.connect(self.machine.set_cpu_hz)
        toolbar.addWidget(self.hz_spin)

        toolbar.addWidget(QLabel(" Volume: "))
        self.volume_slider = QSlider(Qt.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setValue(round(self.config.volume * 100))
        self.volume_slider.setMaximumWidth(120)
        self.volume_slider.valueChanged.connect(self._on_volume_changed)
        toolbar.addWidget(self.volume_slider)

    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")
        file_menu.addAction(self.load_action)

        palette_menu = self.menuBar().addMenu("Palette")
        for palette in self.config.palettes:
            action = QAction(palette.name, self)
            action.triggered.connect(lambda checked=False, p=palette: self.apply_palette(p))
            palette_menu.addAction(action)

    # @intent:responsibility 右側のステータスインスペクタを作成します。
    def _create_status_inspector(self):
        status_dock = QDockWidget("Status Inspector", self)
        status_dock.setAllowedAreas(Qt.RightDockWidgetArea)
        tab_widget = QTabWidget()
        self.register_view = RegisterView()
        self.register_view.set_cpu(self.machine.cpu)
        tab_widget.addTab(self.register_view, "Registers")
        self.code_view = CodeView()
        tab_widget.addTab(self.code_view, "Assembler")
        status_dock.setWidget(tab_widget)
        self.addDockWidget(Qt.RightDockWidgetArea, status_dock)

    def _connect_backend(self):
        self._bridge.frame_ready.connect(self.display_view.update_frame)
        self._bridge.finished.connect(self._on_finished)
        self._bridge.tone_changed.connect(self._on_tone_changed)
        self._frame_listener = self._bridge.frame_ready.emit
        self.machine.cpu.add_render_listener(self._frame_listener)
        self.machine.add_finish_listener(self._bridge.finished.emit)
        if isinstance(self.machine.speaker, ToneSpeaker):
            self.machine.speaker.add_tone_listener(self._bridge.tone_changed.emit)

    # --- Actions ---

    def load_rom(self, path: str) -> bool:
        try:
            self.machine.load_and_run(path)
        except RomLoadError as e:
            logger.error("Failed to load ROM: %s", e)
            QMessageBox.critical(self, "Error", f"Failed to load ROM: {e}")
            return False
        self._rom_path = path
        self.code_view.reset_cache()
        self.status_label.setText(f"Running {os.path.basename(path)}")
        self._update_ui_state()
        return True

    @Slot()
    def _load_rom_dialog(self):
        start_dir = self.config.rom_dir or ""
        file_name, _ = QFileDialog.getOpenFileName(self, "Open CHIP-8 ROM", start_dir, "CHIP-8 ROMs (*.ch8 *.c8);;All Files (*)")
        if file_name:
            self.load_rom(file_name)

    @Slot()
    def _toggle_pause(self):
        if self.machine.cpu.get_breakpointer().should_wait:
            self.debugger.resume()
            self.status_label.setText("Running")
        else:
            self.debugger.pause()
            self.status_label.setText("Paused")
        self._update_ui_state()

    @Slot()
    def _step(self):
        if self.machine.step_instruction():
            self.status_label.setText("Stepped")

    @Slot()
    def _stop(self):
        self.machine.stop()
        self.status_label.setText("Stopped")
        self._update_ui_state()

    @Slot(object)
    def _on_finished(self, result: ExecutionResult):
        if result == ExecutionResult.FATAL:
            fault = self.machine.cpu.get_last_fault()
            self.status_label.setText(f"Fatal: {fault}")
        else:
            self.status_label.setText("Halted")
        self._refresh_inspector()
        self._update_ui_state()

    @Slot(int)
    def _on_volume_changed(self, value: int):
        self.machine.set_volume(value / 100.0)

    # @intent:responsibility 配色を切り替え、現在のフレームを新しい配色で描き直します。
    def apply_palette(self, palette: Palette):
        self.display_view.set_palette(palette)
        self.display_view.update_frame(self.machine.cpu.get_framebuffer())

    @Slot(bool)
    def _on_tone_changed(self, beeping: bool):
        color = "#FFB000" if beeping else "#303030"
        self.tone_label.setStyleSheet(f"color: {color}; font-weight: bold;")

    # @intent:responsibility 一定間隔でレジスタと逆アセンブル表示を更新します。
    @Slot()
    def _refresh_inspector(self):
        self.register_view.update_registers()
        snapshot = self.debugger.get_last_snapshot()
        next_op = snapshot.next_operation if snapshot is not None else None
        self.next_op_label.setText(f"Next: {next_op.to_assembly() if next_op is not None else '-'}")
        if self._rom_path is not None:
            self.code_view.update_code(self.machine.cpu, self.machine.cpu.get_register_map()["PC"])

    # @intent:responsibility 実行状態に応じてUIコンポーネントの有効/無効を切り替えます。
    def _update_ui_state(self):
        running = self.machine.is_running()
        paused = self.machine.cpu.get_breakpointer().should_wait
        self.run_action.setEnabled(running)
        self.run_action.setText("Run" if paused else "Pause")
        self.step_action.setEnabled(running and paused)
        self.stop_action.setEnabled(running)

    # --- Keyboard ---

    # @intent:responsibility ホストのキー入力を CHIP-8 キーパッドへ転送します。
    def keyPressEvent(self, event: QKeyEvent):
        if not event.isAutoRepeat() and self.machine.keyboard.press_physical(event.text()):
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent):
        if not event.isAutoRepeat() and self.machine.keyboard.release_physical(event.text()):
            return
        super().keyReleaseEvent(event)

    # @intent:responsibility アプリケーションにダークテーマのスタイルシートを適用します。
    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        QApplication.setPalette(dark_palette)

        font_family = get_monospace_font_family()
        self.setStyleSheet(f"""
            QWidget {{ font-family: '{font_family}', monospace; font-size: 10pt; }}
            QMainWindow, QToolBar {{ background-color: #1D1D1D; border: none; }}
            QDockWidget::title {{ text-align: left; background: #101010; padding: 4px; font-weight: bold; }}
        """)

    # @intent:responsibility ウィンドウが閉じられる際に、クロックのスレッドを停止します。
    def closeEvent(self, event: QCloseEvent):
        self._refresh_timer.stop()
        self.machine.stop()
        self.machine.cpu.remove_render_listener(self._frame_listener)
        event.accept()

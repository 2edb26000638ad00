"""
CHIP-8 の 64x32 フレームバッファを描画するウィジェット。
"""
from typing import Optional

from PySide6.QtCore import QRect, QSize, Slot
from PySide6.QtGui import QColor, QPainter, QPaintEvent
from PySide6.QtWidgets import QSizePolicy, QWidget

from chip8_tracer.common.types import FrameBuffer
from chip8_tracer.config.models import Palette
from chip8_tracer.arch.chip8.state import DISPLAY_HEIGHT, DISPLAY_WIDTH
from .theme import palette_colors

# @intent:responsibility Render Listener から受け取ったフレームバッファのコピーを、パレットの色で拡大描画します。
class DisplayView(QWidget):
    """
    フレームバッファ表示ウィジェット。
    update_frame() はUIスレッドから呼び出す必要があります（CPUスレッドからはシグナル経由で渡します）。
    """
    DEFAULT_SCALE = 10

    def __init__(self, palette: Optional[Palette] = None, parent=None):
        super().__init__(parent)
        self._frame: Optional[FrameBuffer] = None
        self._on_color = QColor("#FFFFFF")
        self._off_color = QColor("#000000")
        if palette is not None:
            self.set_palette(palette)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(DISPLAY_WIDTH * 4, DISPLAY_HEIGHT * 4)

    def sizeHint(self) -> QSize:
        return QSize(DISPLAY_WIDTH * self.DEFAULT_SCALE, DISPLAY_HEIGHT * self.DEFAULT_SCALE)

    def set_palette(self, palette: Palette) -> None:
        self._on_color, self._off_color = palette_colors(palette)
        self.update()

    def get_frame(self) -> Optional[FrameBuffer]:
        return self._frame

    @Slot(object)
    def update_frame(self, frame: FrameBuffer) -> None:
        self._frame = frame
        self.update()

    # @intent:responsibility ウィジェットのサイズに合わせた整数倍率で、点灯ピクセルのみを矩形で塗ります。
    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._off_color)
        if self._frame is None:
            painter.end()
            return

        scale = max(1, min(self.width() // DISPLAY_WIDTH, self.height() // DISPLAY_HEIGHT))
        offset_x = (self.width() - DISPLAY_WIDTH * scale) // 2
        offset_y = (self.height() - DISPLAY_HEIGHT * scale) // 2
        for y, row in enumerate(self._frame):
            for x, lit in enumerate(row):
                if lit:
                    painter.fillRect(QRect(offset_x + x * scale, offset_y + y * scale, scale, scale), self._on_color)
        painter.end()

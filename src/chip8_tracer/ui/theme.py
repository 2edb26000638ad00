"""
UIテーマ管理モジュール。

等幅フォントの選択と、設定ファイルのパレットから Qt の色への変換を提供します。
"""
from typing import Tuple

from PySide6.QtGui import QColor, QFont, QFontDatabase

from chip8_tracer.config.models import Palette

# @intent:responsibility 現在のシステムで利用可能な最適な等幅フォントファミリー名を返します。
def get_monospace_font_family() -> str:
    """
    優先順位: Consolas -> Menlo -> Monaco -> Courier New -> システムの固定幅フォント
    """
    available_families = QFontDatabase.families()
    for font in ("Consolas", "Menlo", "Monaco", "Courier New"):
        if font in available_families:
            return font
    return QFontDatabase.systemFont(QFontDatabase.FixedFont).family()

def get_monospace_font(size: int = 10) -> QFont:
    return QFont(get_monospace_font_family(), size)

# @intent:utility_function パレットを (点灯色, 消灯色) の QColor に変換します。
def palette_colors(palette: Palette) -> Tuple[QColor, QColor]:
    return QColor(palette.on), QColor(palette.off)

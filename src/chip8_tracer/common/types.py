"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型エイリアスなどを定義します。
"""
from typing import Callable, List, NamedTuple, Tuple

# @intent:data_structure フレームバッファのコピー。32行 x 64列の真偽値グリッド（行優先）。
# Render Listener へ渡す際は必ずタプルに変換し、ライブ状態を共有しません。
FrameBuffer = Tuple[Tuple[bool, ...], ...]

# @intent:data_structure 描画通知を受け取るコールバックの型。
RenderListener = Callable[[FrameBuffer], None]

# @intent:data_structure 単一のレジスタの表示定義。UIが動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅 (8 or 16)

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "General", "Pointers"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]

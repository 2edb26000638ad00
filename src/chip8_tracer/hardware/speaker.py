# chip8_tracer/hardware/speaker.py
"""
サウンドタイマーに連動するスピーカー（トーン要求）のインターフェース。

実際の音声出力はフロントエンド側の責務です。CPUはサウンドタイマーが0でない間
トーンを要求し、0になったら停止を要求するだけです。
"""
import threading
from abc import ABC, abstractmethod
from typing import Callable, List

# @intent:responsibility トーン要求の開始/終了を受け取るスピーカーの抽象インターフェース。
class Speaker(ABC):
    @abstractmethod
    def start_beep_if_not_started(self) -> None:
        pass

    @abstractmethod
    def end_beep(self) -> None:
        pass

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        pass

    @property
    @abstractmethod
    def beeping(self) -> bool:
        pass

# @intent:responsibility トーン要求の状態と音量を保持し、状態が変わった時だけリスナーへ通知します。
class ToneSpeaker(Speaker):
    """
    トーン要求を記録するスピーカー。UIはリスナー経由でビープ表示や音声出力を行います。
    """
    def __init__(self, volume: float = 0.5):
        self._lock = threading.Lock()
        self._beeping = False
        self._volume = self._clamp(volume)
        self._listeners: List[Callable[[bool], None]] = []

    @staticmethod
    def _clamp(volume: float) -> float:
        return min(max(0.0, float(volume)), 1.0)

    def add_tone_listener(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    @property
    def beeping(self) -> bool:
        with self._lock:
            return self._beeping

    @property
    def volume(self) -> float:
        with self._lock:
            return self._volume

    def set_volume(self, volume: float) -> None:
        with self._lock:
            self._volume = self._clamp(volume)

    def start_beep_if_not_started(self) -> None:
        self._transition(True)

    def end_beep(self) -> None:
        self._transition(False)

    def _transition(self, beeping: bool) -> None:
        with self._lock:
            if self._beeping == beeping:
                return
            self._beeping = beeping
        for listener in list(self._listeners):
            listener(beeping)

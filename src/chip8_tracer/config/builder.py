import logging
import random

from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.hardware.keyboard import Keyboard
from chip8_tracer.hardware.speaker import ToneSpeaker
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.arch.chip8.state import MEMORY_SIZE
from chip8_tracer.emulator.machine import Chip8Machine
from .models import SystemConfig

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPU、周辺機器を生成・接続します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Chip8Machine:
        bus = Bus()
        bus.register_device(0x000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))

        keyboard = Keyboard(config.key_map)
        speaker = ToneSpeaker(config.volume)
        rng = random.Random(config.seed) if config.seed is not None else random.Random()

        cpu = Chip8Cpu(bus, keyboard, speaker=speaker, rng=rng)
        # 初期状態の適用（フォントの配置）
        cpu.reset()

        logger.debug("Built system: cpu %d Hz, timers %d Hz, palette %s",
                     config.cpu_hz, config.timer_hz, config.palette)
        return Chip8Machine(cpu, speaker=speaker, cpu_hz=config.cpu_hz, timer_hz=config.timer_hz)

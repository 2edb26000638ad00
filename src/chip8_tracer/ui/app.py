# src/chip8_tracer/ui/app.py
"""
Qtアプリケーションのエントリポイント。
設定ファイルからシステムを構築し、メインウィンドウを起動します。
"""
import argparse
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from chip8_tracer.common.errors import ConfigError
from chip8_tracer.config.builder import SystemBuilder
from chip8_tracer.config.loader import ConfigLoader
from chip8_tracer.config.models import SystemConfig
from .main_window import MainWindow

logger = logging.getLogger(__name__)

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8-tracer", description="CHIP-8 interpreter and tracer")
    parser.add_argument("rom", nargs="?", help="ROM file to load and run")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    return parser

# @intent:responsibility アプリケーションを起動し、メインウィンドウを表示します。
def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    except ConfigError as e:
        logger.error("%s", e)
        return 2

    app = QApplication(sys.argv[:1])
    machine = SystemBuilder().build_system(config)
    main_win = MainWindow(machine, config)
    main_win.show()
    if args.rom:
        main_win.load_rom(args.rom)
    return app.exec()

if __name__ == '__main__':
    sys.exit(main())

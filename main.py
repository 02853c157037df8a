"""
ClaudeCtx Switcher — Entry Point
Run with: python main.py
"""

import sys
import logging
from pathlib import Path

# Resolve root so imports work regardless of CWD
ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from PyQt6.QtWidgets import QApplication

from core.paths import ConfigPaths
from core.profile_manager import ProfileManager
from core.settings import AppSettings
from gui.app import MainWindow


def setup_logging(log_file: Path, level_name: str = "INFO"):
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def main():
    paths = ConfigPaths.default()
    paths.app_data_dir.mkdir(parents=True, exist_ok=True)

    settings = AppSettings(paths.app_config_file)
    setup_logging(paths.log_file, settings.get("log_level", "INFO"))

    logger = logging.getLogger(__name__)
    logger.info(f"ClaudeCtx Switcher starting (config dir: {paths.tool_dir})")

    pm = ProfileManager(paths)

    app = QApplication(sys.argv)
    app.setApplicationName("ClaudeCtx Switcher")
    app.setOrganizationName("ClaudeCtx")

    window = MainWindow(pm, settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()

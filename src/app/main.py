from __future__ import annotations

import logging
import os

from app.gui_main import main as gui_main


def main():
    logging.basicConfig(
        level=os.environ.get("SCHEMATIC_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    gui_main()


if __name__ == "__main__":
    main()

import sys
import logging
import argparse

from PyQt6.QtWidgets import QApplication

from imagecapturer.apps.capture_window import CaptureWindow
from imagecapturer.core.config import load_config
from imagecapturer.core.version import VERSION_STRING
from imagecapturer.main_setup import setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(description=VERSION_STRING)
    parser.add_argument("--config", help="Path to capture.json (default: config/capture.json)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    args, qt_args = parser.parse_known_args(argv if argv is not None else sys.argv[1:])

    config = load_config(args.config)
    setup_logging(config.resolved_log_dir(), logging.DEBUG if args.debug else logging.INFO)

    try:
        app = QApplication([sys.argv[0]] + qt_args)

        window = CaptureWindow(config)
        window.show()
        logging.info("Launched capture window.")

        return app.exec()
    except Exception:
        logging.error("Fatal error in main loop", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

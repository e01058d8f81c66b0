"""
TapCalc Web Portal Launcher
Simple script to start the web server
"""
import logging
import sys

import config

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    logger.info("Starting %s Web Portal...", config.APP_NAME)
    try:
        from api import app
    except ImportError:
        logger.exception("Error importing modules; install the dependencies with: pip install -e .")
        return 1

    try:
        app.run(host=config.WEB_HOST, port=config.WEB_PORT, debug=False)
    except OSError:
        logger.exception("Could not start the server on %s:%s (is the port in use?)",
                         config.WEB_HOST, config.WEB_PORT)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

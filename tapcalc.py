"""
TapCalc
Main application entry point
"""
import atexit
import logging
import os
import subprocess
import sys
import tkinter as tk

import config
from gui import TapCalcGUI

logger = logging.getLogger(__name__)

# Global variable to track API process
api_process = None


def start_api_server():
    """Start the Flask API server in a separate process"""
    global api_process
    script_dir = os.path.dirname(os.path.abspath(__file__))
    api_path = os.path.join(script_dir, 'api.py')
    try:
        api_process = subprocess.Popen(
            [sys.executable, api_path],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=subprocess.CREATE_NEW_CONSOLE if sys.platform == 'win32' else 0
        )
    except OSError:
        logger.exception("Failed to start API server")
        return
    logger.info("API server started (PID: %s) on http://localhost:%s",
                api_process.pid, config.WEB_PORT)


def cleanup_api_server():
    """Terminate the API server when the main application exits"""
    global api_process
    if api_process is None:
        return
    try:
        api_process.terminate()
        api_process.wait(timeout=5)
        logger.info("API server stopped")
    except (OSError, subprocess.TimeoutExpired):
        logger.exception("Error stopping API server")
    finally:
        api_process = None


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    if config.START_WEB_PORTAL:
        start_api_server()
        atexit.register(cleanup_api_server)

    root = tk.Tk()
    TapCalcGUI(root)
    root.mainloop()

    cleanup_api_server()


if __name__ == "__main__":
    main()

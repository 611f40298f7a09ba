"""Local launcher: starts the Azure Functions host on the configured port.

Usage:
    python -m monday_provisioner
"""

import logging
import subprocess
import sys
from pathlib import Path

from monday_provisioner.config import load_config

logger = logging.getLogger(__name__)

# Repository root holding function_app.py and host.json
APP_ROOT = Path(__file__).resolve().parents[2]


def build_command(port: int) -> list[str]:
    """Return the Functions Core Tools command that serves the app on port."""
    return ["func", "start", "--port", str(port)]


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    config = load_config()
    command = build_command(config.port)
    logger.info("[main] starting Functions host; port:%d;app_root:%s", config.port, APP_ROOT)
    try:
        return subprocess.call(command, cwd=APP_ROOT)
    except FileNotFoundError:
        logger.error("[main] Azure Functions Core Tools ('func') not found on PATH")
        return 1


if __name__ == "__main__":
    sys.exit(main())

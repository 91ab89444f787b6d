"""Sprechpartner — server entry point.

Loads config, initializes components, and starts the uvicorn server.
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
import yaml

from server.app import create_app

log = logging.getLogger(__name__)


def load_config(path: str | None = None) -> dict:
    """Load server config from YAML file."""
    if path is None:
        # Default: server/config.yaml relative to this file
        path = str(Path(__file__).parent / "config.yaml")

    config_path = Path(path)
    if not config_path.exists():
        log.error("Config file not found: %s", path)
        sys.exit(1)
    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    parser = argparse.ArgumentParser(description="Sprechpartner voice conversation server")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--host", type=str, default=None, help="Bind host (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")
    args = parser.parse_args()

    config = load_config(args.config)

    server_cfg = config.get("server", {})
    host = args.host or server_cfg.get("host", "127.0.0.1")
    port = args.port or server_cfg.get("port", 8000)

    app = create_app(config)

    log.info("Sprechpartner starting on http://%s:%d/", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()

"""
Entry point — start the FlowBlock engine.

Usage:
    python -m flowblock.main
    uvicorn flowblock.api.app:app --host 127.0.0.1 --port 8766 --reload
"""

import logging

import uvicorn

from .config import config


def main():
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    uvicorn.run(
        "flowblock.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()

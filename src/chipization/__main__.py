"""Run the Chipization tracker with uvicorn: ``python -m chipization``."""

import uvicorn

from .config import get_config


def main() -> None:
    config = get_config()
    uvicorn.run(
        "chipization.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.auto_reload,
        workers=None if config.server.auto_reload else config.server.workers,
        log_level=config.app.log_level.lower(),
    )


if __name__ == "__main__":
    main()

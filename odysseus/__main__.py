"""Run the API server with uvicorn: ``python -m odysseus``."""

import uvicorn

from odysseus.core.config import settings


def main() -> None:
    uvicorn.run(
        "odysseus.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()

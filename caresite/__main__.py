from __future__ import annotations
import logging
import uvicorn

from .config import Settings


def main():
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("caresite").info("Server running at http://localhost:%s", settings.port)
    uvicorn.run("caresite.main:app", host=settings.host, port=settings.port,
                log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

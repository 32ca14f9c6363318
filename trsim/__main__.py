"""Run the API server: ``python -m trsim``."""

import logging

import uvicorn

from trsim.infra.config import settings


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.app_debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("trsim.main:app", host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    main()

"""Entrypoint: python -m messaging_hub"""
from __future__ import annotations

import uvicorn

from messaging_hub.config import settings


def main() -> None:
    uvicorn.run(
        "messaging_hub.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()

from __future__ import annotations

import uvicorn

from .config import DEFAULT_SETTINGS


def main() -> None:
    uvicorn.run(
        "cloudcompare.app:app",
        host=DEFAULT_SETTINGS.host,
        port=DEFAULT_SETTINGS.port,
        log_level=DEFAULT_SETTINGS.log_level.lower(),
    )


if __name__ == "__main__":
    main()

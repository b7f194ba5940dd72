"""Run the API server: python -m bookingdesk"""

import uvicorn

from bookingdesk.config import settings


def main() -> None:
    uvicorn.run(
        "bookingdesk.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

"""Run the API with uvicorn: python -m product_api"""

import uvicorn

from product_api.config import settings


def main() -> None:
    uvicorn.run(
        "product_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

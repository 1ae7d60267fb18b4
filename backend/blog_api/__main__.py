"""Run the API with uvicorn: `python -m blog_api`."""

import uvicorn

from blog_api.config import get_settings
from blog_api.main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.listen_host,
        port=settings.listen_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

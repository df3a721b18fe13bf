"""Run the API with uvicorn: ``python -m learnpath``."""

import uvicorn

from learnpath.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "learnpath.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()

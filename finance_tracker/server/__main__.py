"""Run the REST service: python -m finance_tracker.server"""

import uvicorn

from finance_tracker.config.settings import ServerSettings


def main() -> None:
    settings = ServerSettings()
    uvicorn.run("finance_tracker.server.api:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

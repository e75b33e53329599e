"""Hit logger service: accepts hits and persists them (POST /api/log-hit)."""

import uvicorn

from hit_counter.app import create_app
from hit_counter.config import ServiceName, Settings

settings = Settings()
app = create_app(ServiceName.HIT_LOGGER, settings)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port_for(ServiceName.HIT_LOGGER))

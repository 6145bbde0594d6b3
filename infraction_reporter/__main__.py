"""
Run the API server: python -m infraction_reporter
"""

import uvicorn

from infraction_reporter.core.settings import settings


if __name__ == "__main__":
    print(f"🚀 Starting {settings.APP_NAME} on http://{settings.HOST}:{settings.PORT} (docs at /docs)")
    uvicorn.run(
        "infraction_reporter.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )

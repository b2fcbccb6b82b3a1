"""Run the study tracker API with uvicorn on the configured host and port."""
import uvicorn
from study_tracker.config import settings


def run():
    """Serve `study_tracker.main:app`.

    Host and port come from the `HOST` and `PORT` environment variables
    (default 0.0.0.0:5000). Tables are created on first import of the app.
    """
    print(f"Serving on {settings.HOST}:{settings.PORT} using {settings.DATABASE_URL.split('://')[0]}")
    uvicorn.run("study_tracker.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == '__main__':
    run()

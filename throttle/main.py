from throttle.core.app_factory import create_app
from throttle.core.config import settings

app = create_app()


if __name__ == "__main__":
    import uvicorn

    # One worker: windows are per-process, more workers multiply the limits.
    uvicorn.run("throttle.main:app", host="127.0.0.1", port=8000, reload=settings.app.debug)

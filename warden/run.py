# warden/run.py
import uvicorn

from warden.configuration.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "warden.api.app:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
    )

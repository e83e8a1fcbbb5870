import uvicorn
from core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "web.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )

import uvicorn

from resource_server.config.settings import settings

if __name__ == "__main__":
    uvicorn.run(
        "resource_server.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

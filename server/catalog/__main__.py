import uvicorn

from catalog.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "catalog.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

import uvicorn

from .config import settings


def main():
    settings.validate()
    uvicorn.run("screenshot_api.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()

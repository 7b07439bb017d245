import uvicorn

from .settings import settings


def main():
    uvicorn.run("gallery.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()

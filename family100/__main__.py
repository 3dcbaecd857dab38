import uvicorn

from family100.config import load_settings


def main():
    settings = load_settings()
    uvicorn.run("family100.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

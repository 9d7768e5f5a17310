# backend/run.py
import sys

import uvicorn

from prdify.config import settings


def main():
    try:
        uvicorn.run(
            "prdify.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.RELOAD,
            log_level=settings.LOG_LEVEL.lower()
        )
    except Exception as e:
        print(f"Error starting the PRDify API: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Local entry point:  python run.py"""

import uvicorn

from academy.config import settings


if __name__ == "__main__":
    uvicorn.run(
        "academy.app:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )

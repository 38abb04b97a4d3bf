"""Run the API with uvicorn: python -m api"""

import uvicorn

from shared.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,  # keep the JSON logging configured in api.main
    )

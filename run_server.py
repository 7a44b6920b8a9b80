import logging

import uvicorn

from settings import settings

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        # Exclude rendered artifacts from the reload watcher
        reload_excludes=["storage/*"],
    )

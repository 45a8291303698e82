import logging
import os

from fastapi import FastAPI

from lockgraph.api.routes import router

logging.basicConfig(
    level=os.environ.get("LOCKGRAPH_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="lockgraph", version="0.1.0")
app.include_router(router)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "lockgraph", "version": "0.1.0"}

from prometheus_fastapi_instrumentator import Instrumentator

from app import create_app
from app.core.logging import setup_logging

setup_logging()
app = create_app()
Instrumentator().instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}

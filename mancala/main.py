from fastapi import FastAPI
import logging

from mancala import __version__
from mancala.api.routes import router
from mancala.config import get_log_level

app = FastAPI(title="mancala-live", version=__version__)
app.include_router(router)
# Configure logging
logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "mancala-live", "version": __version__}

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core import config, db
from journal import router as journal_router


@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # The DB pool only exists for the direct Postgres store.
    use_db = config.store_backend() == "postgres"
    if use_db:
        await db.init_pool()
    try:
        yield
    finally:
        if use_db:
            await db.close_pool()


app = FastAPI(title="journal-entry-api", lifespan=lifespan)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


# Catch-all: must be included after every other route.
app.include_router(journal_router.router, tags=["journal"])

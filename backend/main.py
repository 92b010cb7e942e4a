# Role: FastAPI app bootstrap. Loads environment config early, builds the Dialogflow client once (fail fast on
# bad credentials), closes it on shutdown, registers the router with an open CORS policy, and runs uvicorn on PORT.

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

import backend.config
backend.config.load_env()

from backend.api.chat import router as chat_router
from backend.core.relay import MessageRelay
from backend.llm.dialogflow_client import DialogflowClient


def create_app(relay: Optional[MessageRelay] = None) -> FastAPI:
    # Key line: the relay is injectable; without one, credentials are read from env right here.
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.relay.close()

    app = FastAPI(title="Dialogflow Relay API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.relay = relay or MessageRelay(DialogflowClient())
    app.include_router(chat_router)
    return app


def run() -> None:
    app = create_app()
    logger.info("Server started on port {}", backend.config.PORT)
    uvicorn.run(app, host=backend.config.HOST, port=backend.config.PORT)


if __name__ == "__main__":
    run()

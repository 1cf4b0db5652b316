from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import config
from src.routes.agents import router as agents_router
from src.routes.chat import router as chat_router
from src.routes.credits import router as credits_router
from src.utils.cron import lifespan

app = FastAPI(title="Companion gate", lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"] if config.IS_DEVELOPMENT else [],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


app.include_router(credits_router)
app.include_router(agents_router)
app.include_router(chat_router)

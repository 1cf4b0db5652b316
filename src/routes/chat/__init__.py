from fastapi import APIRouter

router = APIRouter(prefix="/chat", tags=["Chat"])

# Import routes
from src.routes.chat.messages import send_message  # noqa

from fastapi import Depends, HTTPException, status

from src.dependencies import get_conversation_service
from src.interfaces.agent import ChatRequest, ChatResponse
from src.routes.chat import router
from src.services.auth import get_current_user_id
from src.services.conversation import ConversationService
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


@router.post("/messages")
async def send_message(
    body: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    conversation: ConversationService = Depends(get_conversation_service),
) -> ChatResponse:
    """
    Route a user message, meter it and forward it to the generation service.

    Quota and upstream problems are not HTTP errors: the response carries a `notice` for the user instead.
    """
    logger.debug(f"Received {body.action.value} message from {user_id}")
    try:
        return await conversation.handle_message(
            user_id=user_id,
            text=body.message,
            action=body.action,
            global_mode=body.global_mode,
            context=body.context,
        )
    except Exception as e:
        logger.error(f"Unexpected error in chat for {user_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Unexpected error: {str(e)}",
        )

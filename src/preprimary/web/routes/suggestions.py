"""AI teaching suggestion endpoint."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from preprimary.core.suggestions import get_suggestion
from preprimary.db.users_repository import UserRecord
from preprimary.web.deps import get_current_user
from preprimary.web.schemas import SuggestionRequest, SuggestionResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/ai-suggestions", tags=["suggestions"])


@router.post("", response_model=SuggestionResponse)
def suggest_activities(
    request: SuggestionRequest,
    user: UserRecord = Depends(get_current_user),
) -> SuggestionResponse:
    """Suggest teaching activities for a prompt.

    Falls back to built-in suggestions (source "offline") when the AI
    provider is unavailable.
    """
    try:
        suggestion = get_suggestion(request.prompt, class_level=request.class_level)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    logger.info("suggestions.served", user_id=user.id, source=suggestion.source)
    return SuggestionResponse(suggestion=suggestion.text, source=suggestion.source)

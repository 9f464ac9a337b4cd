"""Nova chat endpoint."""

from fastapi import APIRouter, Depends

from staarkids.core.tutor import NovaTutor
from staarkids.web.dependencies import get_tutor
from staarkids.web.schemas import NovaChatRequest, NovaChatResponse

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/nova-chat", response_model=NovaChatResponse)
def nova_chat(
    body: NovaChatRequest,
    tutor: NovaTutor = Depends(get_tutor),
) -> NovaChatResponse:
    """Ask Nova a question. Provider failures yield a friendly canned reply."""
    return NovaChatResponse(response=tutor.reply(body.user_id, body.grade, body.message))

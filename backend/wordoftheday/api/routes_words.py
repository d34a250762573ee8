from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.errors import ServiceError
from ..core.service import WordService

router = APIRouter(prefix="/v1alpha1", tags=["words"])

# ids are int32 on the wire
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


# ---------- Schemas ----------
# Field names follow the protobuf JSON mapping (customDefinition).

class _Message(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class WordIn(_Message):
    word: str = ""
    custom_definition: str = ""


class WordOut(_Message):
    id: int
    word: str
    custom_definition: str = ""


class AddWordRequest(_Message):
    word: WordIn


class WordResponse(_Message):
    word: Optional[WordOut] = None


class ListWordsResponse(_Message):
    words: List[WordOut] = []


class HeartbeatResponse(_Message):
    pass


# ---------- Dependencies ----------

def get_word_service(request: Request) -> WordService:
    return request.app.state.word_service


def _http_error(exc: ServiceError) -> HTTPException:
    if exc.not_found:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ---------- Endpoints ----------

@router.get("/heartbeat", response_model=HeartbeatResponse)
def heartbeat(service: WordService = Depends(get_word_service)):
    service.heartbeat()
    return HeartbeatResponse()


@router.post("/words", response_model=WordResponse)
def add_word(payload: AddWordRequest, service: WordService = Depends(get_word_service)):
    try:
        w = service.add_word(payload.word.word, payload.word.custom_definition)
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return WordResponse(word=WordOut.model_validate(w))


@router.get("/words", response_model=ListWordsResponse)
def list_words(service: WordService = Depends(get_word_service)):
    try:
        words = service.list_words()
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return ListWordsResponse(words=[WordOut.model_validate(w) for w in words])


@router.get(
    "/words/random",
    response_model=WordResponse,
    response_model_exclude_none=True,
)
def random_word(service: WordService = Depends(get_word_service)):
    try:
        w = service.random_word()
    except ServiceError as exc:
        raise _http_error(exc) from exc

    # no words yet: empty body, not an error
    if w is None:
        return WordResponse()
    return WordResponse(word=WordOut.model_validate(w))


@router.delete("/words/{word_id}", response_model=WordResponse)
def delete_word(
    word_id: int = Path(..., ge=INT32_MIN, le=INT32_MAX),
    service: WordService = Depends(get_word_service),
):
    try:
        w = service.delete_word(word_id)
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return WordResponse(word=WordOut.model_validate(w))

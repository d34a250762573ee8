from __future__ import annotations

import logging
from concurrent import futures
from typing import Optional

import grpc
from grpc_reflection.v1alpha import reflection

from ..core.errors import ServiceError
from ..core.service import WordService
from . import messages
from .messages import METHODS, SERVICE_NAME, message_class, word_to_message

logger = logging.getLogger(__name__)


def _abort(context: grpc.ServicerContext, exc: ServiceError):
    code = grpc.StatusCode.NOT_FOUND if exc.not_found else grpc.StatusCode.INTERNAL
    logger.warning("Request failed code=%s error=%s", code.name, exc)
    # abort raises, the request ends here
    context.abort(code, str(exc))


class WordOfTheDayServicer:
    """gRPC face of WordService. One call per request, no state of its own."""

    def __init__(self, service: WordService):
        self.service = service

    def Heartbeat(self, request, context):
        self.service.heartbeat()
        return messages.HeartbeatResponse()

    def AddWord(self, request, context):
        try:
            word = self.service.add_word(request.word.word, request.word.custom_definition)
        except ServiceError as exc:
            _abort(context, exc)
        return messages.AddWordResponse(word=word_to_message(word))

    def ListWords(self, request, context):
        try:
            words = self.service.list_words()
        except ServiceError as exc:
            _abort(context, exc)
        return messages.ListWordsResponse(words=[word_to_message(w) for w in words])

    def DeleteWord(self, request, context):
        try:
            word = self.service.delete_word(request.id)
        except ServiceError as exc:
            _abort(context, exc)
        return messages.DeleteWordResponse(word=word_to_message(word))

    def RandomWord(self, request, context):
        try:
            word = self.service.random_word()
        except ServiceError as exc:
            _abort(context, exc)

        if word is None:
            return messages.RandomWordResponse()
        return messages.RandomWordResponse(word=word_to_message(word))


def add_servicer_to_server(servicer: WordOfTheDayServicer, server: grpc.Server) -> None:
    handlers = {}
    for name, (request_name, response_name) in METHODS.items():
        handlers[name] = grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=message_class(request_name).FromString,
            response_serializer=message_class(response_name).SerializeToString,
        )
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),))


class WordOfTheDayStub:
    """Client for MyWordOfTheDayService."""

    def __init__(self, channel: grpc.Channel):
        for name, (request_name, response_name) in METHODS.items():
            setattr(
                self,
                name,
                channel.unary_unary(
                    f"/{SERVICE_NAME}/{name}",
                    request_serializer=message_class(request_name).SerializeToString,
                    response_deserializer=message_class(response_name).FromString,
                ),
            )


def create_grpc_server(
    service: WordService,
    port: int,
    max_workers: int = 10,
    host: str = "[::]",
) -> tuple[grpc.Server, int]:
    """
    Build (but do not start) the server. Returns the server and the bound
    port, which differs from `port` when 0 is passed.
    """
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers))
    add_servicer_to_server(WordOfTheDayServicer(service), server)
    reflection.enable_server_reflection((SERVICE_NAME, reflection.SERVICE_NAME), server, pool=messages.POOL)

    bound: Optional[int] = server.add_insecure_port(f"{host}:{port}")
    if not bound:
        raise RuntimeError(f"unable to bind grpc server to {host}:{port}")
    return server, bound

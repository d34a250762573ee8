"""
Protobuf messages for mywordoftheday.v1alpha1.

The file descriptor is assembled here rather than compiled from a .proto, so
the package needs no code generation step. It is equivalent to:

    syntax = "proto3";
    package mywordoftheday.v1alpha1;

    message Word {
      int32 id = 1;
      string word = 2;
      string custom_definition = 3;
    }

    message HeartbeatRequest {}
    message HeartbeatResponse {}
    message AddWordRequest { Word word = 1; }
    message AddWordResponse { Word word = 1; }
    message ListWordsRequest {}
    message ListWordsResponse { repeated Word words = 1; }
    message DeleteWordRequest { int32 id = 1; }
    message DeleteWordResponse { Word word = 1; }
    message RandomWordRequest {}
    message RandomWordResponse { Word word = 1; }

    service MyWordOfTheDayService {
      rpc Heartbeat(HeartbeatRequest) returns (HeartbeatResponse);
      rpc AddWord(AddWordRequest) returns (AddWordResponse);
      rpc ListWords(ListWordsRequest) returns (ListWordsResponse);
      rpc DeleteWord(DeleteWordRequest) returns (DeleteWordResponse);
      rpc RandomWord(RandomWordRequest) returns (RandomWordResponse);
    }
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

from ..models import Word as WordValue

PACKAGE = "mywordoftheday.v1alpha1"
SERVICE_NAME = f"{PACKAGE}.MyWordOfTheDayService"

_Field = descriptor_pb2.FieldDescriptorProto

# rpc name -> (request message, response message)
METHODS = {
    "Heartbeat": ("HeartbeatRequest", "HeartbeatResponse"),
    "AddWord": ("AddWordRequest", "AddWordResponse"),
    "ListWords": ("ListWordsRequest", "ListWordsResponse"),
    "DeleteWord": ("DeleteWordRequest", "DeleteWordResponse"),
    "RandomWord": ("RandomWordRequest", "RandomWordResponse"),
}


def _add_message(file_proto, name, fields=()):
    msg = file_proto.message_type.add(name=name)
    for number, (field_name, json_name, field_type, label, type_name) in enumerate(fields, start=1):
        field = msg.field.add(
            name=field_name,
            json_name=json_name,
            number=number,
            type=field_type,
            label=label,
        )
        if type_name:
            field.type_name = type_name
    return msg


def _word_field(label=_Field.LABEL_OPTIONAL):
    name = "words" if label == _Field.LABEL_REPEATED else "word"
    return (name, name, _Field.TYPE_MESSAGE, label, f".{PACKAGE}.Word")


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="mywordoftheday/v1alpha1/mywordoftheday.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    _add_message(
        file_proto,
        "Word",
        [
            ("id", "id", _Field.TYPE_INT32, _Field.LABEL_OPTIONAL, None),
            ("word", "word", _Field.TYPE_STRING, _Field.LABEL_OPTIONAL, None),
            ("custom_definition", "customDefinition", _Field.TYPE_STRING, _Field.LABEL_OPTIONAL, None),
        ],
    )
    _add_message(file_proto, "HeartbeatRequest")
    _add_message(file_proto, "HeartbeatResponse")
    _add_message(file_proto, "AddWordRequest", [_word_field()])
    _add_message(file_proto, "AddWordResponse", [_word_field()])
    _add_message(file_proto, "ListWordsRequest")
    _add_message(file_proto, "ListWordsResponse", [_word_field(_Field.LABEL_REPEATED)])
    _add_message(
        file_proto,
        "DeleteWordRequest",
        [("id", "id", _Field.TYPE_INT32, _Field.LABEL_OPTIONAL, None)],
    )
    _add_message(file_proto, "DeleteWordResponse", [_word_field()])
    _add_message(file_proto, "RandomWordRequest")
    _add_message(file_proto, "RandomWordResponse", [_word_field()])

    service = file_proto.service.add(name="MyWordOfTheDayService")
    for method_name, (request_name, response_name) in METHODS.items():
        service.method.add(
            name=method_name,
            input_type=f".{PACKAGE}.{request_name}",
            output_type=f".{PACKAGE}.{response_name}",
        )

    return file_proto


# server reflection answers out of this pool
POOL = descriptor_pool.DescriptorPool()

_classes = message_factory.GetMessages([build_file_descriptor()], pool=POOL)

Word = _classes[f"{PACKAGE}.Word"]
HeartbeatRequest = _classes[f"{PACKAGE}.HeartbeatRequest"]
HeartbeatResponse = _classes[f"{PACKAGE}.HeartbeatResponse"]
AddWordRequest = _classes[f"{PACKAGE}.AddWordRequest"]
AddWordResponse = _classes[f"{PACKAGE}.AddWordResponse"]
ListWordsRequest = _classes[f"{PACKAGE}.ListWordsRequest"]
ListWordsResponse = _classes[f"{PACKAGE}.ListWordsResponse"]
DeleteWordRequest = _classes[f"{PACKAGE}.DeleteWordRequest"]
DeleteWordResponse = _classes[f"{PACKAGE}.DeleteWordResponse"]
RandomWordRequest = _classes[f"{PACKAGE}.RandomWordRequest"]
RandomWordResponse = _classes[f"{PACKAGE}.RandomWordResponse"]


def message_class(name: str):
    return _classes[f"{PACKAGE}.{name}"]


def word_to_message(word: WordValue):
    return Word(id=word.id, word=word.word, custom_definition=word.custom_definition)

"""
Encode response decoding.

Justification: The native encode calls return a serialized
``sentencepiece.SentencePieceText`` protobuf message. The message class is
built at import time from a descriptor (no generated ``_pb2`` module is
shipped) and decoded with the protobuf runtime. Every field in the schema is
optional, but the binding requires ``piece``, ``id``, ``begin`` and ``end`` on
each record and never falls back to default values.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError

from ..exceptions import MissingFieldError, NativeDefectError
from .piece import Piece

__all__ = ["SentencePieceText", "REQUIRED_FIELDS", "parse_pieces"]

# Checked in this order; the first absent field is reported.
REQUIRED_FIELDS = ("piece", "id", "begin", "end")

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _build_message_class() -> type:
    """Build the SentencePieceText message class in a private descriptor pool."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="spiece/sentencepiece_text.proto",
        package="sentencepiece",
        syntax="proto2",
    )
    text = file_proto.message_type.add(name="SentencePieceText")

    piece = text.nested_type.add(name="SentencePiece")
    for name, number, field_type in (
        ("piece", 1, _FieldProto.TYPE_STRING),
        ("id", 2, _FieldProto.TYPE_UINT32),
        ("surface", 3, _FieldProto.TYPE_STRING),
        ("begin", 4, _FieldProto.TYPE_UINT32),
        ("end", 5, _FieldProto.TYPE_UINT32),
    ):
        piece.field.add(
            name=name, number=number, type=field_type, label=_FieldProto.LABEL_OPTIONAL
        )

    text.field.add(
        name="text", number=1, type=_FieldProto.TYPE_STRING, label=_FieldProto.LABEL_OPTIONAL
    )
    text.field.add(
        name="pieces",
        number=2,
        type=_FieldProto.TYPE_MESSAGE,
        type_name=".sentencepiece.SentencePieceText.SentencePiece",
        label=_FieldProto.LABEL_REPEATED,
    )
    text.field.add(
        name="score", number=3, type=_FieldProto.TYPE_FLOAT, label=_FieldProto.LABEL_OPTIONAL
    )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    descriptor = pool.FindMessageTypeByName("sentencepiece.SentencePieceText")
    return message_factory.GetMessageClass(descriptor)


SentencePieceText = _build_message_class()


def parse_pieces(data: bytes) -> list[Piece]:
    """
    Decode an encode response into pieces.

    Args:
        data: Serialized ``SentencePieceText`` bytes (non-empty).

    Returns
    -------
        Pieces in input order.

    Raises
    ------
        MissingFieldError: If a record lacks ``piece``, ``id``, ``begin`` or ``end``.
        NativeDefectError: If ``data`` is not a valid message. The engine
            guarantees well-formed output, so this indicates corruption or a
            schema mismatch rather than an empty result.
    """
    message = SentencePieceText()
    try:
        message.ParseFromString(data)
        records = list(message.pieces)
    except (DecodeError, UnicodeDecodeError) as exc:
        raise NativeDefectError(
            f"Received invalid protobuf from sentencepiece: {exc}",
            code="MALFORMED_RESPONSE",
            details={"length": len(data)},
        ) from exc

    pieces = []
    for index, record in enumerate(records):
        for field in REQUIRED_FIELDS:
            if not record.HasField(field):
                raise MissingFieldError(field, details={"index": index})
        pieces.append(
            Piece(
                text=record.piece,
                id=record.id,
                span=(record.begin, record.end),
                surface=record.surface if record.HasField("surface") else None,
            )
        )
    return pieces

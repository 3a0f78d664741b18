"""Pluggable body encoders and response decoders."""

from src.codecs.decoders import (
    Decoder,
    GraphQLDecoder,
    JsonDecoder,
    JsonOrThrowDecoder,
    JsonSchemaDecoder,
    RawDecoder,
    XmlDecoder,
    parse_json_or_raise,
)
from src.codecs.encoders import (
    Encoder,
    FormEncoder,
    GraphQLEncoder,
    JsonEncoder,
    JsonSchemaEncoder,
    RawEncoder,
    XmlEncoder,
)
from src.codecs.schema import check_schema, schema_errors


__all__ = [
    # Encoders
    "Encoder",
    "FormEncoder",
    "GraphQLEncoder",
    "JsonEncoder",
    "JsonSchemaEncoder",
    "RawEncoder",
    "XmlEncoder",
    # Decoders
    "Decoder",
    "GraphQLDecoder",
    "JsonDecoder",
    "JsonOrThrowDecoder",
    "JsonSchemaDecoder",
    "RawDecoder",
    "XmlDecoder",
    "parse_json_or_raise",
    # Schema
    "check_schema",
    "schema_errors",
]

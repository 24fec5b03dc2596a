# SPDX-License-Identifier: Apache-2.0
"""
Record model and error taxonomy shared by the capture pipeline and its sinks.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

ACK_BODY = "OK\n"
ACK_CONTENT_TYPE = "application/json; charset=UTF-8"


class ErrorKind(str, Enum):
    """Kinds of failure the server distinguishes."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    SERIALIZATION = "serialization"
    SINK_WRITE = "sink_write"


class RequestLoggerError(Exception):
    """Base error carrying its ErrorKind."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConfigurationError(RequestLoggerError):
    """Invalid configuration; fatal before the server starts."""

    kind = ErrorKind.CONFIGURATION


class Record(BaseModel):
    """Immutable snapshot of one captured request.

    Attribute names are pythonic; the JSON keys are the aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="Id")
    timestamp: datetime = Field(alias="isoDateTime")
    protocol: str
    method: str
    url: str
    content_length: int = Field(alias="contentLength")
    client_address: str = Field(alias="ipClient")
    headers: Mapping[str, tuple[str, ...]] = Field(default_factory=dict, validate_default=True)
    body: str = ""

    @field_validator("headers", mode="after")
    @classmethod
    def _freeze_headers(cls, value: Mapping[str, tuple[str, ...]]) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("headers")
    def _dump_headers(self, headers: Mapping[str, tuple[str, ...]]) -> dict[str, list[str]]:
        return {name: list(values) for name, values in headers.items()}

    def to_json(self) -> str:
        """Serialize to a single JSON line (without newline).

        The ``body`` key is omitted when the body is empty.
        """
        exclude = {"body"} if not self.body else None
        return self.model_dump_json(by_alias=True, exclude=exclude)

    def header_lines(self) -> list[tuple[str, str]]:
        """Flatten headers into (name, value) pairs, one per value."""
        return [(name, value) for name, values in self.headers.items() for value in values]


__all__ = [
    "ACK_BODY",
    "ACK_CONTENT_TYPE",
    "ErrorKind",
    "RequestLoggerError",
    "ConfigurationError",
    "Record",
]

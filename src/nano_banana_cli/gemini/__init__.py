"""Gemini generateContent 模块。

nano-banana-cli gemini v0.1.0

提供凭据解析、请求构建、响应解析与结果输出。
"""

from __future__ import annotations

from .types import (
    Modality,
    RequestState,
    Credential,
    GenerationRequest,
    TextResult,
    ImageResult,
    GenerationResult,
    BuiltRequest,
    HttpResponse,
    GenerationOutcome,
)
from .errors import (
    NanoBananaError,
    NoCredentialFoundError,
    InvalidRequestError,
    ProviderError,
    MalformedResponseError,
    NoImageReturnedError,
    TransportError,
    OutputError,
)
from .credentials import (
    LookupStatus,
    LookupOutcome,
    CredentialSource,
    CredentialResolver,
)
from .request_builder import RequestBuilder, validate_request
from .decoder import decode_response
from .transport import Transport, AiohttpTransport
from .output import OutputSink, write_atomic
from .client import GeminiClient

__all__ = [
    # Types
    "Modality",
    "RequestState",
    "Credential",
    "GenerationRequest",
    "TextResult",
    "ImageResult",
    "GenerationResult",
    "BuiltRequest",
    "HttpResponse",
    "GenerationOutcome",
    # Errors
    "NanoBananaError",
    "NoCredentialFoundError",
    "InvalidRequestError",
    "ProviderError",
    "MalformedResponseError",
    "NoImageReturnedError",
    "TransportError",
    "OutputError",
    # Credentials
    "LookupStatus",
    "LookupOutcome",
    "CredentialSource",
    "CredentialResolver",
    # Request / response
    "RequestBuilder",
    "validate_request",
    "decode_response",
    # Transport / output
    "Transport",
    "AiohttpTransport",
    "OutputSink",
    "write_atomic",
    # Client
    "GeminiClient",
]

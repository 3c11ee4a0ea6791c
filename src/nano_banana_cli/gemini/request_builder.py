"""generateContent 请求构建。

nano-banana-cli gemini v0.1.0
"""

from __future__ import annotations

from typing import Any

from ..config import Config
from .errors import InvalidRequestError
from .types import BuiltRequest, Credential, GenerationRequest, Modality

__all__ = [
    "RESPONSE_MODALITIES",
    "validate_request",
    "RequestBuilder",
]

# responseModalities 决定 API 返回的内容形态
RESPONSE_MODALITIES: dict[Modality, list[str]] = {
    Modality.TEXT: ["TEXT"],
    Modality.IMAGE: ["TEXT", "IMAGE"],
}


def validate_request(request: GenerationRequest) -> None:
    """校验请求参数。

    Raises:
        InvalidRequestError: 提示词为空，或图片请求缺少输出路径
    """
    if not request.prompt or not request.prompt.strip():
        raise InvalidRequestError("Prompt must not be empty")
    if request.modality is Modality.IMAGE and not str(request.output_path or "").strip():
        raise InvalidRequestError("Image generation requires an output path")


class RequestBuilder:
    """将 GenerationRequest 映射为 Gemini generateContent 请求。

    纯函数：相同的 (request, credential) 总是得到相同的 URL 和请求体。
    """

    def __init__(self, config: Config) -> None:
        self._config = config

    def model_for(self, modality: Modality) -> str:
        if modality is Modality.IMAGE:
            return self._config.image_model
        return self._config.text_model

    def endpoint_for(self, modality: Modality) -> str:
        return f"{self._config.base_url}/models/{self.model_for(modality)}:generateContent"

    def _auth_headers(self, credential: Credential) -> dict[str, str]:
        # 只放一处：Bearer token 走 Authorization，否则走 x-goog-api-key
        if credential.value.startswith("Bearer "):
            return {"Authorization": credential.value}
        return {"x-goog-api-key": credential.value}

    def _build_body(self, request: GenerationRequest) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "responseModalities": list(RESPONSE_MODALITIES[request.modality]),
            },
        }

    def build(self, request: GenerationRequest, credential: Credential) -> BuiltRequest:
        """构建请求。

        Args:
            request: 生成请求
            credential: 已解析的凭据

        Returns:
            BuiltRequest 实例

        Raises:
            InvalidRequestError: 请求参数无效
        """
        validate_request(request)

        headers = {"Content-Type": "application/json"}
        headers.update(self._auth_headers(credential))

        return BuiltRequest(
            url=self.endpoint_for(request.modality),
            headers=headers,
            body=self._build_body(request),
        )

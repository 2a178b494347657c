"""Churn 预测服务适配器。

本模块负责：

1. 接收统一的 TurnRequest。
2. 以 JSON ``{message, session_id}`` POST 到 /chat 端点。
3. 处理网络错误、超时和无法解析的响应体。
4. 将响应 JSON 解析为 TurnSuccess，或抛出对应的业务异常。

后端约定：成功时 ``{"status": "success", "response": str, "session_id"?: str}``，
失败时 ``{"status": <其他>, "message": str}``。
"""

from typing import Any, Dict, Optional

import httpx

from churn_chat.config.settings import settings
from churn_chat.domain.exceptions import ApplicationError, RequestTimeoutError, TransportError, ValidationError
from churn_chat.domain.models import TurnRequest, TurnSuccess


class ChurnApiClient:
    """Churn 预测服务客户端实现。"""

    name = "churn-api"

    def __init__(self, cfg=settings):
        self._settings = cfg

    async def chat(self, req: TurnRequest) -> TurnSuccess:
        url = getattr(self._settings, "chat_endpoint_url", None)
        if not url:
            raise ValidationError(code="MISSING_ENDPOINT", message="CHAT_ENDPOINT_URL not set")
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    url,
                    json=req.to_payload(),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(code="TIMEOUT", message=str(e) or "request timed out", endpoint=url)
        except httpx.RequestError as e:
            raise TransportError(code="NETWORK_ERROR", message=str(e), endpoint=url)

        data = self._decode(resp)
        return self._parse_response(data, resp.status_code)

    # ---- 辅助方法 ----

    @staticmethod
    def _decode(resp) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(
                code="MALFORMED_RESPONSE",
                message=f"response body is not JSON: {e}",
                http_status=resp.status_code,
            )
        if not isinstance(data, dict):
            raise TransportError(
                code="MALFORMED_RESPONSE",
                message="response body is not a JSON object",
                http_status=resp.status_code,
            )
        return data

    def _parse_response(self, data: Dict[str, Any], status_code: int) -> TurnSuccess:
        status = data.get("status")
        if status != "success":
            message = data.get("message") or data.get("detail") or f"HTTP {status_code}"
            raise ApplicationError(
                code="API_ERROR",
                message=str(message),
                http_status=status_code,
                status=status,
            )
        text = data.get("response")
        if not isinstance(text, str):
            raise TransportError(
                code="MALFORMED_RESPONSE",
                message="success response without a text 'response' field",
                http_status=status_code,
            )
        return TurnSuccess(response_text=text, session_id=self._parse_session_id(data.get("session_id")))

    @staticmethod
    def _parse_session_id(raw: Any) -> Optional[str]:
        if isinstance(raw, str) and raw.strip():
            return raw
        return None

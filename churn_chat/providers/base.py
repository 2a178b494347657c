"""Prediction Client 抽象接口。

Lifecycle Controller 不直接依赖 HTTP 细节，而是依赖此协议：
将 TurnRequest 发给后端，成功时返回 TurnSuccess，失败时抛出
domain.exceptions 中定义的 ApplicationError / TransportError。
"""

from typing import Protocol

from churn_chat.domain.models import TurnRequest, TurnSuccess


class PredictionClient(Protocol):
    """预测服务客户端协议。

    - name: 客户端名称，用于日志。
    - chat(req): 执行一次请求，返回 TurnSuccess 或抛出业务异常。
    """

    name: str

    async def chat(self, req: TurnRequest) -> TurnSuccess:
        ...

"""预测服务集成层。

该包下的模块负责：
- 定义客户端抽象接口 (base)。
- 提供 /chat 端点的具体实现 (churn_client)。
"""

from churn_chat.config.settings import settings
from churn_chat.providers.base import PredictionClient
from churn_chat.providers.churn_client import ChurnApiClient


def create_client(cfg=None) -> PredictionClient:
    """根据配置创建客户端实例，默认使用全局 settings。"""

    return ChurnApiClient(cfg or settings)


__all__ = ["ChurnApiClient", "PredictionClient", "create_client"]

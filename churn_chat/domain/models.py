"""统一的对话与请求结果数据模型。

本模块定义了会话引擎在各层之间共享的标准数据结构：

- Message: 对话记录中的一条消息（user/assistant），创建后不可变。
- TurnRequest: 发给预测服务 /chat 端点的单轮请求。
- TurnSuccess / TurnFailure: 单轮请求的结果（判别联合 TurnOutcome）。

Prediction Client 只依赖这些模型，负责在后端 JSON 与这些模型之间做转换。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from churn_chat.rendering.blocks import Block


# 对话记录中的角色，只有用户和助手两种
Role = Literal["user", "assistant"]


class FailureReason(str, Enum):
    """失败原因分类，用于生成对用户可见的诊断文本。"""

    APPLICATION = "application"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Message:
    """对话记录中的一条消息。

    - role: user 或 assistant。
    - content: 用户原始输入、后端原始回复或失败时的诊断文本。
    - rendered_blocks: 仅 assistant 消息有值，是 Formatter 的输出。
    - failure_reason: 诊断消息对应的失败原因，正常回复为 None。
    """

    role: Role
    content: str
    rendered_blocks: Optional[Tuple["Block", ...]] = None
    failure_reason: Optional[FailureReason] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.failure_reason is not None


@dataclass(frozen=True)
class TurnRequest:
    """一次发往后端的请求体：{message, session_id}。"""

    message: str
    session_id: Optional[str] = None

    def to_payload(self) -> dict:
        return {"message": self.message, "session_id": self.session_id}


@dataclass(frozen=True)
class TurnSuccess:
    """后端返回 status == "success" 时的结果。"""

    response_text: str
    session_id: Optional[str] = None


@dataclass(frozen=True)
class TurnFailure:
    """请求失败的结果，message 为展示给用户的诊断文本。"""

    reason: FailureReason
    message: str


TurnOutcome = Union[TurnSuccess, TurnFailure]

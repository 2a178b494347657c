"""Churn 助手的便捷包装。

把配置、预测服务客户端、SessionStore 与 ConversationController 组装成
一个独立的对话对象，并写入开场问候。每次构造都是全新的对话，没有全局单例。
"""

from typing import Optional, Tuple

from churn_chat.agents.controller import ConversationController
from churn_chat.config.settings import settings as default_settings
from churn_chat.domain.models import Message, TurnOutcome
from churn_chat.domain.session import SessionStore
from churn_chat.providers import create_client
from churn_chat.providers.base import PredictionClient


class ChurnAssistant:
    """面向 Presentation 层的 Churn 预测对话。"""

    def __init__(
        self,
        settings=None,
        client: Optional[PredictionClient] = None,
        store: Optional[SessionStore] = None,
        greeting: bool = True,
    ):
        """初始化对话。

        Args:
            settings: 配置对象，默认使用全局 settings
            client: 预测服务客户端（可选，默认按配置创建）
            store: 会话存储（可选，默认新建）
            greeting: 是否写入 settings.greeting_message 作为首条消息
        """
        self._settings = settings or default_settings
        self._store = store if store is not None else SessionStore()
        self._controller = ConversationController(
            store=self._store,
            client=client or create_client(self._settings),
            turn_timeout=self._settings.turn_timeout,
        )
        if greeting and self._settings.greeting_message:
            self._controller.add_assistant_message(self._settings.greeting_message)

    @property
    def controller(self) -> ConversationController:
        return self._controller

    @property
    def transcript(self) -> Tuple[Message, ...]:
        return self._controller.snapshot()

    @property
    def session_id(self) -> Optional[str]:
        return self._controller.session_id

    @property
    def is_sending(self) -> bool:
        return self._controller.is_sending

    async def ask(self, text: str) -> Optional[TurnOutcome]:
        return await self._controller.submit_turn(text)

    def cancel(self) -> bool:
        return self._controller.cancel_turn()


def create_assistant(**kwargs) -> ChurnAssistant:
    """创建一个新的 ChurnAssistant 实例。"""

    return ChurnAssistant(**kwargs)

"""Churn Chat 顶层包。

该包提供客户流失预测对话前端的核心实现，
包括配置加载、领域模型、预测服务适配、回复格式化与对话生命周期控制。
"""

from churn_chat.agents.churn_assistant import ChurnAssistant, create_assistant
from churn_chat.agents.controller import ConversationController, TurnState
from churn_chat.domain.session import SessionStore
from churn_chat.rendering.formatter import format_response

__all__ = [
    "ChurnAssistant",
    "ConversationController",
    "SessionStore",
    "TurnState",
    "create_assistant",
    "format_response",
]

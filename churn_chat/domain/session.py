"""会话存储：当前 session id 与对话记录。

只在内存中保存，不做持久化。每个对话实例持有独立的 SessionStore，
由 ConversationController 作为唯一写入方。
"""

from typing import List, Optional, Tuple

from churn_chat.domain.models import FailureReason, Message, Role


class SessionStore:
    """追加写入的对话记录 + 只设置一次的 session id。"""

    def __init__(self) -> None:
        self._messages: List[Message] = []
        self._session_id: Optional[str] = None

    def append_message(
        self,
        role: Role,
        content: str,
        rendered_blocks: Optional[tuple] = None,
        failure_reason: Optional[FailureReason] = None,
    ) -> int:
        """追加一条消息并返回它在记录中的位置。"""

        self._messages.append(
            Message(
                role=role,
                content=content,
                rendered_blocks=tuple(rendered_blocks) if rendered_blocks is not None else None,
                failure_reason=failure_reason,
            )
        )
        return len(self._messages) - 1

    def get_session_id(self) -> Optional[str]:
        return self._session_id

    def set_session_id_once(self, session_id: Optional[str]) -> bool:
        """仅在尚未设置时保存 session id，第一次成功的响应为准。"""

        if self._session_id is not None or not session_id:
            return False
        self._session_id = session_id
        return True

    def snapshot(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

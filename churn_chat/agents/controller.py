"""对话生命周期控制器。

负责单轮对话的完整流程：写入用户消息、调用预测服务、更新 SessionStore、
对成功回复调用 Formatter。任何失败都会折叠成一条 assistant 诊断消息，
不会抛给调用方。

状态机：IDLE → SENDING → {SUCCEEDED, FAILED} → IDLE。同一时间最多一个
进行中的请求，SENDING 期间再次提交会被直接拒绝（不排队）。
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from churn_chat.config.settings import settings
from churn_chat.domain.exceptions import ApplicationError, BusinessError, RequestTimeoutError, TransportError
from churn_chat.domain.models import (
    FailureReason,
    Message,
    TurnFailure,
    TurnOutcome,
    TurnRequest,
    TurnSuccess,
)
from churn_chat.domain.session import SessionStore
from churn_chat.infrastructure.logging.logger import logger
from churn_chat.providers.base import PredictionClient
from churn_chat.rendering.formatter import format_response

ERROR_PREFIX = "❌ Error: "
APOLOGY_MESSAGE = (
    "❌ Sorry, I encountered an error. Please make sure the backend is running and try again."
)
TIMEOUT_MESSAGE = (
    "❌ Sorry, the prediction service took too long to respond. "
    "Please make sure the backend is running and try again."
)


class TurnState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


Listener = Callable[["ConversationController"], Any]


class ConversationController:
    """一个对话实例的 Request/Response Lifecycle Controller。

    Presentation 层只读取 snapshot()/session_id/is_sending，
    并通过 submit_turn() 发起新一轮对话。
    """

    def __init__(
        self,
        store: SessionStore,
        client: PredictionClient,
        turn_timeout: Optional[float] = None,
    ):
        self._store = store
        self._client = client
        self._turn_timeout = turn_timeout if turn_timeout is not None else settings.turn_timeout
        self._state = TurnState.IDLE
        self._inflight: Optional[asyncio.Future] = None
        self._listeners: List[Listener] = []
        self._log_ctx: Dict[str, Any] = {
            "conversation": f"cv-{uuid4().hex[:12]}",
            "client": getattr(client, "name", type(client).__name__),
        }

    # ---- 只读视图 ----

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def is_sending(self) -> bool:
        return self._state is TurnState.SENDING

    @property
    def session_id(self) -> Optional[str]:
        return self._store.get_session_id()

    def snapshot(self) -> Tuple[Message, ...]:
        return self._store.snapshot()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """注册状态变化回调，返回取消订阅函数。"""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- 写操作 ----

    def add_assistant_message(self, text: str) -> int:
        """直接追加一条 assistant 消息（例如开场问候），不经过网络。"""

        index = self._store.append_message("assistant", text, rendered_blocks=format_response(text))
        self._notify()
        return index

    async def submit_turn(self, text: str) -> Optional[TurnOutcome]:
        """提交一轮对话。

        输入为空白或已有请求在途时返回 None，不修改任何状态。
        否则返回本轮的 TurnOutcome；被 cancel_turn() 取消的轮次返回 None。
        """

        if not text or not text.strip():
            self._log(logging.DEBUG, "Rejected blank input", self._log_ctx)
            return None
        if self._state is TurnState.SENDING:
            self._log(logging.INFO, "Rejected turn while another is in flight", self._log_ctx)
            return None

        turn_ctx = dict(self._log_ctx, trace_id=f"tr-{uuid4().hex}")
        self._store.append_message("user", text)
        request = TurnRequest(message=text, session_id=self._store.get_session_id())
        task = asyncio.ensure_future(self._request(request, turn_ctx))
        self._inflight = task
        self._set_state(TurnState.SENDING)
        self._log(
            logging.INFO,
            "Sending turn",
            turn_ctx,
            input_chars=len(text),
            has_session=request.session_id is not None,
        )

        start_time = time.time()
        try:
            outcome = await task
        except asyncio.CancelledError:
            if self._inflight is not task:
                # cancel_turn() 已经把状态切回 IDLE，迟到的结果被丢弃
                return None
            self._inflight = None
            self._set_state(TurnState.IDLE)
            raise
        self._inflight = None

        self._apply(outcome)
        self._log(
            logging.INFO,
            "Completed turn",
            turn_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
            outcome="success" if isinstance(outcome, TurnSuccess) else outcome.reason.value,
            transcript_length=len(self._store),
        )
        return outcome

    def cancel_turn(self) -> bool:
        """取消在途请求并回到 IDLE；没有在途请求时返回 False。"""

        task = self._inflight
        if task is None or task.done():
            return False
        self._inflight = None
        task.cancel()
        self._set_state(TurnState.IDLE)
        self._log(logging.INFO, "Cancelled turn", self._log_ctx)
        return True

    # ---- 内部流程 ----

    async def _request(self, request: TurnRequest, log_ctx: Dict[str, Any]) -> TurnOutcome:
        try:
            return await asyncio.wait_for(self._client.chat(request), timeout=self._turn_timeout)
        except (asyncio.TimeoutError, RequestTimeoutError) as e:
            self._log(logging.WARNING, "Turn timed out", log_ctx, error=str(e), timeout=self._turn_timeout)
            return TurnFailure(reason=FailureReason.TIMEOUT, message=TIMEOUT_MESSAGE)
        except ApplicationError as e:
            self._log(logging.WARNING, "Backend returned an error", log_ctx, code=e.code, error=e.message)
            return TurnFailure(reason=FailureReason.APPLICATION, message=f"{ERROR_PREFIX}{e.message}")
        except TransportError as e:
            self._log(logging.ERROR, "Transport failure", log_ctx, code=e.code, error=e.message)
            return TurnFailure(reason=FailureReason.TRANSPORT, message=APOLOGY_MESSAGE)
        except BusinessError as e:
            self._log(logging.ERROR, "Client rejected request", log_ctx, code=e.code, error=e.message)
            return TurnFailure(reason=FailureReason.TRANSPORT, message=APOLOGY_MESSAGE)
        except Exception as e:
            logger.exception(
                "Unexpected failure while calling prediction service",
                extra={"extra": dict(log_ctx, error=str(e))},
            )
            return TurnFailure(reason=FailureReason.TRANSPORT, message=APOLOGY_MESSAGE)

    def _apply(self, outcome: TurnOutcome) -> None:
        if isinstance(outcome, TurnSuccess):
            self._store.set_session_id_once(outcome.session_id)
            self._store.append_message(
                "assistant",
                outcome.response_text,
                rendered_blocks=format_response(outcome.response_text),
            )
            self._set_state(TurnState.SUCCEEDED)
        else:
            self._store.append_message(
                "assistant",
                outcome.message,
                rendered_blocks=format_response(outcome.message),
                failure_reason=outcome.reason,
            )
            self._set_state(TurnState.FAILED)
        self._set_state(TurnState.IDLE)

    def _set_state(self, state: TurnState) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.exception("Listener failed", extra={"extra": dict(self._log_ctx, error=str(e))})

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})

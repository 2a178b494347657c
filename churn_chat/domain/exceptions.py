"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
由 Lifecycle Controller 统一捕获并折叠为对话记录中的一条 assistant 消息。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NETWORK_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 endpoint、status 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ApplicationError(BusinessError):
    """后端返回了非 success 的 status，message 原样展示给用户。"""


class TransportError(BusinessError):
    """网络层错误或响应体无法解析。"""


class RequestTimeoutError(TransportError):
    """请求超过了配置的超时时间。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""

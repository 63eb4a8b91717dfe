"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 GUI 层做统一捕获，并把错误以对话消息的形式写入记录。

每个子类带一个 kind，由 Provider 层根据 HTTP 状态码决定，
上层据此分类，而不是去匹配错误文本。
"""

from typing import Literal


ErrorKind = Literal["configuration", "network", "unauthorized", "rate_limited", "api"]


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "RATE_LIMIT"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 trace_id、provider 等）。
    """

    kind: ErrorKind = "api"

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigurationError(BusinessError):
    """配置缺失或无效（例如未设置 GEMINI_API_KEY），不会发起网络请求。"""

    kind: ErrorKind = "configuration"


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""

    kind: ErrorKind = "network"


class AuthenticationError(BusinessError):
    """Provider 拒绝了密钥（401/403）。"""

    kind: ErrorKind = "unauthorized"


class RateLimitError(BusinessError):
    """Provider 限流错误（429）。不自动重试，由用户稍后再试。"""

    kind: ErrorKind = "rate_limited"


class ApiError(BusinessError):
    """第三方 API 返回其他非 2xx 错误，或调用过程中出现未分类的异常。"""

    kind: ErrorKind = "api"

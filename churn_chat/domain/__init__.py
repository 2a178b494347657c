"""领域层模型与协议。

包含：
- models: Message / TurnRequest / TurnOutcome 等统一模型。
- session: 对话记录与 session id 的内存存储 SessionStore。
- exceptions: 业务异常类型定义。
"""

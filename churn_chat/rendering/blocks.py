"""Formatter 输出的可渲染块类型。

展示层只负责按块渲染，不应把任何内容当作 HTML/markdown 解释执行。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class Tone(str, Enum):
    INFORMATIONAL = "informational"
    CRITICAL = "critical"
    WARNING = "warning"
    POSITIVE = "positive"


@dataclass(frozen=True)
class PlainText:
    text: str
    kind: str = "plain"


@dataclass(frozen=True)
class Emphasis:
    text: str
    kind: str = "emphasis"


@dataclass(frozen=True)
class Section:
    """带标签的分组起点，例如 "🎯 **Prediction:**"。

    - label: 含冒号的标签文本，如 "Prediction:"。
    - tone: 由标签决定的语气，供展示层选择样式。
    - icon: 标签前的 emoji。
    """

    label: str
    tone: Tone
    icon: str = ""
    kind: str = "section"


@dataclass(frozen=True)
class LineBreak:
    kind: str = "line_break"


Block = Union[PlainText, Emphasis, Section, LineBreak]


@dataclass(frozen=True)
class BlockGroup:
    """一个 Section 及其后直到下一个 Section 之前的所有块。"""

    section: Optional[Section]
    blocks: Tuple[Block, ...]

    @property
    def tone(self) -> Tone:
        return self.section.tone if self.section else Tone.INFORMATIONAL

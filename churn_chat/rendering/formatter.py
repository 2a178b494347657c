"""Response Formatter：把后端回复文本转换为可渲染块序列。

后端输出的是受限的伪 markup，只有两类标记：

1. 强调：``**text**``（同一行内，非空）。
2. 标签段落：emoji + 可选空白 + ``**Label:**``，标签限于 SECTION_LABELS。

这里按固定语法单遍扫描，不做通用 markdown 解析，也不产出 HTML。
任何无法匹配的内容都退化为 PlainText，函数本身永远不会抛异常。
"""

import unicodedata
from typing import Iterable, List, Optional, Tuple

from churn_chat.rendering.blocks import (
    Block,
    BlockGroup,
    Emphasis,
    LineBreak,
    PlainText,
    Section,
    Tone,
)

EMPHASIS_MARKER = "**"

# 顺序即匹配优先级，不可调整
SECTION_LABELS: Tuple[Tuple[str, Tone], ...] = (
    ("Prediction:", Tone.INFORMATIONAL),
    ("Churn Probability:", Tone.INFORMATIONAL),
    ("Risk Level:", Tone.INFORMATIONAL),
    ("Alert:", Tone.CRITICAL),
    ("Caution:", Tone.WARNING),
    ("Good News:", Tone.POSITIVE),
    ("Recommendations:", Tone.INFORMATIONAL),
)

# emoji 序列中允许出现的连接符/变体选择符
_EMOJI_JOINERS = {"\u200d", "\ufe0e", "\ufe0f", "\u20e3"}
_INLINE_SPACE = " \t"


def format_response(text: str) -> Tuple[Block, ...]:
    """将原始回复转换为有序的块序列。"""

    if not text:
        return ()

    blocks: List[Block] = []
    plain: List[str] = []

    def flush() -> None:
        if plain:
            blocks.append(PlainText("".join(plain)))
            plain.clear()

    n = len(text)
    i = 0
    while i < n:
        ch = text[i]

        if ch == "\r" or ch == "\n":
            flush()
            blocks.append(LineBreak())
            i += 2 if text.startswith("\r\n", i) else 1
            continue

        if _is_emoji_start(ch):
            end = _emoji_end(text, i)
            section, after = _match_section(text, i, end)
            if section is not None:
                flush()
                blocks.append(section)
                i = _skip_inline_space(text, after)
            else:
                plain.append(text[i:end])
                i = end
            continue

        if text.startswith(EMPHASIS_MARKER, i):
            emphasized = _match_emphasis(text, i)
            if emphasized is not None:
                flush()
                blocks.append(Emphasis(emphasized))
                i += len(emphasized) + 2 * len(EMPHASIS_MARKER)
            else:
                plain.append(EMPHASIS_MARKER)
                i += len(EMPHASIS_MARKER)
            continue

        plain.append(ch)
        i += 1

    flush()
    return tuple(blocks)


def group_blocks(blocks: Iterable[Block]) -> List[BlockGroup]:
    """按 Section 切分块序列，下一个 Section 或输入结束时关闭当前分组。"""

    groups: List[BlockGroup] = []
    current: Optional[Section] = None
    body: List[Block] = []
    for block in blocks:
        if isinstance(block, Section):
            if current is not None or body:
                groups.append(BlockGroup(section=current, blocks=tuple(body)))
            current = block
            body = []
        else:
            body.append(block)
    if current is not None or body:
        groups.append(BlockGroup(section=current, blocks=tuple(body)))
    return groups


def blocks_to_text(blocks: Iterable[Block]) -> str:
    """去掉标记后还原为纯文本，用于终端输出或日志。"""

    parts: List[str] = []
    for block in blocks:
        if isinstance(block, LineBreak):
            parts.append("\n")
        elif isinstance(block, Section):
            prefix = f"{block.icon} " if block.icon else ""
            parts.append(f"{prefix}{block.label} ")
        else:
            parts.append(block.text)
    return "".join(parts)


def _is_emoji_start(ch: str) -> bool:
    return ord(ch) > 0x7F and unicodedata.category(ch) == "So"


def _emoji_end(text: str, start: int) -> int:
    """返回从 start 开始的 emoji 序列（含 ZWJ、变体选择符、肤色修饰）的结束位置。"""

    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch in _EMOJI_JOINERS or (ord(ch) > 0x7F and unicodedata.category(ch) in ("So", "Sk")):
            i += 1
            continue
        break
    return i


def _skip_inline_space(text: str, i: int) -> int:
    while i < len(text) and text[i] in _INLINE_SPACE:
        i += 1
    return i


def _match_section(text: str, emoji_start: int, emoji_end: int) -> Tuple[Optional[Section], int]:
    pos = _skip_inline_space(text, emoji_end)
    for label, tone in SECTION_LABELS:
        marker = f"{EMPHASIS_MARKER}{label}{EMPHASIS_MARKER}"
        if text.startswith(marker, pos):
            section = Section(label=label, tone=tone, icon=text[emoji_start:emoji_end])
            return section, pos + len(marker)
    return None, emoji_end


def _match_emphasis(text: str, start: int) -> Optional[str]:
    """匹配 start 处的 ``**...**``，内容为空或跨行时返回 None。"""

    body_start = start + len(EMPHASIS_MARKER)
    close = text.find(EMPHASIS_MARKER, body_start)
    if close == -1 or close == body_start:
        return None
    body = text[body_start:close]
    if "\n" in body or "\r" in body:
        return None
    return body

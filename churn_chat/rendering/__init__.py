"""回复文本渲染：固定语法的 Formatter 与块类型。"""

from churn_chat.rendering.blocks import Block, BlockGroup, Emphasis, LineBreak, PlainText, Section, Tone
from churn_chat.rendering.formatter import SECTION_LABELS, blocks_to_text, format_response, group_blocks

__all__ = [
    "Block",
    "BlockGroup",
    "Emphasis",
    "LineBreak",
    "PlainText",
    "Section",
    "Tone",
    "SECTION_LABELS",
    "blocks_to_text",
    "format_response",
    "group_blocks",
]

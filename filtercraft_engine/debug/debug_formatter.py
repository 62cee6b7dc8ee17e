"""
Text rendering of a debug tree.

    Filter Debug Tree
    └── AND (3/10 matched, 30.0%)
        ├── city = "Berlin" (3/10 matched, 30.0%)
        └── price
            └── price >= 10 (8/10 matched, 80.0%)

Statistics are green when every evaluated record matched and red otherwise.
"""
import json
import re
from datetime import date
from typing import List

from pydantic import BaseModel

from filtercraft_data_model.expression import MISSING
from filtercraft_data_model.operator_symbols import OPERATOR_LABELS
from filtercraft_engine.debug.debug_node import (
    FIELD_OR, FUNCTION, NODE_FIELD, NODE_LOGICAL, NODE_OPERATOR, NODE_PRIMITIVE, DebugNode,
)

BRANCH = '├──'
LAST_BRANCH = '└──'
VERTICAL = '│'
SPACE = '    '

RESET = '\x1b[0m'
BRIGHT = '\x1b[1m'
DIM = '\x1b[2m'
RED = '\x1b[31m'
GREEN = '\x1b[32m'
YELLOW = '\x1b[33m'
BLUE = '\x1b[34m'
MAGENTA = '\x1b[35m'
CYAN = '\x1b[36m'

HEADER = 'Filter Debug Tree'


def _paint(text: str, color: str, colorize: bool) -> str:
    return f"{color}{text}{RESET}" if colorize else text


def format_operator_label(operator: str) -> str:
    return OPERATOR_LABELS.get(operator, operator)


def format_value(value) -> str:
    if value is MISSING:
        return 'undefined'
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    if isinstance(value, BaseModel):
        return value.model_dump_json(by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return '[' + ', '.join(format_value(v) for v in value) + ']'
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    return str(value)


class DebugFormatter:

    def __init__(self, verbose: bool = False, show_timings: bool = False, colorize: bool = False):
        self.verbose = verbose
        self.show_timings = show_timings
        self.colorize = colorize

    def format_tree(self, root: DebugNode) -> str:
        lines = [_paint(HEADER, BRIGHT + CYAN, self.colorize)]
        self._format_node(root, '', True, lines)
        return '\n'.join(lines)

    def _format_node(self, node: DebugNode, prefix: str, is_last: bool, lines: List[str]) -> None:
        connector = LAST_BRANCH if is_last else BRANCH
        timing = f" {self._format_timing(node.evaluation_time)}" if self.show_timings else ''
        lines.append(f"{prefix}{connector} {self._label(node)}{self.format_stats(node)}{timing}")

        child_prefix = prefix + (SPACE if is_last else VERTICAL + '   ')
        if self.verbose and node.value is not MISSING and node.node_type != NODE_PRIMITIVE:
            lines.append(f"{child_prefix}{VERTICAL} Value: {format_value(node.value)}")

        for index, child in enumerate(node.children):
            self._format_node(child, child_prefix, index == len(node.children) - 1, lines)

    def _label(self, node: DebugNode) -> str:
        c = self.colorize
        if node.node_type == NODE_LOGICAL:
            return _paint(format_operator_label(node.operator or ''), YELLOW + BRIGHT, c)

        if node.node_type == NODE_OPERATOR:
            return ' '.join([
                _paint(node.field or '', CYAN, c),
                _paint(format_operator_label(node.operator or ''), MAGENTA, c),
                _paint(format_value(node.value), GREEN, c),
            ])

        if node.node_type == NODE_FIELD:
            if node.operator == FIELD_OR:
                return f"{_paint(node.field or '', CYAN, c)} {_paint('OR', YELLOW, c)}"
            if node.value is not MISSING:
                return (f"{_paint(node.field or '', CYAN, c)} {_paint('=', MAGENTA, c)} "
                        f"{_paint(format_value(node.value), GREEN, c)}")
            return _paint(node.field or '', CYAN, c)

        if node.operator == FUNCTION:
            return _paint(str(node.value), BLUE, c)
        return format_value(node.value)

    def format_stats(self, node: DebugNode) -> str:
        if node.total == 0:
            return ''
        percentage = node.matched / node.total * 100
        stats = f" ({node.matched}/{node.total} matched, {percentage:.1f}%)"
        return _paint(stats, GREEN if node.matched == node.total else RED, self.colorize)

    def _format_timing(self, ms: float) -> str:
        return _paint(f"[{ms:.2f}ms]", DIM, self.colorize)

import time
from typing import Any, List, Sequence, Tuple

from filtercraft_engine.debug.debug_node import COMBINE_ANY, COMBINE_NOT, DebugNode


class DebugEvaluator:
    """Walks a debug tree per record, updating the statistics of reached nodes.

    The root decides membership with the full compiled predicate. Its children
    are then visited in the order the compiled predicate visits them: an AND
    stops at the first false child, an OR at the first true one. A node the
    compiled predicate never reaches for a record is not evaluated for it.
    """

    def __init__(self):
        self.conditions_evaluated = 0

    def evaluate(self, records: Sequence[Any], tree: DebugNode) -> Tuple[List[Any], DebugNode]:
        items = [record for record in records if self._decide(tree, record)]
        return items, tree

    def _decide(self, root: DebugNode, record: Any) -> bool:
        started = time.perf_counter()
        result = bool(root.predicate(record)) if root.predicate is not None else False
        self._record(root, result, started)
        if root.combine is not None:
            self._combine(root, record)
        return result

    def _evaluate_node(self, node: DebugNode, record: Any) -> bool:
        started = time.perf_counter()
        if node.combine is not None:
            result = self._combine(node, record)
        else:
            result = bool(node.predicate(record)) if node.predicate is not None else False
        self._record(node, result, started)
        return result

    def _combine(self, node: DebugNode, record: Any) -> bool:
        if node.gate is not None and not node.gate(record):
            return False
        if node.combine == COMBINE_ANY:
            return any(self._evaluate_node(child, record) for child in node.children)
        if node.combine == COMBINE_NOT:
            return not self._evaluate_node(node.children[0], record)
        return all(self._evaluate_node(child, record) for child in node.children)

    def _record(self, node: DebugNode, result: bool, started: float) -> None:
        node.evaluation_time += (time.perf_counter() - started) * 1000
        node.total += 1
        if result:
            node.matched += 1
        self.conditions_evaluated += 1

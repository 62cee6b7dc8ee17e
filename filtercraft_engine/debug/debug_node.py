import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from filtercraft_data_model.expression import MISSING

NODE_LOGICAL = 'logical'
NODE_FIELD = 'field'
NODE_OPERATOR = 'operator'
NODE_PRIMITIVE = 'primitive'

ROOT = 'ROOT'
FIELD_OR = 'OR'
FUNCTION = 'function'

COMBINE_ALL = 'all'
COMBINE_ANY = 'any'
COMBINE_NOT = 'not'


@dataclass
class DebugNode:
    """One node of a debug tree.

    ``matched``/``total`` count the records this node was reached for;
    ``evaluation_time`` is the time spent in it in milliseconds.

    A leaf decides with ``predicate``. A node with ``combine`` set derives its
    result from its children in order, stopping where the compiled predicate
    stops; ``gate`` must hold before any child is visited. The root always
    decides with ``predicate``, the full compiled predicate.
    """
    node_type: str
    operator: Optional[str] = None
    field: Optional[str] = None
    value: Any = MISSING
    children: List['DebugNode'] = dataclasses.field(default_factory=list)
    matched: int = 0
    total: int = 0
    evaluation_time: float = 0.0
    predicate: Optional[Callable[[Any], bool]] = dataclasses.field(default=None, repr=False, compare=False)
    combine: Optional[str] = dataclasses.field(default=None, repr=False, compare=False)
    gate: Optional[Callable[[Any], bool]] = dataclasses.field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'type': self.node_type}
        if self.operator is not None:
            result['operator'] = self.operator
        if self.field is not None:
            result['field'] = self.field
        if self.value is not MISSING:
            result['value'] = self.value
        if self.children:
            result['children'] = [child.to_dict() for child in self.children]
        result['matched'] = self.matched
        result['total'] = self.total
        result['evaluation_time'] = self.evaluation_time
        return result


@dataclass(frozen=True)
class DebugStats:
    matched: int
    total: int
    percentage: float
    execution_time: float
    cache_hit: bool
    conditions_evaluated: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matched': self.matched,
            'total': self.total,
            'percentage': self.percentage,
            'execution_time': self.execution_time,
            'cache_hit': self.cache_hit,
            'conditions_evaluated': self.conditions_evaluated,
        }

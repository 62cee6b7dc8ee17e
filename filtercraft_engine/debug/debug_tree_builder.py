"""
Builds a DebugNode tree that mirrors a typed expression.

    {"$or": [...], "price": {"$gte": 10}, "tags": ["a", "b"]}

    ROOT                        logical wrapper when logical and field clauses mix
    ├── OR                      logical node, one child per operand
    ├── price                   field node
    │   └── price >= 10         operator leaf
    └── tags OR                 array-OR field node
        ├── "a"                 primitive children
        └── "b"

A single top-level clause becomes the root itself; several field clauses are
wrapped in an AND node. Nested conditions contribute their clauses with the
dotted path prefixed.

Leaves carry their own predicate over the root record. Composite nodes carry
the way their children combine, so the evaluator can stop exactly where the
compiled predicate stops.
"""
from typing import Any, Callable, List

from filtercraft_data_model.expression import (
    AnyPropertyClause, ArrayOrCondition, FieldClause, LiteralCondition, LogicalExpression, NestedCondition,
    ObjectExpression, OperatorCondition, PredicateExpression, PrimitiveExpression,
)
from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_data_model.operator_symbols import AND, ANY_PROPERTY_KEY, NOT, OR
from filtercraft_engine.debug.debug_node import (
    COMBINE_ALL, COMBINE_ANY, COMBINE_NOT, FIELD_OR, FUNCTION, NODE_FIELD, NODE_LOGICAL, NODE_OPERATOR,
    NODE_PRIMITIVE, ROOT, DebugNode,
)
from filtercraft_engine.matching.values import resolve_path
from filtercraft_engine.operators.operator_dispatcher import OperatorContext, bind_operator
from filtercraft_engine.predicate.predicate_compiler import PredicateCompiler

Locator = Callable[[Any], Any]

_LOGICAL_COMBINE = {AND: COMBINE_ALL, OR: COMBINE_ANY, NOT: COMBINE_NOT}


def _identity(record):
    return record


def _scoped(predicate, locate: Locator):
    if locate is _identity:
        return predicate
    return lambda record: predicate(locate(record))


class DebugTreeBuilder:

    def __init__(self, compiler: PredicateCompiler):
        self._compiler = compiler

    def build(self, expression, config: FilterConfig) -> DebugNode:
        """Build the tree; the root node decides with the full compiled predicate."""
        root = self._build_expression(expression, config, _identity, '', 0)
        root.predicate = self._compiler.build(expression, config)
        return root

    def _build_expression(self, expression, config: FilterConfig, locate: Locator, prefix: str,
                          depth: int) -> DebugNode:
        if isinstance(expression, PredicateExpression):
            return DebugNode(NODE_PRIMITIVE, operator=FUNCTION, value='<custom predicate>',
                             predicate=_scoped(expression.fn, locate))
        if isinstance(expression, PrimitiveExpression):
            return DebugNode(NODE_PRIMITIVE, value=expression.value,
                             predicate=_scoped(self._compiler.build(expression, config), locate))
        if isinstance(expression, LogicalExpression):
            return self._logical_node(expression, config, locate, prefix)
        if isinstance(expression, ObjectExpression):
            return self._object_node(expression, config, locate, prefix, depth)
        return DebugNode(NODE_PRIMITIVE, value=expression,
                         predicate=_scoped(self._compiler.build(expression, config), locate))

    def _logical_node(self, clause: LogicalExpression, config, locate, prefix) -> DebugNode:
        return DebugNode(
            NODE_LOGICAL,
            operator=clause.operator,
            children=[self._build_expression(e, config, locate, prefix, 0) for e in clause.operands],
            combine=_LOGICAL_COMBINE[clause.operator],
            predicate=_scoped(self._compiler.compile_clause(clause, config), locate),
        )

    def _object_node(self, expression: ObjectExpression, config, locate, prefix, depth) -> DebugNode:
        children: List[DebugNode] = []
        has_logical = False
        for clause in expression.clauses:
            if isinstance(clause, LogicalExpression):
                has_logical = True
                children.append(self._logical_node(clause, config, locate, prefix))
            elif isinstance(clause, AnyPropertyClause):
                children.append(DebugNode(
                    NODE_FIELD, field=prefix + ANY_PROPERTY_KEY, value=clause.value,
                    predicate=_scoped(self._compiler.compile_clause(clause, config, depth), locate)))
            elif isinstance(clause, FieldClause):
                children.append(self._field_node(clause, config, locate, prefix, depth))

        whole = _scoped(self._compiler.build(expression, config, depth), locate)
        if len(children) == 1:
            return children[0]
        operator = ROOT if has_logical else AND
        return DebugNode(NODE_LOGICAL, operator=operator, children=children, predicate=whole, combine=COMBINE_ALL)

    def _field_node(self, clause: FieldClause, config, locate, prefix, depth) -> DebugNode:
        path = clause.path
        label = prefix + path
        condition = clause.condition
        predicate = _scoped(self._compiler.compile_clause(clause, config, depth), locate)

        def field_value(record, path=path):
            return resolve_path(locate(record), path)

        if isinstance(condition, ArrayOrCondition):
            children = []
            for value in condition.values:
                match = self._compiler.scalar_matcher(value, config)
                children.append(DebugNode(
                    NODE_PRIMITIVE, value=value,
                    predicate=lambda record, match=match: match(field_value(record))))
            return DebugNode(NODE_FIELD, operator=FIELD_OR, field=label, children=children, predicate=predicate,
                             combine=COMBINE_ANY)

        if isinstance(condition, OperatorCondition):
            ctx = OperatorContext(config, self._compiler.patterns, path)
            children = []
            for op in condition.operators:
                check = bind_operator(op, ctx)
                children.append(DebugNode(
                    NODE_OPERATOR, operator=op.operator, field=label, value=op.operand,
                    predicate=lambda record, check=check: check(field_value(record))))
            return DebugNode(NODE_FIELD, field=label, children=children, predicate=predicate, combine=COMBINE_ALL)

        if isinstance(condition, NestedCondition):
            def nested_locate(record, path=path):
                return resolve_path(locate(record), path)
            gate = self._compiler.nested_gate(config, depth)
            child = self._object_node(condition.expression, config, nested_locate, label + '.', depth + 1)
            return DebugNode(NODE_FIELD, field=label, children=[child], predicate=predicate, combine=COMBINE_ALL,
                             gate=lambda record: gate(field_value(record)))

        if isinstance(condition, LiteralCondition):
            return DebugNode(NODE_FIELD, field=label, value=condition.value, predicate=predicate)

        return DebugNode(NODE_FIELD, field=label, predicate=predicate)

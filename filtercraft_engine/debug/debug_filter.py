import logging
import time
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Sequence

from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_engine.debug.debug_evaluator import DebugEvaluator
from filtercraft_engine.debug.debug_formatter import DebugFormatter
from filtercraft_engine.debug.debug_node import DebugNode, DebugStats
from filtercraft_engine.debug.debug_tree_builder import DebugTreeBuilder
from filtercraft_engine.matching.pattern_compiler import PatternCompiler
from filtercraft_engine.predicate.predicate_compiler import PredicateCompiler


@dataclass
class DebugResult:
    items: List[Any]
    tree: DebugNode
    stats: DebugStats
    config: FilterConfig

    def render(self) -> str:
        formatter = DebugFormatter(self.config.verbose, self.config.show_timings, self.config.colorize)
        return formatter.format_tree(self.tree)

    def render_stats(self) -> str:
        s = self.stats
        return '\n'.join([
            "Statistics:",
            f"├── Matched: {s.matched} / {s.total} items ({s.percentage:.1f}%)",
            f"├── Execution Time: {s.execution_time:.2f}ms",
            f"├── Cache Hit: {'Yes' if s.cache_hit else 'No'}",
            f"└── Conditions Evaluated: {s.conditions_evaluated}",
        ])

    def print(self) -> None:
        print(self.render())
        print()
        print(self.render_stats())


class DebugFilter:
    """Runs a filter pass through a debug tree instead of a flat predicate.

    Every cache layer is bypassed, and the items always equal those of a
    plain pass with the same expression and config.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def run(self, records: Sequence[Any], expression, config: FilterConfig) -> DebugResult:
        """
        Build, evaluate and summarize a debug tree.

        Args:
            records: Collection to filter.
            expression: Validated, typed expression.
            config: Filter configuration; caching is ignored.

        Returns:
            DebugResult: Matching items, the populated tree and statistics.
        """
        started = time.perf_counter()
        config = replace(config, enable_cache=False)
        compiler = PredicateCompiler(PatternCompiler(), logger=self._logger)

        tree = DebugTreeBuilder(compiler).build(expression, config)
        evaluator = DebugEvaluator()
        items, tree = evaluator.evaluate(records, tree)

        execution_time = (time.perf_counter() - started) * 1000
        total = len(records)
        stats = DebugStats(
            matched=len(items),
            total=total,
            percentage=(len(items) * 100 / total) if total else 0.0,
            execution_time=execution_time,
            cache_hit=False,
            conditions_evaluated=evaluator.conditions_evaluated,
        )
        self._logger.debug(f"Debug pass matched {stats.matched}/{stats.total} in {execution_time:.2f}ms")
        return DebugResult(items, tree, stats, config)

import re
import unittest
from datetime import date, datetime, timezone

import numpy as np

from filtercraft_data_model.expression import MISSING, OperatorClause
from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_data_model.operator_symbols import OPERATOR_FAMILIES, OperatorFamily
from filtercraft_engine.matching.pattern_compiler import PatternCompiler
from filtercraft_engine.operators.operator_dispatcher import HANDLERS, OperatorContext, bind_operator, \
    compile_operator_condition
from filtercraft_engine.validation.expression_validator import validate_expression
from filtercraft_exception_model.exception import InvalidExpressionError


def matcher(operators, config=None, field='f'):
    condition = validate_expression({field: operators}).clauses[0].condition
    ctx = OperatorContext(config or FilterConfig(), PatternCompiler(), field)
    return compile_operator_condition(condition, ctx)


class TestComparisonOperators(unittest.TestCase):

    def test_ordering_numbers(self):
        self.assertTrue(matcher({'$gt': 5})(10))
        self.assertFalse(matcher({'$gt': 5})(5))
        self.assertTrue(matcher({'$gte': 5})(5))
        self.assertTrue(matcher({'$lt': 5})(4.5))
        self.assertTrue(matcher({'$lte': 5})(np.int64(5)))

    def test_ordering_never_coerces_strings(self):
        self.assertFalse(matcher({'$gt': 5})("10"))
        self.assertFalse(matcher({'$lt': 5})(None))
        self.assertFalse(matcher({'$lt': 5})(MISSING))

    def test_bool_is_not_ordered(self):
        self.assertFalse(matcher({'$gte': 0})(True))

    def test_eq_and_ne(self):
        self.assertTrue(matcher({'$eq': 1})(1.0))
        self.assertFalse(matcher({'$eq': 1})(True))
        self.assertFalse(matcher({'$eq': 1})("1"))
        self.assertTrue(matcher({'$ne': 150})(100))
        self.assertFalse(matcher({'$ne': 150})(150))

    def test_dates(self):
        check = matcher({'$gte': datetime(2024, 1, 1)})
        self.assertTrue(check(datetime(2024, 3, 1)))
        self.assertFalse(check(datetime(2023, 12, 31, 23, 59)))
        # plain dates order as midnight
        self.assertTrue(check(date(2024, 1, 1)))

    def test_naive_and_aware_never_match(self):
        check = matcher({'$lt': datetime(2024, 1, 1, tzinfo=timezone.utc)})
        self.assertFalse(check(datetime(2020, 1, 1)))

    def test_range_is_anded(self):
        check = matcher({'$gte': 100, '$lte': 200, '$ne': 150})
        self.assertTrue(check(100))
        self.assertTrue(check(200))
        self.assertFalse(check(150))
        self.assertFalse(check(250))


class TestArrayOperators(unittest.TestCase):

    def test_in(self):
        self.assertTrue(matcher({'$in': [1, 2]})(2))
        self.assertFalse(matcher({'$in': [1, 2]})("2"))
        self.assertFalse(matcher({'$in': []})(1))

    def test_nin(self):
        self.assertTrue(matcher({'$nin': ['a', 'b']})('c'))
        self.assertFalse(matcher({'$nin': ['a', 'b']})('a'))
        self.assertTrue(matcher({'$nin': ['a']})(MISSING))

    def test_size(self):
        self.assertTrue(matcher({'$size': 2})([1, 2]))
        self.assertTrue(matcher({'$size': 0})(()))
        self.assertFalse(matcher({'$size': 2})('ab'))
        self.assertFalse(matcher({'$size': 2})([1]))

    def test_contains_on_sequence(self):
        self.assertTrue(matcher({'$contains': 2})([1, 2, 3]))
        self.assertFalse(matcher({'$contains': '2'})([1, 2, 3]))
        self.assertTrue(matcher({'$contains': 'vip'})(['new', 'vip']))

    def test_contains_on_string(self):
        self.assertTrue(matcher({'$contains': 'world'})('Hello World'))
        self.assertFalse(matcher({'$contains': 'world'}, FilterConfig(case_sensitive=True))('Hello World'))

    def test_contains_on_anything_else(self):
        self.assertFalse(matcher({'$contains': 4})(42))
        self.assertFalse(matcher({'$contains': 'a'})({'a': 1}))


class TestStringOperators(unittest.TestCase):

    def test_starts_and_ends_with(self):
        self.assertTrue(matcher({'$startsWith': 'ap'})('Apple'))
        self.assertFalse(matcher({'$startsWith': 'ap'}, FilterConfig(case_sensitive=True))('Apple'))
        self.assertTrue(matcher({'$endsWith': 'LE'})('Apple'))
        self.assertFalse(matcher({'$endsWith': 'x'})('Apple'))

    def test_values_use_their_string_form(self):
        self.assertTrue(matcher({'$startsWith': '12'})(123))
        self.assertTrue(matcher({'$startsWith': 'tr'})(True))

    def test_absent_values_never_match(self):
        self.assertFalse(matcher({'$startsWith': 'nu'})(None))
        self.assertFalse(matcher({'$endsWith': ''})(MISSING))
        self.assertFalse(matcher({'$regex': '.*'})(None))

    def test_regex(self):
        self.assertTrue(matcher({'$regex': '^a.*e$'})('Apple'))
        self.assertFalse(matcher({'$regex': '^a.*e$'}, FilterConfig(case_sensitive=True))('Apple'))
        self.assertTrue(matcher({'$match': 'pp'})('Apple'))

    def test_compiled_regex_keeps_flags(self):
        self.assertFalse(matcher({'$regex': re.compile('^a')})('Apple'))
        self.assertTrue(matcher({'$regex': re.compile('^a', re.IGNORECASE)})('Apple'))


class TestDispatcher(unittest.TestCase):

    def test_every_operator_has_a_handler(self):
        self.assertEqual(set(OPERATOR_FAMILIES), set(HANDLERS))

    def test_unknown_operator(self):
        ctx = OperatorContext(FilterConfig(), PatternCompiler())
        with self.assertRaises(InvalidExpressionError):
            bind_operator(OperatorClause('$between', OperatorFamily.COMPARISON, (1, 2)), ctx)

    def test_short_circuit_in_declaration_order(self):
        check = matcher({'$gt': 10, '$startsWith': '5'})
        self.assertFalse(check(5))
        self.assertTrue(check(50))


if __name__ == '__main__':
    unittest.main()

import unittest

from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_engine.cache.predicate_cache import PredicateCache
from filtercraft_engine.predicate.predicate_compiler import PredicateCompiler
from filtercraft_engine.validation.expression_validator import validate_expression


class TestPredicateCompiler(unittest.TestCase):

    def setUp(self):
        self.compiler = PredicateCompiler()
        self.config = FilterConfig()

    def compile(self, raw, config=None):
        return self.compiler.compile(validate_expression(raw), config or self.config)

    def test_predicate_function_is_used_verbatim(self):
        def is_even(n):
            return n % 2 == 0
        self.assertIs(self.compile(is_even), is_even)

    def test_string_against_scalars_and_records(self):
        predicate = self.compile('berlin')
        self.assertTrue(predicate('Berlin'))
        self.assertTrue(predicate({'city': 'Berlin'}))
        self.assertTrue(predicate(['x', 'BERLIN']))
        self.assertFalse(predicate({'city': 'Berlin City'}))
        self.assertFalse(predicate(None))

    def test_string_is_compared_one_level_deep(self):
        self.assertFalse(self.compile('Berlin')({'address': {'city': 'Berlin'}}))

    def test_string_against_numbers(self):
        predicate = self.compile('7')
        self.assertFalse(predicate({'id': 7}))
        self.assertTrue(predicate({'id': '7'}))

    def test_negated_wildcard(self):
        predicate = self.compile('!A%')
        self.assertFalse(predicate('Alfreds'))
        self.assertTrue(predicate('Bon app'))

    def test_number_primitive_uses_deep_comparison(self):
        predicate = self.compile(42)
        self.assertTrue(predicate({'a': {'b': 42}}))
        self.assertFalse(predicate({'a': 41}))

    def test_literal_field(self):
        predicate = self.compile({'active': True})
        self.assertTrue(predicate({'active': True}))
        self.assertFalse(predicate({'active': 1}))
        self.assertFalse(predicate({}))

    def test_literal_field_negation(self):
        predicate = self.compile({'city': '!Berlin'})
        self.assertFalse(predicate({'city': 'Berlin'}))
        self.assertTrue(predicate({'city': 'Paris'}))
        self.assertTrue(predicate({}))

    def test_literal_field_is_case_sensitive(self):
        self.assertFalse(self.compile({'city': 'berlin'})({'city': 'Berlin'}))

    def test_field_wildcard(self):
        predicate = self.compile({'code': 'A_'})
        self.assertTrue(predicate({'code': 'a1'}))
        self.assertFalse(predicate({'code': 'A12'}))

    def test_array_or(self):
        predicate = self.compile({'city': ['Berlin', 'Pa%']})
        self.assertTrue(predicate({'city': 'Berlin'}))
        self.assertTrue(predicate({'city': 'Paris'}))
        self.assertFalse(predicate({'city': 'Rome'}))
        self.assertFalse(self.compile({'city': []})({'city': 'Berlin'}))

    def test_custom_comparator_on_literal(self):
        config = FilterConfig(custom_comparator=lambda actual, expected: str(actual).startswith(expected))
        self.assertTrue(self.compile({'code': 'AB'}, config)({'code': 'ABC'}))

    def test_any_property_clause_does_not_match_whole_record(self):
        predicate = self.compile({'$': 'Berlin'})
        self.assertTrue(predicate({'city': 'Berlin'}))
        self.assertFalse(predicate({'city': 'Paris'}))

    def test_not(self):
        predicate = self.compile({'$not': {'city': 'Berlin'}})
        self.assertFalse(predicate({'city': 'Berlin'}))
        self.assertTrue(predicate({'city': 'Paris'}))

    def test_attribute_records(self):
        class Customer:
            def __init__(self, city):
                self.city = city
        self.assertTrue(self.compile({'city': 'Berlin'})(Customer('Berlin')))
        self.assertTrue(self.compile('Berlin')(Customer('Berlin')))


class TestPredicateCaching(unittest.TestCase):

    def test_cached_only_when_enabled(self):
        cache = PredicateCache()
        compiler = PredicateCompiler(predicate_cache=cache)
        expression = validate_expression({'city': 'Berlin'})

        compiler.compile(expression, FilterConfig())
        self.assertEqual(len(cache), 0)

        config = FilterConfig(enable_cache=True)
        first = compiler.compile(expression, config)
        second = compiler.compile(validate_expression({'city': 'Berlin'}), config)
        self.assertIs(first, second)
        self.assertEqual(len(cache), 1)

    def test_case_sensitivity_gets_its_own_entry(self):
        cache = PredicateCache()
        compiler = PredicateCompiler(predicate_cache=cache)
        expression = validate_expression('Berlin')
        compiler.compile(expression, FilterConfig(enable_cache=True))
        compiler.compile(expression, FilterConfig(enable_cache=True, case_sensitive=True))
        self.assertEqual(len(cache), 2)


if __name__ == '__main__':
    unittest.main()

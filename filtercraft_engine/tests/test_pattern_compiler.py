import re
import unittest

from filtercraft_engine.cache.pattern_cache import PatternCache
from filtercraft_engine.matching.pattern_compiler import PatternCompiler, has_wildcard, peel_negation, \
    wildcard_to_regex
from filtercraft_exception_model.exception import OperatorError


class TestWildcards(unittest.TestCase):

    def setUp(self):
        self.compiler = PatternCompiler()

    def test_underscore_is_exactly_one_character(self):
        self.assertTrue(self.compiler.wildcard_matches('A_', 'A1', False))
        self.assertFalse(self.compiler.wildcard_matches('A_', 'AB1', False))
        self.assertFalse(self.compiler.wildcard_matches('A_', 'A', False))

    def test_percent_is_any_run(self):
        self.assertTrue(self.compiler.wildcard_matches('A%', 'A', False))
        self.assertTrue(self.compiler.wildcard_matches('A%', 'Alfreds', False))
        self.assertTrue(self.compiler.wildcard_matches('%eds', 'Alfreds', False))
        self.assertFalse(self.compiler.wildcard_matches('%eds', 'Alfred', False))

    def test_other_characters_are_literal(self):
        self.assertFalse(self.compiler.wildcard_matches('a.c%', 'abc', False))
        self.assertTrue(self.compiler.wildcard_matches('a.c%', 'a.cd', False))
        self.assertEqual(wildcard_to_regex('(x)%'), r'\(x\).*')

    def test_case(self):
        self.assertTrue(self.compiler.wildcard_matches('a%', 'Alfreds', False))
        self.assertFalse(self.compiler.wildcard_matches('a%', 'Alfreds', True))

    def test_non_strings_never_match(self):
        self.assertFalse(self.compiler.wildcard_matches('1%', 12, False))

    def test_has_wildcard(self):
        self.assertTrue(has_wildcard('A_'))
        self.assertTrue(has_wildcard('%'))
        self.assertFalse(has_wildcard('Berlin'))


class TestNegation(unittest.TestCase):

    def test_peel(self):
        self.assertEqual(peel_negation('x'), (False, 'x'))
        self.assertEqual(peel_negation('!x'), (True, 'x'))
        self.assertEqual(peel_negation('!!x'), (False, 'x'))
        self.assertEqual(peel_negation('!!!%x'), (True, '%x'))


class TestRegex(unittest.TestCase):

    def test_invalid_regex_raises_operator_error(self):
        with self.assertRaises(OperatorError) as ctx:
            PatternCompiler().compile_regex('[', False, '$regex', 'name')
        self.assertEqual(ctx.exception.operator, '$regex')
        self.assertEqual(ctx.exception.field, 'name')

    def test_compiled_pattern_keeps_its_flags(self):
        pattern = re.compile('^a')
        self.assertIs(PatternCompiler().compile_regex(pattern, False), pattern)

    def test_string_pattern_case_follows_config(self):
        compiler = PatternCompiler()
        self.assertIsNotNone(compiler.compile_regex('^a', False).search('Apple'))
        self.assertIsNone(compiler.compile_regex('^a', True).search('Apple'))


class TestPatternCache(unittest.TestCase):

    def test_memoized(self):
        cache = PatternCache()
        compiler = PatternCompiler(cache)
        first = compiler.compile_wildcard('A%', False)
        second = compiler.compile_wildcard('A%', False)
        self.assertIs(first, second)
        self.assertEqual(len(cache), 1)

        compiler.compile_wildcard('A%', True)
        compiler.compile_regex('^x', False)
        self.assertEqual(len(cache), 3)

    def test_without_cache_patterns_still_compile(self):
        compiler = PatternCompiler()
        self.assertTrue(compiler.wildcard_matches('A%', 'Alfreds', False))
        self.assertTrue(compiler.wildcard_matches('A%', 'Ana', False))


if __name__ == '__main__':
    unittest.main()

import re
import unittest
from io import StringIO
from unittest.mock import patch

from filtercraft_data_model.expression import MISSING
from filtercraft_data_model.filter_config import FilterConfig, merge_config
from filtercraft_engine.debug.debug_filter import DebugFilter
from filtercraft_engine.debug.debug_formatter import GREEN, RED, format_value
from filtercraft_engine.debug.debug_node import NODE_FIELD, NODE_LOGICAL, NODE_OPERATOR, DebugNode
from filtercraft_engine.engine.filter_service import FilterService
from filtercraft_engine.validation.expression_validator import validate_expression

CUSTOMERS = [
    {'name': 'Alfreds', 'city': 'Berlin', 'orders': 6, 'address': {'zip': '10115'}},
    {'name': 'Ana', 'city': 'Madrid', 'orders': 4, 'address': {'zip': '28001'}},
    {'name': 'Blauer See', 'city': 'Berlin', 'orders': 12, 'address': {'zip': '10117'}},
    {'name': 'Bon app', 'city': 'Paris', 'orders': 17},
]


def run(expression, **options):
    config = merge_config(options) if options else FilterConfig()
    return DebugFilter().run(CUSTOMERS, validate_expression(expression), config)


class TestDebugTree(unittest.TestCase):

    def test_single_field_is_the_root(self):
        result = run({'city': 'Berlin'})
        self.assertEqual(result.tree.node_type, NODE_FIELD)
        self.assertEqual((result.tree.matched, result.tree.total), (2, 4))
        self.assertEqual(result.stats.percentage, 50.0)

    def test_several_fields_are_wrapped_in_and(self):
        result = run({'city': 'Berlin', 'orders': {'$gt': 10}})
        tree = result.tree
        self.assertEqual((tree.node_type, tree.operator), (NODE_LOGICAL, '$and'))
        city, orders = tree.children
        self.assertEqual((city.matched, city.total), (2, 4))
        # orders is only reached for the two Berlin records
        self.assertEqual((orders.matched, orders.total), (1, 2))
        self.assertEqual(orders.children[0].node_type, NODE_OPERATOR)
        self.assertEqual((tree.matched, tree.total), (1, 4))
        self.assertEqual([c['name'] for c in result.items], ['Blauer See'])

    def test_unreached_conditions_are_not_counted(self):
        result = run({'city': 'Nowhere', 'orders': {'$gt': 10, '$lt': 15}})
        city, orders = result.tree.children
        self.assertEqual(city.total, 4)
        self.assertEqual(orders.total, 0)
        self.assertEqual([child.total for child in orders.children], [0, 0])
        # root and city, for each record
        self.assertEqual(result.stats.conditions_evaluated, 2 * 4)

    def test_operators_stop_at_the_first_failure(self):
        orders = run({'orders': {'$gt': 5, '$lt': 15}}).tree
        greater, less = orders.children
        self.assertEqual((greater.matched, greater.total), (3, 4))
        self.assertEqual((less.matched, less.total), (2, 3))

    def test_guarded_or_branch_is_never_reached(self):
        records = [{'kind': 'a'}, {'kind': 'b', 'x': 5}]
        expression = {'$or': [{'kind': 'a'}, lambda r: r['x'] > 1]}
        result = DebugFilter().run(records, validate_expression(expression), FilterConfig())
        self.assertEqual(result.items, records)
        self.assertEqual(result.items, FilterService().filter(records, expression))
        kind, guarded = result.tree.children
        self.assertEqual((kind.matched, kind.total), (1, 2))
        self.assertEqual((guarded.matched, guarded.total), (1, 1))

    def test_guarded_and_branch_is_never_reached(self):
        records = [{'kind': 'a'}, {'kind': 'b', 'x': 5}]
        expression = {'$and': [{'kind': 'b'}, lambda r: r['x'] > 1]}
        result = DebugFilter().run(records, validate_expression(expression), FilterConfig())
        self.assertEqual(result.items, [records[1]])
        self.assertEqual(result.tree.children[1].total, 1)

    def test_nested_children_need_an_object_value(self):
        records = [{'address': 'unknown'}, {'address': {'zip': '10115'}}]
        result = DebugFilter().run(records, validate_expression({'address': {'zip': '10115'}}), FilterConfig())
        address = result.tree
        self.assertEqual((address.matched, address.total), (1, 2))
        self.assertEqual(address.children[0].total, 1)

    def test_logical_and_array_nodes(self):
        result = run({'$or': [{'city': 'Paris'}, {'orders': {'$lt': 5}}], 'city': ['Paris', 'Madrid']})
        tree = result.tree
        self.assertEqual(tree.operator, 'ROOT')
        either, cities = tree.children
        self.assertEqual(either.operator, '$or')
        self.assertEqual(either.matched, 2)
        self.assertEqual(cities.operator, 'OR')
        self.assertEqual([c.matched for c in cities.children], [1, 1])

    def test_nested_paths_are_prefixed(self):
        result = run({'address': {'zip': '10115', 'city': 'Berlin'}})
        nested = result.tree.children[0]
        self.assertEqual([c.field for c in nested.children], ['address.zip', 'address.city'])
        self.assertEqual(nested.children[0].matched, 1)

    def test_items_equal_plain_filter(self):
        expression = {'$or': [{'city': 'Paris'}, {'name': 'A%'}]}
        self.assertEqual(run(expression).items, FilterService().filter(CUSTOMERS, expression))

    def test_cache_is_bypassed(self):
        result = run({'city': 'Berlin'}, enableCache=True)
        self.assertFalse(result.config.enable_cache)
        self.assertFalse(result.stats.cache_hit)

    def test_empty_collection(self):
        result = DebugFilter().run([], validate_expression('x'), FilterConfig())
        self.assertEqual(result.stats.percentage, 0.0)
        self.assertEqual(result.items, [])


class TestDebugRendering(unittest.TestCase):

    def test_tree_text(self):
        text = run({'city': 'Berlin', 'orders': {'$gt': 10}}).render()
        lines = text.splitlines()
        self.assertEqual(lines[0], 'Filter Debug Tree')
        self.assertEqual(lines[1], '└── AND (1/4 matched, 25.0%)')
        self.assertEqual(lines[2], '    ├── city = "Berlin" (2/4 matched, 50.0%)')
        self.assertEqual(lines[3], '    └── orders (1/2 matched, 50.0%)')
        self.assertEqual(lines[4], '        └── orders > 10 (1/2 matched, 50.0%)')

    def test_stats_text(self):
        text = run({'city': 'Berlin'}).render_stats()
        self.assertIn('Matched: 2 / 4 items (50.0%)', text)
        self.assertIn('Cache Hit: No', text)
        self.assertIn('Conditions Evaluated: 4', text)

    def test_colorize(self):
        self.assertIn(RED, run({'city': 'Berlin'}, colorize=True).render())
        self.assertIn(GREEN, run({'orders': {'$gt': 0}}, colorize=True).render())
        self.assertNotIn('\x1b[', run({'city': 'Berlin'}).render())

    def test_show_timings(self):
        text = run({'city': 'Berlin'}, showTimings=True).render()
        self.assertRegex(text, r'\[\d+\.\d{2}ms\]')

    def test_verbose_shows_values(self):
        text = run({'orders': {'$in': [4, 6]}}, verbose=True).render()
        self.assertIn('Value: [4, 6]', text)

    def test_print(self):
        with patch('sys.stdout', new_callable=StringIO) as out:
            run({'city': 'Berlin'}).print()
        self.assertIn('Filter Debug Tree', out.getvalue())
        self.assertIn('Statistics:', out.getvalue())


class TestFormatting(unittest.TestCase):

    def test_format_value(self):
        self.assertEqual(format_value('x'), '"x"')
        self.assertEqual(format_value(None), 'null')
        self.assertEqual(format_value(MISSING), 'undefined')
        self.assertEqual(format_value(True), 'true')
        self.assertEqual(format_value((1, 'a')), '[1, "a"]')
        self.assertEqual(format_value(re.compile('^a')), '/^a/')

    def test_node_to_dict(self):
        node = DebugNode(NODE_FIELD, field='city', value='Berlin', matched=1, total=2)
        self.assertEqual(node.to_dict(), {
            'type': 'field', 'field': 'city', 'value': 'Berlin',
            'matched': 1, 'total': 2, 'evaluation_time': 0.0,
        })


if __name__ == '__main__':
    unittest.main()

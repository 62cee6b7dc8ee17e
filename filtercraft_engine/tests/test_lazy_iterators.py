import asyncio
import unittest

from filtercraft_engine.engine.lazy_iterators import async_filter, async_map, chunk, every, find, flatten, \
    for_each, map_items, reduce_items, require_positive, skip, some, take, to_list
from filtercraft_exception_model.exception import ConfigurationError


def counting(values, pulled):
    for value in values:
        pulled.append(value)
        yield value


async def agen(values):
    for value in values:
        yield value


class TestLazyIterators(unittest.TestCase):

    def test_take_pulls_only_what_it_needs(self):
        pulled = []
        self.assertEqual(list(take(counting(range(100), pulled), 3)), [0, 1, 2])
        self.assertEqual(pulled, [0, 1, 2])

    def test_take_zero(self):
        self.assertEqual(list(take([1, 2], 0)), [])

    def test_skip(self):
        self.assertEqual(list(skip(range(5), 2)), [2, 3, 4])
        self.assertEqual(list(skip(range(2), 5)), [])

    def test_map_and_reduce_receive_index(self):
        self.assertEqual(list(map_items(['a', 'b'], lambda item, i: f"{i}{item}")), ['0a', '1b'])
        self.assertEqual(reduce_items([1, 2, 3], lambda acc, item, i: acc + item * i, 0), 8)

    def test_for_each(self):
        seen = []
        for_each(['x', 'y'], lambda item, i: seen.append((i, item)))
        self.assertEqual(seen, [(0, 'x'), (1, 'y')])

    def test_every_some_find(self):
        self.assertTrue(every([2, 4], lambda item, i: item % 2 == 0))
        self.assertFalse(every([2, 3], lambda item, i: item % 2 == 0))
        self.assertTrue(every([], lambda item, i: False))
        self.assertTrue(some([1, 2], lambda item, i: item == 2))
        self.assertFalse(some([], lambda item, i: True))
        self.assertEqual(find([1, 2, 3], lambda item, i: item > 1), 2)
        self.assertIsNone(find([1], lambda item, i: item > 1))

    def test_some_stops_early(self):
        pulled = []
        some(counting(range(10), pulled), lambda item, i: item == 1)
        self.assertEqual(pulled, [0, 1])

    def test_chunk(self):
        self.assertEqual(list(chunk(range(5), 2)), [[0, 1], [2, 3], [4]])
        self.assertEqual(list(chunk([], 2)), [])

    def test_chunk_size_must_be_positive(self):
        with self.assertRaises(ConfigurationError):
            list(chunk([1], 0))

    def test_require_positive(self):
        require_positive(1, 'count')
        for bad in (0, -1, 1.5, True):
            with self.assertRaises(ConfigurationError) as ctx:
                require_positive(bad, 'count')
            self.assertEqual(ctx.exception.option, 'count')

    def test_flatten_one_level(self):
        self.assertEqual(list(flatten([[1, 2], 3, 'ab', [[4]], {'k': 1}])), [1, 2, 3, 'ab', [4], {'k': 1}])

    def test_to_list(self):
        self.assertEqual(to_list(iter((1, 2))), [1, 2])


class TestAsyncIterators(unittest.TestCase):

    def test_async_filter(self):
        async def collect():
            return [item async for item in async_filter(agen(range(6)), lambda item: item % 2 == 0)]
        self.assertEqual(asyncio.run(collect()), [0, 2, 4])

    def test_async_map(self):
        async def collect():
            return [item async for item in async_map(agen(['a', 'b']), lambda item, i: (i, item))]
        self.assertEqual(asyncio.run(collect()), [(0, 'a'), (1, 'b')])


if __name__ == '__main__':
    unittest.main()

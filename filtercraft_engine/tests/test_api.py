import unittest

from filtercraft_engine import api

ORDERS = [
    {'id': 1, 'status': 'open', 'total': 120},
    {'id': 2, 'status': 'closed', 'total': 80},
    {'id': 3, 'status': 'open', 'total': 40},
]


class TestModuleApi(unittest.TestCase):

    def tearDown(self):
        api.clear_cache()

    def test_filter(self):
        self.assertEqual([o['id'] for o in api.filter(ORDERS, {'status': 'open'})], [1, 3])

    def test_lazy_helpers(self):
        self.assertEqual([o['id'] for o in api.filter_lazy(ORDERS, {'total': {'$gt': 50}})], [1, 2])
        self.assertEqual([o['id'] for o in api.filter_first(ORDERS, 'open')], [1])
        self.assertTrue(api.filter_exists(ORDERS, 'closed'))
        self.assertEqual(api.filter_count(ORDERS, 'open'), 2)
        self.assertEqual(len(api.filter_chunked(ORDERS, {'total': {'$gt': 0}}, 2)), 2)

    def test_debug(self):
        result = api.filter_debug(ORDERS, {'status': 'open'})
        self.assertEqual(result.stats.matched, 2)

    def test_cache_stats(self):
        api.filter(ORDERS, 'open', {'enableCache': True})
        self.assertEqual(api.cache_stats()['result_cache_size'], 1)
        api.clear_cache()
        self.assertEqual(api.cache_stats()['result_cache_size'], 0)


if __name__ == '__main__':
    unittest.main()

import unittest
from decimal import Decimal

from fakes import FakeTable, client_error, posts

from socialfeed.errors import InternalError
from socialfeed.services import store


class TestPlain(unittest.TestCase):
    def test_converts_decimals(self):
        item = {"n": Decimal("3"), "f": Decimal("1.5"), "nested": {"l": [Decimal("2")]}}
        self.assertEqual(store.plain(item), {"n": 3, "f": 1.5, "nested": {"l": [2]}})


class TestQueryPage(unittest.TestCase):
    def test_first_page(self):
        table = FakeTable(posts(25))
        page = store.query_page(table, skip=0, limit=10, KeyConditionExpression="cond")
        self.assertEqual([p["post_id"] for p in page], [f"p{i:03d}" for i in range(10)])
        self.assertEqual(table.queries[0]["KeyConditionExpression"], "cond")

    def test_skips_prefix(self):
        table = FakeTable(posts(25))
        page = store.query_page(table, skip=20, limit=10)
        self.assertEqual([p["post_id"] for p in page], [f"p{i:03d}" for i in range(20, 25)])

    def test_follows_last_evaluated_key(self):
        table = FakeTable(posts(40), page_cap=3)
        page = store.query_page(table, skip=10, limit=10)
        self.assertEqual([p["post_id"] for p in page], [f"p{i:03d}" for i in range(10, 20)])
        self.assertGreater(len(table.queries), 1)

    def test_page_past_end_is_empty(self):
        table = FakeTable(posts(5))
        self.assertEqual(store.query_page(table, skip=10, limit=10), [])

    def test_page_never_exceeds_limit(self):
        table = FakeTable(posts(100), page_cap=7)
        for skip in range(0, 100, 10):
            self.assertLessEqual(len(store.query_page(table, skip=skip, limit=10)), 10)

    def test_items_are_plain(self):
        table = FakeTable(posts(2))
        page = store.query_page(table, skip=0, limit=10)
        self.assertIsInstance(page[1]["likes"], int)


class TestCountItems(unittest.TestCase):
    def test_sums_pages(self):
        table = FakeTable(posts(23), page_cap=5)
        self.assertEqual(store.count_items(table, KeyConditionExpression="cond"), 23)
        self.assertTrue(all(q["Select"] == "COUNT" for q in table.queries))

    def test_empty(self):
        self.assertEqual(store.count_items(FakeTable([])), 0)


class TestClientErrors(unittest.TestCase):
    def test_query_error_becomes_internal_error(self):
        table = FakeTable(posts(3))
        table.fail = client_error(message="table missing")
        with self.assertLogs("socialfeed.services.store", level="ERROR"):
            with self.assertRaises(InternalError) as ctx:
                store.query_page(table, skip=0, limit=10)
        self.assertNotIn("table missing", str(ctx.exception))

    def test_get_item_error_becomes_internal_error(self):
        table = FakeTable()
        table.fail = client_error("GetItem")
        with self.assertLogs("socialfeed.services.store", level="ERROR"):
            with self.assertRaises(InternalError):
                store.ddb_get_item(table, {"user_id": "u1"})


class TestBatchGet(unittest.TestCase):
    def build_users(self):
        table = FakeTable(name="users")
        table.put({"user_id": "u1"}, {"user_id": "u1", "username": "ada", "age": Decimal("36")})
        table.put({"user_id": "u3"}, {"user_id": "u3", "username": "grace"})
        return table

    def test_single_call_deduplicates_and_skips_missing(self):
        table = self.build_users()
        got = store.batch_get(table, [{"user_id": "u1"}, {"user_id": "u1"}, {"user_id": "u2"}])
        self.assertEqual(got, [{"user_id": "u1", "username": "ada", "age": 36}])
        calls = table.meta.client.calls
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0], {"users": {"Keys": [{"user_id": "u1"}, {"user_id": "u2"}]}})

    def test_retries_unprocessed_keys(self):
        table = self.build_users()
        table.meta.client.unprocessed_rounds = 1
        got = store.batch_get(table, [{"user_id": "u1"}, {"user_id": "u3"}])
        self.assertEqual(sorted(u["username"] for u in got), ["ada", "grace"])
        self.assertEqual(len(table.meta.client.calls), 2)
        self.assertEqual(table.meta.client.calls[1], {"users": {"Keys": [{"user_id": "u1"}, {"user_id": "u3"}]}})

    def test_gives_up_when_keys_stay_unprocessed(self):
        table = self.build_users()
        table.meta.client.unprocessed_rounds = 100
        with self.assertLogs("socialfeed.services.store", level="ERROR"):
            with self.assertRaises(InternalError):
                store.batch_get(table, [{"user_id": "u1"}, {"user_id": "u3"}])
        self.assertEqual(len(table.meta.client.calls), store.BATCH_GET_ATTEMPTS)

    def test_chunks_large_requests(self):
        table = FakeTable(name="users")
        keys = [{"user_id": f"u{i}"} for i in range(store.BATCH_GET_MAX + 5)]
        store.batch_get(table, keys)
        sizes = [len(call["users"]["Keys"]) for call in table.meta.client.calls]
        self.assertEqual(sizes, [store.BATCH_GET_MAX, 5])

    def test_no_keys_no_calls(self):
        table = FakeTable(name="users")
        self.assertEqual(store.batch_get(table, []), [])
        self.assertEqual(table.meta.client.calls, [])

    def test_client_error_becomes_internal_error(self):
        table = self.build_users()
        table.fail = client_error("BatchGetItem", message="throttled")
        with self.assertLogs("socialfeed.services.store", level="ERROR"):
            with self.assertRaises(InternalError) as ctx:
                store.batch_get(table, [{"user_id": "u1"}])
        self.assertNotIn("throttled", str(ctx.exception))

if __name__ == "__main__":
    unittest.main()

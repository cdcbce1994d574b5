import unittest
from unittest.mock import patch

from fakes import FakeTable, client_error, posts
from fastapi import HTTPException

from socialfeed.auth.deps import AuthContext
from socialfeed.core.tables import Tables
from socialfeed.models import envelope_body
from socialfeed.routers import comments, posts as posts_router


def build_ctx(user_id="u1"):
    return AuthContext(user_id=user_id, claims={"userId": user_id})


def build_tables(post_items=None, comment_items=None, page_cap=None):
    return Tables(
        posts=FakeTable(post_items, page_cap=page_cap),
        comments=FakeTable(comment_items, page_cap=page_cap),
        users=FakeTable(),
    )


def comment_items(n, post_id="p1"):
    return [
        {"post_id": post_id, "comment_id": f"c{i:03d}", "user_id": f"u{i % 2}", "text": f"comment {i}"}
        for i in range(n)
    ]


class TestGetPosts(unittest.TestCase):
    def test_first_page_by_default(self):
        tables = build_tables(posts(23))
        resp = posts_router.get_posts(tables, build_ctx(), page=None)
        body = envelope_body(resp)
        self.assertEqual(body["code"], 200)
        self.assertEqual(body["message"], "User Posts Received")
        self.assertEqual(len(body["data"]["posts"]), 10)
        self.assertEqual(body["data"]["currentPage"], 1)
        self.assertEqual(body["data"]["totalPages"], 3)
        self.assertEqual(body["data"]["totalPosts"], 23)

    def test_last_page(self):
        tables = build_tables(posts(23), page_cap=4)
        resp = posts_router.get_posts(tables, build_ctx(), page="3")
        self.assertEqual([p["post_id"] for p in resp.data.posts], ["p020", "p021", "p022"])
        self.assertEqual(resp.data.current_page, 3)

    def test_no_posts(self):
        resp = posts_router.get_posts(build_tables([]), build_ctx(), page="1")
        self.assertEqual(resp.data.posts, [])
        self.assertEqual(resp.data.total_pages, 0)
        self.assertEqual(resp.data.total_posts, 0)

    def test_invalid_page_falls_back_to_first(self):
        resp = posts_router.get_posts(build_tables(posts(3)), build_ctx(), page="zero")
        self.assertEqual(resp.data.current_page, 1)
        self.assertEqual(len(resp.data.posts), 3)

    def test_queries_caller_partition(self):
        with patch.object(posts_router, "list_user_posts", return_value=([], 0)) as list_mock:
            posts_router.get_posts(build_tables(), build_ctx("someone"), page="2")
        tables_arg, user_id, window = list_mock.call_args.args
        self.assertEqual(user_id, "someone")
        self.assertEqual(window.skip, 10)

    def test_store_failure_is_generic_500_and_logged(self):
        tables = build_tables(posts(3))
        tables.posts.fail = client_error(message="secret table detail")
        with self.assertLogs("socialfeed.routers.posts", level="ERROR"):
            with self.assertRaises(HTTPException) as ctx:
                posts_router.get_posts(tables, build_ctx(), page=None)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.detail, "Internal Server Error")

    def test_unexpected_failure_is_generic_500(self):
        with patch.object(posts_router, "list_user_posts", side_effect=RuntimeError("kaboom")):
            with self.assertLogs("socialfeed.routers.posts", level="ERROR"):
                with self.assertRaises(HTTPException) as ctx:
                    posts_router.get_posts(build_tables(), build_ctx(), page=None)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertNotIn("kaboom", ctx.exception.detail)


class TestGetPostComments(unittest.TestCase):
    def test_requires_post_id(self):
        for post_id in (None, "", "   "):
            with self.assertRaises(HTTPException) as ctx:
                comments.get_post_comments(build_tables(), build_ctx(), post_id=post_id, page=None)
            self.assertEqual(ctx.exception.status_code, 400)
            self.assertEqual(ctx.exception.detail, "postId is required")

    def test_page_with_usernames(self):
        tables = build_tables(comment_items=comment_items(12))
        tables.users.put({"user_id": "u0"}, {"user_id": "u0", "username": "ada"})
        resp = comments.get_post_comments(tables, build_ctx(), post_id="p1", page="2")
        body = envelope_body(resp)
        self.assertEqual(body["message"], "Comments fetched successfully")
        self.assertEqual(body["data"]["currentPage"], 2)
        self.assertEqual(body["data"]["totalPages"], 2)
        self.assertEqual(body["data"]["totalComments"], 12)
        got = body["data"]["comments"]
        self.assertEqual([c["comment_id"] for c in got], ["c010", "c011"])
        self.assertEqual(got[0]["username"], "ada")
        self.assertIsNone(got[1]["username"])

    def test_usernames_fetched_in_one_batch(self):
        tables = build_tables(comment_items=comment_items(10))
        comments.get_post_comments(tables, build_ctx(), post_id="p1", page=None)
        calls = tables.users.meta.client.calls
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0]["table"]["Keys"], [{"user_id": "u0"}, {"user_id": "u1"}])

    def test_store_failure_is_generic_500_and_logged(self):
        tables = build_tables(comment_items=comment_items(3))
        tables.comments.fail = client_error()
        with self.assertLogs("socialfeed.routers.comments", level="ERROR"):
            with self.assertRaises(HTTPException) as ctx:
                comments.get_post_comments(tables, build_ctx(), post_id="p1", page=None)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.detail, "Internal Server Error")


if __name__ == "__main__":
    unittest.main()

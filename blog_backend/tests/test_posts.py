import unittest

from blog_backend.db import InMemoryDbClient
from blog_backend.errors import Forbidden, NotFound
from blog_backend.posts import PostPatch, PostService


class PostServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.alice = self.db.create_user("alice", "hash")
        self.bob = self.db.create_user("bob", "hash")
        self.posts = PostService(self.db)

    def _create(self, title="Hello"):
        return self.posts.create(
            self.alice.user_id, title, "summary", "content", "uploads/a.png"
        )

    def test_create_sets_author(self):
        post = self._create()
        self.assertEqual(post.author_id, self.alice.user_id)
        self.assertEqual(post.author_username, "alice")

    def test_get_by_id_unknown(self):
        with self.assertRaises(NotFound):
            self.posts.get_by_id("missing")

    def test_update_by_non_author_leaves_post_unchanged(self):
        post = self._create()
        with self.assertRaises(Forbidden):
            self.posts.update(post.post_id, self.bob.user_id, PostPatch(title="Mine now"))
        self.assertEqual(self.posts.get_by_id(post.post_id).title, "Hello")

    def test_update_by_author_applies_only_supplied_fields(self):
        post = self._create()
        updated = self.posts.update(
            post.post_id, self.alice.user_id, PostPatch(content="edited")
        )
        self.assertEqual(updated.content, "edited")
        self.assertEqual(updated.title, "Hello")
        self.assertEqual(updated.summary, "summary")
        self.assertEqual(updated.cover, "uploads/a.png")
        self.assertEqual(updated.author_id, self.alice.user_id)

    def test_update_unknown_post(self):
        with self.assertRaises(NotFound):
            self.posts.update("missing", self.alice.user_id, PostPatch(title="x"))

    def test_list_recent_limit_and_order(self):
        for i in range(30):
            post = self._create(title=f"post {i}")
            self.db.posts[post.post_id].created_at = float(i)
        recent = self.posts.list_recent()
        self.assertEqual(len(recent), 20)
        self.assertEqual(recent[0].title, "post 29")
        self.assertEqual(recent[-1].title, "post 10")
        self.assertEqual(len(self.posts.list_recent(limit=5)), 5)

    def test_returned_records_are_copies(self):
        post = self._create()
        post.title = "changed locally"
        self.assertEqual(self.posts.get_by_id(post.post_id).title, "Hello")


if __name__ == "__main__":
    unittest.main()

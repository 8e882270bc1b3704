"""
Tests for member bookmarks.
"""
from uuid import uuid4

from store.domain.errors import ErrorKind
from store.infra.models import BookmarkORM
from store.infra.repositories import BookmarkRepository
from store.services import BookmarkService
from store.test.base import BookstoreTestCase


class BookmarkServiceTest(BookstoreTestCase):

    def setUp(self):
        super().setUp()
        self.bookmarks = BookmarkService()
        self.book = self.make_book()

    def test_add_and_list(self):
        """Test that a member's bookmarks are listed newest first."""
        emma = self.make_book(title="Emma", author="Jane Austen")
        first = self.bookmarks.add_bookmark(self.member.id, self.book.id)
        self.assertTrue(first.success, first.message)
        self.assertEqual(first.message, "Bookmark added successfully")
        self.bookmarks.add_bookmark(self.member.id, emma.id)

        result = self.bookmarks.list_bookmarks(self.member.id)
        self.assertEqual([bookmark.book.title for bookmark in result.value], ["Emma", "Dune"])

    def test_bookmarks_are_private(self):
        """Test that one member never sees another member's bookmarks."""
        other = self.make_user("other", "Member")
        self.bookmarks.add_bookmark(other.id, self.book.id)
        self.assertEqual(self.bookmarks.list_bookmarks(self.member.id).value, [])

    def test_duplicate_is_invalid_state(self):
        """Test that bookmarking the same book twice is rejected."""
        self.bookmarks.add_bookmark(self.member.id, self.book.id)
        result = self.bookmarks.add_bookmark(self.member.id, self.book.id)
        self.assertEqual(result.error_kind, ErrorKind.INVALID_STATE)
        self.assertEqual(result.message, "Book is already bookmarked")
        self.assertEqual(BookmarkORM.objects.count(), 1)

    def test_concurrent_duplicate_is_invalid_state(self):
        """Test that a duplicate caught by the unique constraint still reads as a duplicate."""
        member = self.users.get_member_profile(self.member.id)
        BookmarkRepository().create(member.id, self.book)

        class StaleLookup(BookmarkRepository):
            def get_for(self, member_id, book_id):
                return None

        result = BookmarkService(bookmark_repo=StaleLookup()).add_bookmark(self.member.id, self.book.id)
        self.assertEqual(result.error_kind, ErrorKind.INVALID_STATE)
        self.assertEqual(BookmarkORM.objects.count(), 1)

    def test_unknown_book_is_not_found(self):
        """Test that every book-keyed operation reports a missing book."""
        missing = uuid4()
        for result in (
            self.bookmarks.add_bookmark(self.member.id, missing),
            self.bookmarks.remove_bookmark_for_book(self.member.id, missing),
            self.bookmarks.is_bookmarked(self.member.id, missing),
        ):
            self.assertEqual(result.error_kind, ErrorKind.NOT_FOUND)
            self.assertEqual(result.message, "Book not found")

    def test_check_bookmark(self):
        """Test the bookmarked flag before and after adding."""
        self.assertFalse(self.bookmarks.is_bookmarked(self.member.id, self.book.id).value)
        self.bookmarks.add_bookmark(self.member.id, self.book.id)
        self.assertTrue(self.bookmarks.is_bookmarked(self.member.id, self.book.id).value)

    def test_remove_by_id(self):
        """Test removing a bookmark by its own id."""
        bookmark = self.bookmarks.add_bookmark(self.member.id, self.book.id).value
        result = self.bookmarks.remove_bookmark(self.member.id, bookmark.id)
        self.assertTrue(result.success)
        self.assertEqual(result.message, "Bookmark removed successfully")
        self.assertFalse(BookmarkORM.objects.exists())

        again = self.bookmarks.remove_bookmark(self.member.id, bookmark.id)
        self.assertEqual(again.error_kind, ErrorKind.NOT_FOUND)

    def test_cannot_remove_another_members_bookmark(self):
        """Test that another member's bookmark id reads as missing."""
        other = self.make_user("other", "Member")
        bookmark = self.bookmarks.add_bookmark(other.id, self.book.id).value

        result = self.bookmarks.remove_bookmark(self.member.id, bookmark.id)
        self.assertEqual(result.error_kind, ErrorKind.NOT_FOUND)
        self.assertEqual(result.message, "Bookmark not found")
        self.assertTrue(BookmarkORM.objects.filter(id=bookmark.id).exists())

    def test_remove_by_book(self):
        """Test removing a bookmark by book id."""
        self.bookmarks.add_bookmark(self.member.id, self.book.id)
        result = self.bookmarks.remove_bookmark_for_book(self.member.id, self.book.id)
        self.assertTrue(result.success)
        self.assertFalse(BookmarkORM.objects.exists())

        again = self.bookmarks.remove_bookmark_for_book(self.member.id, self.book.id)
        self.assertEqual(again.error_kind, ErrorKind.NOT_FOUND)
        self.assertEqual(again.message, "Bookmark not found")

    def test_admins_cannot_use_bookmarks(self):
        """Test that Admins are refused before anything else is checked."""
        result = self.bookmarks.add_bookmark(self.admin.id, uuid4())
        self.assertEqual(result.error_kind, ErrorKind.FORBIDDEN)
        self.assertEqual(result.message, "Admin users cannot use bookmarks")

    def test_staff_have_no_member_profile(self):
        """Test that Staff pass the role gate but have nowhere to keep bookmarks."""
        result = self.bookmarks.list_bookmarks(self.staff.id)
        self.assertEqual(result.error_kind, ErrorKind.NOT_FOUND)
        self.assertEqual(result.message, "Member profile not found")

    def test_deleting_book_drops_its_bookmarks(self):
        """Test that bookmarks go away with the book they point at."""
        self.bookmarks.add_bookmark(self.member.id, self.book.id)
        self.book.delete()
        self.assertEqual(self.bookmarks.list_bookmarks(self.member.id).value, [])

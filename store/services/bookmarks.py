"""
Member bookmarks: a saved-for-later list of books.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.db import IntegrityError, transaction

from store.domain.errors import InvalidState, NotFound
from store.domain.results import Result
from store.domain.roles import Capability
from store.infra.models import BookmarkORM, MemberProfileORM
from store.infra.repositories import BookmarkRepository, BookRepository, UserRepository
from store.services.base import AccessPolicy, service_operation

logger = logging.getLogger(__name__)


class BookmarkService:
    """Bookmarks belong to one member; Admins have none."""

    def __init__(
        self,
        bookmark_repo: BookmarkRepository | None = None,
        book_repo: BookRepository | None = None,
        user_repo: UserRepository | None = None,
        access: AccessPolicy | None = None,
    ):
        self.bookmark_repo = bookmark_repo or BookmarkRepository()
        self.book_repo = book_repo or BookRepository()
        self.user_repo = user_repo or UserRepository()
        self.access = access or AccessPolicy(self.user_repo)

    def _member_for(self, caller_id: UUID | str) -> MemberProfileORM:
        self.access.require(caller_id, Capability.USE_BOOKMARKS)
        member = self.user_repo.get_member_profile(caller_id)
        if member is None:
            raise NotFound("Member profile not found")
        return member

    def _book(self, book_id: UUID | str):
        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")
        return book

    @service_operation
    def list_bookmarks(self, caller_id: UUID | str) -> Result[list[BookmarkORM]]:
        member = self._member_for(caller_id)
        return Result.ok(self.bookmark_repo.list_for_member(member.id))

    @service_operation
    def add_bookmark(self, caller_id: UUID | str, book_id: UUID | str) -> Result[BookmarkORM]:
        member = self._member_for(caller_id)
        book = self._book(book_id)
        if self.bookmark_repo.get_for(member.id, book.id) is not None:
            raise InvalidState("Book is already bookmarked")

        try:
            with transaction.atomic():
                bookmark = self.bookmark_repo.create(member.id, book)
        except IntegrityError:
            # Lost a race with a concurrent add of the same book.
            raise InvalidState("Book is already bookmarked")

        logger.info("bookmark_added", extra={"book_id": str(book.id)})
        return Result.ok(bookmark, "Bookmark added successfully")

    @service_operation
    def remove_bookmark(self, caller_id: UUID | str, bookmark_id: UUID | str) -> Result[None]:
        """Remove by bookmark id; another member's bookmark reads as missing."""
        member = self._member_for(caller_id)
        bookmark = self.bookmark_repo.get_by_id(bookmark_id)
        if bookmark is None or bookmark.member_id != member.id:
            raise NotFound("Bookmark not found")

        self.bookmark_repo.delete(bookmark)
        return Result.ok(None, "Bookmark removed successfully")

    @service_operation
    def remove_bookmark_for_book(self, caller_id: UUID | str, book_id: UUID | str) -> Result[None]:
        member = self._member_for(caller_id)
        book = self._book(book_id)
        bookmark = self.bookmark_repo.get_for(member.id, book.id)
        if bookmark is None:
            raise NotFound("Bookmark not found")

        self.bookmark_repo.delete(bookmark)
        return Result.ok(None, "Bookmark removed successfully")

    @service_operation
    def is_bookmarked(self, caller_id: UUID | str, book_id: UUID | str) -> Result[bool]:
        member = self._member_for(caller_id)
        book = self._book(book_id)
        return Result.ok(self.bookmark_repo.get_for(member.id, book.id) is not None)

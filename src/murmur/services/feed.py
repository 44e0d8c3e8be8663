"""Feed assembly: read-only composition of murmur listings for a viewer."""
from __future__ import annotations

from sqlalchemy.orm import Session

from murmur.core.errors import NotFoundError
from murmur.models import Murmur, User
from murmur.schemas.murmur import MurmurResponse
from murmur.services.content import MurmurService
from murmur.services.engagement import LikeService

FeedPage = tuple[list[MurmurResponse], int]


class FeedService:
    """Turns Content Store listings into response objects for one viewer.

    Every listing resolves like counts and the viewer's liked flags with two
    bulk queries, whatever the page size.
    """

    def __init__(
        self,
        db: Session,
        murmurs: MurmurService | None = None,
        likes: LikeService | None = None,
    ) -> None:
        self.db = db
        self.likes = likes or LikeService(db)
        self.murmurs = murmurs or MurmurService(db, likes=self.likes)

    def _decorate(self, items: list[Murmur], viewer: User | None) -> list[MurmurResponse]:
        ids = [item.id for item in items]
        counts = self.likes.like_counts(ids)
        liked = self.likes.liked_ids(viewer.id, ids) if viewer is not None else set()

        decorated = []
        for item in items:
            response = MurmurResponse.model_validate(item)
            response.likes_count = counts.get(item.id, 0)
            response.is_liked_by_user = item.id in liked
            decorated.append(response)
        return decorated

    def _assemble(self, page: tuple[list[Murmur], int], viewer: User | None) -> FeedPage:
        items, total = page
        return self._decorate(items, viewer), total

    def timeline(self, viewer: User, page: int = 1, limit: int = 10) -> FeedPage:
        """Root murmurs by followed users plus the viewer's own, newest first."""
        return self._assemble(self.murmurs.get_timeline(viewer.id, page, limit), viewer)

    def public_feed(
        self,
        page: int = 1,
        limit: int = 10,
        viewer: User | None = None,
        exclude_user_id: int | None = None,
    ) -> FeedPage:
        return self._assemble(
            self.murmurs.get_public_murmurs(page, limit, exclude_user_id=exclude_user_id),
            viewer,
        )

    def user_feed(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        viewer: User | None = None,
        include_replies: bool = True,
    ) -> FeedPage:
        if self.db.get(User, user_id) is None:
            raise NotFoundError("User not found")
        return self._assemble(
            self.murmurs.get_user_murmurs(user_id, page, limit, include_replies=include_replies),
            viewer,
        )

    def search(
        self, query_text: str, page: int = 1, limit: int = 20, viewer: User | None = None
    ) -> FeedPage:
        return self._assemble(self.murmurs.search(query_text, page, limit), viewer)

    def trending(self, page: int = 1, limit: int = 10, viewer: User | None = None) -> FeedPage:
        return self._assemble(self.murmurs.get_trending(page, limit), viewer)

    def replies(
        self, murmur_id: int, page: int = 1, limit: int = 10, viewer: User | None = None
    ) -> FeedPage:
        return self._assemble(self.murmurs.get_replies(murmur_id, page, limit), viewer)

    def murmur(self, murmur_id: int, viewer: User | None = None) -> MurmurResponse:
        """Return a single visible murmur.

        Raises:
            NotFoundError: If the murmur is absent or deleted.
        """
        murmur = self.murmurs.find_by_id(murmur_id)
        if murmur is None:
            raise NotFoundError("Murmur not found")
        return self._decorate([murmur], viewer)[0]

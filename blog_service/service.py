"""Business rules for blog posts.

Every public method runs as one transaction on the configured pool. The
repository is injected, so tests and alternative storage layouts can supply
their own.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from blog_service.db_context import DatabaseManager
from blog_service.entities import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    DeleteResult,
    Post,
    PostCreate,
    PostFilter,
    PostStats,
    PostUpdate,
)
from blog_service.errors import ConflictError, NotFoundError, ValidationError
from blog_service.post_repository import PostRepository
from blog_service.slug import SlugPolicy, ensure_unique_slug, generate_base_slug

logger = logging.getLogger(__name__)


def publish_changes(
    published: bool, current_published_at: datetime | None, now: datetime
) -> dict[str, Any]:
    """Column changes for setting the publish flag.

    Draft -> Published stamps ``published_at`` only when it is empty,
    unpublishing clears it, re-publishing keeps the original stamp.
    """
    changes: dict[str, Any] = {"published": published}
    if published and current_published_at is None:
        changes["published_at"] = now
    elif not published:
        changes["published_at"] = None
    return changes


class PostService:
    def __init__(
        self,
        repository: PostRepository,
        slug_policy: SlugPolicy | None = None,
        db_name: str = "default",
        slug_conflict_retries: int = 0,
    ):
        self.repository = repository
        self.slug_policy = slug_policy or SlugPolicy()
        self.db_name = db_name
        self.slug_conflict_retries = slug_conflict_retries

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    async def _unique_slug(self, title: str, own_id: int | None = None) -> str:
        base_slug = generate_base_slug(title, self.slug_policy.fallback_prefix)
        exclude_id = own_id if self.slug_policy.exclude_self_on_update else None

        async def taken(candidate: str) -> bool:
            return await self.repository.slug_exists(candidate, exclude_id=exclude_id)

        return await ensure_unique_slug(base_slug, taken)

    async def create_post(self, data: PostCreate) -> Post:
        """Insert a post with a fresh unique slug.

        The slug check and the insert share a transaction; a racing writer
        that takes the slug first surfaces as ``ConflictError``, re-tried in a
        savepoint up to ``slug_conflict_retries`` times.
        """
        async with DatabaseManager.transaction(self.db_name):
            attempt = 0
            while True:
                try:
                    async with DatabaseManager.transaction(self.db_name):
                        slug = await self._unique_slug(data.title)
                        post = await self.repository.insert(
                            {
                                "title": data.title,
                                "content": data.content,
                                "author": data.author,
                                "slug": slug,
                                "published": data.published,
                                "published_at": self._now() if data.published else None,
                            }
                        )
                    break
                except ConflictError:
                    if attempt >= self.slug_conflict_retries:
                        raise
                    attempt += 1
                    logger.warning(
                        "Slug conflict creating %r, retrying (%d/%d)",
                        data.title,
                        attempt,
                        self.slug_conflict_retries,
                    )

        logger.info("Created post %s with slug %r", post.id, post.slug)
        return post

    async def get_post(
        self, post_id: int | None = None, slug: str | None = None
    ) -> Post | None:
        if post_id is None and slug is None:
            raise ValidationError("Either id or slug must be provided")
        async with DatabaseManager.transaction(self.db_name):
            return await self.repository.find_by_id_or_slug(post_id, slug)

    async def list_posts(
        self,
        filters: PostFilter | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Post]:
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValidationError("offset must be 0 or greater")
        async with DatabaseManager.transaction(self.db_name):
            return await self.repository.find_many(filters, limit, offset)

    async def update_post(self, post_id: int, changes: PostUpdate) -> Post:
        """Apply the provided fields; ``updated_at`` is refreshed even when none are."""
        async with DatabaseManager.transaction(self.db_name):
            existing = await self.repository.find_by_id(post_id)
            if existing is None:
                logger.warning("Update of missing post %s", post_id)
                raise NotFoundError(post_id)

            fields = changes.model_dump(exclude_none=True, exclude={"published"})
            if changes.title is not None:
                fields["slug"] = await self._unique_slug(changes.title, own_id=post_id)
            if changes.published is not None:
                fields.update(
                    publish_changes(
                        changes.published, existing.published_at, self._now()
                    )
                )

            post = await self.repository.update(post_id, fields)
            if post is None:
                raise NotFoundError(post_id)

        logger.info("Updated post %s (%s)", post.id, ", ".join(sorted(fields)) or "touch")
        return post

    async def publish_post(self, post_id: int, published: bool) -> Post:
        async with DatabaseManager.transaction(self.db_name):
            existing = await self.repository.find_by_id(post_id)
            if existing is None:
                logger.warning("Publish toggle on missing post %s", post_id)
                raise NotFoundError(post_id)

            post = await self.repository.update(
                post_id, publish_changes(published, existing.published_at, self._now())
            )
            if post is None:
                raise NotFoundError(post_id)

        logger.info("Post %s %s", post.id, "published" if published else "unpublished")
        return post

    async def delete_post(self, post_id: int) -> DeleteResult:
        async with DatabaseManager.transaction(self.db_name):
            if not await self.repository.delete(post_id):
                logger.warning("Delete of missing post %s", post_id)
                raise NotFoundError(post_id)

        logger.info("Deleted post %s", post_id)
        return DeleteResult(success=True)

    async def get_stats(self) -> PostStats:
        async with DatabaseManager.transaction(self.db_name):
            return await self.repository.stats()

from typing import Any

from blog_service.entities import Post, PostColumns, PostFilter, PostStats
from blog_service.repository import Repository, RepositoryConfig

POSTS_TABLE = "blog_posts"


class PostRepository(Repository[Post]):
    def __init__(self, config: RepositoryConfig | None = None):
        super().__init__(entity_class=Post, table_name=POSTS_TABLE, config=config)

    async def find_by_slug(self, slug: str) -> Post | None:
        return await self.where(PostColumns.slug, slug).first()

    async def find_by_id_or_slug(
        self, post_id: int | None = None, slug: str | None = None
    ) -> Post | None:
        """Match on id OR slug. When both are given, a post with that id wins."""
        if post_id is not None:
            post = await self.find_by_id(post_id)
            if post is not None or slug is None:
                return post
        if slug is not None:
            return await self.find_by_slug(slug)
        return None

    async def slug_exists(self, slug: str, exclude_id: int | None = None) -> bool:
        query = self.where(PostColumns.slug, slug)
        if exclude_id is not None:
            query = query.where(PostColumns.id, "!=", exclude_id)
        return await query.exists()

    def filtered(self, filters: PostFilter | None = None) -> "PostRepository":
        """Apply the optional equality filters of a listing"""
        query = self
        if filters is None:
            return query
        if filters.published is not None:
            query = query.where(PostColumns.published, filters.published)
        if filters.author:
            query = query.where(PostColumns.author, filters.author)
        return query

    async def find_many(
        self, filters: PostFilter | None = None, limit: int = 10, offset: int = 0
    ) -> list[Post]:
        """Newest first; id breaks created_at ties so pages never overlap."""
        return await (
            self.filtered(filters)
            .order_by_desc(PostColumns.created_at)
            .order_by_desc(PostColumns.id)
            .limit(limit)
            .offset(offset)
            .get()
        )

    async def stats(self) -> PostStats:
        query, params = (
            self.select(
                "COUNT(*) AS total",
                "COUNT(*) FILTER (WHERE published) AS published",
                "COALESCE(ROUND(AVG(array_length(string_to_array(content, ' '), 1))), 0)"
                "::int AS average_words",
            )
        ).build()
        row: Any = await self.db_ops.fetch_one(query, params)
        total = row["total"]
        return PostStats(
            total=total,
            published=row["published"],
            drafts=total - row["published"],
            average_words=row["average_words"],
        )

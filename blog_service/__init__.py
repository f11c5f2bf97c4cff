"""Blog post service: slugged posts in PostgreSQL behind named RPC procedures"""

from blog_service.errors import BlogError, ConflictError, NotFoundError, ValidationError
from blog_service.post_repository import PostRepository
from blog_service.repository import Repository, RepositoryConfig
from blog_service.service import PostService
from blog_service.slug import SlugPolicy, ensure_unique_slug, generate_base_slug

__all__ = [
    "BlogError",
    "ConflictError",
    "NotFoundError",
    "ValidationError",
    "PostRepository",
    "PostService",
    "Repository",
    "RepositoryConfig",
    "SlugPolicy",
    "ensure_unique_slug",
    "generate_base_slug",
]

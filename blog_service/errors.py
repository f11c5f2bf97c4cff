"""Error taxonomy shared by the service and the RPC surface"""


class BlogError(Exception):
    """Base class for errors surfaced to RPC callers."""

    code: str = "INTERNAL_SERVER_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogError):
    """Input was rejected before reaching the repository."""

    code = "BAD_REQUEST"
    status_code = 400


class NotFoundError(BlogError):
    """A mutation referenced a post that does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, post_id: int):
        super().__init__(f"Blog post with id {post_id} not found")
        self.post_id = post_id


class ConflictError(BlogError):
    """A write violated a uniqueness constraint (e.g. a racing slug)."""

    code = "CONFLICT"
    status_code = 409

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.constraint = constraint

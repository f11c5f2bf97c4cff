"""
Tests for procedure input models and their validation
"""

import pytest

from blog_service.entities import (
    DEFAULT_PAGE_SIZE,
    DeletePostInput,
    GetPostInput,
    GetPostsInput,
    PostCreate,
    PublishPostInput,
    UpdatePostInput,
    parse_input,
)
from blog_service.errors import ValidationError


class TestPostCreate:
    def test_published_defaults_to_draft(self):
        data = parse_input(PostCreate, {"title": "T", "content": "C", "author": "A"})
        assert data.published is False

    @pytest.mark.parametrize("field", ["title", "content", "author"])
    def test_required_fields_must_be_non_empty(self, field):
        payload = {"title": "T", "content": "C", "author": "A", field: ""}
        with pytest.raises(ValidationError, match=field):
            parse_input(PostCreate, payload)

    @pytest.mark.parametrize("field", ["title", "content", "author"])
    def test_required_fields_must_be_present(self, field):
        payload = {"title": "T", "content": "C", "author": "A"}
        del payload[field]
        with pytest.raises(ValidationError, match=field):
            parse_input(PostCreate, payload)

    def test_missing_input_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_input(PostCreate, None)


class TestGetPostsInput:
    def test_defaults(self):
        params = parse_input(GetPostsInput, None)
        assert params.limit == DEFAULT_PAGE_SIZE
        assert params.offset == 0
        assert params.published is None
        assert params.author is None

    def test_upper_bound_is_inclusive(self):
        assert parse_input(GetPostsInput, {"limit": 100}).limit == 100

    @pytest.mark.parametrize(
        "payload", [{"limit": 0}, {"limit": 101}, {"limit": -5}, {"offset": -1}]
    )
    def test_out_of_range_paging_is_rejected(self, payload):
        with pytest.raises(ValidationError):
            parse_input(GetPostsInput, payload)

    def test_filters_are_kept(self):
        params = parse_input(GetPostsInput, {"published": True, "author": "Ada"})
        assert params.published is True
        assert params.author == "Ada"


class TestGetPostInput:
    def test_requires_id_or_slug(self):
        with pytest.raises(ValidationError, match="Either id or slug must be provided"):
            parse_input(GetPostInput, {})

    def test_id_only(self):
        assert parse_input(GetPostInput, {"id": 4}).id == 4

    def test_slug_only(self):
        assert parse_input(GetPostInput, {"slug": "hello"}).slug == "hello"

    def test_both(self):
        params = parse_input(GetPostInput, {"id": 4, "slug": "hello"})
        assert (params.id, params.slug) == (4, "hello")


class TestUpdateInputs:
    def test_changes_drop_id_and_unset_fields(self):
        params = parse_input(UpdatePostInput, {"id": 1, "content": "new"})
        changes = params.changes()

        assert changes.model_dump(exclude_none=True) == {"content": "new"}
        assert changes.title is None
        assert changes.published is None

    def test_explicit_null_means_untouched(self):
        params = parse_input(UpdatePostInput, {"id": 1, "title": None, "published": False})
        assert params.changes().model_dump(exclude_none=True) == {"published": False}

    def test_update_requires_id(self):
        with pytest.raises(ValidationError, match="id"):
            parse_input(UpdatePostInput, {"title": "x"})

    def test_update_rejects_empty_title(self):
        with pytest.raises(ValidationError, match="title"):
            parse_input(UpdatePostInput, {"id": 1, "title": ""})

    def test_publish_requires_flag(self):
        with pytest.raises(ValidationError, match="published"):
            parse_input(PublishPostInput, {"id": 1})

    def test_delete_requires_integer_id(self):
        with pytest.raises(ValidationError):
            parse_input(DeletePostInput, {"id": "not-a-number"})


class TestStrictTypes:
    @pytest.mark.parametrize(
        ("model_class", "payload", "field"),
        [
            (
                PostCreate,
                {"title": "T", "content": "C", "author": "A", "published": "yes"},
                "published",
            ),
            (PostCreate, {"title": 1, "content": "C", "author": "A"}, "title"),
            (GetPostsInput, {"limit": "10"}, "limit"),
            (GetPostsInput, {"published": 1}, "published"),
            (GetPostInput, {"id": "4"}, "id"),
            (UpdatePostInput, {"id": 1, "published": "false"}, "published"),
            (PublishPostInput, {"id": 1, "published": "true"}, "published"),
            (DeletePostInput, {"id": True}, "id"),
        ],
    )
    def test_values_are_not_coerced(self, model_class, payload, field):
        with pytest.raises(ValidationError, match=field):
            parse_input(model_class, payload)

    def test_exact_types_are_accepted(self):
        params = parse_input(GetPostsInput, {"limit": 10, "published": False})
        assert (params.limit, params.published) == (10, False)

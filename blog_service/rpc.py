"""Named remote procedures over HTTP.

Queries are ``GET /<name>?input=<json>``, mutations are ``POST /<name>`` with a
JSON body. Successful calls answer ``{"result": {"data": ...}}``; failures are
rendered by the handlers registered in ``blog_service.app``.
"""

import json
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from blog_service.entities import (
    DeletePostInput,
    GetPostInput,
    GetPostsInput,
    PostCreate,
    PostFilter,
    PublishPostInput,
    UpdatePostInput,
    parse_input,
)
from blog_service.errors import ValidationError
from blog_service.service import PostService

router = APIRouter(tags=["blog"])


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


def _decode(raw: str | bytes | None) -> Any:
    if raw is None or raw in ("", b""):
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"input is not valid JSON: {exc.msg}") from exc
    except UnicodeDecodeError as exc:
        raise ValidationError("input is not valid UTF-8") from exc


def _result(data: Any) -> dict[str, Any]:
    return {"result": {"data": data}}


@router.get("/healthcheck")
async def healthcheck():
    return _result({"status": "ok", "timestamp": datetime.now(UTC).isoformat()})


@router.post("/createBlogPost")
async def create_blog_post(
    request: Request, service: PostService = Depends(get_post_service)
):
    data = parse_input(PostCreate, _decode(await request.body()))
    return _result(await service.create_post(data))


@router.get("/getBlogPosts")
async def get_blog_posts(
    raw_input: str | None = Query(default=None, alias="input"),
    service: PostService = Depends(get_post_service),
):
    params = parse_input(GetPostsInput, _decode(raw_input))
    filters = PostFilter(published=params.published, author=params.author)
    return _result(await service.list_posts(filters, params.limit, params.offset))


@router.get("/getBlogPost")
async def get_blog_post(
    raw_input: str | None = Query(default=None, alias="input"),
    service: PostService = Depends(get_post_service),
):
    params = parse_input(GetPostInput, _decode(raw_input))
    return _result(await service.get_post(post_id=params.id, slug=params.slug))


@router.post("/updateBlogPost")
async def update_blog_post(
    request: Request, service: PostService = Depends(get_post_service)
):
    params = parse_input(UpdatePostInput, _decode(await request.body()))
    return _result(await service.update_post(params.id, params.changes()))


@router.post("/deleteBlogPost")
async def delete_blog_post(
    request: Request, service: PostService = Depends(get_post_service)
):
    params = parse_input(DeletePostInput, _decode(await request.body()))
    return _result(await service.delete_post(params.id))


@router.post("/publishBlogPost")
async def publish_blog_post(
    request: Request, service: PostService = Depends(get_post_service)
):
    params = parse_input(PublishPostInput, _decode(await request.body()))
    return _result(await service.publish_post(params.id, params.published))


@router.get("/getBlogStats")
async def get_blog_stats(service: PostService = Depends(get_post_service)):
    return _result(await service.get_stats())

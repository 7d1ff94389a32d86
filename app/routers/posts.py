"""
Post endpoints.

Plain document CRUD against the ``posts`` collection.  Audio posts are
only created through ``/upload-audio``.
"""

from fastapi import APIRouter, HTTPException, Query, status

from app.dependencies import DocumentStore
from app.models import InsertResponse, Post, TextPost
from app.services.gateway import normalize_identity

router = APIRouter(tags=["posts"])


@router.post(
    "/post",
    response_model=InsertResponse,
    operation_id="createPost",
    summary="Create a text post",
)
async def create_post(store: DocumentStore, body: TextPost) -> InsertResponse:
    if body.type != "text":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="only text posts can be created here",
        )
    email = normalize_identity(body.email)
    if email is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email required")

    post = {key: value for key, value in body.model_dump().items() if key != "_id"}
    post["email"] = email
    inserted_id = await store.insert("posts", post)
    return InsertResponse(acknowledged=True, insertedId=inserted_id)


@router.get(
    "/post",
    response_model=list[Post],
    operation_id="listPosts",
    summary="All posts, newest first",
)
async def list_posts(store: DocumentStore):
    posts = await store.find("posts")
    return list(reversed(posts))


@router.get(
    "/userpost",
    response_model=list[Post],
    operation_id="listUserPosts",
    summary="Posts by one email, newest first",
)
async def list_user_posts(store: DocumentStore, email: str = Query(...)):
    posts = await store.find("posts", {"email": normalize_identity(email)})
    return list(reversed(posts))

"""
User profile endpoints backed by the ``users`` collection.
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query, status

from app.dependencies import DocumentStore
from app.models import InsertResponse, UpdateResponse
from app.services.gateway import normalize_identity

router = APIRouter(tags=["users"])


@router.post(
    "/register",
    response_model=InsertResponse,
    operation_id="registerUser",
    summary="Store a new user profile",
)
async def register(store: DocumentStore, body: dict[str, Any] = Body(...)) -> InsertResponse:
    user = {key: value for key, value in body.items() if key != "_id"}
    if isinstance(user.get("email"), str):
        user["email"] = normalize_identity(user["email"])
    inserted_id = await store.insert("users", user)
    return InsertResponse(acknowledged=True, insertedId=inserted_id)


@router.get(
    "/loggedinuser",
    operation_id="getLoggedInUser",
    summary="Users registered with the given email",
)
async def logged_in_user(store: DocumentStore, email: str = Query(...)) -> list[dict[str, Any]]:
    return await store.find("users", {"email": normalize_identity(email)})


@router.get(
    "/user",
    operation_id="listUsers",
    summary="All users",
)
async def list_users(store: DocumentStore) -> list[dict[str, Any]]:
    return await store.find("users")


@router.patch(
    "/userupdate/{email}",
    response_model=UpdateResponse,
    response_model_exclude_none=True,
    operation_id="updateUser",
    summary="Update (or create) the profile for an email",
)
async def update_user(
    email: str,
    store: DocumentStore,
    body: dict[str, Any] = Body(...),
) -> UpdateResponse:
    identity = normalize_identity(email)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email required")
    values = {key: value for key, value in body.items() if key != "email"}
    modified, upserted_id = await store.update("users", {"email": identity}, values, upsert=True)
    if upserted_id is not None:
        return UpdateResponse(acknowledged=True, upsertedId=upserted_id)
    return UpdateResponse(acknowledged=True, modifiedCount=modified)

"""Authorization and lookup guards shared by the routers and services"""
from fastapi import HTTPException
from typing import Optional


def can_access(user, quote) -> bool:
    return bool(user.is_admin) or quote.created_by == user.username


def filter_by_user(query, model, current_user):

    if not current_user.is_admin:
        return query.where(model.created_by == current_user.username)
    return query


def check_ownership(quote, current_user) -> None:

    if not can_access(current_user, quote):
        raise HTTPException(status_code=403, detail="Access denied")


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")


def check_not_self(target_user_id: int, current_user) -> None:
    """Nobody may delete the account they are signed in with, admins included."""
    if target_user_id == int(current_user.id):
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

"""
API endpoints for users: registration, search, bios and follow edges.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from litlore.domain.ports import SocialGraphRepository, UserRepository
from litlore.domain.value_objects import UserContext
from litlore.api.v1 import schemas as api
from litlore.api.v1.converters import domain_follow_edge_to_api, domain_user_to_api, unwrap_or_raise
from litlore.api.v1.dependencies import (
    get_social_graph_repository,
    get_user_context,
    get_user_repository,
)

router = APIRouter()


# =============================================================================
# Users
# =============================================================================


@router.post("/users", response_model=api.User, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: api.UserCreate,
    users: UserRepository = Depends(get_user_repository),
) -> api.User:
    """
    Create the profile document of a newly registered account.

    Raises:
        400: Username already taken
    """
    user = unwrap_or_raise(await users.create_user(body.user_id, body.username, body.email))
    return domain_user_to_api(user)


@router.get("/users/search", response_model=api.UserList)
async def search_users(
    prefix: str = Query(default="", description="Username prefix (case-sensitive)"),
    social: SocialGraphRepository = Depends(get_social_graph_repository),
) -> api.UserList:
    outcome = await social.search_users(prefix)
    users = unwrap_or_raise(outcome)
    return api.UserList(users=[domain_user_to_api(u) for u in users], skipped=len(outcome.skipped))


@router.put("/users/me/bio", status_code=status.HTTP_204_NO_CONTENT)
async def update_bio(
    body: api.BioUpdate,
    ctx: UserContext = Depends(get_user_context),
    users: UserRepository = Depends(get_user_repository),
) -> None:
    unwrap_or_raise(await users.update_bio(ctx, body.bio))


@router.get("/users/{user_id}", response_model=api.User)
async def get_user(
    user_id: str,
    users: UserRepository = Depends(get_user_repository),
) -> api.User:
    user = unwrap_or_raise(await users.fetch_user(user_id))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )
    return domain_user_to_api(user)


@router.get("/users/{user_id}/following", response_model=api.Following)
async def list_following(
    user_id: str,
    social: SocialGraphRepository = Depends(get_social_graph_repository),
) -> api.Following:
    edges = unwrap_or_raise(await social.fetch_following(user_id))
    return api.Following(
        user_id=user_id,
        usernames=[edge.followed_username for edge in edges],
        edges=[domain_follow_edge_to_api(edge) for edge in edges],
    )


# =============================================================================
# Follow edges of the acting user
# =============================================================================


@router.get("/following/{username}", response_model=api.FollowStatus)
async def get_follow_status(
    username: str,
    ctx: UserContext = Depends(get_user_context),
    social: SocialGraphRepository = Depends(get_social_graph_repository),
) -> api.FollowStatus:
    following = unwrap_or_raise(await social.is_following(ctx.user_id, username))
    return api.FollowStatus(username=username, following=following)


@router.put("/following/{username}", response_model=api.FollowStatus)
async def follow(
    username: str,
    ctx: UserContext = Depends(get_user_context),
    social: SocialGraphRepository = Depends(get_social_graph_repository),
) -> api.FollowStatus:
    """Follow a user. Following twice is not an error."""
    unwrap_or_raise(await social.follow(ctx, username))
    return api.FollowStatus(username=username, following=True)


@router.delete("/following/{username}", response_model=api.FollowStatus)
async def unfollow(
    username: str,
    ctx: UserContext = Depends(get_user_context),
    social: SocialGraphRepository = Depends(get_social_graph_repository),
) -> api.FollowStatus:
    """Unfollow a user. Unfollowing a user you do not follow is not an error."""
    unwrap_or_raise(await social.unfollow(ctx, username))
    return api.FollowStatus(username=username, following=False)

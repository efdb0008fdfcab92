"""
Idea Hub Backend — Platform Functions
======================================

Single-purpose endpoints mounted under `settings.functions_prefix`
(default /functions). Each answers exactly one verb; any other verb gets
405 `{"error": "Method not allowed"}`. Bodies follow the function envelope:
`{"data": ..., <extra keys>, "success": true}` on success and
`{"error": ...}` on failure.

    GET    ideas-list              public paginated listing
    GET    collaborators-list      collaborators of an idea
    POST   collaborators-add       add a collaborator (owner, capped at 3)
    DELETE collaborators-remove    remove a collaborator (owner)
    POST   auth-signup             register
    POST   auth-signin             sign in
    GET    auth-user               current user
    POST   auth-signout            stateless sign-out
    GET    users-profile           profile page by userId or username
    PUT    users-update            edit the caller's profile
    POST   users-follow            follow / unfollow a user
    GET    workspace-permissions   caller's rights on an idea and its workspace
    GET    workspaces-by-idea      workspace of an idea, expanded
    GET    ideas-workspace         idea plus its workspace
    GET    registry                service catalog
"""

from fastapi import APIRouter

from ideahub.functions import auth, collaborators, ideas, registry, users, workspaces


def build_router(prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix)
    for module in (ideas, collaborators, auth, users, workspaces, registry):
        router.include_router(module.router)
    return router

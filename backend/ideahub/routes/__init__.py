"""
Idea Hub Backend — API Routes Package
======================================

What:  HTTP route handlers for the /api surface.

Route Inventory:
    - ideas.py:          /api/ideas, /api/ideas/{id}, /star, /fork
    - comments.py:       /api/comments, /api/comments/{id}, /vote
    - notifications.py:  /api/notifications, /api/notifications/{id}
    - users.py:          /api/users?query=   (user search)
    - workspaces.py:     /api/workspace, /api/workspace/{id}   (bare records)
    - health.py:         /health, /api/health

Handlers stay thin: read the request, resolve the caller when needed, call
one service and wrap the result in an ApiResult. Failures are raised and
rendered by the handlers registered in main.py.
"""

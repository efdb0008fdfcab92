"""
Idea Hub Backend — Services Layer
==================================

What:  Business rules between the HTTP handlers and the database.
How:   Each service is a stateless class with a module-level singleton. Methods
       take the request's AsyncSession as their first argument, raise
       IdeaHubError subclasses for expected failures and flush (never commit);
       the session dependency commits when the handler returns.

Service Inventory:
    - AuthService: register, login, current user
    - IdeaService: listing, CRUD, stars, forks
    - CommentService: threaded comments and votes
    - NotificationService: per-user notifications
    - WorkspaceService: document + whiteboard workspaces
    - UserService: user search, profiles, follows
    - CollaboratorService: capped collaborator lists
    - RegistryService: service catalog
"""

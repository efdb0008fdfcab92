"""
Idea Hub Backend — Idea Service
================================

What:  Listing (public paginated and caller-filtered), create, read, partial
       update, delete, star/unstar and fork for ideas.

Query building:
    build_idea_conditions(filters)  → list of WHERE clauses
    resolve_idea_order(sort)        → ORDER BY clauses, always ending in id

    Sort keys:
        newest            created_at DESC   (also the fallback)
        oldest            created_at ASC
        most-stars        stars DESC
        most-forks        forks DESC
        recently-updated  updated_at DESC

Pagination (public listing):
    page ≥ 1, limit clamped to 1..100, skip = (page - 1) * limit,
    totalPages = ceil(total / limit). Page and count queries run one after
    the other on the request's session.

Visibility:
    A PRIVATE idea is readable by its author and its collaborators only.
"""

import logging
import math
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ideahub.database import db_operation, utcnow
from ideahub.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ideahub.models.comment import Comment
from ideahub.models.enums import IdeaStatus, NotificationType, Visibility
from ideahub.models.idea import Idea, IdeaTag, Star
from ideahub.models.workspace import Workspace
from ideahub.schemas.common import Pagination
from ideahub.schemas.idea import (
    IdeaCreate,
    IdeaFilters,
    IdeaForkRequest,
    IdeaResponse,
    IdeaUpdate,
)
from ideahub.schemas.workspace import IdeaWithCollaborators, IdeaWorkspaceResponse, WorkspaceResponse
from ideahub.security import CallerIdentity
from ideahub.services.access import ensure_can_view, resolve_permissions
from ideahub.services.collaborator_service import collaborator_service
from ideahub.services.notification_service import notification_service
from ideahub.services.workspace_service import new_workspace, workspace_service

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_SORT_COLUMNS = {
    "newest": (Idea.created_at, "desc"),
    "oldest": (Idea.created_at, "asc"),
    "most-stars": (Idea.stars, "desc"),
    "most-forks": (Idea.forks, "desc"),
    "recently-updated": (Idea.updated_at, "desc"),
}

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "content",
    "canvas_data",
    "category",
    "language",
    "license",
    "version",
)


# ── Query building ────────────────────────────────────────────────────────
def _is_filter(value: Optional[str]) -> bool:
    return bool(value) and value.lower() != "all"


def build_idea_conditions(filters: IdeaFilters) -> list:
    conditions = []
    if filters.visibility:
        conditions.append(Idea.visibility == filters.visibility)
    if filters.status:
        conditions.append(Idea.status == filters.status)
    if _is_filter(filters.category):
        conditions.append(Idea.category == filters.category)
    if _is_filter(filters.language):
        conditions.append(Idea.language == filters.language)
    if filters.search:
        # autoescape: % and _ typed by the user match literally
        conditions.append(
            or_(
                Idea.title.icontains(filters.search, autoescape=True),
                Idea.description.icontains(filters.search, autoescape=True),
            )
        )
    if filters.tags:
        conditions.append(Idea.tag_rows.any(IdeaTag.name.in_(filters.tags)))
    if filters.author_id:
        conditions.append(Idea.author_id == filters.author_id)
    return conditions


def resolve_idea_order(sort: Optional[str]) -> list:
    column, direction = _SORT_COLUMNS.get(sort or "newest", _SORT_COLUMNS["newest"])
    primary = column.asc() if direction == "asc" else column.desc()
    tie_break = Idea.id.asc() if direction == "asc" else Idea.id.desc()
    return [primary, tie_break]


def normalize_pagination(page: Optional[int], limit: Optional[int]) -> Tuple[int, int, int]:
    """Returns (page, limit, skip) with page ≥ 1 and limit in 1..MAX_PAGE_SIZE."""
    page = max(page or 1, 1)
    limit = DEFAULT_PAGE_SIZE if limit is None else min(max(limit, 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


def count_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def _clean_tags(tags: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(tag.strip() for tag in tags if tag and tag.strip()))


def _enum_value(enum_cls, raw: Optional[str], default, field: str) -> str:
    if raw is None:
        return default.value
    try:
        return enum_cls(raw.upper()).value
    except ValueError:
        raise ValidationError(f"Invalid {field} '{raw}'", field=field)


class IdeaService:
    """
    Business logic for ideas.

    Responses are always built from rows reloaded with author and tags
    eager-loaded; lazy loading is not available on an AsyncSession.
    """

    # ── Loading helpers ───────────────────────────────────────────────────
    def _select(self):
        return select(Idea).options(selectinload(Idea.author), selectinload(Idea.tag_rows))

    async def _load(self, db: AsyncSession, idea_id: str) -> Idea:
        result = await db.execute(
            self._select().where(Idea.id == idea_id).execution_options(populate_existing=True)
        )
        idea = result.scalar_one_or_none()
        if idea is None:
            raise NotFoundError(resource="idea", resource_id=idea_id)
        return idea

    async def _starred_ids(self, db: AsyncSession, user_id: Optional[str], idea_ids: List[str]) -> Set[str]:
        if not user_id or not idea_ids:
            return set()
        result = await db.execute(
            select(Star.idea_id).where(Star.user_id == user_id, Star.idea_id.in_(idea_ids))
        )
        return set(result.scalars().all())

    async def _comment_counts(self, db: AsyncSession, idea_ids: List[str]) -> Dict[str, int]:
        if not idea_ids:
            return {}
        result = await db.execute(
            select(Comment.idea_id, func.count(Comment.id))
            .where(Comment.idea_id.in_(idea_ids))
            .group_by(Comment.idea_id)
        )
        return {idea_id: count for idea_id, count in result.all()}

    async def _shape(self, db: AsyncSession, ideas: List[Idea], caller_id: Optional[str]) -> List[IdeaResponse]:
        """Builds responses with the caller's stars and comment counts, two queries per page."""
        ids = [idea.id for idea in ideas]
        starred = await self._starred_ids(db, caller_id, ids)
        comments = await self._comment_counts(db, ids)
        return [
            IdeaResponse.from_model(idea, is_starred=idea.id in starred, comments=comments.get(idea.id, 0))
            for idea in ideas
        ]

    async def _ensure_visible(self, db: AsyncSession, idea: Idea, caller: Optional[CallerIdentity]) -> None:
        ensure_can_view(await resolve_permissions(db, idea, caller), caller)

    def _ensure_author(self, idea: Idea, caller: CallerIdentity, action: str) -> None:
        if idea.author_id != caller.user_id:
            raise PermissionDeniedError(f"Only the author can {action} this idea")

    async def _respond(self, db: AsyncSession, idea_id: str, caller_id: Optional[str]) -> IdeaResponse:
        idea = await self._load(db, idea_id)
        (response,) = await self._shape(db, [idea], caller_id)
        return response

    # ── Listing ───────────────────────────────────────────────────────────
    @db_operation("Could not retrieve ideas. Please try again.")
    async def list_public_ideas(
        self,
        db: AsyncSession,
        filters: IdeaFilters,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[IdeaResponse], Pagination]:
        """PUBLIC + PUBLISHED only, whatever the filters say."""
        filters.visibility = Visibility.PUBLIC.value
        filters.status = IdeaStatus.PUBLISHED.value
        filters.author_id = None
        page, limit, skip = normalize_pagination(page, limit)
        conditions = build_idea_conditions(filters)

        result = await db.execute(
            self._select()
            .where(and_(*conditions))
            .order_by(*resolve_idea_order(filters.sort))
            .offset(skip)
            .limit(limit)
        )
        ideas = list(result.scalars().all())

        count_result = await db.execute(
            select(func.count(Idea.id)).where(and_(*conditions))
        )
        total = count_result.scalar() or 0

        pagination = Pagination(page=page, limit=limit, total=total, total_pages=count_pages(total, limit))
        return await self._shape(db, ideas, None), pagination

    @db_operation("Could not retrieve ideas. Please try again.")
    async def list_ideas(
        self, db: AsyncSession, filters: IdeaFilters, caller: Optional[CallerIdentity]
    ) -> List[IdeaResponse]:
        """
        Caller-filtered listing. Defaults to PUBLIC + PUBLISHED; asking for
        PRIVATE or unpublished ideas narrows the result to the caller's own.

        Raises:
            AuthenticationError: restricted filters without a caller.
        """
        filters.visibility = _enum_value(Visibility, filters.visibility, Visibility.PUBLIC, "visibility")
        filters.status = _enum_value(IdeaStatus, filters.status, IdeaStatus.PUBLISHED, "status")
        restricted = (
            filters.visibility != Visibility.PUBLIC.value
            or filters.status != IdeaStatus.PUBLISHED.value
        )
        if restricted:
            if caller is None:
                raise AuthenticationError()
            filters.author_id = caller.user_id

        result = await db.execute(
            self._select()
            .where(and_(*build_idea_conditions(filters)))
            .order_by(*resolve_idea_order(filters.sort))
        )
        ideas = list(result.scalars().all())
        return await self._shape(db, ideas, caller.user_id if caller else None)

    # ── CRUD ──────────────────────────────────────────────────────────────
    @db_operation("Could not create the idea. Please try again.")
    async def create_idea(self, db: AsyncSession, author_id: str, payload: IdeaCreate) -> IdeaResponse:
        """Creates the idea and its companion workspace in the same transaction."""
        missing = [
            name
            for name, value in (
                ("title", payload.title),
                ("description", payload.description),
                ("category", payload.category),
            )
            if not value
        ]
        if missing:
            raise ValidationError.missing_fields(missing)

        idea = Idea(
            title=payload.title,
            description=payload.description,
            content=payload.content or "",
            canvas_data=payload.canvas_data,
            author_id=author_id,
            category=payload.category,
            language=payload.language,
            license=payload.license or "MIT",
            version=payload.version or "1.0.0",
            visibility=_enum_value(Visibility, payload.visibility, Visibility.PUBLIC, "visibility"),
            status=_enum_value(IdeaStatus, payload.status, IdeaStatus.PUBLISHED, "status"),
            tag_rows=[IdeaTag(name=name) for name in _clean_tags(payload.tags)],
        )
        db.add(idea)
        await db.flush()

        db.add(
            new_workspace(
                idea_id=idea.id,
                user_id=author_id,
                name=idea.title,
                is_public=idea.visibility == Visibility.PUBLIC.value,
            )
        )
        await db.flush()
        logger.info("Idea %s created by %s", idea.id, author_id)
        return await self._respond(db, idea.id, author_id)

    @db_operation("Could not retrieve the idea.")
    async def get_idea(
        self, db: AsyncSession, idea_id: str, caller: Optional[CallerIdentity]
    ) -> IdeaResponse:
        idea = await self._load(db, idea_id)
        await self._ensure_visible(db, idea, caller)
        (response,) = await self._shape(db, [idea], caller.user_id if caller else None)
        return response

    @db_operation("Could not retrieve the idea workspace.")
    async def get_idea_workspace(
        self, db: AsyncSession, idea_id: str, caller: Optional[CallerIdentity]
    ) -> IdeaWorkspaceResponse:
        """Idea (with collaborators) plus its workspace, for opening the editor by idea id."""
        idea = await self._load(db, idea_id)
        await self._ensure_visible(db, idea, caller)
        workspace = await workspace_service.find_for_idea(db, idea_id)
        if workspace is None:
            raise NotFoundError(resource="workspace for this idea", resource_id=idea_id)

        (shaped,) = await self._shape(db, [idea], caller.user_id if caller else None)
        collaborators = await collaborator_service.list_collaborators(db, idea_id)
        return IdeaWorkspaceResponse(
            idea=IdeaWithCollaborators(**shaped.model_dump(), collaborators=collaborators),
            workspace=WorkspaceResponse.from_model(workspace),
            workspace_id=workspace.id,
        )

    @db_operation("Could not update the idea.")
    async def update_idea(
        self, db: AsyncSession, idea_id: str, caller: CallerIdentity, payload: IdeaUpdate
    ) -> IdeaResponse:
        idea = await self._load(db, idea_id)
        self._ensure_author(idea, caller, "edit")

        changes = payload.model_dump(exclude_unset=True)
        for name in _UPDATABLE_FIELDS:
            if name in changes and changes[name] is not None:
                setattr(idea, name, changes[name])
        if changes.get("visibility") is not None:
            idea.visibility = _enum_value(Visibility, changes["visibility"], Visibility.PUBLIC, "visibility")
        if changes.get("status") is not None:
            idea.status = _enum_value(IdeaStatus, changes["status"], IdeaStatus.PUBLISHED, "status")
        if changes.get("tags") is not None:
            self._replace_tags(idea, changes["tags"])

        idea.last_edited_at = utcnow()
        idea.last_edited_by = caller.user_id
        await db.flush()
        logger.info("Idea %s updated by %s", idea_id, caller.user_id)
        return await self._respond(db, idea_id, caller.user_id)

    def _replace_tags(self, idea: Idea, tags: Iterable[str]) -> None:
        wanted = _clean_tags(tags)
        for row in list(idea.tag_rows):
            if row.name not in wanted:
                idea.tag_rows.remove(row)
        present = {row.name for row in idea.tag_rows}
        idea.tag_rows.extend(IdeaTag(name=name) for name in wanted if name not in present)

    @db_operation("Could not delete the idea.")
    async def delete_idea(self, db: AsyncSession, idea_id: str, caller: CallerIdentity) -> None:
        idea = await self._load(db, idea_id)
        self._ensure_author(idea, caller, "delete")
        await db.delete(idea)
        await db.flush()
        logger.info("Idea %s deleted by %s", idea_id, caller.user_id)

    # ── Stars ─────────────────────────────────────────────────────────────
    @db_operation("Could not star the idea.")
    async def star_idea(self, db: AsyncSession, idea_id: str, caller: CallerIdentity) -> IdeaResponse:
        idea = await self._load(db, idea_id)
        await self._ensure_visible(db, idea, caller)
        if await self._starred_ids(db, caller.user_id, [idea_id]):
            raise ValidationError("Idea already starred")

        db.add(Star(user_id=caller.user_id, idea_id=idea_id))
        await db.execute(update(Idea).where(Idea.id == idea_id).values(stars=Idea.stars + 1))

        if idea.author_id != caller.user_id:
            await notification_service.create_notification(
                db,
                user_id=idea.author_id,
                type=NotificationType.STAR,
                message=f'{caller.username or "Someone"} starred "{idea.title}"',
                related_user_id=caller.user_id,
                related_idea_id=idea_id,
                related_url=f"/ideas/{idea_id}",
            )
        await db.flush()
        return await self._respond(db, idea_id, caller.user_id)

    @db_operation("Could not unstar the idea.")
    async def unstar_idea(self, db: AsyncSession, idea_id: str, caller: CallerIdentity) -> IdeaResponse:
        await self._load(db, idea_id)
        result = await db.execute(
            delete(Star).where(Star.user_id == caller.user_id, Star.idea_id == idea_id)
        )
        if result.rowcount == 0:
            raise ValidationError("Idea is not starred")
        await db.execute(update(Idea).where(Idea.id == idea_id).values(stars=Idea.stars - 1))
        return await self._respond(db, idea_id, caller.user_id)

    # ── Forks ─────────────────────────────────────────────────────────────
    @db_operation("Could not fork the idea.")
    async def fork_idea(
        self, db: AsyncSession, idea_id: str, caller: CallerIdentity, payload: IdeaForkRequest
    ) -> IdeaResponse:
        """Copies a public idea (and its first workspace) under the caller."""
        source = await self._load(db, idea_id)
        if source.visibility == Visibility.PRIVATE.value:
            raise PermissionDeniedError("Cannot fork private ideas")

        fork = Idea(
            title=payload.title or f"Fork of {source.title}",
            description=payload.description or source.description,
            content=source.content,
            canvas_data=source.canvas_data,
            author_id=caller.user_id,
            category=source.category,
            language=source.language,
            license=source.license,
            version=source.version,
            visibility=source.visibility,
            status=source.status,
            is_fork=True,
            forked_from=source.id,
            tag_rows=[IdeaTag(name=name) for name in source.tags],
        )
        db.add(fork)
        await db.flush()

        result = await db.execute(
            select(Workspace)
            .where(Workspace.idea_id == source.id)
            .order_by(Workspace.created_at.asc())
            .limit(1)
        )
        source_workspace = result.scalar_one_or_none()
        db.add(
            new_workspace(
                idea_id=fork.id,
                user_id=caller.user_id,
                name=fork.title,
                is_public=fork.visibility == Visibility.PUBLIC.value,
                document=source_workspace.document if source_workspace else None,
                whiteboard=source_workspace.whiteboard if source_workspace else None,
            )
        )
        await db.execute(update(Idea).where(Idea.id == source.id).values(forks=Idea.forks + 1))

        if source.author_id != caller.user_id:
            await notification_service.create_notification(
                db,
                user_id=source.author_id,
                type=NotificationType.FORK,
                message=f'{caller.username or "Someone"} forked "{source.title}"',
                related_user_id=caller.user_id,
                related_idea_id=fork.id,
                related_url=f"/ideas/{fork.id}",
            )
        await db.flush()
        logger.info("Idea %s forked from %s by %s", fork.id, source.id, caller.user_id)
        return await self._respond(db, fork.id, caller.user_id)


idea_service = IdeaService()

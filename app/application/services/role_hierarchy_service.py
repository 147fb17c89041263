"""Role hierarchy: bounded parent walk with cycle detection.

Holding a role implies holding every ancestor reached through
parent_role_id. The walk is the only cycle guard: writes may leave a loop
behind, so every walk is bounded by a visited set and a depth limit.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.application.dtos.role import RoleResult
from app.application.interfaces.repositories import IRoleRepository
from app.domain.exceptions import CycleDetectedException, ResourceNotFoundException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 64


def role_contributes(role: RoleResult, organization_id: str | None) -> bool:
    """Return True if an effective role may contribute permissions in the organization.

    Without an organization only system-wide roles contribute.
    """
    if not role.is_active:
        return False
    return role.organization_id is None or role.organization_id == organization_id


class RoleHierarchyService:
    """Role lookups and ancestor expansion over IRoleRepository."""

    def __init__(self, role_repo: IRoleRepository, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be positive")
        self.role_repo = role_repo
        self.max_depth = max_depth

    async def get_role(self, role_id: str) -> RoleResult:
        """Return role by ID.

        Raises:
            ResourceNotFoundException: If the role does not exist.
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException("role", role_id)
        return role

    async def _walk(
        self,
        start: RoleResult,
        known: dict[str, RoleResult],
        finished: dict[str, int] | None = None,
    ) -> list[RoleResult]:
        """Return ancestors of start, nearest first.

        Stops early at a role in `finished` (its chain was already walked;
        the value is that role's ancestor count, still charged against the
        depth limit). Raises CycleDetectedException on a revisit or when the
        depth limit is exceeded.
        """
        ancestors: list[RoleResult] = []
        path = [start.id]
        current = start
        while current.parent_role_id is not None:
            parent_id = current.parent_role_id
            if parent_id in path:
                logger.error(
                    "Role hierarchy cycle: %s -> %s", " -> ".join(path), parent_id
                )
                raise CycleDetectedException(start.id, path + [parent_id], self.max_depth)
            if len(ancestors) >= self.max_depth:
                logger.error(
                    "Role hierarchy deeper than %s starting at %s", self.max_depth, start.id
                )
                raise CycleDetectedException(start.id, path, self.max_depth)
            parent = known.get(parent_id)
            if parent is None:
                parent = await self.role_repo.get_by_id(parent_id)
                if parent is None:
                    logger.warning(
                        "Role %s references missing parent %s; walk stopped",
                        current.id,
                        parent_id,
                    )
                    break
                known[parent_id] = parent
            ancestors.append(parent)
            path.append(parent_id)
            if finished is not None and parent_id in finished:
                if len(ancestors) + finished[parent_id] > self.max_depth:
                    logger.error(
                        "Role hierarchy deeper than %s starting at %s", self.max_depth, start.id
                    )
                    raise CycleDetectedException(start.id, path, self.max_depth)
                break
            current = parent
        return ancestors

    async def get_ancestors(self, role_id: str) -> list[RoleResult]:
        """Return ancestors of role, nearest parent first.

        Raises:
            ResourceNotFoundException: If the role does not exist.
            CycleDetectedException: If the parent chain loops or exceeds max_depth.
        """
        role = await self.get_role(role_id)
        return await self._walk(role, {role.id: role})

    async def get_hierarchy(self, role_id: str) -> list[RoleResult]:
        """Return the role followed by its ancestors."""
        role = await self.get_role(role_id)
        return [role] + await self._walk(role, {role.id: role})

    async def expand(self, role_ids: Iterable[str]) -> dict[str, RoleResult]:
        """Return the given roles plus every ancestor, keyed by ID.

        Granted role IDs that no longer exist are skipped with a warning.
        Inactive roles are kept here; callers filter after expansion.
        """
        wanted = set(role_ids)
        if not wanted:
            return {}
        known = {r.id: r for r in await self.role_repo.get_by_ids(wanted)}
        for missing in sorted(wanted - known.keys()):
            logger.warning("Grant references missing role %s; ignored", missing)
        result: dict[str, RoleResult] = {}
        finished: dict[str, int] = {}
        for start_id in sorted(wanted & known.keys()):
            start = known[start_id]
            result[start.id] = start
            if start.id in finished:
                continue
            ancestors = await self._walk(start, known, finished)
            depth = len(ancestors)
            if ancestors and ancestors[-1].id in finished:
                depth += finished[ancestors[-1].id]
            finished[start.id] = depth
            for offset, ancestor in enumerate(ancestors, start=1):
                result[ancestor.id] = ancestor
                finished.setdefault(ancestor.id, depth - offset)
        return result

    async def list_effective_roles(self, organization_id: str | None) -> list[RoleResult]:
        """Active roles of the organization plus system-wide roles (priority desc, then name).

        Without an organization only system-wide roles are returned.
        """
        return await self.role_repo.list_roles(organization_id, include_inactive=False)

    async def would_create_cycle(self, role_id: str, new_parent_id: str | None) -> bool:
        """Return True if setting role's parent to new_parent_id would create a loop.

        Also True when the new chain would exceed max_depth.
        """
        if new_parent_id is None:
            return False
        if new_parent_id == role_id:
            return True
        seen = {role_id}
        current_id: str | None = new_parent_id
        depth = 0
        while current_id is not None:
            if current_id in seen or depth >= self.max_depth:
                return True
            seen.add(current_id)
            parent = await self.role_repo.get_by_id(current_id)
            if parent is None:
                return False
            current_id = parent.parent_role_id
            depth += 1
        return False

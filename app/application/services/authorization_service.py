"""Authorization decision engine.

decide() composes effective roles, resource grants, attached policies and
role permission rows into one verdict:

- every matching entry carries the priority of the role it came through;
- deny wins when the highest deny priority >= the highest allow priority;
- otherwise any allow (policy, role permission or resource grant) allows;
- otherwise deny by default;
- conditions of every policy that contributed a matching entry must pass.
"""

from __future__ import annotations

from app.application.dtos.decision import (
    Decision,
    EffectiveRoles,
    MatchedEntry,
    SimulatedPermission,
)
from app.application.dtos.policy import PolicyResult
from app.application.dtos.role import RoleResult
from app.application.interfaces.repositories import (
    IPolicyRepository,
    IRolePermissionRepository,
    IRoleResourceRepository,
)
from app.application.services.condition_evaluator import (
    ConditionEvaluator,
    ConditionOutcome,
)
from app.application.services.grant_resolver import GrantResolver
from app.domain.entities.policy import PolicyEntity
from app.domain.enums import DecisionReason, Effect, EntrySource
from app.domain.exceptions import (
    AuthorizationException,
    CycleDetectedException,
    PrincipalNotFoundException,
)
from app.domain.value_objects.core import AccessContext, PermissionRule, Principal
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = get_logger(__name__)


def policy_applies(policy: PolicyResult, organization_id: str | None) -> bool:
    entity = PolicyEntity(
        id=policy.id,
        name=policy.name,
        is_template=policy.is_template,
        is_active=policy.is_active,
        organization_id=policy.organization_id,
    )
    return entity.applies_in(organization_id)


def _rules(policy: PolicyResult) -> list[PermissionRule]:
    rules: list[PermissionRule] = []
    for entry in policy.permissions:
        try:
            rules.append(PermissionRule.from_dict(entry))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping malformed entry in policy %s: %s", policy.id, e)
    return rules


class AuthorizationService:
    """Decision engine over injected stores."""

    def __init__(
        self,
        grant_resolver: GrantResolver,
        role_resource_repo: IRoleResourceRepository,
        policy_repo: IPolicyRepository,
        role_permission_repo: IRolePermissionRepository,
        condition_evaluator: ConditionEvaluator | None = None,
    ) -> None:
        self.grant_resolver = grant_resolver
        self.role_resource_repo = role_resource_repo
        self.policy_repo = policy_repo
        self.role_permission_repo = role_permission_repo
        self.condition_evaluator = condition_evaluator or ConditionEvaluator()

    async def effective_roles(
        self, principal: Principal, context: AccessContext
    ) -> EffectiveRoles:
        """Return the principal's effective roles at context.now.

        Raises:
            PrincipalNotFoundException: If the principal is unknown.
            CycleDetectedException: If a granted role's hierarchy loops.
        """
        return await self.grant_resolver.effective_roles_detail(
            principal, context.now, context.organization_id
        )

    @traced("rbac.decide")
    async def decide(
        self,
        principal: Principal,
        action: str,
        resource_type: str,
        resource_id: str,
        context: AccessContext,
    ) -> Decision:
        """Return the verdict for principal performing action on (resource_type, resource_id).

        Unknown principals get a Deny with reason principal_not_found.

        Raises:
            CycleDetectedException: If a granted role's hierarchy loops.
        """
        try:
            effective = await self.effective_roles(principal, context)
        except PrincipalNotFoundException:
            logger.info("Deny %s %s: unknown principal", principal.type.value, principal.id)
            return Decision(effect=Effect.DENY, reason=DecisionReason.PRINCIPAL_NOT_FOUND)

        roles = {r.id: r for r in effective.roles}
        role_ids = frozenset(roles)
        if not roles:
            return self._log(
                principal, action, resource_type, resource_id,
                Decision(effect=Effect.DENY, reason=DecisionReason.DEFAULT_DENY),
            )

        matched, resource_grant = await self._resource_grant_entries(
            roles, action, resource_type, resource_id
        )
        policy_entries, contributing = await self._policy_entries(
            roles, action, resource_type, resource_id, context.organization_id
        )
        matched.extend(policy_entries)
        matched.extend(
            await self._role_permission_entries(
                roles, action, resource_type, resource_id, context
            )
        )

        decision = self._resolve(matched, role_ids, resource_grant)
        if decision.allowed and contributing:
            decision = self._apply_policy_conditions(decision, contributing, context)
        return self._log(principal, action, resource_type, resource_id, decision)

    async def check(
        self,
        principal: Principal,
        action: str,
        resource_type: str,
        resource_id: str,
        context: AccessContext,
    ) -> bool:
        """Return True only on Allow. Any error while deciding is logged and denies."""
        try:
            decision = await self.decide(
                principal, action, resource_type, resource_id, context
            )
        except Exception:
            logger.exception(
                "Authorization check failed for %s %s; denying",
                principal.type.value,
                principal.id,
            )
            return False
        return decision.allowed

    async def require(
        self,
        principal: Principal,
        action: str,
        resource_type: str,
        resource_id: str,
        context: AccessContext,
    ) -> Decision:
        """Return the Allow decision or raise AuthorizationException.

        A hierarchy cycle is reported as a denial.
        """
        resource = f"{resource_type}:{resource_id}"
        try:
            decision = await self.decide(
                principal, action, resource_type, resource_id, context
            )
        except CycleDetectedException as e:
            logger.error("Denying %s on %s: %s", action, resource, e.message)
            raise AuthorizationException(
                resource=resource, action=action, reason="cycle_detected"
            ) from e
        if not decision.allowed:
            raise AuthorizationException(
                resource=resource, action=action, reason=decision.reason.value
            )
        return decision

    async def simulate(
        self, principal: Principal, context: AccessContext
    ) -> list[SimulatedPermission]:
        """List every permission entry reachable from the principal's effective roles.

        Raises:
            PrincipalNotFoundException: If the principal is unknown.
            CycleDetectedException: If a granted role's hierarchy loops.
        """
        effective = await self.effective_roles(principal, context)
        role_ids = [r.id for r in effective.roles]
        if not role_ids:
            return []
        rows: list[SimulatedPermission] = []
        for role_id, policy in await self.policy_repo.list_for_roles(role_ids):
            if not policy_applies(policy, context.organization_id):
                continue
            for rule in _rules(policy):
                rows.append(
                    SimulatedPermission(
                        scope=rule.scope,
                        resource=rule.resource,
                        action=rule.action,
                        allowed=rule.is_allow,
                        role_id=role_id,
                        source=EntrySource.POLICY,
                        policy_id=policy.id,
                        conditions=policy.conditions or None,
                    )
                )
        for perm in await self.role_permission_repo.list_by_roles(role_ids):
            rows.append(
                SimulatedPermission(
                    scope=perm.scope,
                    resource=perm.resource,
                    action=perm.action,
                    allowed=perm.is_allow,
                    role_id=perm.role_id,
                    source=EntrySource.ROLE_PERMISSION,
                    conditions=perm.conditions or None,
                )
            )
        for grant in await self.role_resource_repo.list_by_roles(role_ids):
            for granted_action in grant.allowed_actions:
                rows.append(
                    SimulatedPermission(
                        scope=grant.resource_type,
                        resource=grant.resource_id,
                        action=granted_action,
                        allowed=True,
                        role_id=grant.role_id,
                        source=EntrySource.RESOURCE_GRANT,
                    )
                )
        rows.sort(key=lambda r: (r.scope, r.resource, r.action, not r.allowed, r.role_id))
        return rows

    async def _resource_grant_entries(
        self,
        roles: dict[str, RoleResult],
        action: str,
        resource_type: str,
        resource_id: str,
    ) -> tuple[list[MatchedEntry], bool]:
        entries: list[MatchedEntry] = []
        grants = await self.role_resource_repo.list_for_resource(
            list(roles), resource_type, resource_id
        )
        for grant in grants:
            role = roles.get(grant.role_id)
            if role is None:
                continue
            if action in grant.allowed_actions or "*" in grant.allowed_actions:
                entries.append(
                    MatchedEntry(
                        is_allow=True,
                        priority=role.priority,
                        role_id=role.id,
                        source=EntrySource.RESOURCE_GRANT,
                    )
                )
        return entries, bool(entries)

    async def _policy_entries(
        self,
        roles: dict[str, RoleResult],
        action: str,
        resource_type: str,
        resource_id: str,
        organization_id: str | None,
    ) -> tuple[list[MatchedEntry], dict[str, PolicyResult]]:
        entries: list[MatchedEntry] = []
        contributing: dict[str, PolicyResult] = {}
        for role_id, policy in await self.policy_repo.list_for_roles(list(roles)):
            role = roles.get(role_id)
            if role is None or not policy_applies(policy, organization_id):
                continue
            for rule in _rules(policy):
                if not rule.matches(resource_type, resource_id, action):
                    continue
                entries.append(
                    MatchedEntry(
                        is_allow=rule.is_allow,
                        priority=role.priority,
                        role_id=role.id,
                        source=EntrySource.POLICY,
                        policy_id=policy.id,
                    )
                )
                contributing[policy.id] = policy
        return entries, contributing

    async def _role_permission_entries(
        self,
        roles: dict[str, RoleResult],
        action: str,
        resource_type: str,
        resource_id: str,
        context: AccessContext,
    ) -> list[MatchedEntry]:
        entries: list[MatchedEntry] = []
        for perm in await self.role_permission_repo.list_by_roles(list(roles)):
            role = roles.get(perm.role_id)
            if role is None:
                continue
            try:
                rule = PermissionRule(perm.scope, perm.resource, perm.action, perm.is_allow)
            except ValueError as e:
                logger.warning("Skipping malformed role permission %s: %s", perm.id, e)
                continue
            if not rule.matches(resource_type, resource_id, action):
                continue
            outcome = self.condition_evaluator.evaluate_rule(
                perm.id, perm.conditions, context
            )
            if outcome == ConditionOutcome.FAILED:
                continue
            # An unevaluable deny still applies; an unevaluable allow does not.
            if outcome == ConditionOutcome.ERROR and rule.is_allow:
                continue
            entries.append(
                MatchedEntry(
                    is_allow=rule.is_allow,
                    priority=role.priority,
                    role_id=role.id,
                    source=EntrySource.ROLE_PERMISSION,
                )
            )
        return entries

    @staticmethod
    def _resolve(
        matched: list[MatchedEntry],
        role_ids: frozenset[str],
        resource_grant: bool,
    ) -> Decision:
        allows = [m.priority for m in matched if m.is_allow]
        denies = [m.priority for m in matched if not m.is_allow]
        top_allow = max(allows, default=None)
        top_deny = max(denies, default=None)
        common = {
            "effective_role_ids": role_ids,
            "resource_grant": resource_grant,
            "matched_allows": len(allows),
            "matched_denies": len(denies),
        }
        if top_deny is not None and (top_allow is None or top_deny >= top_allow):
            return Decision(
                effect=Effect.DENY,
                reason=DecisionReason.EXPLICIT_DENY,
                deciding_priority=top_deny,
                **common,
            )
        if top_allow is not None:
            winners = {m.source for m in matched if m.is_allow and m.priority == top_allow}
            reason = (
                DecisionReason.RESOURCE_GRANT
                if winners == {EntrySource.RESOURCE_GRANT}
                else DecisionReason.POLICY_ALLOW
            )
            return Decision(
                effect=Effect.ALLOW, reason=reason, deciding_priority=top_allow, **common
            )
        return Decision(effect=Effect.DENY, reason=DecisionReason.DEFAULT_DENY, **common)

    def _apply_policy_conditions(
        self,
        decision: Decision,
        contributing: dict[str, PolicyResult],
        context: AccessContext,
    ) -> Decision:
        for policy_id in sorted(contributing):
            outcome = self.condition_evaluator.evaluate_policy(
                policy_id, contributing[policy_id].conditions, context
            )
            if outcome == ConditionOutcome.PASSED:
                continue
            reason = (
                DecisionReason.CONDITION_FAILED
                if outcome == ConditionOutcome.FAILED
                else DecisionReason.CONDITION_ERROR
            )
            return Decision(
                effect=Effect.DENY,
                reason=reason,
                effective_role_ids=decision.effective_role_ids,
                resource_grant=decision.resource_grant,
                deciding_priority=decision.deciding_priority,
                matched_allows=decision.matched_allows,
                matched_denies=decision.matched_denies,
            )
        return decision

    @staticmethod
    def _log(
        principal: Principal,
        action: str,
        resource_type: str,
        resource_id: str,
        decision: Decision,
    ) -> Decision:
        logger.debug(
            "%s %s %s %s:%s -> %s (%s)",
            principal.type.value,
            principal.id,
            action,
            resource_type,
            resource_id,
            decision.effect.value,
            decision.reason.value,
        )
        add_span_attributes(
            **{
                "rbac.principal_type": principal.type.value,
                "rbac.action": action,
                "rbac.resource": f"{resource_type}:{resource_id}",
                "rbac.effect": decision.effect.value,
                "rbac.reason": decision.reason.value,
            }
        )
        return decision

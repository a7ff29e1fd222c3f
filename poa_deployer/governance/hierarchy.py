"""
Role Hierarchy Engine — Admin-link forest queries, cycle checks, ordering.

Roles reference their administering role by index. Free editing can produce
cycles, so every query here tolerates malformed input: traversals stop on
already-visited nodes and out-of-range links are treated as absent. The
validator reports what is wrong; the engine never loops.

The deployment call creates hats in list order, so a parent must precede
its children. ``reorder_by_dependency`` produces that order
deterministically (roots and siblings by name) and rewrites every index
reference through the old → new map.

References:
    Role graph invariants: forest, at least one root, links in range
    Deployment ordering: parents before children
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from poa_deployer.schema.errors import CoreError, ErrorKind, ValidationIssue
from poa_deployer.schema.state import (
    DeployerState,
    HierarchyLink,
    PermissionKey,
    Role,
)

logger = logging.getLogger(__name__)

ROOT_BUCKET = "root"


@dataclass
class HierarchyTree:
    """Children grouped by parent index, plus a ``"root"`` bucket."""

    roots: list[int]
    children_by_parent: dict[int | str, list[int]] = field(default_factory=dict)

    def children(self, parent: int) -> list[int]:
        return self.children_by_parent.get(parent, [])


@dataclass
class CycleReport:
    has_cycle: bool
    cycle_roles: list[int]


@dataclass(frozen=True)
class FlatNode:
    index: int
    depth: int


@dataclass
class ReorderResult:
    roles: list[Role]
    index_map: dict[int, int]  # old index → new index


class RoleHierarchy:
    """
    Read-only view over a role list's admin-link graph.

    Usage:
        hierarchy = RoleHierarchy(state.roles)
        hierarchy.would_create_cycle(0, 2)
        ordered = hierarchy.reorder_by_dependency()
    """

    def __init__(self, roles: Sequence[Role]) -> None:
        self.roles = list(roles)
        self._tree = self._build_tree()

    def __len__(self) -> int:
        return len(self.roles)

    def _parent(self, index: int) -> int | None:
        """The admin link if it points at a real role, else None."""
        admin = self.roles[index].admin_index
        if admin is None or not 0 <= admin < len(self.roles):
            return None
        return admin

    def _build_tree(self) -> HierarchyTree:
        tree = HierarchyTree(roots=[], children_by_parent={ROOT_BUCKET: []})
        for index in range(len(self.roles)):
            parent = self._parent(index)
            if parent is None or parent == index:
                tree.roots.append(index)
                tree.children_by_parent[ROOT_BUCKET].append(index)
            else:
                tree.children_by_parent.setdefault(parent, []).append(index)
        return tree

    def _sort_key(self, index: int) -> tuple[str, int]:
        return (self.roles[index].name.casefold(), index)

    # ────────────────────────────────────────────────────────────
    # Queries
    # ────────────────────────────────────────────────────────────

    def tree(self) -> HierarchyTree:
        return self._tree

    def is_root(self, index: int) -> bool:
        return index in self._tree.roots

    def descendants(self, index: int) -> list[int]:
        """Every role administered directly or transitively by ``index``."""
        visited: set[int] = set()
        stack = list(self._tree.children(index))
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self._tree.children(current))
        visited.discard(index)
        return sorted(visited)

    def ancestors(self, index: int) -> list[int]:
        """Admin chain from the direct parent upward, nearest first."""
        chain: list[int] = []
        seen = {index}
        current = self._parent(index)
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = self._parent(current)
        return chain

    def depth(self, index: int) -> int:
        return len(self.ancestors(index))

    def detect_cycles(self) -> CycleReport:
        """Find every role that sits on a cycle of admin links, self-loops included."""
        # 0 = unvisited, 1 = on the current walk, 2 = finished
        state = [0] * len(self.roles)
        on_cycle: set[int] = set()
        for start in range(len(self.roles)):
            if state[start]:
                continue
            path: list[int] = []
            current: int | None = start
            while current is not None and state[current] == 0:
                state[current] = 1
                path.append(current)
                current = self._parent(current)
            if current is not None and state[current] == 1:
                on_cycle.update(path[path.index(current):])
            for node in path:
                state[node] = 2
        return CycleReport(has_cycle=bool(on_cycle), cycle_roles=sorted(on_cycle))

    def would_create_cycle(self, index: int, candidate_parent: int | None) -> bool:
        """True if making ``candidate_parent`` the admin of ``index`` closes a loop."""
        if candidate_parent is None:
            return False
        if candidate_parent == index:
            return True
        return candidate_parent in self.descendants(index)

    def valid_parents(self, index: int) -> list[int]:
        excluded = {index, *self.descendants(index)}
        return [i for i in range(len(self.roles)) if i not in excluded]

    # ────────────────────────────────────────────────────────────
    # Deterministic ordering
    # ────────────────────────────────────────────────────────────

    def flatten(self) -> list[FlatNode]:
        """Depth-first walk from the roots, siblings visited in name order."""
        nodes: list[FlatNode] = []
        visited: set[int] = set()

        def visit(index: int, depth: int) -> None:
            if index in visited:
                return
            visited.add(index)
            nodes.append(FlatNode(index=index, depth=depth))
            for child in sorted(self._tree.children(index), key=self._sort_key):
                visit(child, depth + 1)

        for root in sorted(self._tree.roots, key=self._sort_key):
            visit(root, 0)
        return nodes

    def reorder_by_dependency(self) -> ReorderResult:
        """
        Reassign indices so every parent precedes its children.

        Returns:
            The reordered roles and the old → new index map.

        Raises:
            CoreError: If some roles are unreachable from a root (a cycle).
        """
        order = [node.index for node in self.flatten()]
        if len(order) != len(self.roles):
            missing = sorted(set(range(len(self.roles))) - set(order))
            raise CoreError(
                ErrorKind.HIERARCHY_CYCLE,
                "Cannot order roles: "
                + ", ".join(self.roles[i].name for i in missing)
                + " are not reachable from a top-level role",
                details={"role_indices": missing},
            )
        index_map = {old: new for new, old in enumerate(order)}

        reordered: list[Role] = []
        for old in order:
            role = self.roles[old]
            admin = role.admin_index
            voucher = role.vouching.voucher_role_index
            reordered.append(
                role.model_copy(
                    update={
                        "hierarchy": HierarchyLink(
                            admin_role_index=index_map.get(admin) if admin is not None else None
                        ),
                        "vouching": role.vouching.model_copy(
                            update={"voucher_role_index": index_map.get(voucher, 0)}
                        ),
                    }
                )
            )
        return ReorderResult(roles=reordered, index_map=index_map)

    # ────────────────────────────────────────────────────────────
    # Validation
    # ────────────────────────────────────────────────────────────

    def validate(self) -> list[ValidationIssue]:
        """Hierarchy and vouching issues, in a fixed order."""
        issues: list[ValidationIssue] = []
        count = len(self.roles)
        if count == 0:
            return issues

        cycles = self.detect_cycles()
        if cycles.has_cycle:
            names = ", ".join(self.roles[i].name for i in cycles.cycle_roles)
            issues.append(
                ValidationIssue(
                    kind=ErrorKind.HIERARCHY_CYCLE,
                    message=f"Circular dependency detected involving roles: {names}",
                    path="roles",
                )
            )

        if not any(role.admin_index is None for role in self.roles):
            issues.append(
                ValidationIssue(
                    kind=ErrorKind.NO_ROOT_ROLE,
                    message="At least one role must be a top-level admin (no parent)",
                    path="roles",
                )
            )

        for index, role in enumerate(self.roles):
            admin = role.admin_index
            if admin is not None and not 0 <= admin < count:
                issues.append(
                    ValidationIssue(
                        kind=ErrorKind.ADMIN_OUT_OF_RANGE,
                        message=f'Role "{role.name}" references invalid parent role index {admin}',
                        path=f"roles.{index}.hierarchy.admin_role_index",
                    )
                )
            elif admin == index:
                issues.append(
                    ValidationIssue(
                        kind=ErrorKind.SELF_ADMIN,
                        message=f'Role "{role.name}" cannot be its own parent',
                        path=f"roles.{index}.hierarchy.admin_role_index",
                    )
                )

        for index, role in enumerate(self.roles):
            voucher = role.vouching.voucher_role_index
            if not 0 <= voucher < count:
                issues.append(
                    ValidationIssue(
                        kind=ErrorKind.VOUCHER_OUT_OF_RANGE,
                        message=f'Role "{role.name}" references invalid voucher role index {voucher}',
                        path=f"roles.{index}.vouching.voucher_role_index",
                    )
                )
            if role.vouching.enabled and role.vouching.quorum < 1:
                issues.append(
                    ValidationIssue(
                        kind=ErrorKind.VOUCHING_QUORUM,
                        message=(
                            f'Role "{role.name}" has vouching enabled but quorum is '
                            f"{role.vouching.quorum}; at least 1 vouch is required"
                        ),
                        path=f"roles.{index}.vouching.quorum",
                    )
                )
        return issues


# ════════════════════════════════════════════════════════════════
# State-level reorder
# ════════════════════════════════════════════════════════════════


def remap_indices(indices: Sequence[int], index_map: dict[int, int]) -> list[int]:
    return sorted({index_map[i] for i in indices if i in index_map})


def reorder_state_by_dependency(state: DeployerState) -> DeployerState:
    """
    Reorder a state's roles parent-first and carry the permission sets along.

    Permission sets and voting-class hat lists hold role indices too, so
    they go through the same index map as admin and voucher links.
    """
    result = RoleHierarchy(state.roles).reorder_by_dependency()
    if all(old == new for old, new in result.index_map.items()):
        return state
    logger.debug("Reordered %d roles: %s", len(result.roles), result.index_map)
    permissions: dict[PermissionKey, list[int]] = {
        key: remap_indices(indices, result.index_map)
        for key, indices in state.permissions.items()
    }
    classes = [
        vc.model_copy(update={"hat_ids": remap_indices(vc.hat_ids, result.index_map)})
        for vc in state.voting.classes
    ]
    return state.model_copy(
        update={
            "roles": result.roles,
            "permissions": permissions,
            "voting": state.voting.model_copy(update={"classes": classes}),
        }
    )

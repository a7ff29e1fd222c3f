"""
Template Registry — Process-wide catalog of organization templates.

The catalog is built once at import and never mutated. Every accessor hands
out a deep clone with fresh role and voting-class ids, so callers can edit
what they receive without touching the registry or colliding with ids from
an earlier clone.
"""

from __future__ import annotations

import logging

from poa_deployer.schema.state import new_id
from poa_deployer.templates.catalog.community_dao import COMMUNITY_DAO_TEMPLATE
from poa_deployer.templates.catalog.creative_collective import CREATIVE_COLLECTIVE_TEMPLATE
from poa_deployer.templates.catalog.custom import CUSTOM_TEMPLATE
from poa_deployer.templates.catalog.open_source import OPEN_SOURCE_TEMPLATE
from poa_deployer.templates.catalog.student_org import STUDENT_ORG_TEMPLATE
from poa_deployer.templates.catalog.worker_coop import WORKER_COOP_TEMPLATE
from poa_deployer.templates.models import Template

logger = logging.getLogger(__name__)

# Display order
_CATALOG: tuple[Template, ...] = (
    STUDENT_ORG_TEMPLATE,
    WORKER_COOP_TEMPLATE,
    OPEN_SOURCE_TEMPLATE,
    CREATIVE_COLLECTIVE_TEMPLATE,
    COMMUNITY_DAO_TEMPLATE,
    CUSTOM_TEMPLATE,
)

TEMPLATES: dict[str, Template] = {template.id: template for template in _CATALOG}
TEMPLATE_IDS: tuple[str, ...] = tuple(TEMPLATES)


def _fresh_clone(template: Template) -> Template:
    clone = template.model_copy(deep=True)
    defaults = clone.defaults
    roles = [role.model_copy(update={"id": new_id()}) for role in defaults.roles]
    classes = [vc.model_copy(update={"id": new_id()}) for vc in defaults.voting.classes]
    return clone.model_copy(
        update={
            "defaults": defaults.model_copy(
                update={
                    "roles": roles,
                    "voting": defaults.voting.model_copy(update={"classes": classes}),
                }
            )
        }
    )


def get_template(template_id: str | None) -> Template | None:
    """Deep, freshly-identified clone of a template, or None if unknown."""
    if template_id is None:
        return None
    template = TEMPLATES.get(template_id)
    if template is None:
        logger.debug("Unknown template requested: %s", template_id)
        return None
    return _fresh_clone(template)


def list_templates() -> list[Template]:
    """Every template in display order, each a fresh clone."""
    return [_fresh_clone(template) for template in _CATALOG]


def has_template(template_id: str) -> bool:
    return template_id in TEMPLATES

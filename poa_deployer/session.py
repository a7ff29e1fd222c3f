"""
POA Deployer — Session owner for one wizard state.

The core is a set of pure functions; something still has to hold the
current state and serialize updates to it. ``DeployerSession`` is that
single owner:
1. Holds the current ``DeployerState``
2. Applies actions one at a time under a lock
3. Validates and builds the deployment hand-off record on demand

Entry points call ``configure_logging()`` once before creating sessions.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable
from uuid import uuid4

import structlog

from poa_deployer.config import settings
from poa_deployer.deployment.blueprint import DeploymentConfig
from poa_deployer.deployment.mapper import (
    ContentStore,
    UsernameResolver,
    create_deployment_config,
)
from poa_deployer.schema.errors import CoreError, ValidationReport
from poa_deployer.schema.state import DeployerState, create_initial_state
from poa_deployer.validation.validator import validate, validate_step
from poa_deployer.wizard.actions import Action
from poa_deployer.wizard.reducer import reduce

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.dev.ConsoleRenderer()
                if settings.log_format != "json"
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class DeployerSession:
    """
    Single owner of one wizard state.

    ``dispatch`` is serialized with a lock, so concurrent callers see each
    action applied in full against the state left by the previous one.
    Listeners are called after every dispatch with the new state, outside
    the lock.
    """

    def __init__(self, state: DeployerState | None = None) -> None:
        self.session_id = uuid4().hex[:12]
        self._state = state if state is not None else create_initial_state()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[DeployerState], Any]] = []
        self._log = structlog.get_logger().bind(session_id=self.session_id)

    @property
    def state(self) -> DeployerState:
        return self._state

    def subscribe(self, listener: Callable[[DeployerState], Any]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> DeployerState:
        with self._lock:
            before = self._state
            after = reduce(before, action, log=logger)
            self._state = after
        self._log.debug(
            "poa_deployer.session.dispatch",
            action=str(getattr(action.type, "value", action.type)),
            changed=after is not before,
            roles=len(after.roles),
            errors=len(after.errors),
        )
        for listener in list(self._listeners):
            listener(after)
        return after

    def dispatch_all(self, actions: list[Action]) -> DeployerState:
        state = self._state
        for action in actions:
            state = self.dispatch(action)
        return state

    def validate(self) -> ValidationReport:
        return validate(self._state)

    def validate_step(self, step: int | None = None) -> ValidationReport:
        state = self._state
        return validate_step(state, state.current_step if step is None else step)

    def build_deployment_config(
        self,
        deployer_address: str,
        registry_address: str | None = None,
        content_store: ContentStore | None = None,
        username_resolver: UsernameResolver | None = None,
    ) -> DeploymentConfig:
        """
        Build the deployment hand-off record for the current state.

        Args:
            deployer_address: Address that submits the deployment.
            registry_address: Registry contract address; falls back to
                ``settings.registry_address``.
            content_store: Optional ``put(bytes) -> cid`` for metadata.
            username_resolver: Optional username → address lookup.

        Raises:
            CoreError: If the state is invalid or the registry is missing.
        """
        state = self._state
        if not state.organization.username and settings.deployer_username:
            state = state.model_copy(
                update={
                    "organization": state.organization.model_copy(
                        update={"username": settings.deployer_username}
                    )
                }
            )
        try:
            config = create_deployment_config(
                state,
                deployer_address,
                registry_address or settings.registry_address,
                content_store=content_store,
                username_resolver=username_resolver,
                decimals=settings.participation_token_decimals,
            )
        except CoreError as exc:
            self._log.warning(
                "poa_deployer.session.blueprint_failed",
                code=exc.kind.value,
                error=exc.message,
            )
            raise
        self._log.info(
            "poa_deployer.session.blueprint_built",
            org_name=config.summary.org_name,
            roles=config.summary.role_count,
            voting_classes=config.summary.voting_class_count,
        )
        return config

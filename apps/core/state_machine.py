"""
Status State Machine.

Shared engine behind every status column that follows a workflow:
editorial articles, classifieds moderation and business reviews.

- Clear state transitions with validation
- Hook system for before/after state changes
- State history tracking in the model's metadata
- Transactional, with the row locked while it changes

Usage:
    class ClassifiedStateMachine(StateMachine):
        name = 'classified'
        states = ClassifiedState
        transitions = {...}

    machine = ClassifiedStateMachine(classified)
    machine.transition_to('approved', actor=request.user)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Type

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import InvalidTransitionError
from apps.core.metrics import increment_workflow_transition

logger = logging.getLogger(__name__)

# Bound on metadata['state_history'] entries kept per row
HISTORY_LIMIT = 50


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: Enum
    to_state: Enum
    timestamp: datetime
    actor_id: Optional[str] = None
    reason: str = ''
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'from': self.from_state.value,
            'to': self.to_state.value,
            'at': self.timestamp.isoformat(),
            'actor_id': self.actor_id,
            'reason': self.reason,
            **self.metadata,
        }


@dataclass
class TransitionContext:
    """Context passed to transition hooks."""
    instance: Any
    from_state: Enum
    to_state: Enum
    actor: Any = None
    reason: str = ''
    metadata: Dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any):
        self.metadata[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)


HookFunction = Callable[[TransitionContext], None]


class StateMachine:
    """
    Base state machine over a model's status column.

    Subclasses set ``name``, ``states`` and ``transitions`` and may
    override ``apply_state_fields`` to stamp timestamps or flags that
    belong to a state. Hook registries are per subclass.
    """

    name: str = 'default'
    states: Type[Enum]
    transitions: Dict[Enum, Set[Enum]] = {}
    status_field: str = 'status'

    _global_before_hooks: Dict[Tuple[Enum, Enum], List[HookFunction]]
    _global_after_hooks: Dict[Tuple[Enum, Enum], List[HookFunction]]
    _global_on_enter_hooks: Dict[Enum, List[HookFunction]]
    _global_on_exit_hooks: Dict[Enum, List[HookFunction]]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._global_before_hooks = {}
        cls._global_after_hooks = {}
        cls._global_on_enter_hooks = {}
        cls._global_on_exit_hooks = {}

    def __init__(self, instance):
        self.instance = instance

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    def to_state(self, value) -> Enum:
        """Coerce a string or enum into this machine's state enum."""
        if isinstance(value, self.states):
            return value
        try:
            return self.states(value)
        except ValueError:
            raise InvalidTransitionError(
                from_state=getattr(self.instance, self.status_field),
                to_state=str(value),
                message=f"Estado desconocido: {value}",
            )

    @property
    def current_state(self) -> Enum:
        return self.to_state(getattr(self.instance, self.status_field))

    @property
    def history(self) -> List[Dict[str, Any]]:
        """Transition history stored on the model, oldest first."""
        metadata = getattr(self.instance, 'metadata', None) or {}
        return list(metadata.get('state_history', []))

    def can_transition_to(self, target) -> bool:
        target = self.to_state(target)
        return target in self.transitions.get(self.current_state, set())

    def get_valid_transitions(self) -> Set[Enum]:
        return set(self.transitions.get(self.current_state, set()))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def apply_state_fields(self, context: TransitionContext):
        """Set fields tied to entering ``context.to_state``. Override in subclasses."""

    def transition_to(
        self,
        target,
        actor=None,
        reason: str = '',
        metadata: Optional[Dict[str, Any]] = None,
        force: bool = False,
    ) -> StateTransition:
        """
        Move the instance to ``target``.

        The row is re-read under ``select_for_update`` so two concurrent
        moves from the same state cannot both succeed. The instance is
        refreshed from the locked row, discarding unsaved edits, and only
        the fields the move touched are written back.

        Raises:
            InvalidTransitionError: if the move is not in the transition
                table and ``force`` is False
        """
        target = self.to_state(target)
        model = type(self.instance)

        with transaction.atomic():
            locked = model._default_manager.select_for_update().get(pk=self.instance.pk)
            fields = self._sync_from(locked)
            before = {f.name: getattr(self.instance, f.attname) for f in fields}
            current = self.current_state

            if not force and not self.can_transition_to(target):
                valid = sorted(s.value for s in self.get_valid_transitions())
                raise InvalidTransitionError(
                    from_state=current.value,
                    to_state=target.value,
                    message=(
                        f"Transición inválida de {current.value} a {target.value}. "
                        f"Permitidas: {', '.join(valid) or 'ninguna'}"
                    ),
                )

            context = TransitionContext(
                instance=self.instance,
                from_state=current,
                to_state=target,
                actor=actor,
                reason=reason,
                metadata=dict(metadata or {}),
            )

            self._run_hooks('before', current, target, context)
            self._run_state_hooks(self._global_on_exit_hooks, current, context)

            self.apply_state_fields(context)
            setattr(self.instance, self.status_field, target.value)

            record = StateTransition(
                from_state=current,
                to_state=target,
                timestamp=timezone.now(),
                actor_id=str(actor.pk) if getattr(actor, 'pk', None) else None,
                reason=reason,
                metadata=context.metadata,
            )
            self._append_history(record)

            update_fields = {
                f.name for f in fields if getattr(self.instance, f.attname) != before[f.name]
            }
            # metadata is mutated in place; updated_at only moves when listed
            update_fields.update(
                f.name for f in fields if f.name in (self.status_field, 'metadata', 'updated_at')
            )
            self.instance.save(update_fields=sorted(update_fields))

            self._run_state_hooks(self._global_on_enter_hooks, target, context)
            self._run_hooks('after', current, target, context)

        increment_workflow_transition(self.name, current.value, target.value)
        logger.info(
            f"{model.__name__} {self.instance.pk} transitioned: "
            f"{current.value} -> {target.value}"
        )
        return record

    def _sync_from(self, locked) -> list:
        """Copy every concrete column of the locked row onto the instance."""
        fields = [f for f in self.instance._meta.concrete_fields if not f.primary_key]
        for f in fields:
            setattr(self.instance, f.attname, getattr(locked, f.attname))
        return fields

    def _append_history(self, record: StateTransition):
        if not hasattr(self.instance, 'metadata'):
            return
        metadata = self.instance.metadata or {}
        history = metadata.get('state_history', [])
        history.append(record.to_dict())
        metadata['state_history'] = history[-HISTORY_LIMIT:]
        metadata['last_transition'] = record.to_dict()
        self.instance.metadata = metadata

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @classmethod
    def register_before_hook(cls, from_state, to_state, hook: HookFunction):
        """Register a hook that runs before the move; raising aborts it."""
        cls._global_before_hooks.setdefault((from_state, to_state), []).append(hook)

    @classmethod
    def register_after_hook(cls, from_state, to_state, hook: HookFunction):
        """Register a hook that runs after the move is saved."""
        cls._global_after_hooks.setdefault((from_state, to_state), []).append(hook)

    @classmethod
    def register_on_enter(cls, state, hook: HookFunction):
        cls._global_on_enter_hooks.setdefault(state, []).append(hook)

    @classmethod
    def register_on_exit(cls, state, hook: HookFunction):
        cls._global_on_exit_hooks.setdefault(state, []).append(hook)

    def _run_hooks(self, phase: str, from_state, to_state, context: TransitionContext):
        hooks = self._global_before_hooks if phase == 'before' else self._global_after_hooks
        for hook in hooks.get((from_state, to_state), []):
            try:
                hook(context)
            except Exception as e:
                logger.error(f"Hook error during {phase} {from_state.value}->{to_state.value}: {e}")
                if phase == 'before':
                    raise  # before hooks can abort the transition

    def _run_state_hooks(self, registry, state, context: TransitionContext):
        for hook in registry.get(state, []):
            try:
                hook(context)
            except Exception as e:
                logger.error(f"State hook error for {state.value}: {e}")

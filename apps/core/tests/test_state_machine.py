"""
Tests for the shared status state machine, exercised through the
editorial article workflow.
"""

import pytest
from django.db.models import F

from apps.articles.models import Article
from apps.articles.state_machine import EditorialState, EditorialStateMachine
from apps.core.exceptions import InvalidTransitionError


class HookedMachine(EditorialStateMachine):
    """Subclass with its own hook registries."""


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def article(db):
    return Article.objects.create(title='Nuevo puerto en Manzanillo')


@pytest.fixture
def editor(django_user_model):
    user = django_user_model.objects.create_user(username='editora', password='x')
    user.profile.role = 'editor'
    user.profile.save()
    return user


# ============================================================================
# Inspection
# ============================================================================

@pytest.mark.django_db
class TestInspection:

    def test_current_state(self, article):
        assert EditorialStateMachine(article).current_state == EditorialState.DRAFT

    def test_valid_transitions_from_draft(self, article):
        machine = EditorialStateMachine(article)
        assert machine.get_valid_transitions() == {EditorialState.PENDING_REVIEW}
        assert machine.can_transition_to('pending_review')
        assert not machine.can_transition_to(EditorialState.PUBLISHED)

    def test_unknown_state_is_rejected(self, article):
        with pytest.raises(InvalidTransitionError):
            EditorialStateMachine(article).to_state('borrador')

    def test_editable_states(self):
        editable = {state for state in EditorialState if state.is_editable}
        assert editable == {
            EditorialState.DRAFT,
            EditorialState.NEEDS_CHANGES,
            EditorialState.REJECTED,
        }


# ============================================================================
# Transitions
# ============================================================================

@pytest.mark.django_db
class TestTransitions:

    def test_transition_saves_and_records_history(self, article, editor):
        record = EditorialStateMachine(article).transition_to('pending_review', actor=editor)

        article.refresh_from_db()
        assert article.status == 'pending_review'
        assert article.submitted_at is not None
        assert record.actor_id == str(editor.pk)

        history = EditorialStateMachine(article).history
        assert len(history) == 1
        assert history[0]['from'] == 'draft'
        assert history[0]['to'] == 'pending_review'
        assert article.metadata['last_transition']['to'] == 'pending_review'

    def test_invalid_transition_raises_and_leaves_row(self, article):
        with pytest.raises(InvalidTransitionError) as exc_info:
            EditorialStateMachine(article).transition_to('published')

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_details == {'from_state': 'draft', 'to_state': 'published'}
        article.refresh_from_db()
        assert article.status == 'draft'

    def test_reads_status_from_database(self, article):
        Article.objects.filter(pk=article.pk).update(status='pending_review')

        # The in-memory copy is stale; the locked re-read decides
        EditorialStateMachine(article).transition_to('approved')

        article.refresh_from_db()
        assert article.status == 'approved'

    def test_stale_double_move_fails(self, article):
        stale = Article.objects.get(pk=article.pk)
        EditorialStateMachine(article).transition_to('pending_review')

        EditorialStateMachine(stale).transition_to('approved')
        with pytest.raises(InvalidTransitionError):
            EditorialStateMachine(article).transition_to('pending_review')

    def test_concurrent_counter_is_kept(self, article):
        Article.objects.filter(pk=article.pk).update(views=F('views') + 7)

        EditorialStateMachine(article).transition_to('pending_review')

        assert article.views == 7
        article.refresh_from_db()
        assert article.views == 7
        assert article.status == 'pending_review'

    def test_only_touched_fields_are_written(self, article):
        Article.objects.filter(pk=article.pk).update(title='Título corregido')
        article.excerpt = 'Cambio sin guardar'

        EditorialStateMachine(article).transition_to('pending_review')

        article.refresh_from_db()
        assert article.title == 'Título corregido'
        assert article.excerpt == ''
        assert article.submitted_at is not None

    def test_force_skips_table(self, article):
        EditorialStateMachine(article).transition_to('archived', force=True)
        article.refresh_from_db()
        assert article.status == 'archived'

    def test_publish_and_archive_toggle_flag(self, article, editor):
        machine = EditorialStateMachine(article)
        machine.transition_to('pending_review')
        machine.transition_to('approved', actor=editor)
        assert article.approved_by == editor

        machine.transition_to('published')
        assert article.published is True
        assert article.published_at is not None

        machine.transition_to('archived')
        assert article.published is False

    def test_return_to_draft_clears_approval(self, article, editor):
        machine = EditorialStateMachine(article)
        machine.transition_to('pending_review')
        machine.transition_to('approved', actor=editor)
        machine.transition_to('draft')

        article.refresh_from_db()
        assert article.approved_at is None
        assert article.approved_by is None


# ============================================================================
# Hooks
# ============================================================================

@pytest.mark.django_db
class TestHooks:

    def test_registries_are_per_subclass(self):
        HookedMachine.register_on_enter(EditorialState.APPROVED, lambda ctx: None)
        assert EditorialState.APPROVED not in EditorialStateMachine._global_on_enter_hooks

    def test_after_hook_receives_context(self, article):
        seen = []
        HookedMachine.register_after_hook(
            EditorialState.DRAFT,
            EditorialState.PENDING_REVIEW,
            lambda ctx: seen.append((ctx.from_state, ctx.to_state, ctx.reason)),
        )

        HookedMachine(article).transition_to('pending_review', reason='listo')

        assert seen == [(EditorialState.DRAFT, EditorialState.PENDING_REVIEW, 'listo')]

    def test_before_hook_can_abort(self, article):
        def veto(ctx):
            raise ValueError('sin categoría')

        HookedMachine.register_before_hook(EditorialState.DRAFT, EditorialState.PENDING_REVIEW, veto)
        try:
            with pytest.raises(ValueError):
                HookedMachine(article).transition_to('pending_review')
        finally:
            HookedMachine._global_before_hooks.clear()

        article.refresh_from_db()
        assert article.status == 'draft'

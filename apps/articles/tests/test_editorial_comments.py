"""
Tests for editorial comments on articles.
"""

import uuid

import pytest
from django.contrib.auth import get_user_model

from apps.articles.models import Article, EditorialComment
from apps.articles.services import ArticleReviewService
from apps.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from apps.core.models import AuditLog

User = get_user_model()


# ============================================================================
# Fixtures
# ============================================================================

def make_user(username, role):
    user = User.objects.create_user(username=username, password='testpass123')
    user.profile.role = role
    user.profile.save()
    return user


@pytest.fixture
def service():
    return ArticleReviewService()


@pytest.fixture
def author(db):
    return make_user('autor', 'author')


@pytest.fixture
def editor(db):
    return make_user('editora', 'editor')


@pytest.fixture
def admin(db):
    return make_user('jefa', 'admin')


@pytest.fixture
def article(author):
    return Article.objects.create(title='Presupuesto 2025', author=author)


@pytest.fixture
def comment(service, article, editor):
    return service.add_comment(article.id, editor, 'Verificar la cifra del segundo párrafo')


# ============================================================================
# Creating & listing
# ============================================================================

@pytest.mark.django_db
class TestAddComment:

    def test_text_is_trimmed(self, service, article, author):
        comment = service.add_comment(article.id, author, '   Listo para revisión  ')

        assert comment.text == 'Listo para revisión'
        assert comment.resolved is False
        assert comment.author == author

    @pytest.mark.parametrize('text', ['', '   ', None])
    def test_empty_rejected(self, service, article, author, text):
        with pytest.raises(ValidationError) as exc_info:
            service.add_comment(article.id, author, text)

        assert exc_info.value.message == 'El comentario no puede estar vacío'

    def test_length_limit(self, service, article, author, settings):
        settings.EDITORIAL_COMMENT_MAX_LENGTH = 1000

        service.add_comment(article.id, author, 'a' * 1000)
        with pytest.raises(ValidationError) as exc_info:
            service.add_comment(article.id, author, 'a' * 1001)

        assert '1000' in exc_info.value.message

    def test_unknown_article(self, service, author):
        with pytest.raises(NotFoundError):
            service.add_comment(uuid.uuid4(), author, 'Hola')

    def test_listing_newest_first(self, service, article, author, editor):
        service.add_comment(article.id, author, 'Primero')
        service.add_comment(article.id, editor, 'Segundo')

        texts = [c.text for c in service.get_comments(article.id)]
        assert texts == ['Segundo', 'Primero']


# ============================================================================
# Editing & resolving
# ============================================================================

@pytest.mark.django_db
class TestUpdateComment:

    def test_author_edits_text(self, service, comment, editor):
        updated = service.update_comment(comment.id, editor, text='Cifra corregida')
        assert updated.text == 'Cifra corregida'

    def test_update_can_resolve(self, service, comment, editor):
        updated = service.update_comment(comment.id, editor, resolved=True)

        assert updated.resolved is True
        assert updated.text == 'Verificar la cifra del segundo párrafo'

    def test_blank_text_rejected(self, service, comment, editor):
        with pytest.raises(ValidationError):
            service.update_comment(comment.id, editor, text='  ')

    def test_non_author_forbidden(self, service, comment, author):
        with pytest.raises(PermissionDeniedError):
            service.update_comment(comment.id, author, text='Cambio ajeno')

    def test_admin_may_edit(self, service, comment, admin):
        updated = service.update_comment(comment.id, admin, text='Editado por admin')
        assert updated.text == 'Editado por admin'

    def test_missing_comment(self, service, editor):
        with pytest.raises(NotFoundError):
            service.update_comment(uuid.uuid4(), editor, text='x')

    def test_resolve_and_reopen(self, service, comment, editor):
        assert service.set_comment_resolved(comment.id, editor).resolved is True
        assert service.set_comment_resolved(comment.id, editor, resolved=False).resolved is False


# ============================================================================
# Deleting & stats
# ============================================================================

@pytest.mark.django_db
class TestDeleteComment:

    def test_author_deletes_without_audit(self, service, comment, editor):
        service.delete_comment(comment.id, editor)

        assert not EditorialComment.objects.filter(pk=comment.id).exists()
        assert not AuditLog.objects.filter(entity_type='editorial_comment').exists()

    def test_admin_delete_is_audited(self, service, comment, admin):
        service.delete_comment(comment.id, admin)

        entry = AuditLog.objects.get(entity_type='editorial_comment', action='delete')
        assert entry.actor == admin
        assert entry.changes['text'] == 'Verificar la cifra del segundo párrafo'

    def test_non_author_forbidden(self, service, comment, author):
        with pytest.raises(PermissionDeniedError):
            service.delete_comment(comment.id, author)
        assert EditorialComment.objects.filter(pk=comment.id).exists()

    def test_stats(self, service, article, author, editor):
        first = service.add_comment(article.id, author, 'Uno')
        service.add_comment(article.id, editor, 'Dos')
        service.add_comment(article.id, editor, 'Tres')
        service.set_comment_resolved(first.id, author)

        assert service.get_comment_stats(article.id) == {'total': 3, 'resolved': 1, 'unresolved': 2}

    def test_stats_empty(self, service, article):
        assert service.get_comment_stats(article.id) == {'total': 0, 'resolved': 0, 'unresolved': 0}

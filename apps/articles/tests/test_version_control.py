"""
Tests for article version history: numbering, restore, compare,
stats and cleanup.
"""

import uuid

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.articles.models import Article, ArticleVersion
from apps.articles.services import VersionControl
from apps.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
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
def control():
    return VersionControl()


@pytest.fixture
def author(db):
    return make_user('autor', 'author')


@pytest.fixture
def editor(db):
    return make_user('editor', 'editor')


@pytest.fixture
def article(author):
    return Article.objects.create(
        title='Título actual',
        excerpt='Resumen actual',
        content='Contenido actual',
        author=author,
    )


@pytest.fixture
def three_versions(control, article, author):
    for n in range(1, 4):
        control.save_version(article.id, author, title=f'Título {n}', excerpt=f'Resumen {n}',
                             content=f'Contenido {n}')
    return article


# ============================================================================
# Saving
# ============================================================================

@pytest.mark.django_db
class TestSaveVersion:

    def test_numbers_are_consecutive(self, control, three_versions):
        numbers = sorted(ArticleVersion.objects.filter(article=three_versions).values_list('version', flat=True))
        assert numbers == [1, 2, 3]

    def test_default_summary(self, control, article, author):
        version = control.save_version(article.id, author, title='Borrador')

        today = timezone.localdate()
        assert version.changes_summary == f'Versión 1 - {today.day}/{today.month}/{today.year}'
        assert version.changed_by == author

    def test_explicit_summary(self, control, article, author):
        version = control.save_version(article.id, author, title='X', changes_summary='Corrección de estilo')
        assert version.changes_summary == 'Corrección de estilo'

    def test_numbering_is_per_article(self, control, three_versions, author):
        other = Article.objects.create(title='Otra nota', author=author)
        assert control.save_version(other.id, author, title='Otra').version == 1

    def test_numbering_continues_after_cleanup(self, control, three_versions, author):
        control.cleanup_old_versions(three_versions.id, keep_last=1)
        assert control.save_version(three_versions.id, author, title='Nuevo').version == 4

    def test_other_author_cannot_save(self, control, article):
        intruder = make_user('otro-autor', 'author')

        with pytest.raises(PermissionDeniedError):
            control.save_version(article.id, intruder, title='Ajeno')
        assert not ArticleVersion.objects.filter(article=article).exists()

    def test_editor_may_save_any_article(self, control, article, editor):
        assert control.save_version(article.id, editor, title='Edición').changed_by == editor

    def test_unknown_article(self, control, author):
        with pytest.raises(NotFoundError):
            control.save_version(uuid.uuid4(), author, title='X')


# ============================================================================
# Reading
# ============================================================================

@pytest.mark.django_db
class TestReadVersions:

    def test_newest_first(self, control, three_versions):
        assert [v.version for v in control.get_versions(three_versions.id)] == [3, 2, 1]

    def test_get_version(self, control, three_versions):
        assert control.get_version(three_versions.id, 2).title == 'Título 2'

    def test_missing_version(self, control, three_versions):
        with pytest.raises(NotFoundError) as exc_info:
            control.get_version(three_versions.id, 9)
        assert exc_info.value.message == 'Versión no encontrada'

    def test_compare(self, control, three_versions, author):
        control.save_version(three_versions.id, author, title='Título 3', excerpt='Resumen 3',
                             content='Contenido nuevo')

        result = control.compare_versions(three_versions.id, 3, 4)

        assert result['version1'].version == 3
        assert result['version2'].version == 4
        assert result['changes'] == {'title': False, 'excerpt': False, 'content': True}

    def test_compare_missing(self, control, three_versions):
        with pytest.raises(NotFoundError):
            control.compare_versions(three_versions.id, 1, 7)

    def test_stats(self, control, three_versions):
        stats = control.get_version_stats(three_versions.id)

        assert stats['total_versions'] == 3
        assert stats['first_version'] <= stats['last_version']

    def test_stats_without_versions(self, control, article):
        assert control.get_version_stats(article.id) == {
            'total_versions': 0,
            'first_version': None,
            'last_version': None,
        }


# ============================================================================
# Restoring
# ============================================================================

@pytest.mark.django_db
class TestRestoreVersion:

    def test_restore_copies_fields_and_adds_version(self, control, three_versions, author):
        restored = control.restore_version(three_versions.id, 1, author)

        three_versions.refresh_from_db()
        assert three_versions.title == 'Título 1'
        assert three_versions.excerpt == 'Resumen 1'
        assert three_versions.content == 'Contenido 1'
        assert restored.version == 4
        assert restored.changes_summary == 'Restaurado a versión 1'

        entry = AuditLog.objects.get(action='restore')
        assert entry.changes['restored_version'] == 1
        assert entry.changes['new_version'] == 4
        assert entry.changes['previous']['title'] == 'Título actual'

    def test_restore_missing_version(self, control, three_versions, author):
        with pytest.raises(NotFoundError):
            control.restore_version(three_versions.id, 42, author)

        three_versions.refresh_from_db()
        assert three_versions.title == 'Título actual'

    def test_other_author_cannot_restore(self, control, three_versions):
        intruder = make_user('otro-autor', 'author')

        with pytest.raises(PermissionDeniedError) as exc_info:
            control.restore_version(three_versions.id, 1, intruder)

        assert exc_info.value.status_code == 403
        three_versions.refresh_from_db()
        assert three_versions.title == 'Título actual'
        assert not AuditLog.objects.filter(action='restore').exists()

    def test_author_blocked_outside_editable_states(self, control, three_versions, author):
        Article.objects.filter(pk=three_versions.pk).update(status='pending_review')

        with pytest.raises(ConflictError):
            control.restore_version(three_versions.id, 1, author)

    def test_editor_may_restore_any_state(self, control, three_versions, editor):
        Article.objects.filter(pk=three_versions.pk).update(status='published', published=True)

        restored = control.restore_version(three_versions.id, 2, editor)

        assert restored.version == 4
        three_versions.refresh_from_db()
        assert three_versions.title == 'Título 2'

    def test_author_may_restore_when_changes_requested(self, control, three_versions, author):
        Article.objects.filter(pk=three_versions.pk).update(status='needs_changes')
        assert control.restore_version(three_versions.id, 3, author).version == 4


# ============================================================================
# Cleanup
# ============================================================================

@pytest.mark.django_db
class TestCleanup:

    def test_keeps_newest(self, control, three_versions):
        deleted = control.cleanup_old_versions(three_versions.id, keep_last=2)

        assert deleted == 1
        assert [v.version for v in control.get_versions(three_versions.id)] == [3, 2]

    def test_nothing_to_delete(self, control, three_versions):
        assert control.cleanup_old_versions(three_versions.id, keep_last=10) == 0

    def test_keep_must_be_positive(self, control, three_versions):
        with pytest.raises(ValidationError) as exc_info:
            control.cleanup_old_versions(three_versions.id, keep_last=0)
        assert exc_info.value.field == 'keep'

    def test_cleanup_task(self, control, three_versions, author, settings):
        from apps.articles.tasks import cleanup_article_versions

        settings.ARTICLE_VERSIONS_KEEP_LAST = 2
        small = Article.objects.create(title='Corta', author=author)
        control.save_version(small.id, author, title='Única')

        result = cleanup_article_versions()

        assert result == {'deleted_count': 1, 'articles': 1, 'keep_last': 2}
        assert ArticleVersion.objects.filter(article=small).count() == 1

    def test_cleanup_task_defaults_to_ten(self, control, article, author, settings):
        from apps.articles.tasks import cleanup_article_versions

        del settings.ARTICLE_VERSIONS_KEEP_LAST
        for n in range(12):
            control.save_version(article.id, author, title=f'Título {n}')

        result = cleanup_article_versions()

        assert result == {'deleted_count': 2, 'articles': 1, 'keep_last': 10}
        assert [v.version for v in control.get_versions(article.id)][-1] == 3

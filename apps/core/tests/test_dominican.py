"""
Tests for the Dominican Republic helpers: DOP formatting, Spanish
slugs, phone numbers and the province list.
"""

import pytest
from decimal import Decimal

from django.core.exceptions import ValidationError

from apps.core.dominican import (
    DR_PROVINCES,
    ERROR_MESSAGES,
    format_dop,
    normalize_dominican_phone,
    slugify_es,
    unique_slug,
    validate_dominican_phone,
)


# ============================================================================
# Currency
# ============================================================================

class TestFormatDop:

    def test_thousands_separator(self):
        assert format_dop(1500) == 'RD$1,500'
        assert format_dop(Decimal('1250000.00')) == 'RD$1,250,000'

    def test_rounds_half_up(self):
        assert format_dop(Decimal('99.50')) == 'RD$100'
        assert format_dop('10.49') == 'RD$10'

    def test_negative(self):
        assert format_dop(-2500) == '-RD$2,500'

    @pytest.mark.parametrize('value', [None, 'abc', True, float('nan'), float('inf')])
    def test_non_numbers_render_zero(self, value):
        assert format_dop(value) == 'RD$0'


# ============================================================================
# Slugs
# ============================================================================

class TestSlugs:

    def test_strips_accents_and_enye(self):
        assert slugify_es('Año Nuevo en Samaná') == 'ano-nuevo-en-samana'

    def test_collapses_punctuation(self):
        assert slugify_es('¡Última hora!  Lluvias -- en  Santiago') == 'ultima-hora-lluvias-en-santiago'

    def test_underscores_and_edges(self):
        assert slugify_es('  _Pica_pollo--de  Villa Mella-_ ') == 'pica-pollo-de-villa-mella'

    def test_empty(self):
        assert slugify_es('') == ''

    @pytest.mark.django_db
    def test_unique_slug_suffixes(self):
        from apps.articles.models import Category

        Category.objects.create(name='Deportes')
        Category.objects.create(name='Deportes!', slug='deportes-2')

        assert unique_slug(Category, 'Deportes', max_length=100) == 'deportes-3'

    @pytest.mark.django_db
    def test_model_save_generates_slug(self):
        from apps.articles.models import Article

        first = Article.objects.create(title='Política nacional')
        second = Article.objects.create(title='Política nacional')

        assert first.slug == 'politica-nacional'
        assert second.slug == 'politica-nacional-2'


# ============================================================================
# Phones
# ============================================================================

class TestPhones:

    @pytest.mark.parametrize('raw', ['8095551234', '809-555-1234', '(809) 555 1234', '+1 809 555 1234'])
    def test_normalizes(self, raw):
        assert normalize_dominican_phone(raw) == '(809) 555-1234'

    @pytest.mark.parametrize('raw', ['', '3055551234', '80955512', '1-212-555-1234'])
    def test_rejects(self, raw):
        assert normalize_dominican_phone(raw) is None

    def test_accepts_all_area_codes(self):
        for area in ('809', '829', '849'):
            assert normalize_dominican_phone(f'{area}5551234') == f'({area}) 555-1234'

    def test_validator(self):
        validate_dominican_phone('')
        validate_dominican_phone('829-555-0000')
        with pytest.raises(ValidationError) as exc_info:
            validate_dominican_phone('555-0000')
        assert exc_info.value.messages == [ERROR_MESSAGES['invalid_phone']]


# ============================================================================
# Provinces
# ============================================================================

class TestProvinces:

    def test_thirty_two_unique_codes(self):
        codes = [code for code, _ in DR_PROVINCES]
        assert len(codes) == 32
        assert len(set(codes)) == 32

    def test_slugs_are_unique(self):
        slugs = {slugify_es(name) for _, name in DR_PROVINCES}
        assert len(slugs) == 32

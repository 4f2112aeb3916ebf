"""
Dominican Republic helpers: DOP currency display, Spanish slugs,
phone numbers, provinces and user-facing error messages.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from django.core.exceptions import ValidationError
from django.utils.text import slugify


# ISO 3166-2:DO codes
DR_PROVINCES = [
    ('01', 'Distrito Nacional'),
    ('02', 'Azua'),
    ('03', 'Bahoruco'),
    ('04', 'Barahona'),
    ('05', 'Dajabón'),
    ('06', 'Duarte'),
    ('07', 'Elías Piña'),
    ('08', 'El Seibo'),
    ('09', 'Espaillat'),
    ('10', 'Independencia'),
    ('11', 'La Altagracia'),
    ('12', 'La Romana'),
    ('13', 'La Vega'),
    ('14', 'María Trinidad Sánchez'),
    ('15', 'Monte Cristi'),
    ('16', 'Pedernales'),
    ('17', 'Peravia'),
    ('18', 'Puerto Plata'),
    ('19', 'Hermanas Mirabal'),
    ('20', 'Samaná'),
    ('21', 'San Cristóbal'),
    ('22', 'San Juan'),
    ('23', 'San Pedro de Macorís'),
    ('24', 'Sánchez Ramírez'),
    ('25', 'Santiago'),
    ('26', 'Santiago Rodríguez'),
    ('27', 'Valverde'),
    ('28', 'Monseñor Nouel'),
    ('29', 'Monte Plata'),
    ('30', 'Hato Mayor'),
    ('31', 'San José de Ocoa'),
    ('32', 'Santo Domingo'),
]

DR_AREA_CODES = ('809', '829', '849')

ERROR_MESSAGES = {
    'generic': 'Ha ocurrido un error inesperado',
    'validation': 'Los datos enviados no son válidos',
    'not_found': 'Recurso no encontrado',
    'article_not_found': 'Artículo no encontrado',
    'article_not_approved': 'Artículo no encontrado o no aprobado',
    'version_not_found': 'Versión no encontrada',
    'comment_not_found': 'Comentario no encontrado',
    'classified_not_found': 'Clasificado no encontrado',
    'business_not_found': 'Negocio no encontrado',
    'review_not_found': 'Reseña no encontrada',
    'comment_empty': 'El comentario no puede estar vacío',
    'comment_too_long': 'Comentario muy largo (máximo {max_length} caracteres)',
    'comment_forbidden': 'Solo el autor del comentario o un administrador puede modificarlo',
    'duplicate': 'El recurso ya existe',
    'duplicate_review': 'Ya has publicado una reseña para este negocio',
    'conflict': 'El recurso no permite esta operación en su estado actual',
    'invalid_transition': 'Cambio de estado no permitido',
    'forbidden': 'No tienes permiso para realizar esta acción',
    'unavailable': 'Servicio temporalmente no disponible. Intente nuevamente en unos minutos.',
    'invalid_phone': 'Número de teléfono dominicano inválido',
    'invalid_rating': 'La calificación debe estar entre 1 y 5',
}


def format_dop(amount) -> str:
    """
    Format an amount as Dominican pesos, e.g. ``RD$1,500``.

    Rounds half-up to whole pesos. Anything that is not a number
    renders as ``RD$0``.
    """
    if amount is None or isinstance(amount, bool):
        return 'RD$0'
    try:
        value = Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return 'RD$0'
    if not value.is_finite():
        return 'RD$0'

    sign = '-' if value < 0 else ''
    return f"{sign}RD${abs(value):,.0f}"


def slugify_es(text: str) -> str:
    """Build a URL slug from Spanish text (accents stripped, ñ -> n)."""
    if not text:
        return ''
    # slugify keeps underscores; they separate words here
    return slugify(str(text).replace('_', ' '))


def unique_slug(model, text: str, field_name: str = 'slug', exclude_pk=None, max_length: int = 200) -> str:
    """Return a slug for ``text`` not yet used by ``model``, suffixing -2, -3 ..."""
    base = slugify_es(text)[:max_length] or 'item'
    queryset = model._default_manager.all()
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)

    candidate = base
    suffix = 2
    while queryset.filter(**{field_name: candidate}).exists():
        tail = f"-{suffix}"
        candidate = f"{base[:max_length - len(tail)]}{tail}"
        suffix += 1
    return candidate


def normalize_dominican_phone(value: str) -> Optional[str]:
    """
    Normalize a Dominican phone number to ``(809) 555-1234``.

    Returns None when the number is not a valid 809/829/849 number.
    """
    if not value:
        return None
    digits = re.sub(r'\D', '', str(value))
    if len(digits) == 11 and digits.startswith('1'):
        digits = digits[1:]
    if len(digits) != 10 or digits[:3] not in DR_AREA_CODES:
        return None
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def validate_dominican_phone(value: str):
    """Django field validator for Dominican phone numbers."""
    if value and normalize_dominican_phone(value) is None:
        raise ValidationError(ERROR_MESSAGES['invalid_phone'], code='invalid_phone')

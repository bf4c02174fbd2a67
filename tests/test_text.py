"""Tests for text.py — slugs and Spanish sort keys."""

import re

from coros.text import MAX_SLUG_LENGTH, collation_key, slugify, strip_accents


class TestSlugify:

    def test_basic(self):
        assert slugify('Marcos Witt') == 'marcos-witt'

    def test_accents_removed(self):
        assert slugify('Juan Pérez') == 'juan-perez'
        assert slugify('Niño Güero') == 'nino-guero'

    def test_punctuation_runs_collapse(self):
        assert slugify('Hillsong -- United!!') == 'hillsong-united'
        assert slugify("Don't Stop") == 'don-t-stop'

    def test_leading_and_trailing_hyphens_stripped(self):
        assert slugify('  ¡Aleluya!  ') == 'aleluya'

    def test_only_symbols_gives_empty(self):
        assert slugify('???') == ''
        assert slugify('') == ''

    def test_length_capped(self):
        assert len(slugify('a' * 200)) == MAX_SLUG_LENGTH

    def test_cap_does_not_leave_trailing_hyphen(self):
        # Position 80 falls right after a hyphen
        name = 'a' * 79 + ' b'
        slug = slugify(name)
        assert slug == 'a' * 79
        assert not slug.endswith('-')

    def test_output_alphabet(self):
        names = ['Él Shaddai', 'Danilo Montero & Co.', '  --x--  ', 'Ü' * 100, 'Ñandú 2000']
        for name in names:
            slug = slugify(name)
            assert re.fullmatch(r'([a-z0-9]+(-[a-z0-9]+)*)?', slug)
            assert len(slug) <= MAX_SLUG_LENGTH

    def test_deterministic(self):
        assert slugify('Jesús Adrián Romero') == slugify('Jesús Adrián Romero')


class TestStripAccents:

    def test_strips_marks(self):
        assert strip_accents('canción ñandú') == 'cancion nandu'


class TestCollationKey:

    def test_case_insensitive_first(self):
        assert sorted(['beta', 'Alpha', 'alpha2'], key=collation_key) == ['Alpha', 'alpha2', 'beta']

    def test_accents_ignored_at_first_level(self):
        assert sorted(['Ángel', 'Amor', 'Azul'], key=collation_key) == ['Amor', 'Ángel', 'Azul']

    def test_enye_sorts_after_n(self):
        assert sorted(['ñu', 'nz', 'o', 'na'], key=collation_key) == ['na', 'nz', 'ñu', 'o']

    def test_unaccented_before_accented(self):
        assert sorted(['qué', 'que'], key=collation_key) == ['que', 'qué']

    def test_lowercase_before_uppercase(self):
        assert sorted(['Dios', 'dios'], key=collation_key) == ['dios', 'Dios']

    def test_total_order_on_equal_text(self):
        assert collation_key('Santo') == collation_key('Santo')

    def test_inverted_punctuation_before_letters(self):
        titles = ['Zapato', '¡Aleluya!', '¿Quién como Él?', 'Abba Padre']
        assert sorted(titles, key=collation_key) == ['¡Aleluya!', '¿Quién como Él?', 'Abba Padre', 'Zapato']

    def test_punctuation_before_digits(self):
        assert sorted(['1 Corintios', '¡Gloria!', 'Gloria'], key=collation_key) == ['¡Gloria!', '1 Corintios', 'Gloria']

"""Tests for USPS size-limit sentence parsing."""

import random

import pytest

from src.errors.domain import MalformedConstraintSentence
from src.models.constraints import AnyOf, Single
from src.services.constraint_parser import (
    BARE,
    COMBINED,
    GIRTH,
    SINGLE,
    normalize_sentence,
    parse_inches,
    parse_max_dimensions,
    tokenize,
)


class TestParseInches:
    """Trailing number extraction, including mixed fractions."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Max. length 46", 46.0),
            ("9 1/2", 9.5),
            (" x 12 1/2.", 12.5),
            ("Flat Rate Envelope 12-1/2", 12.5),
            (" x 9-1/2.", 9.5),
            ("height 4.5", 4.5),
            ("about 3/4", 0.75),
        ],
    )
    def test_values(self, text, expected):
        """Whole, decimal, mixed (spaced or hyphenated) and bare fractions parse."""
        assert parse_inches(text) == pytest.approx(expected)

    def test_no_number(self):
        """Text without a trailing number gives None."""
        assert parse_inches("Maximum weight") is None


class TestTokenize:
    """Classification of inch-marked pieces."""

    def test_kinds(self):
        """Each piece is classified by the axis words it names."""
        bounds = tokenize('Max. length 24", Max. length, height, depth combined 36"')
        assert [(b.kind, b.value) for b in bounds] == [(SINGLE, 24.0), (COMBINED, 36.0)]

    def test_girth_and_bare(self):
        """Girth wins over axis words; no axis word is bare."""
        bounds = tokenize('9 1/2" x 12 1/2" and length plus girth 108"')
        assert [b.kind for b in bounds] == [BARE, BARE, GIRTH]

    def test_text_after_last_mark_ignored(self):
        """Trailing prose without an inch mark contributes nothing."""
        assert tokenize("Maximum weight 70 pounds") == []


class TestParseMaxDimensions:
    """Sentences observed in USPS responses."""

    @pytest.mark.parametrize(
        "sentence,expected",
        [
            (
                'Max. length 46", width 35", height 46" and max. length plus girth 108"',
                {"length": 46.0, "width": 46.0, "height": 35.0, "length_plus_girth": 108.0},
            ),
            (
                'Max.length 42", max. length plus girth 79"',
                {"length": 42.0, "length_plus_girth": 79.0},
            ),
            (
                'Maximum length and girth combined 108"',
                {"length_plus_girth": 108.0},
            ),
            (
                'Max. length 24", Max. length, height, depth combined 36"',
                {"length": 24.0, "length_plus_width_plus_height": 36.0},
            ),
            (
                'Max. length 36", width 24", height 12"',
                {"length": 36.0, "width": 24.0, "height": 12.0},
            ),
        ],
    )
    def test_dimension_sentences(self, sentence, expected):
        """Each grammar yields a single constraint set."""
        spec = parse_max_dimensions(sentence)
        assert isinstance(spec, Single)
        assert spec.constraints.as_dict() == expected
        assert spec.label is None

    @pytest.mark.parametrize(
        "sentence",
        [
            '9 1/2" X 12 1/2"',
            'USPS-supplied Priority Mail flat-rate envelope 9 1/2" x 12 1/2." Maximum weight 4 pounds.',
            'USPS-supplied Priority Mail International Flat Rate Envelope 12-1/2" x 9-1/2". Maximum weight 4 pounds.',
        ],
    )
    def test_flat_rate_envelope(self, sentence):
        """A bare pair or named envelope is a 0.75" deep envelope."""
        spec = parse_max_dimensions(sentence)
        assert isinstance(spec, Single)
        assert spec.label == "Flat Rate Envelope"
        assert spec.constraints.as_dict() == {"length": 12.5, "width": 9.5, "height": 0.75}

    def test_envelope_named_without_size_uses_standard(self):
        """An envelope with no stated size gets the standard envelope."""
        spec = parse_max_dimensions(
            "USPS-supplied Priority Mail flat-rate envelope. Maximum weight 4 pounds."
        )
        assert spec.constraints.as_dict() == {"length": 12.5, "width": 9.5, "height": 0.75}

    def test_flat_rate_box_has_two_alternatives(self):
        """A flat-rate box may be either physical box."""
        spec = parse_max_dimensions(
            "USPS-supplied Priority Mail flat-rate box. Maximum weight 20 pounds.",
            service_name="flat-rate box",
        )
        assert isinstance(spec, AnyOf)
        assert spec.label == "Flat Rate Box"
        assert [s.as_dict() for s in spec.sets] == [
            {"length": 11.0, "width": 8.5, "height": 5.5},
            {"length": 13.625, "width": 11.875, "height": 3.375},
        ]

    def test_flat_rate_box_from_service_name(self):
        """The service name alone identifies a flat-rate box."""
        spec = parse_max_dimensions(
            "Maximum weight 20 pounds.",
            service_name="USPS Priority Mail International Medium Flat Rate Box",
        )
        assert isinstance(spec, AnyOf)

    def test_html_escaped_quotes(self):
        """Escaped inch marks are unescaped before parsing."""
        spec = parse_max_dimensions("Max.length 42&amp;quot;, max. length plus girth 79&quot;")
        assert spec.constraints.as_dict() == {"length": 42.0, "length_plus_girth": 79.0}

    @pytest.mark.parametrize(
        "sentence",
        ["", "Maximum weight 70 pounds.", "Envelopes only."],
    )
    def test_unrecognized_raises(self, sentence):
        """Sentences matching no grammar raise with the sentence attached."""
        with pytest.raises(MalformedConstraintSentence) as exc_info:
            parse_max_dimensions(sentence)
        assert exc_info.value.code == "E-2006"
        assert exc_info.value.sentence == normalize_sentence(sentence)


CANONICAL_SENTENCES = [
    'Max. length 46", width 35", height 46" and max. length plus girth 108"',
    'Max.length 42", max. length plus girth 79"',
    'Maximum length and girth combined 108"',
    'Max. length 24", Max. length, height, depth combined 36"',
    '9 1/2" X 12 1/2"',
    'USPS-supplied Priority Mail International Flat Rate Envelope 12-1/2" x 9-1/2". Maximum weight 4 pounds.',
    "USPS-supplied Priority Mail flat-rate box. Maximum weight 20 pounds.",
]


class TestParseIsStateless:
    """Results depend only on the sentence."""

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_order_independent(self, seed):
        """Parsing in any order gives the same specs as parsing in order."""
        expected = {s: parse_max_dimensions(s) for s in CANONICAL_SENTENCES}

        for _ in range(2):
            shuffled = list(CANONICAL_SENTENCES)
            random.Random(seed).shuffle(shuffled)
            assert {s: parse_max_dimensions(s) for s in shuffled} == expected

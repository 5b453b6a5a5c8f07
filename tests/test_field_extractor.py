"""
Unit tests for heuristic field extraction.

Tests:
- Email detection
- Phone detection and normalization
- Name passes (strict, permissive, filename fallback)
- Skill and language matching
"""

import pytest
from cvintake.schemas.candidate import NOT_AVAILABLE
from cvintake.services.field_extractor import (
    extract_email,
    extract_fields,
    extract_languages,
    extract_name,
    extract_phone,
    extract_skills,
    name_from_filename,
)
from cvintake.services.vocabulary import PHONE_PATTERN_SETS, PhonePatternSet, make_normalizer


class TestEmail:
    def test_single_email(self):
        assert extract_email("Contact: jean.dupont+cv@mail.example.fr (pro)") == "jean.dupont+cv@mail.example.fr"

    def test_first_email_wins(self):
        assert extract_email("a@first.com then b@second.org") == "a@first.com"

    def test_no_email(self):
        assert extract_email("no address here, just @handles") == NOT_AVAILABLE


class TestPhone:
    def test_moroccan_trunk_number(self):
        assert extract_phone("Tel 06 12 34 56 78") == "+212612345678"

    def test_moroccan_international_prefix(self):
        assert extract_phone("00212 612-34-56-78") == "+212612345678"

    def test_canonical_number_kept(self):
        assert extract_phone("call +212612345678 now") == "+212612345678"

    def test_french_international_number(self):
        assert extract_phone("Tél : +33 1 23 45 67 89") == "+33123456789"

    def test_french_trunk_number(self):
        assert extract_phone("01.23.45.67.89") == "+33123456789"

    def test_french_bare_mobile_number(self):
        france = [s for s in PHONE_PATTERN_SETS if s.code == "+33"]
        assert extract_phone("Mobile : 6 12 34 56 78", france) == "+33612345678"
        assert extract_phone("Mobile : 612345678", france) == NOT_AVAILABLE

    def test_north_american_number(self):
        assert extract_phone("Phone: +1 (415) 555-2671") == "+14155552671"

    def test_no_phone(self):
        assert extract_phone("Nothing numeric here, 2019-2021") == NOT_AVAILABLE

    def test_first_pattern_set_wins(self):
        # Both a Moroccan and a French number: only the first set is consulted
        text = "+33 1 23 45 67 89 / 06 12 34 56 78"
        assert extract_phone(text) == "+212612345678"

    @pytest.mark.parametrize("pattern_set", PHONE_PATTERN_SETS, ids=lambda s: s.label)
    def test_normalization_is_idempotent(self, pattern_set):
        sample = {"+212": "+212612345678", "+33": "+33123456789", "+1": "+14155552671"}[pattern_set.code]
        assert pattern_set.normalize(sample) == sample
        assert pattern_set.normalize(pattern_set.normalize(sample)) == sample

    def test_normalizer_forms(self):
        normalize = make_normalizer("212", 9, "0", "[5-7]")
        assert normalize("0612345678") == "+212612345678"
        assert normalize("00212612345678") == "+212612345678"
        assert normalize("612345678") == "+212612345678"
        assert normalize("+212 6.12.34.56.78") == "+212612345678"

    def test_normalizer_rejects_foreign_digits(self):
        with pytest.raises(ValueError):
            make_normalizer("212", 9, "0", "[5-7]")("0123")

    def test_failed_normalization_tries_next_pattern(self):
        import re

        def broken(raw):
            raise ValueError("nope")

        sets = [
            PhonePatternSet("Broken", "+0", (re.compile(r"\d{3}"),), broken),
            PhonePatternSet("Real", "+212", PHONE_PATTERN_SETS[0].patterns, PHONE_PATTERN_SETS[0].normalize),
        ]
        assert extract_phone("0612345678", sets) == "+212612345678"


class TestName:
    def test_first_line_name(self):
        assert extract_name("Jean Dupont\nDéveloppeur Python\n") == "Jean Dupont"

    def test_skips_blank_and_boilerplate_lines(self):
        text = "\n\nCURRICULUM VITAE\nemail: x@y.fr\nÉlodie Léa-Marchand\n"
        assert extract_name(text) == "Élodie Léa-Marchand"

    def test_rejects_short_single_word(self):
        text = "Bob\n12 rue des Lilas\n"
        # "Bob" fails the strict pass (one word of 3 letters), pass 2 accepts it
        assert extract_name(text) == "Bob"

    def test_single_long_word_accepted(self):
        assert extract_name("Madonna\n") == "Madonna"

    def test_permissive_pass(self):
        text = "Jean-Luc Picard, PhD\nStarfleet, USS Enterprise\n"
        assert extract_name(text) == "Jean-Luc Picard, PhD"

    def test_permissive_pass_skips_numbers(self):
        text = "+33 1 23 45 67 89\n2019\nCaptain J. Picard (retired)\n"
        assert extract_name(text) == "Captain J. Picard (retired)"

    def test_filename_fallback(self):
        text = "jean@dupont.fr\n0612345678\n"
        assert extract_name(text, fallback_filename="CV_jean_dupont_2024.pdf") == "jean dupont"

    def test_no_name(self):
        assert extract_name("jean@dupont.fr\n0612345678\n") == NOT_AVAILABLE

    def test_name_from_filename_too_short(self):
        assert name_from_filename("CV_12.pdf") == NOT_AVAILABLE


class TestSkills:
    def test_whole_word_match_only(self):
        text = "Senior JavaScript developer, aka javascript_ninja"
        assert extract_skills(text) == "JavaScript"

    def test_java_not_matched_inside_javascript(self):
        assert extract_skills("JavaScript only") == "JavaScript"

    def test_vocabulary_order_and_dedup(self):
        text = "react, Python, PYTHON, docker"
        assert extract_skills(text) == "Python, React, Docker"

    def test_symbols_in_keywords(self):
        assert extract_skills("C++ and C# and Node.js") == "C#, C++, Node.js"

    def test_regex_failure_falls_back_to_substring(self, monkeypatch):
        import re
        import types
        from cvintake.services import field_extractor

        def failing_compile(pattern, flags=0):
            if "GraphQL" in pattern:
                raise re.error("boom")
            return re.compile(pattern, flags)

        fake_re = types.SimpleNamespace(
            compile=failing_compile, escape=re.escape, error=re.error, IGNORECASE=re.IGNORECASE
        )
        monkeypatch.setattr(field_extractor, "re", fake_re)
        assert extract_skills("graphql APIs with Python") == "Python, GraphQL"

    def test_no_skills(self):
        assert extract_skills("Gardening and cooking") == NOT_AVAILABLE


class TestLanguages:
    def test_all_groups_reported(self):
        text = "Languages: French (native), English, Deutsch"
        assert extract_languages(text) == "Français, Anglais, Allemand"

    def test_synonyms_deduplicated(self):
        assert extract_languages("Anglais courant / fluent English") == "Anglais"

    def test_accented_synonyms(self):
        assert extract_languages("Español, Português, néerlandais") == "Espagnol, Portugais, Néerlandais"

    def test_no_language(self):
        assert extract_languages("Python developer") == NOT_AVAILABLE


def test_extract_fields_sample(sample_resume_text):
    fields = extract_fields(sample_resume_text)

    assert fields.name == "Marie Curie"
    assert fields.email == "marie@example.com"
    assert fields.phone == "+212612345678"
    assert fields.skills == "Python, React"
    assert fields.languages == "Français, Anglais"


def test_fields_are_independent():
    fields = extract_fields("someone@example.com")

    assert fields.email == "someone@example.com"
    assert fields.phone == NOT_AVAILABLE
    assert fields.skills == NOT_AVAILABLE
    assert fields.languages == NOT_AVAILABLE

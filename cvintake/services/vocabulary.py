"""
Static lookup tables used by the field extractor.

- SKILL_KEYWORDS: technology/tool names matched as whole words
- LANGUAGE_GROUPS: spoken languages and the synonyms that identify them
- PHONE_PATTERN_SETS: per-country phone patterns, tried in priority order

Adding a country or a skill only means adding a row here.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Pattern, Tuple

SKILL_KEYWORDS: Tuple[str, ...] = (
    # Programming languages
    "JavaScript", "TypeScript", "Python", "Java", "C#", "C++", "PHP", "Ruby", "Go", "Rust", "Swift", "Kotlin",
    # Frontend frameworks
    "React", "Vue", "Vue.js", "Angular", "Svelte", "Next.js", "Nuxt.js",
    # Backend
    "Node.js", "Express", "Django", "Laravel", "Spring", "Flask", "FastAPI",
    # Web
    "HTML", "HTML5", "CSS", "CSS3", "SASS", "SCSS", "Bootstrap", "Tailwind", "Material-UI", "Chakra UI",
    # Databases
    "SQL", "MySQL", "PostgreSQL", "MongoDB", "Redis", "SQLite", "Oracle", "Elasticsearch",
    # DevOps and tooling
    "Git", "Docker", "Kubernetes", "AWS", "Azure", "Google Cloud", "Linux", "Jenkins", "GitLab CI",
    # Design
    "Figma", "Photoshop", "Illustrator", "Adobe XD", "Sketch",
    # Other
    "REST API", "GraphQL", "Webpack", "Vite", "Jest", "Cypress", "Selenium",
)


@dataclass(frozen=True)
class LanguageGroup:
    name: str
    synonyms: Tuple[str, ...]

    @property
    def pattern(self) -> Pattern[str]:
        alternatives = "|".join(re.escape(s) for s in self.synonyms)
        return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


LANGUAGE_GROUPS: Tuple[LanguageGroup, ...] = (
    LanguageGroup("Français", ("français", "french", "francais")),
    LanguageGroup("Anglais", ("anglais", "english")),
    LanguageGroup("Espagnol", ("espagnol", "spanish", "español", "castellano")),
    LanguageGroup("Allemand", ("allemand", "german", "deutsch")),
    LanguageGroup("Italien", ("italien", "italian", "italiano")),
    LanguageGroup("Portugais", ("portugais", "portuguese", "português")),
    LanguageGroup("Chinois", ("mandarin", "chinois", "chinese")),
    LanguageGroup("Japonais", ("japonais", "japanese")),
    LanguageGroup("Coréen", ("coréen", "korean")),
    LanguageGroup("Arabe", ("arabe", "arabic")),
    LanguageGroup("Russe", ("russe", "russian")),
    LanguageGroup("Néerlandais", ("néerlandais", "dutch", "nederlands")),
)


# Phone numbers -------------------------------------------------------------

_SEPARATORS = re.compile(r"[\s.\-()]")

# A trunk or bare national number must not continue a longer digit run or
# follow an international prefix such as "+33 "
_NOT_AFTER_PREFIX = r"(?<![\d+])(?<![\d+][\s.-])"


def make_normalizer(code: str, national_length: int, trunk_prefix: str, national_start: str) -> Callable[[str], str]:
    """
    Build a normalizer rewriting a raw match into +<code><national number>.

    Handles the canonical "+<code>" form (returned unchanged), the
    international "00<code>" form, the trunk form (trunk_prefix followed by
    the national number) and the bare national number.

    Raises:
        ValueError: if the digits do not form a national number for this country
    """
    national = re.compile(rf"^{national_start}\d{{{national_length - 1}}}$")

    def normalize(raw: str) -> str:
        phone = _SEPARATORS.sub("", raw)

        if phone.startswith(f"+{code}"):
            rest = phone[len(code) + 1:]
        elif phone.startswith(f"00{code}"):
            rest = phone[len(code) + 2:]
        elif phone.startswith(trunk_prefix) and len(phone) == national_length + len(trunk_prefix):
            rest = phone[len(trunk_prefix):]
        else:
            rest = phone

        if not national.match(rest):
            raise ValueError(f"'{raw}' is not a +{code} number")
        return f"+{code}{rest}"

    return normalize


@dataclass(frozen=True)
class PhonePatternSet:
    label: str
    code: str
    patterns: Tuple[Pattern[str], ...]
    normalize: Callable[[str], str]


PHONE_PATTERN_SETS: List[PhonePatternSet] = [
    PhonePatternSet(
        label="Maroc",
        code="+212",
        patterns=(
            re.compile(r"\+212\s?[5-7](?:[\s.-]?\d{2}){4}(?!\d)"),
            re.compile(r"(?<!\d)00212\s?[5-7](?:[\s.-]?\d{2}){4}(?!\d)"),
            re.compile(_NOT_AFTER_PREFIX + r"0[5-7](?:[\s.-]?\d{2}){4}(?!\d)"),
            re.compile(_NOT_AFTER_PREFIX + r"[5-7](?:[\s.-]?\d{2}){4}(?!\d)"),
        ),
        normalize=make_normalizer("212", 9, "0", "[5-7]"),
    ),
    PhonePatternSet(
        label="France",
        code="+33",
        patterns=(
            re.compile(r"\+33\s?[1-9](?:[\s.-]?\d{2}){4}(?!\d)"),
            re.compile(r"(?<!\d)0033\s?[1-9](?:[\s.-]?\d{2}){4}(?!\d)"),
            re.compile(_NOT_AFTER_PREFIX + r"0[1-9](?:[\s.-]?\d{2}){4}(?!\d)"),
            re.compile(_NOT_AFTER_PREFIX + r"[67](?:[\s.-]\d{2}){4}(?!\d)"),
        ),
        normalize=make_normalizer("33", 9, "0", "[1-9]"),
    ),
    PhonePatternSet(
        label="Canada/USA",
        code="+1",
        patterns=(
            re.compile(r"\+1[\s.-]?\(?[2-9]\d{2}\)?[\s.-]?\d{3}[\s.-]?\d{4}(?!\d)"),
            re.compile(r"(?<!\d)001[\s.-]?\(?[2-9]\d{2}\)?[\s.-]?\d{3}[\s.-]?\d{4}(?!\d)"),
            re.compile(_NOT_AFTER_PREFIX + r"\(?[2-9]\d{2}\)?[\s.-]\d{3}[\s.-]\d{4}(?!\d)"),
        ),
        normalize=make_normalizer("1", 10, "1", "[2-9]"),
    ),
]

import re

PERSON_SUFFIXES = ["jr", "sr", "ii", "iii", "iv", "phd", "md", "esq"]

COMPANY_LEGAL_SUFFIXES = [
    "inc",
    "llc",
    "ltd",
    "corp",
    "co",
    "corporation",
    "incorporated",
    "limited",
    "company",
    "group",
    "holdings",
]

COMPANY_DESCRIPTORS = [
    "technologies",
    "technology",
    "security",
    "networks",
    "systems",
    "solutions",
    "software",
    "labs",
    "digital",
    "media",
    "studios",
    "services",
    "consulting",
    "partners",
    "ventures",
    "international",
    "global",
    "usa",
    "us",
]

PERSON = "person"
COMPANY = "company"

_PERSON_SUFFIX_RE = re.compile(r"(?:,\s*|\s+)(?:%s)$" % "|".join(PERSON_SUFFIXES), re.IGNORECASE)
# Suffix must be its own token: "Cisco" keeps its "co".
_LEGAL_SUFFIX_RE = re.compile(r"(?:,\s*|\s+)(?:%s)$" % "|".join(COMPANY_LEGAL_SUFFIXES), re.IGNORECASE)
_DESCRIPTOR_RE = re.compile(r"\s+(?:%s)$" % "|".join(COMPANY_DESCRIPTORS), re.IGNORECASE)


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().replace(".", "").split())


def normalize_person(name: str) -> str:
    """Canonical dedup key for a person: "John H. Dimm" -> "john dimm"."""
    key = normalize_text(name or "")
    key = _PERSON_SUFFIX_RE.sub("", key).rstrip(",")
    # Middle initials
    key = " ".join(t for t in key.split() if not (len(t) == 1 and t.isalpha()))
    return key.strip()


def normalize_company(name: str) -> str:
    """Canonical dedup key for a company: "Websense, Inc." -> "websense"."""
    key = normalize_text(name or "")
    key = _LEGAL_SUFFIX_RE.sub("", key)
    key = _DESCRIPTOR_RE.sub("", key)
    return " ".join(key.split())


def normalizer_for(kind: str):
    return normalize_person if kind == PERSON else normalize_company


def node_id(kind: str, key: str) -> str:
    return f"{kind}:{key}"

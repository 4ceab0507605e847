"""
Keyword extraction for memory search.

Turns a free-text form prompt into at most eight salient terms. Terms that
look like form-domain vocabulary (roles, form types, field types, industries,
actions) are moved to the front so that callers keeping only the first few
never lose them.
"""

import re

MAX_KEYWORDS = 8
MIN_KEYWORD_LENGTH = 3

# Prompt filler: articles, pronouns and the verbs/nouns every form request uses
STOP_WORDS = frozenset({
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'by', 'for', 'from', 'has',
    'he', 'in', 'is', 'it', 'its', 'of', 'on', 'that', 'the', 'to', 'was',
    'will', 'with', 'i', 'want', 'need', 'create', 'make', 'build', 'design',
    'form', 'field', 'add', 'new', 'please', 'can', 'you', 'help', 'me',
})

# Prefix patterns, checked in order; a match makes the token a domain keyword
DOMAIN_PATTERNS = (
    # Roles and organizations
    re.compile(r'^(customer|client|user|employee|staff|team|company|business|organization|department)'),
    # Form types
    re.compile(r'^(feedback|survey|application|registration|contact|order|booking|appointment|evaluation|assessment)'),
    # Field types and concepts
    re.compile(r'^(email|phone|address|name|title|description|rating|score|date|time|number|text|dropdown|checkbox|radio)'),
    # Industries
    re.compile(r'^(healthcare|education|finance|retail|technology|marketing|sales|hr|legal|real|estate)'),
    # Actions and purposes
    re.compile(r'^(collect|gather|track|analyze|measure|evaluate|assess|review|submit|process)'),
)

_NON_WORD = re.compile(r'\W')
_LETTER = re.compile(r"[^\W\d_]")


def tokenize(text: str) -> list[str]:
    """Lowercase ``text`` and split it into word tokens."""
    return _NON_WORD.sub(' ', text.lower()).split()


def _has_letter(token: str) -> bool:
    return _LETTER.search(token) is not None


def is_domain_keyword(token: str) -> bool:
    return any(pattern.match(token) for pattern in DOMAIN_PATTERNS)


def extract_keywords(prompt: str) -> list[str]:
    """
    Extract the most useful search terms from a prompt.

    Args:
        prompt: Free-text prompt

    Returns:
        Up to eight distinct lowercase terms, domain keywords first, then the
        remaining terms in prompt order. Numbers are kept alongside words;
        empty for blank, punctuation-only or numeric-only input.
    """
    if not prompt:
        return []

    words = [w for w in tokenize(prompt) if len(w) >= MIN_KEYWORD_LENGTH and w not in STOP_WORDS]
    if not any(_has_letter(w) for w in words):
        return []
    domain = [w for w in words if is_domain_keyword(w)]

    return list(dict.fromkeys(domain + words))[:MAX_KEYWORDS]

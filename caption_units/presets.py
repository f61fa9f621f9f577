"""Punctuation sets and noise patterns used by segmentation and sanitizing.

WHY: Which marks end a sentence, which marks end a clause, and what counts
as decorative noise are plain data. Keeping them here, away from the
algorithms, lets them be tuned without touching the splitting logic.

HOW: Mark sets are strings consumed by regex character classes in core.py.
Link patterns are ordered: earlier patterns win, so an email address is
removed before the bare-domain pattern can eat its host part. The emoji
class covers the pictographic planes plus the dingbat/misc-symbol blocks
and the invisible joiners that ride along with emoji sequences.

RULES:
- Mark sets cover both wide (CJK) and narrow (ASCII) punctuation forms.
- Never mutate these constants at runtime.
- KEPT_CATEGORIES are Unicode general-category prefixes: letters, numbers,
  punctuation, separators, marks. Everything else is noise.
"""

import re
from typing import List, Pattern

# Sentence tier: full stop, question and exclamation marks.
SENTENCE_MARKS: str = "。！？!?."

# Clause tier: commas, enumeration comma, semicolons, colons.
CLAUSE_MARKS: str = "，、；;,：:"

KEPT_CATEGORIES: str = "LNPZM"

EMOJI_RE: Pattern = re.compile(
    "[\U0001F000-\U0001FFFF\u2600-\u27BF\u2B50\u2B55\uFE0E\uFE0F\u20E3\u200D]"
)

# Bare domains only count with a known lowercase TLD, or with a path.
# "Node.js" and "works.OK" are prose, not links.
BARE_DOMAIN_TLDS = (
    "com", "net", "org", "edu", "gov", "info", "io", "co", "ai", "app",
    "dev", "me", "tv", "us", "uk", "cn", "de", "fr", "jp", "ru",
)

LINK_PATTERNS: List[Pattern] = [
    re.compile(r"https?://\S+"),
    re.compile(r"www\.\S+"),
    re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    re.compile(
        r"(?<![A-Za-z0-9._@/-])"
        r"[a-zA-Z0-9][a-zA-Z0-9-]*(?:\.[a-zA-Z0-9-]+)*"
        r"(?:\.(?:" + "|".join(BARE_DOMAIN_TLDS) + r")\b(?:/\S*)?"
        r"|\.[a-zA-Z]{2,}/\S*)"
    ),
]

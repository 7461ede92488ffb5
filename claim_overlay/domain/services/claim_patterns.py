"""Pattern families used to detect and score claims.

Two families drive extraction: statistical values and assertion triggers.
The scorer reuses them as positive signals and adds its own junk and penalty
patterns in worthiness_scorer.
"""

import re
from typing import List, Pattern

_NUM = r"\d+(?:,\d{3})*(?:\.\d+)?"

STATISTIC_PATTERNS: List[Pattern[str]] = [
    # Percentages
    re.compile(rf"{_NUM}\s*%"),
    re.compile(rf"{_NUM}\s*percent\b", re.IGNORECASE),
    # Counts with units
    re.compile(
        rf"{_NUM}\s*(?:people|patients|cases|deaths|americans|children|adults|women|men|"
        rf"users|participants|subjects|residents|students|workers|voters)\b",
        re.IGNORECASE,
    ),
    re.compile(rf"{_NUM}\s*(?:million|billion|trillion|thousand|hundred)\b", re.IGNORECASE),
    re.compile(rf"{_NUM}\s*(?:dollars|euros|pounds|€|£)", re.IGNORECASE),
    re.compile(rf"[$€£]\s?{_NUM}(?:\s*(?:million|billion|trillion|thousand))?", re.IGNORECASE),
    # Ratios and comparisons
    re.compile(r"\b\d+\s*(?:out of|in)\s*\d+\b", re.IGNORECASE),
    re.compile(
        rf"{_NUM}\s*times\s*(?:more|less|higher|lower|greater|as likely|as much)",
        re.IGNORECASE,
    ),
    re.compile(rf"{_NUM}\s*-?\s*fold(?:\s*(?:increase|decrease|higher|lower|more|less))?", re.IGNORECASE),
    # Changes
    re.compile(rf"\breduces?\s*(?:the\s+)?(?:risk|chance|likelihood)?\s*by\s*{_NUM}", re.IGNORECASE),
    re.compile(rf"\bincreases?\s*(?:the\s+)?(?:risk|chance|likelihood)?\s*by\s*{_NUM}", re.IGNORECASE),
    re.compile(r"\b(?:doubled|tripled|quadrupled|halved)\b", re.IGNORECASE),
    re.compile(rf"\b(?:rose|fell|grew|dropped|declined|jumped|climbed)\s*(?:by\s*)?{_NUM}", re.IGNORECASE),
    # Time spans
    re.compile(r"\b\d+\s*(?:year|month|week|day|hour)s?\s*(?:ago|later|earlier)\b", re.IGNORECASE),
    re.compile(r"\bsince\s*(?:1[89]|20)\d{2}\b", re.IGNORECASE),
    re.compile(r"\bbetween\s*\d{4}\s*and\s*\d{4}\b", re.IGNORECASE),
    # Rankings
    re.compile(
        r"\b(?:first|second|third|fourth|fifth|\d+(?:st|nd|rd|th))\s*"
        r"(?:largest|smallest|biggest|highest|lowest|most|least)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\branked?\s*#?\s*\d+", re.IGNORECASE),
    re.compile(r"\btop\s*\d+\b", re.IGNORECASE),
]

# Phrases that signal a factual assertion even without numbers.
ATTRIBUTION_TRIGGERS: List[Pattern[str]] = [
    re.compile(r"\bstud(?:y|ies)\s+(?:shows?|found|suggests?|reveals?|indicates?|demonstrates?|confirms?)", re.IGNORECASE),
    re.compile(r"\bresearch\s+(?:shows?|found|suggests?|reveals?|indicates?|demonstrates?|confirms?)", re.IGNORECASE),
    re.compile(r"\bscientists?\s+(?:found|discovered|say|claim|believe|confirmed)", re.IGNORECASE),
    re.compile(r"\bresearchers?\s+(?:found|discovered|say|claim|believe|confirmed)", re.IGNORECASE),
    re.compile(r"\bexperts?\s+(?:say|warn|believe|agree|recommend|advise)", re.IGNORECASE),
    re.compile(r"\bdoctors?\s+(?:say|warn|believe|agree|recommend|advise)", re.IGNORECASE),
    re.compile(
        r"\baccording\s+to\s+(?:a\s+|the\s+)?(?:new\s+|recent\s+)?"
        r"(?:study|research|data|report|survey|poll|analysis|figures)",
        re.IGNORECASE,
    ),
    re.compile(r"\bdata\s+(?:shows?|suggests?|indicates?|reveals?)", re.IGNORECASE),
]

CAUSAL_TRIGGERS: List[Pattern[str]] = [
    re.compile(r"\b(?:is|are|was|were)\s+(?:proven|shown|confirmed|linked|associated|connected)\s+to\b", re.IGNORECASE),
    re.compile(r"\bhas\s+been\s+(?:proven|shown|confirmed|linked|associated|connected)", re.IGNORECASE),
    re.compile(r"\bcauses?\s+(?:cancer|disease|death|illness|damage|harm|autism|infertility)", re.IGNORECASE),
    re.compile(r"\bprevents?\s+(?:cancer|disease|death|illness|damage|harm)", re.IGNORECASE),
    re.compile(r"\bcures?\s+(?:cancer|disease|illness|diabetes)", re.IGNORECASE),
    re.compile(r"\bproven\s+(?:to|that)\b", re.IGNORECASE),
    re.compile(r"\b(?:the\s+)?fact\s+(?:is|that)\b", re.IGNORECASE),
]

COMPARATIVE_TRIGGERS: List[Pattern[str]] = [
    re.compile(r"\bmore\s+(?:effective|dangerous|harmful|beneficial|likely|common|deadly)\s+than\b", re.IGNORECASE),
    re.compile(r"\bless\s+(?:effective|dangerous|harmful|beneficial|likely|common|deadly)\s+than\b", re.IGNORECASE),
    re.compile(r"\bthe\s+(?:most|least|best|worst|safest|deadliest|largest|highest)\b", re.IGNORECASE),
]

CERTAINTY_TRIGGERS: List[Pattern[str]] = [
    re.compile(r"\b(?:always|never|every|all|none|no\s+one)\b", re.IGNORECASE),
    re.compile(r"\b(?:definitely|certainly|absolutely|undoubtedly)\b", re.IGNORECASE),
]

ASSERTION_PATTERNS: List[Pattern[str]] = (
    ATTRIBUTION_TRIGGERS + CAUSAL_TRIGGERS + COMPARATIVE_TRIGGERS + CERTAINTY_TRIGGERS
)

# Certainty words alone are too common to count as a scoring signal.
TRIGGER_SIGNAL_PATTERNS: List[Pattern[str]] = ATTRIBUTION_TRIGGERS + CAUSAL_TRIGGERS + COMPARATIVE_TRIGGERS

QUOTE_PATTERNS: List[Pattern[str]] = [
    re.compile(
        r"[\"“]([^\"”]{20,300})[\"”]\s*,?\s*(?:said|says|according to|stated|wrote|claimed|argued)\s+"
        r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"
    ),
    re.compile(
        r"(?:said|says|according to|stated|wrote|claimed|argued)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"
        r"[,:]?\s*[\"“]([^\"”]{20,300})[\"”]"
    ),
]

AUTHORITY_PATTERN = re.compile(
    r"\b(?:FDA|CDC|WHO|NIH|NHS|AMA|EMA|NICE|USPSTF|UN|IMF|OECD|NASA|IPCC|"
    r"World Health Organization|Centers for Disease Control|Food and Drug Administration|"
    r"[A-Z][a-z]+ (?:University|Institute|Foundation|Association|Agency|Department|Ministry)|"
    r"University of [A-Z][a-z]+|Harvard|Stanford|Oxford|Cambridge|Mayo Clinic|Cochrane|"
    r"Lancet|New England Journal|JAMA|Nature|Science|BMJ|Pew Research|Census Bureau)\b"
    r"|(?i:\b(?:scientists?|researchers?|experts?|doctors?|physicians?|professors?|economists?|"
    r"officials?|government|ministry|agency|university|institute|journal|study|studies|survey|"
    r"report|census|trial)\b)",
)

ORGANIZATION_PATTERN = re.compile(
    r"\b(?:FDA|CDC|WHO|NIH|NHS|AMA|EMA|NICE|USPSTF|IPCC|OECD|IMF)\b"
)

PERCENT_PATTERN = re.compile(rf"{_NUM}\s*%")

SENTENCE_TERMINATORS = ".!?\n"

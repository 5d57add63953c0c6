import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

AUTO_MODERATOR = "AUTO_MODERATOR"

STATUS_VISIBLE = "VISIBLE"
STATUS_HIDDEN = "HIDDEN"

REASON_AUTO_HIDDEN = "Auto-hidden by moderation for potentially harmful/offensive content"
REASON_NEEDS_REVIEW = "Flagged for moderator review"

# (flag prefix, points per matched term, terms)
TERM_GROUPS: Tuple[Tuple[str, int, Tuple[str, ...]], ...] = (
    ("SEVERE", 90, ("hate speech", "kill yourself", "go die", "lynch", "genocide", "rape", "terrorist")),
    ("SELF_HARM", 80, ("suicide", "self harm", "hurt yourself", "end your life")),
    ("SEXUAL", 55, ("nude", "naked", "porn", "sex", "sext")),
    ("HARASSMENT", 35, ("idiot", "stupid", "moron", "loser", "shut up", "dumb", "trash")),
    ("PROFANITY", 30, ("f**k", "fuk", "fk", "shit", "bitch", "asshole", "bastard")),
    ("SPAM", 40, ("buy now", "free money", "click here", "crypto giveaway", "telegram", "whatsapp me")),
)

URL_POINTS = 25
ALL_CAPS_POINTS = 15
ALL_CAPS_MIN_LETTERS = 10
ALL_CAPS_RATIO = 0.8
PUNCTUATION_POINTS = 10
PUNCTUATION_MIN_BANGS = 5

AUTO_FLAG_SCORE = 80
REVIEW_SCORE = 40
AUTO_FLAG_PRIORITY_BONUS = 20


@dataclass(frozen=True)
class LevelRule:
    # strict: 노출 중인 댓글을 숨기는 점수 / 검토 대기로 올리는 점수
    hide_at: Optional[int] = None
    hide_priority: int = 0
    hide_reason: str = ""
    review_at: Optional[int] = None
    review_priority: int = 0
    review_reason: str = ""
    # relaxed: 자동 숨김을 되돌릴 수 있는 점수 상한(SEVERE 제외)
    unhide_below: Optional[int] = None
    unhide_priority: int = 0
    unhide_reason: str = ""


LEVEL_RULES: Dict[str, LevelRule] = {
    "strict": LevelRule(
        hide_at=60,
        hide_priority=85,
        hide_reason="Auto-hidden under strict regional moderation policy",
        review_at=25,
        review_priority=55,
        review_reason="Flagged for manual review under strict regional moderation policy",
    ),
    "standard": LevelRule(),
    "relaxed": LevelRule(
        unhide_below=90,
        unhide_priority=65,
        unhide_reason="Visible under relaxed regional policy but queued for review",
    ),
}

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class CommentAssessment:
    status: str = STATUS_VISIBLE
    moderation_score: int = 0
    moderation_flags: List[str] = field(default_factory=list)
    auto_flagged: bool = False
    needs_review: bool = False
    review_priority: int = 0
    moderated_by: Optional[str] = None
    moderation_reason: Optional[str] = None

    @property
    def has_severe(self) -> bool:
        return any(f.startswith("SEVERE") for f in self.moderation_flags)

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "moderation_score": self.moderation_score,
            "moderation_flags": list(self.moderation_flags),
            "auto_flagged": self.auto_flagged,
            "needs_review": self.needs_review,
            "review_priority": self.review_priority,
            "moderated_by": self.moderated_by,
            "moderation_reason": self.moderation_reason,
        }


def _clamp(value: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(value, hi))


def normalize_text(content: str) -> str:
    chars = []
    for ch in content:
        if (ch.isascii() and ch.isalnum()) or ch.isspace():
            chars.append(ch.lower())
        else:
            chars.append(" ")
    return _WS_RE.sub(" ", "".join(chars)).strip()


def _match_terms(normalized: str, tokens: set, prefix: str, points: int, terms) -> Tuple[int, List[str]]:
    score, flags = 0, []
    for term in terms:
        # 공백 포함 구문은 부분 문자열, 단어는 토큰 단위 일치
        hit = term in normalized if " " in term else term in tokens
        if hit:
            score += points
            flags.append(f"{prefix}:{term}")
    return score, flags


def assess_comment_content(content: str) -> CommentAssessment:
    """
    댓글 텍스트를 위험도 점수(0~100)와 플래그 목록으로 평가한다. 외부 상태가 없는 순수 함수.
    """
    content = content or ""
    normalized = normalize_text(content)
    tokens = set(normalized.split(" ")) if normalized else set()

    score = 0
    flags: List[str] = []
    for prefix, points, terms in TERM_GROUPS:
        s, f = _match_terms(normalized, tokens, prefix, points, terms)
        score += s
        flags.extend(f)

    if "http://" in content or "https://" in content:
        score += URL_POINTS
        flags.append("SPAM:url")

    letters = [ch for ch in content if ch.isascii() and ch.isalpha()]
    if len(letters) >= ALL_CAPS_MIN_LETTERS:
        upper = sum(1 for ch in letters if ch.isupper())
        if upper / len(letters) > ALL_CAPS_RATIO:
            score += ALL_CAPS_POINTS
            flags.append("ABUSE:all_caps")

    if content.count("!") >= PUNCTUATION_MIN_BANGS:
        score += PUNCTUATION_POINTS
        flags.append("ABUSE:aggressive_punctuation")

    score = _clamp(score)
    auto_flagged = score >= AUTO_FLAG_SCORE or any(f.startswith("SEVERE") for f in flags)
    needs_review = auto_flagged or score >= REVIEW_SCORE or bool(flags)

    if auto_flagged:
        reason = REASON_AUTO_HIDDEN
    elif needs_review:
        reason = REASON_NEEDS_REVIEW
    else:
        reason = None

    priority = score + (AUTO_FLAG_PRIORITY_BONUS if auto_flagged else 0) if needs_review else 0

    return CommentAssessment(
        status=STATUS_HIDDEN if auto_flagged else STATUS_VISIBLE,
        moderation_score=score,
        moderation_flags=flags,
        auto_flagged=auto_flagged,
        needs_review=needs_review,
        review_priority=_clamp(priority),
        moderated_by=AUTO_MODERATOR if auto_flagged else None,
        moderation_reason=reason,
    )


def apply_region_moderation_policy(assessment: CommentAssessment, level: Optional[str]) -> CommentAssessment:
    """
    지역 정책의 auto_moderation_level에 따라 평가 결과를 조정한다. 알 수 없는 레벨은 standard와 동일(변경 없음).
    """
    rule = LEVEL_RULES.get((level or "").strip().lower(), LEVEL_RULES["standard"])
    a = assessment

    if rule.hide_at is not None and a.status == STATUS_VISIBLE and a.moderation_score >= rule.hide_at:
        return replace(
            a,
            status=STATUS_HIDDEN,
            auto_flagged=True,
            needs_review=True,
            review_priority=max(a.review_priority, rule.hide_priority),
            moderated_by=AUTO_MODERATOR,
            moderation_reason=a.moderation_reason or rule.hide_reason,
        )
    if rule.review_at is not None and a.moderation_score >= rule.review_at:
        return replace(
            a,
            needs_review=True,
            review_priority=max(a.review_priority, rule.review_priority),
            moderation_reason=a.moderation_reason or rule.review_reason,
        )
    if rule.unhide_below is not None and a.status == STATUS_HIDDEN and not a.has_severe and a.moderation_score < rule.unhide_below:
        return replace(
            a,
            status=STATUS_VISIBLE,
            auto_flagged=False,
            needs_review=True,
            review_priority=max(a.review_priority, rule.unhide_priority),
            moderated_by=None,
            moderation_reason=rule.unhide_reason,
        )
    return a

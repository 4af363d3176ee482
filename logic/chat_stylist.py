"""Chat stylist: intent parsing, follow-up memory and response copy.

Occasion and tone detection are ordered keyword rule tables. Rules are checked
top to bottom and the first match wins, so more specific contexts (weddings,
interviews) sit above generic ones.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from logic.attribute_resolver import get_colors
from models.occasions import DEFAULT_OCCASION, get_occasion, resolve_occasion_key
from models.taxonomy import normalize_color_name, normalize_key, unique
from models.wardrobe_item import WardrobeItem

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.55
FORMALITY_STEP = 0.15


@dataclass(frozen=True)
class OccasionRule:
    occasion: str
    keywords: Tuple[str, ...]
    confidence: float
    label: str
    requires: Tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not _includes_any(text, self.keywords):
            return False
        return not self.requires or _includes_any(text, self.requires)


@dataclass(frozen=True)
class ToneRule:
    tone: str
    keywords: Tuple[str, ...]


_DATE_WORDS = ("date", "girlfriend", "boyfriend", "crush", "romantic", "dinner date")

OCCASION_RULES: Tuple[OccasionRule, ...] = (
    OccasionRule(
        "wedding_guest",
        ("wedding", "shaadi", "marriage", "baraat", "reception", "nikah", "mehendi", "haldi"),
        0.95,
        "wedding",
    ),
    OccasionRule(
        "interview", ("interview", "job interview", "hr round", "placement", "campus placement"), 0.92, "interview"
    ),
    OccasionRule(
        "office",
        ("office", "work", "meeting", "client", "presentation", "startup", "boss", "corporate"),
        0.84,
        "office/work",
    ),
    OccasionRule(
        "college", ("college", "class", "university", "campus", "lecture", "exam", "test"), 0.84, "college/class"
    ),
    OccasionRule("gym", ("gym", "workout", "training", "fitness", "run"), 0.9, "gym"),
    OccasionRule("club_night", ("club", "night club", "bar", "dj", "dance"), 0.88, "club"),
    OccasionRule("party", ("party", "birthday", "celebration"), 0.82, "party"),
    OccasionRule("date_day", _DATE_WORDS, 0.82, "date_day", requires=("morning", "day", "afternoon", "lunch")),
    OccasionRule("romantic_dinner", _DATE_WORDS, 0.82, "romantic_dinner"),
    OccasionRule("festival", ("festival", "diwali", "eid", "christmas", "holi"), 0.78, "festival"),
    OccasionRule("travel", ("travel", "trip", "flight", "airport", "journey"), 0.74, "travel"),
    OccasionRule("funeral", ("funeral",), 0.95, "funeral"),
    OccasionRule("streetwear", ("streetwear", "street style"), 0.72, "streetwear"),
)

TONE_RULES: Tuple[ToneRule, ...] = (
    ToneRule(
        "safe",
        (
            "safe",
            "simple",
            "no risk",
            "decent",
            "minimal",
            "not flashy",
            "premium but not steal attention",
            "not steal attention",
        ),
    ),
    ToneRule("attraction", ("attractive", "impress", "crush", "hot", "sexy", "charming")),
    ToneRule("statement", ("stand out", "statement", "bold", "different", "unique", "attention")),
)

_RESPONSE_COPY: Dict[str, Tuple[str, str]] = {
    "romantic_dinner": (
        "Alright. Romantic Dinner = attraction + mature confidence without trying too hard.",
        "In romantic settings, clean fit + deep tones signal intention, confidence, and maturity.",
    ),
    "casual": (
        "Casual vibe. Let's keep it clean, chill and confident.",
        "Casual is about looking relaxed but intentional; clean fit beats overdressing.",
    ),
    "casual_hangout": (
        "Casual hangout = effortless cool and friendly vibe.",
        "People respond best to comfort + clean aesthetics in casual events. Keep it simple.",
    ),
    "interview": (
        "Interview = maximum trust + sharp professional vibe.",
        "Neutral tones, clean fit, and formality cues strongly increase credibility.",
    ),
    "office": (
        "Office/work = smart, clean, and capable style.",
        "Work outfits should signal competence but still feel approachable.",
    ),
    "wedding_guest": (
        "Alright. Wedding Guest = Look elegant and respectful without stealing spotlight.",
        "Weddings reward premium elegance; avoid extreme attention grabbing colors.",
    ),
    "party": (
        "Party = stylish + confident with some fun energy.",
        "Social events reward charisma; slightly bolder choices feel better here.",
    ),
    "club_night": (
        "Club night = bold, attractive, high confidence vibe.",
        "Night settings reward sharp silhouettes + statement energy.",
    ),
    "date_day": (
        "Day date = warm, friendly, cute but still clean.",
        "Day dates reward approachability. Softer tones feel welcoming and charming.",
    ),
    "travel": (
        "Travel = comfort first but still clean and stylish.",
        "Long journeys need comfort. Still, clean fit keeps your look premium.",
    ),
    "gym": (
        "Gym = sporty, functional, confident.",
        "Gym outfits are about movement. Comfort and breathable pieces win.",
    ),
    "funeral": (
        "Funeral = respectful and silent. No attention.",
        "Funerals demand minimalism. Dark neutral tones and simplicity show respect.",
    ),
    "festival": (
        "Festival = expressive, joyful, energetic style.",
        "Festivals reward vibrant personality. Expression is socially encouraged.",
    ),
    "family_dinner": (
        "Family dinner = mature, respectful, warm vibe.",
        "Family settings reward clean maturity. Respect + calm colors win.",
    ),
    "presentation": (
        "Presentation = authority, confidence, premium vibe.",
        "On stage, outfits influence perception. Sharp formality increases authority.",
    ),
    "college": (
        "College = comfortable, cool, clean confidence.",
        "College style is about vibe. Casual but clean gives the best look.",
    ),
    "streetwear": (
        "Streetwear = bold vibe, identity, statement fit.",
        "Streetwear is self-expression; statement pieces matter most here.",
    ),
}

_TONE_SUFFIX: Dict[str, str] = {
    "safe": " I'll keep it safe and premium.",
    "attraction": " I'll optimize for attraction.",
    "statement": " I'll go for a statement fit.",
}

MODE_TITLES: Dict[str, str] = {
    "safe": "Safe Win",
    "attraction": "Attraction Max",
    "statement": "Statement Fit",
}

MEMORY_AVOID_COLORS = ("red", "black", "white", "blue", "green")
MEMORY_PREFER_COLORS = ("black", "white", "blue", "red")
_MORE_FORMAL = ("more formal", "more premium", "more classy")
_MORE_CASUAL = ("more casual", "less formal", "relaxed")


def _includes_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


@dataclass
class StylistIntent:
    occasion: str
    tone: str
    confidence: float
    matched: List[str] = field(default_factory=list)


@dataclass
class StylistResponseText:
    intro: str
    psychology: str


@dataclass
class StylistMemory:
    """Follow-up preferences carried across chat turns by the caller."""

    occasion: Optional[str] = None
    avoid_colors: List[str] = field(default_factory=list)
    prefer_colors: List[str] = field(default_factory=list)
    ban_items: List[str] = field(default_factory=list)
    force_mode: Optional[str] = None
    formality_delta: float = 0.0

    def merge(self, updates: "StylistMemory", occasion: Optional[str] = None) -> "StylistMemory":
        return StylistMemory(
            occasion=occasion or updates.occasion or self.occasion,
            avoid_colors=unique(normalize_color_name(c) for c in [*self.avoid_colors, *updates.avoid_colors]),
            prefer_colors=unique(normalize_color_name(c) for c in [*self.prefer_colors, *updates.prefer_colors]),
            ban_items=unique(str(i) for i in [*self.ban_items, *updates.ban_items]),
            force_mode=updates.force_mode or self.force_mode,
            formality_delta=self.formality_delta + updates.formality_delta,
        )


def infer_intent_from_message(message: str | None) -> StylistIntent:
    """Infer the occasion and tone a chat message is asking for."""

    text = normalize_key(message)
    matched: List[str] = []

    occasion, confidence = DEFAULT_OCCASION, FALLBACK_CONFIDENCE
    for rule in OCCASION_RULES:
        if rule.matches(text):
            occasion, confidence = rule.occasion, rule.confidence
            matched.append(rule.label)
            break
    else:
        matched.append("casual_fallback")

    tone = "balanced"
    for tone_rule in TONE_RULES:
        if _includes_any(text, tone_rule.keywords):
            tone = tone_rule.tone
            matched.append(f"tone_{tone_rule.tone}")
            break

    logger.debug("Inferred intent occasion=%s tone=%s confidence=%.2f", occasion, tone, confidence)
    return StylistIntent(occasion=occasion, tone=tone, confidence=confidence, matched=matched)


def resolve_requested_occasion(value: str | None) -> str:
    """Map an occasion key or free text ("job interview tomorrow") onto a profile key.

    Exact keys and the ``casual`` alias pass through; other text goes through
    the intent rules. Text no rule recognises comes back normalized but
    unresolved, so callers still see it as an unknown occasion.
    """

    key = normalize_key(value)
    if get_occasion(key) is not None or key == "casual":
        return resolve_occasion_key(key)
    intent = infer_intent_from_message(key)
    if "casual_fallback" in intent.matched:
        return key
    return intent.occasion


def build_stylist_response_text(occasion: str, tone: str = "balanced") -> StylistResponseText:
    intro, psychology = _RESPONSE_COPY.get(occasion, _RESPONSE_COPY[DEFAULT_OCCASION])
    return StylistResponseText(intro=f"{intro}{_TONE_SUFFIX.get(tone, '')}", psychology=psychology)


def extract_memory_updates(message: str | None) -> StylistMemory:
    """Pull color, mode and formality follow-ups out of a chat message."""

    text = normalize_key(message)
    avoid = [c for c in MEMORY_AVOID_COLORS if f"no {c}" in text or f"avoid {c}" in text]
    prefer = [c for c in MEMORY_PREFER_COLORS if f"more {c}" in text or f"prefer {c}" in text]

    force_mode = None
    for mode in ("safe", "attraction", "statement"):
        if mode in text:
            force_mode = mode

    delta = 0.0
    if _includes_any(text, _MORE_FORMAL):
        delta += FORMALITY_STEP
    if _includes_any(text, _MORE_CASUAL):
        delta -= FORMALITY_STEP

    return StylistMemory(avoid_colors=avoid, prefer_colors=prefer, force_mode=force_mode, formality_delta=delta)


def apply_memory_bans(wardrobe: Iterable[WardrobeItem], memory: StylistMemory) -> List[WardrobeItem]:
    """Flag banned items and items in avoided colors for this session only."""

    banned_ids = set(memory.ban_items)
    avoided = set(memory.avoid_colors)
    flagged: List[WardrobeItem] = []
    for item in wardrobe:
        hit = item.item_id in banned_ids or bool(avoided.intersection(get_colors(item)))
        flagged.append(dataclasses.replace(item, banned=True) if hit else item)
    return flagged


__all__ = [
    "OCCASION_RULES",
    "TONE_RULES",
    "MODE_TITLES",
    "StylistIntent",
    "StylistResponseText",
    "StylistMemory",
    "infer_intent_from_message",
    "resolve_requested_occasion",
    "build_stylist_response_text",
    "extract_memory_updates",
    "apply_memory_bans",
]

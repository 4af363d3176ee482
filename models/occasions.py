"""Occasion profiles: formality bands, vibe tags and color guidance per occasion."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from models.taxonomy import normalize_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OccasionPsychology:
    """Presentation-only copy explaining why an occasion is styled a certain way."""

    goal: str
    impression: Tuple[str, ...]
    why_it_works: Tuple[str, ...]


@dataclass(frozen=True)
class OccasionProfile:
    """Styling targets for one social context."""

    key: str
    title: str
    formality_target: float
    formality_range: Tuple[float, float]
    vibe_tags: Tuple[str, ...]
    avoid_tags: Tuple[str, ...]
    color_pref: Tuple[str, ...]
    avoid_colors: Tuple[str, ...]
    psychology: OccasionPsychology


def _profile(
    key: str,
    title: str,
    target: float,
    band: Tuple[float, float],
    vibe: Tuple[str, ...],
    avoid: Tuple[str, ...],
    colors: Tuple[str, ...],
    avoid_colors: Tuple[str, ...],
    goal: str,
    impression: Tuple[str, ...],
    why: Tuple[str, ...],
) -> OccasionProfile:
    return OccasionProfile(
        key=key,
        title=title,
        formality_target=target,
        formality_range=band,
        vibe_tags=vibe,
        avoid_tags=avoid,
        color_pref=colors,
        avoid_colors=avoid_colors,
        psychology=OccasionPsychology(goal=goal, impression=impression, why_it_works=why),
    )


_OCCASIONS: Dict[str, OccasionProfile] = {
    "romantic_dinner": _profile(
        "romantic_dinner",
        "Romantic Dinner",
        0.72,
        (0.55, 0.9),
        ("classy", "attractive", "warm", "intentional", "clean"),
        ("gym", "dirty", "oversized", "messy", "too_sporty"),
        ("black", "white", "navy", "burgundy", "earth"),
        ("neon",),
        "Attraction + confidence without looking like you're trying too hard.",
        ("Intentional", "Clean & confident", "Mature and attractive", "Warm & approachable"),
        (
            "Romantic settings reward effort and clean styling.",
            "Balanced formality signals respect and value.",
            "Neutral/deep colors amplify elegance and attraction.",
        ),
    ),
    "casual": _profile(
        "casual",
        "Casual (Generic)",
        0.32,
        (0.1, 0.6),
        ("casual", "relaxed", "comfortable", "clean", "cool"),
        ("too_formal", "interview", "wedding", "club"),
        ("white", "black", "blue", "grey", "earth"),
        ("neon",),
        "Look comfortable but still stylish and clean.",
        ("Effortless", "Friendly", "Relaxed", "Cool"),
        (
            "Most everyday situations reward comfort + clean styling.",
            "Casual outfits should look intentional, not lazy.",
        ),
    ),
    "casual_hangout": _profile(
        "casual_hangout",
        "Casual Hangout",
        0.35,
        (0.15, 0.55),
        ("relaxed", "cool", "comfortable", "friendly"),
        ("too_formal", "wedding"),
        ("white", "black", "blue", "green", "earth"),
        (),
        "Look effortlessly cool and approachable.",
        ("Easy-going", "Clean", "Stylish without effort"),
        ("Casual events reward comfort + a clean look.", "Over-dressing creates social distance."),
    ),
    "interview": _profile(
        "interview",
        "Interview",
        0.88,
        (0.7, 1.0),
        ("professional", "sharp", "trustworthy", "clean", "confident"),
        ("club", "party", "streetwear", "messy", "ripped"),
        ("navy", "black", "white", "grey"),
        ("neon", "flashy"),
        "Maximize trust and competence signals.",
        ("Professional", "Reliable", "Focused", "Serious"),
        (
            "Interviews are about trust + competence cues.",
            "Neutral colors reduce distraction and increase credibility.",
        ),
    ),
    "office": _profile(
        "office",
        "Office / Work",
        0.68,
        (0.45, 0.85),
        ("professional", "clean", "smart", "comfortable"),
        ("club", "messy", "too_sporty"),
        ("black", "white", "navy", "grey", "brown"),
        ("neon",),
        "Look capable, clean, and easy to work with.",
        ("Smart", "Competent", "Approachable"),
        (
            "Office outfits should be smart without feeling aggressive.",
            "Clean lines improve authority and clarity.",
        ),
    ),
    "wedding_guest": _profile(
        "wedding_guest",
        "Wedding Guest",
        0.82,
        (0.6, 1.0),
        ("formal", "celebratory", "elegant", "premium"),
        ("gym", "dirty", "ripped"),
        ("navy", "black", "beige", "pastel", "maroon"),
        ("too_white",),
        "Look elegant and respectful without stealing spotlight.",
        ("Elegant", "Well-mannered", "Celebratory"),
        (
            "Weddings reward elegance and respect.",
            "Avoid extreme attention colors unless culture requires.",
        ),
    ),
    "party": _profile(
        "party",
        "Party",
        0.55,
        (0.35, 0.8),
        ("stylish", "fun", "confident"),
        ("interview", "too_formal"),
        ("black", "white", "red", "blue", "metallic"),
        (),
        "Stand out but still look sharp.",
        ("Fun", "Confident", "Stylish"),
        ("Parties reward charisma and a bolder vibe.",),
    ),
    "club_night": _profile(
        "club_night",
        "Club Night",
        0.6,
        (0.35, 0.85),
        ("bold", "attractive", "statement", "clean"),
        ("office", "interview", "too_formal"),
        ("black", "dark", "red"),
        (),
        "High attraction + high confidence vibe.",
        ("Bold", "Sexy", "Confident"),
        ("Night settings reward bold statements and clean fit.",),
    ),
    "date_day": _profile(
        "date_day",
        "Day Date",
        0.52,
        (0.35, 0.75),
        ("warm", "friendly", "clean", "cute"),
        ("too_formal",),
        ("white", "blue", "earth", "pastel"),
        ("neon",),
        "Warm + charming, approachable style.",
        ("Cute", "Clean", "Friendly"),
        ("Day dates reward warmth and friendliness.",),
    ),
    "travel": _profile(
        "travel",
        "Travel",
        0.28,
        (0.1, 0.55),
        ("comfortable", "clean", "practical", "cool"),
        ("too_formal",),
        ("black", "grey", "blue", "earth"),
        (),
        "Comfort + clean aesthetics.",
        ("Practical", "Put-together"),
        ("Travel is long hours; comfort first but clean look matters.",),
    ),
    "gym": _profile(
        "gym",
        "Gym",
        0.1,
        (0.0, 0.25),
        ("gym", "sporty", "comfortable"),
        ("formal",),
        ("black", "grey", "blue"),
        (),
        "Function and confidence.",
        ("Athletic", "Focused"),
        ("Fitness vibe. No overthinking.",),
    ),
    "funeral": _profile(
        "funeral",
        "Funeral",
        0.82,
        (0.6, 1.0),
        ("respectful", "simple", "formal"),
        ("bold", "statement", "party"),
        ("black", "dark", "grey"),
        ("bright", "neon"),
        "Respect and silence (no attention).",
        ("Respectful", "Serious"),
        ("The moment is not about you. Blend respectfully.",),
    ),
    "festival": _profile(
        "festival",
        "Festival",
        0.45,
        (0.2, 0.75),
        ("fun", "colorful", "comfortable", "expressive"),
        ("too_formal",),
        ("bright", "earth", "white"),
        (),
        "Expressive and joyful.",
        ("Fun", "Energetic"),
        ("Festivals reward self-expression.",),
    ),
    "family_dinner": _profile(
        "family_dinner",
        "Family Dinner",
        0.55,
        (0.35, 0.8),
        ("clean", "mature", "warm", "respectful"),
        ("too_bold", "club"),
        ("earth", "white", "navy", "grey"),
        (),
        "Respect + warmth.",
        ("Mature", "Respectful", "Comfortable"),
        ("Family settings reward warmth and clean maturity.",),
    ),
    "presentation": _profile(
        "presentation",
        "Presentation / On Stage",
        0.8,
        (0.55, 1.0),
        ("authority", "sharp", "clean", "premium"),
        ("messy", "too_casual"),
        ("black", "navy", "white", "grey"),
        ("neon",),
        "Authority + confidence.",
        ("Leader", "Confident", "Professional"),
        ("Strong outfits improve perceived competence on stage.",),
    ),
    "college": _profile(
        "college",
        "College / Class",
        0.25,
        (0.1, 0.55),
        ("comfortable", "cool", "clean"),
        ("too_formal",),
        ("white", "black", "blue", "green"),
        (),
        "Comfort + confidence.",
        ("Cool", "Approachable"),
        ("College style is about comfort and vibe.",),
    ),
    "streetwear": _profile(
        "streetwear",
        "Streetwear",
        0.35,
        (0.15, 0.65),
        ("streetwear", "cool", "bold", "statement"),
        ("interview",),
        ("black", "white", "neon"),
        (),
        "Make a style statement.",
        ("Trendy", "Bold"),
        ("Streetwear is identity. Statement pieces matter.",),
    ),
}

OCCASION_KEYS: Tuple[str, ...] = tuple(_OCCASIONS)
DEFAULT_OCCASION = "casual_hangout"

# Substring hints for loose occasion text, checked in order.
_OCCASION_HINTS: Tuple[Tuple[str, str], ...] = (
    ("hang", "casual_hangout"),
    ("college", "college"),
    ("office", "office"),
    ("work", "office"),
    ("wedding", "wedding_guest"),
    ("party", "party"),
    ("club", "club_night"),
    ("interview", "interview"),
    ("gym", "gym"),
    ("travel", "travel"),
    ("street", "streetwear"),
)


def get_occasion(key: str | None) -> Optional[OccasionProfile]:
    """Return the :class:`OccasionProfile` for ``key`` or ``None`` if unsupported."""

    return _OCCASIONS.get(normalize_key(key))


def resolve_occasion_key(value: str | None) -> str:
    """Soft-map an occasion key or loose occasion text onto a supported key.

    The generic ``casual`` alias maps to ``casual_hangout`` so chat replies
    always name a concrete occasion. Anything unrecognised falls back to
    ``casual_hangout``.
    """

    key = normalize_key(value)
    if key == "casual":
        return DEFAULT_OCCASION
    if key in _OCCASIONS:
        return key
    for hint, occasion in _OCCASION_HINTS:
        if hint in key:
            return occasion
    if key:
        logger.info("Unknown occasion '%s', defaulting to %s", value, DEFAULT_OCCASION)
    return DEFAULT_OCCASION


__all__ = [
    "OccasionPsychology",
    "OccasionProfile",
    "OCCASION_KEYS",
    "DEFAULT_OCCASION",
    "get_occasion",
    "resolve_occasion_key",
]

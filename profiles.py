"""
Fixed profiles returned instead of live GitHub data for a handful of names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from scoring import ScoreBreakdown

MESSI_AVATAR = "https://upload.wikimedia.org/wikipedia/commons/b/b4/Lionel-Messi-Argentina-2022-FIFA-World-Cup_%28cropped%29.jpg"
RONALDO_AVATAR = "https://upload.wikimedia.org/wikipedia/commons/8/8c/Cristiano_Ronaldo_2018.jpg"

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ProfileOverride:
    username: str
    avatar_url: str
    name: str
    bio: str
    followers: int
    public_repos: int
    total_stars: int
    total_commits: int
    active_days: int
    breakdown: ScoreBreakdown

    def profile_fields(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "avatar_url": self.avatar_url,
            "name": self.name,
            "bio": self.bio,
            "followers": self.followers,
            "public_repos": self.public_repos,
            "totalStars": self.total_stars,
            "totalCommits": self.total_commits,
            "activeDays": self.active_days,
        }


def _saturated(years: float) -> ScoreBreakdown:
    return ScoreBreakdown(
        popularity=10.0,
        impact=10.0,
        activity=10.0,
        tenure=10.0,
        volume=10.0,
        consistency=10.0,
        final_score=10.0,
        years_on_platform=years,
    )


def _goat(username: str, avatar_url: str, name: str, bio: str, years: float) -> ProfileOverride:
    return ProfileOverride(
        username=username,
        avatar_url=avatar_url,
        name=name,
        bio=bio,
        followers=99999999,
        public_repos=999,
        total_stars=99999999,
        total_commits=99999999,
        active_days=365,
        breakdown=_saturated(years),
    )


_RONALDO_BIO = "O G.O.A.T. 🤖 | Siuuuu!"

OVERRIDES: Mapping[str, ProfileOverride] = MappingProxyType({
    "messi": _goat("messi", MESSI_AVATAR, "Lionel Messi", "O G.O.A.T. 🐐 | 8x Bola de Ouro", 20.0),
    "cristiano ronaldo": _goat("cristiano", RONALDO_AVATAR, "Cristiano Ronaldo", _RONALDO_BIO, 22.0),
    "cr7": _goat("cr7", RONALDO_AVATAR, "Cristiano Ronaldo", _RONALDO_BIO, 22.0),
})


def normalize_identity(identity: str) -> str:
    return _WS_RE.sub(" ", (identity or "").strip().lower())


def find_override(identity: str, overrides: Mapping[str, ProfileOverride] = OVERRIDES) -> Optional[ProfileOverride]:
    return overrides.get(normalize_identity(identity))

"""
Cluster configuration — density thresholds and per-tier spot styles.

Clusters fall into three tiers by member count:

    count <= low            → LOW
    low < count <= medium   → MEDIUM
    count > medium          → HIGH

Each tier has a :class:`ClusterSpot` describing how its marker glyph looks.
The clustering algorithm itself never reads the spot values; they only pick
the visual treatment of a synthesized cluster marker.

Thresholds must satisfy ``low < medium``.  Any construction path that
violates this raises ``ValueError``; there is no silent fallback to the
defaults.

Usage
-----
    config = ClusterConfig(low=4, medium=8)
    config.tier_for(5)          # ClusterTier.MEDIUM
    config.spot_for(ClusterTier.HIGH).color
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_LOW = 10
DEFAULT_MEDIUM = 20


class ClusterTier(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ClusterSpot:
    """Appearance of a cluster marker."""

    color: str = "#3c8ce6"             # background fill (hex)
    width: int = 28                    # px
    height: int = 28                   # px
    text_size: int = 14                # px
    text_color: str = "#ffffff"
    title: Optional[str] = None        # replaces the member count when set
    image_path: Optional[str] = None   # custom background image

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterSpot":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown cluster spot keys: {sorted(unknown)}")
        return cls(**data)


def _default_low_spot() -> ClusterSpot:
    return ClusterSpot(color="#3c8ce6", width=28, height=28, text_size=13)


def _default_medium_spot() -> ClusterSpot:
    return ClusterSpot(color="#f0a028", width=36, height=36, text_size=14)


def _default_high_spot() -> ClusterSpot:
    return ClusterSpot(color="#dc3c3c", width=44, height=44, text_size=16)


@dataclass(frozen=True)
class ClusterConfig:
    """Thresholds and spots used to classify clusters into tiers."""

    low: int = DEFAULT_LOW
    medium: int = DEFAULT_MEDIUM
    low_spot: ClusterSpot = field(default_factory=_default_low_spot)
    medium_spot: ClusterSpot = field(default_factory=_default_medium_spot)
    high_spot: ClusterSpot = field(default_factory=_default_high_spot)

    def __post_init__(self):
        if self.medium <= self.low:
            raise ValueError(
                f"Invalid cluster thresholds low={self.low} medium={self.medium} "
                "(must be low < medium)"
            )

    def tier_for(self, count: int) -> ClusterTier:
        if count <= self.low:
            return ClusterTier.LOW
        if count <= self.medium:
            return ClusterTier.MEDIUM
        return ClusterTier.HIGH

    def spot_for(self, tier: ClusterTier) -> ClusterSpot:
        if tier is ClusterTier.LOW:
            return self.low_spot
        if tier is ClusterTier.MEDIUM:
            return self.medium_spot
        return self.high_spot

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterConfig":
        """Build from a JSON-style dict (spots given as nested dicts)."""
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key in ("low", "medium"):
                kwargs[key] = int(value)
            elif key in ("low_spot", "medium_spot", "high_spot"):
                kwargs[key] = ClusterSpot.from_dict(value)
            else:
                raise ValueError(f"Unknown cluster config key: {key!r}")
        return cls(**kwargs)

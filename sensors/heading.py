"""
Heading normalization: classify raw orientation samples from the different
platform conventions and reduce them to one compass heading.

Three sample shapes are recognised, highest priority first:

  - CompassHeadingSample: an earth-referenced, compass-corrected heading
    (``webkitCompassHeading``).
  - AbsoluteAlphaSample: ``alpha`` with ``absolute`` true.
  - RelativeAlphaSample: a bare ``alpha`` with no absoluteness guarantee.
    It is still used, but readings derived from it are marked unreliable.
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

from config.logger import setup_logger
from navigation.errors import NoUsableHeadingField
from utils.orientation_utils import normalize_deg

logger = setup_logger("compass_nav.sensors")

COMPASS_FIELD = "webkitCompassHeading"
ABSOLUTE_FIELD = "absolute"
ALPHA_FIELD = "alpha"


@dataclass(frozen=True)
class CompassHeadingSample:
    heading: float
    source = "compass"
    reliable = True


@dataclass(frozen=True)
class AbsoluteAlphaSample:
    alpha: float
    source = "absolute_alpha"
    reliable = True


@dataclass(frozen=True)
class RelativeAlphaSample:
    alpha: float
    source = "relative_alpha"
    reliable = False


OrientationSample = Union[CompassHeadingSample, AbsoluteAlphaSample, RelativeAlphaSample]


@dataclass(frozen=True)
class HeadingReading:
    heading_deg: float
    source: str
    reliable: bool


def _number(value):
    """A finite float, or None for missing/null/NaN/non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num


def _field(raw, name):
    if isinstance(raw, dict):
        return raw.get(name)
    return getattr(raw, name, None)


def _flag(value):
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def classify_sample(raw):
    """
    Turn a raw event (dict or object with the platform attribute names) into
    one of the sample variants. Raises NoUsableHeadingField when none fits.
    """
    if isinstance(raw, (CompassHeadingSample, AbsoluteAlphaSample, RelativeAlphaSample)):
        return raw
    compass = _number(_field(raw, COMPASS_FIELD))
    if compass is not None:
        return CompassHeadingSample(compass)
    alpha = _number(_field(raw, ALPHA_FIELD))
    if alpha is not None:
        if _flag(_field(raw, ABSOLUTE_FIELD)):
            return AbsoluteAlphaSample(alpha)
        return RelativeAlphaSample(alpha)
    raise NoUsableHeadingField("orientation sample has no compass heading or alpha")


def heading_of(sample: OrientationSample) -> HeadingReading:
    if isinstance(sample, CompassHeadingSample):
        value = sample.heading
    else:
        value = sample.alpha
    return HeadingReading(normalize_deg(value), sample.source, sample.reliable)


class HeadingNormalizer:
    """
    Keeps the latest accepted reading. Rejected samples leave it untouched.
    """

    def __init__(self):
        self.current: Optional[HeadingReading] = None
        self.accepted = 0
        self.rejected = 0

    @property
    def heading_deg(self):
        return self.current.heading_deg if self.current is not None else None

    def accept(self, raw):
        try:
            sample = classify_sample(raw)
        except NoUsableHeadingField:
            self.rejected += 1
            logger.warning("Discarding orientation sample without heading data: %r", raw)
            raise
        reading = heading_of(sample)
        if not reading.reliable and (self.current is None or self.current.reliable):
            logger.warning("Heading comes from relative alpha; direction may drift")
        self.current = reading
        self.accepted += 1
        return reading

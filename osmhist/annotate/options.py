"""Options that tune how children are matched to parents."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta

from ..feature import FeatureID

DEFAULT_THRESHOLD = timedelta(minutes=30)


@dataclass
class Options:
    """Parameters of the matching process."""

    threshold: timedelta = timedelta(0)
    ignore_inconsistency: bool = False
    ignore_missing_children: bool = False
    child_filter: Callable[[FeatureID], bool] | None = None


Option = Callable[[Options], None]


def threshold(t: timedelta) -> Option:
    """Set the time range used to group changes when commit times are unknown.

    Children in the same commit as their parent may carry a later timestamp;
    changes within this range are grouped forward.
    """

    def apply(o: Options) -> None:
        o.threshold = t

    return apply


def ignore_inconsistency(yes: bool) -> Option:
    """Match children even when their history is missing or inconsistent.

    Children with unclear data, e.g. redacted or pre-versioning history,
    are then left unannotated instead of raising an error.
    """

    def apply(o: Options) -> None:
        o.ignore_inconsistency = yes

    return apply


def ignore_missing_children(yes: bool) -> Option:
    """Skip children that the datasource reports as not found."""

    def apply(o: Options) -> None:
        o.ignore_missing_children = yes

    return apply


def child_filter(filter: Callable[[FeatureID], bool]) -> Option:
    """Only annotate already annotated children that pass the filter.

    Children that are not yet annotated are annotated regardless.
    """

    def apply(o: Options) -> None:
        o.child_filter = filter

    return apply


def build_options(
    opts: Iterable[Option], default_threshold: timedelta = timedelta(0)
) -> Options:
    """Return the options that result from applying each option in order."""
    result = Options(threshold=default_threshold)
    for opt in opts:
        opt(result)
    return result
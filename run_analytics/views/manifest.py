"""View manifest definition for the plugin system."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from run_analytics.recorder import TestAnalytics


@dataclass(frozen=True, kw_only=True)
class ViewManifest:
    """Manifest describing a text view over the analytics state.

    Views only read the state; rendering never mutates it.
    """

    title: str
    render: Callable[[TestAnalytics], Sequence[str]]

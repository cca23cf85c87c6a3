"""Views registered under the ``run_analytics.views`` entry-point group."""

from importlib.metadata import EntryPoint, entry_points

from run_analytics.views.manifest import ViewManifest

ENTRY_POINT_GROUP = "run_analytics.views"


class ViewNotFoundError(Exception):
    """Raised when no view is registered under a key."""


def _registered() -> dict[str, EntryPoint]:
    return {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}


def available_views() -> list[str]:
    """Keys of all registered views, sorted."""
    return sorted(_registered())


def load_view(key: str) -> ViewManifest:
    """Load the manifest registered under ``key`` (e.g. ``"dashboard"``).

    Raises:
        ViewNotFoundError: If no view with the given key is registered

    """
    registered = _registered()
    if (entry := registered.get(key)) is None:
        raise ViewNotFoundError(
            f"Unknown view '{key}'. Available views: {', '.join(sorted(registered))}"
        )

    manifest: ViewManifest = entry.load()
    return manifest

"""Layout spacing configuration."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields, replace

from models import NodeSize


@dataclass(frozen=True)
class LayoutConfig:
    # Estimated node size used when the renderer has not measured a node
    node_width: float = 150.0
    node_height: float = 80.0

    vertical_spacing: float = 100.0  # Between generations
    horizontal_spacing: float = 30.0  # Between siblings / neighbours in a level

    # Length of the vertical stub that drops into a child
    connector_length: float = 40.0

    def with_overrides(self, **overrides) -> "LayoutConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown layout settings: {sorted(unknown)}")
        return replace(self, **{k: float(v) for k, v in overrides.items() if v is not None})


DEFAULT_CONFIG = LayoutConfig()

NodeSizeSource = Callable[[str], NodeSize | None] | Mapping[str, NodeSize] | None


def size_lookup(
    node_size: NodeSizeSource, config: LayoutConfig = DEFAULT_CONFIG
) -> Callable[[str], NodeSize]:
    """
    Normalize a measured-size source into a function that always returns a NodeSize.

    `node_size` may be a callable (id -> NodeSize or None), a mapping of
    id -> NodeSize, or None. Missing measurements fall back to the configured
    node estimate.
    """
    default = NodeSize(config.node_width, config.node_height)

    if node_size is None:
        return lambda _person_id: default

    if isinstance(node_size, Mapping):
        return lambda person_id: node_size.get(person_id) or default

    def lookup(person_id: str) -> NodeSize:
        return node_size(person_id) or default

    return lookup

import hashlib
import json
import math
import numbers
from dataclasses import asdict, dataclass, fields

DEFAULT_FILENAME = "logo-extruded.stl"

# camelCase names accepted for compatibility with the browser settings surface
_ALIASES = {
    "extrudeHeight": "extrude_height",
    "baseHeight": "base_height",
}


def _field_names(data):
    """Map setting names to dataclass field names, rejecting unknown and repeated keys."""
    known = {f.name for f in fields(Settings)}
    kwargs = {}
    for key, value in data.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise ValueError(f"Unknown setting '{key}'.")
        if name in kwargs:
            raise ValueError(f"Setting '{name}' given more than once.")
        kwargs[name] = value
    return kwargs


@dataclass(frozen=True)
class Settings:
    """
    Parameters of one image-to-mesh run.

    Parameters:
    threshold (float): Luminance cutoff as a fraction of full brightness, in [0, 1].
    extrude_height (float): Elevation of raised pixels in mm (> 0).
    base_height (float): Elevation of flat pixels in mm (>= 0).
    scale (float): Length of the longer planar side of the model in mm (> 0).
    invert (bool): Raise bright pixels instead of dark ones.
    smoothing (float): Majority filter radius hint in pixels, 0 disables it.
    """

    threshold: float = 0.5
    extrude_height: float = 5.0
    base_height: float = 2.0
    scale: float = 100.0
    invert: bool = False
    smoothing: float = 1.0

    def __post_init__(self):
        for f in fields(self):
            if f.name == "invert":
                continue
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError(f"{f.name} must be a number, got {value!r}.")
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}.")

        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must lie in [0, 1], got {self.threshold}.")
        if self.extrude_height <= 0:
            raise ValueError(f"extrude_height must be positive, got {self.extrude_height}.")
        if self.base_height < 0:
            raise ValueError(f"base_height must be non-negative, got {self.base_height}.")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}.")
        if self.smoothing < 0:
            raise ValueError(f"smoothing must be non-negative, got {self.smoothing}.")
        if not isinstance(self.invert, bool):
            raise ValueError(f"invert must be a bool, got {self.invert!r}.")

    @classmethod
    def from_dict(cls, data):
        """
        Build settings from a mapping of field names to values.

        Both the snake_case field names and the camelCase names of the browser
        settings (``extrudeHeight``, ``baseHeight``) are accepted. Unknown keys
        raise ValueError.
        """
        return cls(**_field_names(data))

    def updated(self, **overrides):
        """
        Return a copy with some settings replaced.

        Overrides may use the snake_case field names or their camelCase aliases.
        """
        state = asdict(self)
        state.update(_field_names(overrides))
        return type(self)(**state)

    @classmethod
    def from_json(cls, path):
        """Load settings from a JSON file holding a single object."""
        with open(path, "r") as file:
            data = json.load(file)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {path}.")
        return cls.from_dict(data)

    def to_json(self):
        return json.dumps(asdict(self), sort_keys=True)

    @property
    def name_hash(self):
        """md5 digest of the JSON state, used to name cached outputs."""
        return hashlib.md5(self.to_json().encode()).hexdigest()

import logging
import math
import os
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .buffer import Color
from .errors import InvalidConfig


class Algorithm(str, Enum):
    ATKINSON = "atkinson"
    FLOYD_STEINBERG = "floyd-steinberg"
    SIERRA = "sierra"
    SIERRA_TWO_ROW = "sierra-two-row"
    STUCKI = "stucki"


class ColorMetric(str, Enum):
    MANHATTAN = "manhattan"
    EUCLIDEAN = "euclidean"
    PERCEPTUAL_WEIGHTED = "perceptual-weighted"
    DELTA_E = "delta-e"


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidConfig(f"{name}: expected a boolean, got {raw!r}")


def _parse_enum(enum_type, name: str, raw: Any):
    if isinstance(raw, enum_type):
        return raw
    try:
        return enum_type(str(raw).strip().lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise InvalidConfig(f"{name}: {raw!r} is not one of {choices}") from exc


@dataclass(frozen=True)
class DitherConfig:
    algorithm: Algorithm = Algorithm.STUCKI
    color_distance: ColorMetric = ColorMetric.PERCEPTUAL_WEIGHTED
    use_perceptual_space: bool = False
    serpentine: bool = True
    gamma: float = 0.9
    error_clamping: bool = True
    contrast_enhancement: float = 0.1
    optimize_palette: bool = False
    seed: Optional[int] = None
    max_iterations: int = 20

    def __post_init__(self) -> None:
        # Accept plain strings such as "floyd-steinberg" for the enum fields.
        if not isinstance(self.algorithm, Algorithm):
            object.__setattr__(self, "algorithm", _parse_enum(Algorithm, "algorithm", self.algorithm))
        if not isinstance(self.color_distance, ColorMetric):
            object.__setattr__(
                self, "color_distance", _parse_enum(ColorMetric, "color_distance", self.color_distance)
            )

    @property
    def metric(self) -> ColorMetric:
        """Metric used for nearest-color lookups; LAB overrides the selection."""
        if self.use_perceptual_space:
            return ColorMetric.DELTA_E
        return self.color_distance

    def validate(self) -> "DitherConfig":
        if not math.isfinite(self.gamma) or self.gamma <= 0:
            raise InvalidConfig(f"gamma must be a positive number, got {self.gamma!r}")
        if not math.isfinite(self.contrast_enhancement) or not (
            0.0 <= self.contrast_enhancement <= 1.0
        ):
            raise InvalidConfig(
                f"contrast_enhancement must be within [0, 1], got {self.contrast_enhancement!r}"
            )
        if self.max_iterations < 1:
            raise InvalidConfig(f"max_iterations must be at least 1, got {self.max_iterations!r}")
        return self

    @classmethod
    def from_env(cls) -> "DitherConfig":
        seed = os.getenv("DITHER_SEED")
        return cls(
            algorithm=_parse_enum(Algorithm, "DITHER_ALGORITHM", os.getenv("DITHER_ALGORITHM", "stucki")),
            color_distance=_parse_enum(
                ColorMetric,
                "DITHER_COLOR_DISTANCE",
                os.getenv("DITHER_COLOR_DISTANCE", "perceptual-weighted"),
            ),
            use_perceptual_space=_parse_bool("DITHER_PERCEPTUAL", os.getenv("DITHER_PERCEPTUAL", "false")),
            serpentine=_parse_bool("DITHER_SERPENTINE", os.getenv("DITHER_SERPENTINE", "true")),
            gamma=float(os.getenv("DITHER_GAMMA", "0.9")),
            error_clamping=_parse_bool("DITHER_ERROR_CLAMPING", os.getenv("DITHER_ERROR_CLAMPING", "true")),
            contrast_enhancement=float(os.getenv("DITHER_CONTRAST", "0.1")),
            optimize_palette=_parse_bool(
                "DITHER_OPTIMIZE_PALETTE", os.getenv("DITHER_OPTIMIZE_PALETTE", "false")
            ),
            seed=int(seed) if seed else None,
            max_iterations=int(os.getenv("DITHER_MAX_ITERATIONS", "20")),
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], base: Optional["DitherConfig"] = None) -> "DitherConfig":
        """Build a config from a partial mapping of field names to raw values.

        Values are coerced by field type. Every field that fails to coerce is
        reported in a single :class:`InvalidConfig`, as are unknown keys.
        Fields missing from ``payload`` keep the value from ``base`` (or the
        dataclass default).
        """

        base = base or cls()
        known = {field.name for field in fields(cls)}
        errors: Dict[str, str] = {
            key: "Unknown option" for key in payload if key not in known
        }
        applied: Dict[str, Any] = {}

        for field in fields(cls):
            if field.name not in payload:
                continue

            raw_value = payload[field.name]
            try:
                if field.name == "algorithm":
                    coerced = _parse_enum(Algorithm, field.name, raw_value)
                elif field.name == "color_distance":
                    coerced = _parse_enum(ColorMetric, field.name, raw_value)
                elif field.name == "seed":
                    coerced = None if raw_value is None else int(raw_value)
                elif field.name == "max_iterations":
                    coerced = int(raw_value)
                elif field.name in ("gamma", "contrast_enhancement"):
                    coerced = float(raw_value)
                else:
                    coerced = _parse_bool(field.name, raw_value)
            except InvalidConfig as exc:
                errors[field.name] = str(exc)
                continue
            except (TypeError, ValueError):
                errors[field.name] = f"Invalid value {raw_value!r}"
                continue

            applied[field.name] = coerced

        if errors:
            detail = "; ".join(f"{name}: {message}" for name, message in sorted(errors.items()))
            raise InvalidConfig(f"Invalid dither options: {detail}")

        values = {field.name: getattr(base, field.name) for field in fields(cls)}
        values.update(applied)
        return cls(**values).validate()


SETTINGS = DitherConfig.from_env()


BW_PALETTE: Tuple[Color, ...] = (
    Color(0, 0, 0),
    Color(255, 255, 255),
)

COLOR_PALETTE_6: Tuple[Color, ...] = (
    Color(255, 0, 0),
    Color(0, 255, 0),
    Color(0, 0, 255),
    Color(255, 255, 0),
    Color(0, 0, 0),
    Color(255, 255, 255),
)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"))
    return logging.getLogger("eink-dither")

# xflplot/options.py
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

# Hyndman & Fan sample quantile types -> numpy / xarray method names
QUANTILE_TYPES: dict[int, str] = {
    1: "inverted_cdf",
    2: "averaged_inverted_cdf",
    3: "closest_observation",
    4: "interpolated_inverted_cdf",
    5: "hazen",
    6: "weibull",
    7: "linear",
    8: "median_unbiased",
    9: "normal_unbiased",
}

DEFAULT_PROBS: tuple[float, ...] = (0.10, 0.25, 0.50, 0.75, 0.90)
DEFAULT_STOCK_PROBS: tuple[float, ...] = (0.10, 0.50, 0.90)

MissingPolicy = Literal["exclude", "propagate"]


class UnusedOptionWarning(UserWarning):
    """Emitted when keyword options match no known option and are ignored."""


def validate_probs(probs: Sequence[float]) -> tuple[float, ...]:
    """
    Check a quantile probability set and return it as a tuple of floats.

    The set must be of odd length, strictly increasing and within [0, 1], so
    the middle element can be used as the central line of a plot.

    Raises
    ------
    ValueError
        If any of the above conditions is not met.
    """
    values = tuple(float(p) for p in np.atleast_1d(np.asarray(probs, dtype=float)))
    if len(values) == 0:
        raise ValueError("quantile probs must contain at least one value")
    if len(values) % 2 == 0:
        raise ValueError(
            f"quantile probs can only be a vector of odd length, got {len(values)}"
        )
    if any(np.isnan(values)) or min(values) < 0.0 or max(values) > 1.0:
        raise ValueError(f"quantile probs must lie within [0, 1], got {values}")
    if any(b <= a for a, b in zip(values, values[1:])):
        raise ValueError(
            f"quantile probs must be sorted and free of duplicates, got {values}"
        )
    return values


def quantile_method(rule: int | str) -> str:
    """
    Translate a quantile type (1-9, "type 7", or a method name) into the
    method name understood by ``numpy.quantile`` / ``DataArray.quantile``.
    """
    if isinstance(rule, str):
        key = rule.strip().lower()
        if key in QUANTILE_TYPES.values():
            return key
        if key.startswith("type"):
            key = key[4:].strip()
        if not key.isdigit():
            raise ValueError(
                f"Unknown quantile type '{rule}'. "
                f"Expected 1-9, 'type N' or one of {list(QUANTILE_TYPES.values())}"
            )
        rule = int(key)
    # bool is an int subclass, reject it explicitly
    if isinstance(rule, bool) or rule not in QUANTILE_TYPES:
        raise ValueError(f"Quantile type must be between 1 and 9, got {rule!r}")
    return QUANTILE_TYPES[rule]


@dataclass
class QuantileOptions:
    """
    Option container threaded through every tabulation and plot call.
    All fields have sensible defaults so you can override only what you need.
    """

    # ------------------------------------------------------------
    # 1. Order statistics
    # ------------------------------------------------------------
    probs: Sequence[float] = DEFAULT_PROBS
    type: int | str = 7
    missing: MissingPolicy = "exclude"

    # ------------------------------------------------------------
    # 2. Stock comparisons (FLStocks-like subjects)
    # ------------------------------------------------------------
    stock_probs: Sequence[float] = DEFAULT_STOCK_PROBS
    metrics: Callable[[Any], Any] | None = None

    # ------------------------------------------------------------
    # 3. Overlays
    # ------------------------------------------------------------
    reference_points: Mapping[str, float] | None = None
    iters: Sequence[Any] | None = None

    # ------------------------------------------------------------
    # 4. Future / rarely-used kwargs bucket
    # ------------------------------------------------------------
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    # -----------------------------------------------------------------
    # Normalize user inputs so internals can assume fixed types
    # -----------------------------------------------------------------
    def __post_init__(self) -> None:
        self.probs = validate_probs(self.probs)
        self.stock_probs = validate_probs(self.stock_probs)

        # type: 7 / "type 7" / "linear" -> "linear"
        self.method = quantile_method(self.type)

        policy = str(self.missing).lower()
        if policy not in ("exclude", "propagate"):
            raise ValueError(
                f"Unknown missing-value policy '{self.missing}'. "
                "Expected 'exclude' or 'propagate'"
            )
        self.missing = policy  # type: ignore[assignment]

        if self.iters is not None:
            self.iters = list(np.atleast_1d(self.iters))

    @property
    def skipna(self) -> bool:
        return self.missing == "exclude"

    # ------------------------------------------------------------
    # Helper constructor to accept loose **kwargs
    # ------------------------------------------------------------
    @classmethod
    def from_kwargs(cls, **kwargs) -> QuantileOptions:
        """
        Convert keyword arguments into QuantileOptions,
        unknown fields are stored in `extra`.
        """
        field_names = {
            f.name for f in cls.__dataclass_fields__.values() if f.name != "extra"
        }

        core: dict[str, Any] = {}
        for key in list(kwargs):
            if key in field_names:
                core[key] = kwargs.pop(key)
        return cls(**core, extra=kwargs)

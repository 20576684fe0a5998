#!/usr/bin/env python3
"""Example script drawing quantile ribbons for simulated stocks.

Builds two stochastic stocks (recruitment, SSB, catch and F over a number of
iterations), then writes three figures:

* the metrics of the first stock with a catch reference line,
* both stocks compared on the same panels,
* both stocks relative to their reference points.

Examples:
    python plot_stock_ribbons.py --iters 200 --output figures
    python plot_stock_ribbons.py --years 1990 2020 --probs 0.05 0.5 0.95
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import xarray as xr

# Add parent directory to path for xflplot import
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from xflplot import NamedCollection, PlotConfig, Stock
from xflplot.plot import plot

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def simulate_stock(
    name: str, years: np.ndarray, n_iter: int, rng: np.random.Generator
) -> Stock:
    """Random-walk F and lognormal recruitment driving a crude biomass model."""
    shape = (len(years), n_iter)
    f = np.clip(0.3 + np.cumsum(rng.normal(0, 0.03, shape), axis=0), 0.05, None)
    rec = rng.lognormal(np.log(1e4), 0.4, shape)

    ssb = np.empty(shape)
    ssb[0] = 5e4
    for t in range(1, len(years)):
        ssb[t] = ssb[t - 1] * np.exp(-f[t - 1]) * 0.9 + 0.5 * rec[t - 1]
    catch = ssb * (1 - np.exp(-f))

    coords = {"year": years, "iter": [str(i + 1) for i in range(n_iter)]}

    def wrap(values, label):
        return xr.DataArray(values, dims=("year", "iter"), coords=coords, name=label)

    return Stock(
        {
            "Rec": wrap(rec, "Rec"),
            "SSB": wrap(ssb, "SSB"),
            "Catch": wrap(catch, "Catch"),
            "F": wrap(f, "F"),
        },
        name=name,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--years", nargs=2, type=int, default=[2000, 2030])
    parser.add_argument("--iters", type=int, default=100)
    parser.add_argument("--probs", nargs="+", type=float, default=None)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output", type=Path, default=Path("output"))
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    years = np.arange(args.years[0], args.years[1] + 1)
    base = simulate_stock("base", years, args.iters, rng)
    alt = simulate_stock("alt", years, args.iters, rng)

    args.output.mkdir(parents=True, exist_ok=True)
    options = {"probs": args.probs} if args.probs else {}
    cfg = PlotConfig(panel_size=(8.0, 2.0))

    fig, _ = plot(
        base, {"yield": 1.5e4}, cfg=cfg, title="Base stock", iters=[1, 2], **options
    )
    fig.savefig(args.output / "stock.png")
    logger.info("Saved %s", args.output / "stock.png")

    fig, _ = plot(base, alt, cfg=cfg, title="Base vs alternative")
    fig.savefig(args.output / "stocks.png")
    logger.info("Saved %s", args.output / "stocks.png")

    fig, _ = plot(
        NamedCollection(base=base, alt=alt),
        {"ssb": 4e4, "harvest": 0.3},
        cfg=cfg,
        title="Relative to reference points",
    )
    fig.savefig(args.output / "relative.png")
    logger.info("Saved %s", args.output / "relative.png")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Grid search configuration generation.

A ParameterGrid lists candidate values per StrategyParams field and expands
them into the cartesian product in a fixed order (risk fields vary fastest
from the right, as itertools.product does).
"""
import logging
from dataclasses import dataclass, field, fields
from itertools import product
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from ..shared.defaults import (
    OPTIMIZER_POSITION_SIZES,
    OPTIMIZER_STOP_LOSSES,
    OPTIMIZER_TAKE_PROFITS,
)
from ..shared.errors import InvalidParameters
from ..signals.config import StrategyParams


logger = logging.getLogger(__name__)

PARAM_FIELDS = [f.name for f in fields(StrategyParams)]


@dataclass
class ParameterGrid:
    """
    Candidate values per parameter.

    Fields not listed in `values` take the single value from `base`.
    """
    values: Dict[str, List[Any]] = field(default_factory=lambda: {
        'position_size_pct': list(OPTIMIZER_POSITION_SIZES),
        'stop_loss_pct': list(OPTIMIZER_STOP_LOSSES),
        'take_profit_pct': list(OPTIMIZER_TAKE_PROFITS),
    })
    base: StrategyParams = field(default_factory=StrategyParams)

    def __post_init__(self) -> None:
        for name, candidates in self.values.items():
            if name not in PARAM_FIELDS:
                raise InvalidParameters("grid", name, f"is not a strategy parameter ({', '.join(PARAM_FIELDS)})")
            if isinstance(candidates, (str, bytes)) or not isinstance(candidates, Sequence) or not candidates:
                raise InvalidParameters(f"grid.{name}", candidates, "must be a non-empty list")

    def axes(self) -> Dict[str, List[Any]]:
        """Every StrategyParams field with its candidate list, in field order."""
        base = self.base.to_dict()
        return {name: list(self.values.get(name, [base[name]])) for name in PARAM_FIELDS}

    def size(self) -> int:
        """Number of raw combinations (before invalid ones are skipped)."""
        n = 1
        for candidates in self.axes().values():
            n *= len(candidates)
        return n

    def iter_params(self) -> Iterator[StrategyParams]:
        """Yield valid StrategyParams in deterministic cartesian order."""
        axes = self.axes()
        names = list(axes)
        for combo in product(*axes.values()):
            overrides = dict(zip(names, combo))
            try:
                yield StrategyParams(**overrides)
            except InvalidParameters as e:
                logger.debug(f"Skipping invalid combination {overrides}: {e}")

    def __iter__(self) -> Iterator[StrategyParams]:
        return self.iter_params()


def grid_from_dict(
    config_dict: Optional[Mapping[str, Any]],
    base: Optional[StrategyParams] = None,
) -> ParameterGrid:
    """
    Build a ParameterGrid from the `optimizer` section of a YAML config.

        optimizer:
          position_size_pct: [1, 2, 5, 10]
          stop_loss_pct: [0.5, 1]

    Listed fields replace the default risk grid entry of the same name; the
    other default axes stay. Scalars are treated as one-value lists.
    """
    base = base if base is not None else StrategyParams()
    values = ParameterGrid(base=base).values
    for name, candidates in (config_dict or {}).items():
        if not isinstance(candidates, (list, tuple)):
            candidates = [candidates]
        values[name] = list(candidates)
    return ParameterGrid(values=values, base=base)

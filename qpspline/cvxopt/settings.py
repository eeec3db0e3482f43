"""OSQP solver settings."""

__all__ = ["SolverConfig"]

import dataclasses
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class SolverConfig:
    """
    Settings handed to OSQP at setup.

    The configuration is fixed once constructed; a solver reuses it across
    repeated solves until it is reset with a new one.

    Attributes
    ----------
    alpha : float
        ADMM relaxation parameter, in (0, 2).
        Default: 1.0
    eps_abs : float
        Absolute convergence tolerance.
        Default: 1e-3
    eps_rel : float
        Relative convergence tolerance.
        Default: 1e-3
    max_iter : int
        Maximum number of ADMM iterations.
        Default: 5000
    verbose : bool
        Let OSQP print its iteration log.
        Default: False
    warm_start : bool
        Start from the previous solution when the problem size is unchanged.
        Default: True
    polish : bool | None
        Run OSQP solution polishing. None keeps the OSQP default.
        Default: None
    """

    alpha: float = 1.0
    eps_abs: float = 1.0e-3
    eps_rel: float = 1.0e-3
    max_iter: int = 5000
    verbose: bool = False
    warm_start: bool = True
    polish: Optional[bool] = None

    def __post_init__(self) -> None:
        if not 0.0 < self.alpha < 2.0:
            raise ValueError(f"alpha must lie in (0, 2), got {self.alpha}.")
        if self.eps_abs < 0 or self.eps_rel < 0:
            raise ValueError("Convergence tolerances must be non-negative.")
        if self.max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}.")

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None) -> "SolverConfig":
        """
        Build a config from a plain dict, falling back to defaults.

        Raises
        ------
        ValueError
            If params holds a key that is not a recognised option.
        """
        params = dict(params or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValueError(f"Unrecognised solver options: {', '.join(unknown)}.")
        return cls(**params)

    def replace(self, **changes: Any) -> "SolverConfig":
        """Return a copy with some options changed."""
        return dataclasses.replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_osqp_settings(self) -> Dict[str, Any]:
        """Return the keyword arguments for ``osqp.OSQP.setup``."""
        settings: Dict[str, Any] = {
            "alpha": float(self.alpha),
            "eps_abs": float(self.eps_abs),
            "eps_rel": float(self.eps_rel),
            "max_iter": int(self.max_iter),
            "verbose": bool(self.verbose),
            "warm_start": bool(self.warm_start),
        }
        if self.polish is not None:
            settings["polish"] = bool(self.polish)
        return settings

"""Configuration module for AtacFlux."""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import json
import logging
import os

from .presets import PRESETS
from .solver import DEGENERATE_POLICIES

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class WorkbenchConfig:
    """Configuration for AtacFlux solves, sweeps and screens."""

    # Solver parameters
    input_flux: float = 1.0  # Flux entering at the input metabolite
    degenerate_policy: str = "even"  # What to do when every branch exit is closed
    conservation_tolerance: float = 1e-9  # Allowed branch in/out mismatch

    # Sweep / screen parameters
    sweep_points: int = 21  # Accessibility values between 0 and 1 in a sweep
    n_jobs: int = 1  # Parallel workers for intervention screens (-1 for CPU count)

    # Pathway
    preset: str = "ehrlich"  # Named pathway + accessibility preset

    # Output
    log_level: str = "INFO"
    output_dir: str = "outputs"

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.input_flux < 0:
            raise ValueError(f"input_flux must be non-negative, got {self.input_flux}")

        if self.degenerate_policy not in DEGENERATE_POLICIES:
            raise ValueError(
                f"degenerate_policy must be one of {DEGENERATE_POLICIES}, got {self.degenerate_policy!r}"
            )

        if self.conservation_tolerance < 0:
            raise ValueError(
                f"conservation_tolerance must be non-negative, got {self.conservation_tolerance}"
            )

        if self.sweep_points < 2:
            raise ValueError(f"sweep_points must be at least 2, got {self.sweep_points}")

        if self.n_jobs == 0 or self.n_jobs < -1:
            raise ValueError(f"n_jobs must be positive or -1, got {self.n_jobs}")

        if self.preset not in PRESETS:
            raise ValueError(f"preset must be one of {sorted(PRESETS)}, got {self.preset!r}")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "WorkbenchConfig":
        """Create a WorkbenchConfig from a dictionary, ignoring unknown keys."""
        return cls(**{
            k: v for k, v in config_dict.items()
            if k in cls.__dataclass_fields__
        })

    @classmethod
    def from_json_file(cls, filepath: str) -> "WorkbenchConfig":
        """Load configuration from a JSON file."""
        with open(filepath, "r") as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "input_flux": self.input_flux,
            "degenerate_policy": self.degenerate_policy,
            "conservation_tolerance": self.conservation_tolerance,
            "sweep_points": self.sweep_points,
            "n_jobs": self.n_jobs,
            "preset": self.preset,
            "log_level": self.log_level,
            "output_dir": self.output_dir,
        }

    def to_web_schema(self) -> Dict[str, Any]:
        """
        Generates a JSON structure suitable for a frontend form.
        Includes metadata like ranges and descriptions for better UI.
        """
        return {
            "schema_version": "0.1.0",
            "parameters": [
                {
                    "id": "input_flux",
                    "label": "Input Flux",
                    "type": "number",
                    "default": self.input_flux,
                    "min": 0,
                    "description": "Flux entering at the pathway input"
                },
                {
                    "id": "degenerate_policy",
                    "label": "Closed Branch Policy",
                    "type": "select",
                    "options": list(DEGENERATE_POLICIES),
                    "default": self.degenerate_policy,
                    "description": "Even split or error when every branch exit is closed"
                },
                {
                    "id": "sweep_points",
                    "label": "Sweep Resolution",
                    "type": "integer",
                    "default": self.sweep_points,
                    "min": 2,
                },
                {
                    "id": "preset",
                    "label": "Pathway",
                    "type": "select",
                    "options": sorted(PRESETS),
                    "default": self.preset
                }
            ]
        }

    def get_figure_filename(self, tag: Optional[str] = None) -> str:
        """Generate a descriptive filename for a pathway diagram."""
        suffix = f"_{tag}" if tag else ""
        return os.path.join(self.output_dir, f"atacflux_{self.preset}_in{self.input_flux}{suffix}.html")

# ============================================================================
# STL Reader -- Configuration (stlreader/core/config.py)
# ============================================================================
#
# WHAT THIS FILE DOES:
#   The "single source of truth" for every tunable of the reader: merge
#   tolerance, buffer sizes, progress granularity, and logging.
#
# HOW IT WORKS:
#   1. Python "dataclasses" define every setting with a sensible default
#   2. A YAML file (config/default_config.yaml) can override those defaults
#   3. Environment variables can override YAML (for machine-specific paths)
#
#   Priority: env vars > YAML file > hardcoded defaults
#
# USAGE:
#   from stlreader.core.config import load_config
#   config = load_config(".")                       # load from project dir
#   config = load_config(".", "custom.yaml")        # load specific file
#   print(config.reader.square_confusion)           # 1e-14
# ============================================================================

from __future__ import annotations

import os
import sys
import yaml
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path


# -------------------------------------------------------------------
# Sub-configs: each one maps to a section in the YAML file
# -------------------------------------------------------------------

@dataclass
class ReaderConfig:
    """
    Parsing settings.

    square_confusion is the squared distance under which two vertices are
    the same node. 1e-14 corresponds to a linear tolerance of 1e-7, which
    absorbs float round-off between neighbouring facets but never merges
    distinct features of a real model.
    """
    square_confusion: float = 1.0e-14
    line_buffer_size: int = 1024              # Bytes pulled per refill of the line buffer
    binary_chunk_facets: int = 80             # Facet records decoded per binary read
    text_progress_step_bytes: int = 1024 * 1024

    def __post_init__(self) -> None:
        if self.square_confusion <= 0.0:
            raise ValueError("reader.square_confusion must be positive")
        if self.line_buffer_size <= 0:
            raise ValueError("reader.line_buffer_size must be positive")
        if self.binary_chunk_facets <= 0:
            raise ValueError("reader.binary_chunk_facets must be positive")
        if self.text_progress_step_bytes <= 0:
            raise ValueError("reader.text_progress_step_bytes must be positive")


@dataclass
class LoggingConfig:
    """
    Where logs go and how chatty they are.

    STLREADER_LOG_DIR and STLREADER_LOG_LEVEL win over YAML because log
    locations differ per machine.
    """
    log_dir: str = "logs"
    level: str = "WARNING"

    def __post_init__(self) -> None:
        env_dir = os.getenv("STLREADER_LOG_DIR")
        if env_dir:
            self.log_dir = env_dir
        env_level = os.getenv("STLREADER_LOG_LEVEL")
        if env_level:
            self.level = env_level
        self.level = self.level.upper()
        self.log_dir = os.path.normpath(os.path.expandvars(self.log_dir))


@dataclass
class ProgressConfig:
    """How often the progress indicator forwards updates to its callback."""
    report_every_seconds: float = 0.5

    def __post_init__(self) -> None:
        env_every = os.getenv("STLREADER_PROGRESS_EVERY_S")
        if env_every:
            self.report_every_seconds = float(env_every)


@dataclass
class Config:
    """
    Top-level configuration object.

    Example:
        config = load_config(".")
        print(config.reader.binary_chunk_facets)   # 80
        print(config.logging.level)                # "WARNING"
    """
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    progress: ProgressConfig = field(default_factory=ProgressConfig)


# -------------------------------------------------------------------
# Helper: YAML dict -> dataclass (with safety net)
# -------------------------------------------------------------------

def _dict_to_dataclass(cls, data: dict):
    """
    Build a dataclass from a dictionary, ignoring unknown keys.

    If a YAML key does NOT match any dataclass field name, print a loud
    warning to stderr and suggest the closest field, so a typo like
    "chunk_facets" vs "binary_chunk_facets" does not silently fall back
    to the default.
    """
    known_fields = {f.name for f in dataclasses.fields(cls)}

    filtered = {}
    for k, v in (data or {}).items():
        if k in known_fields:
            filtered[k] = v
        else:
            suggestion = ""
            for field_name in sorted(known_fields):
                if k in field_name or field_name in k:
                    suggestion = " Did you mean '" + field_name + "'?"
                    break
            print(
                "  [WARN] config/" + cls.__name__ + ": YAML key '"
                + k + "' is not a recognized setting"
                + " -- IGNORED (using default)." + suggestion,
                file=sys.stderr,
            )

    return cls(**filtered)


# -------------------------------------------------------------------
# Main entry point: load_config()
# -------------------------------------------------------------------

def load_config(
    project_dir: str = ".",
    config_filename: str = "default_config.yaml",
) -> Config:
    """
    Load configuration from YAML file, with defaults and env var overrides.

    Parameters
    ----------
    project_dir : str
        Folder that contains the config/ subfolder.

    config_filename : str
        Name of the YAML config file inside the config/ subfolder.

    Returns
    -------
    Config
        Fully resolved configuration object. A missing file means
        "all defaults".
    """
    config_path = Path(project_dir) / "config" / config_filename

    yaml_data: dict = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                yaml_data = raw

    return Config(
        reader=_dict_to_dataclass(ReaderConfig, yaml_data.get("reader", {})),
        logging=_dict_to_dataclass(LoggingConfig, yaml_data.get("logging", {})),
        progress=_dict_to_dataclass(ProgressConfig, yaml_data.get("progress", {})),
    )

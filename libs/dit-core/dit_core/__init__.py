"""Dit Core - data model, digests, filesystem and config utilities."""

from dit_core.config import CONFIG_ENV, DitConfig, load_config
from dit_core.digest import hash_file
from dit_core.errors import (
    ConfigError,
    CopyError,
    DitError,
    EnumerationError,
    HashError,
    RootError,
)
from dit_core.fsutil import ensure_valid_roots, is_hidden, relpath_key
from dit_core.models import (
    ConflictKind,
    ConflictRecord,
    ErrorKind,
    ErrorRecord,
    FileVariant,
    OutputItem,
    ReadGroup,
    Root,
    RootKind,
    RunResult,
    WriteAction,
    WriteDecision,
)

__all__ = [
    "hash_file",
    # config
    "DitConfig",
    "CONFIG_ENV",
    "load_config",
    # errors
    "DitError",
    "RootError",
    "ConfigError",
    "EnumerationError",
    "HashError",
    "CopyError",
    # fsutil
    "ensure_valid_roots",
    "is_hidden",
    "relpath_key",
    # models
    "Root",
    "RootKind",
    "RunResult",
    "FileVariant",
    "ReadGroup",
    "OutputItem",
    "ConflictKind",
    "ConflictRecord",
    "ErrorKind",
    "ErrorRecord",
    "WriteAction",
    "WriteDecision",
]

__version__ = "0.1.0"

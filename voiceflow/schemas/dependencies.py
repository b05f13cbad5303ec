from dataclasses import dataclass
from typing import Dict, Optional

# Required for building whisper.cpp, in display order
REQUIRED_DEPENDENCIES = ("git", "cmake", "compiler")
OPTIONAL_DEPENDENCIES = ("python", "make")

# Human readable names used in "missing" reports
DEPENDENCY_LABELS = {
    "git": "git",
    "cmake": "cmake",
    "compiler": "gcc/clang",
    "python": "python",
    "make": "make",
}


@dataclass(frozen=True)
class DependencyInfo:
    available: bool
    version: Optional[str] = None
    error: Optional[str] = None


# name -> DependencyInfo, built once per detection pass
DependencySet = Dict[str, DependencyInfo]

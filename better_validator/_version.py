"""Version and environment information for better-validator.

Usage:
    from better_validator import __version__, get_version_info

    print(__version__)  # "0.3.0"
    info = get_version_info()

CLI Usage:
    python -m better_validator --version
    python -m better_validator info
"""

from __future__ import annotations

import importlib
import importlib.metadata
import importlib.util
import platform
import sys
from typing import Any, Dict, Optional

# Version components
VERSION_MAJOR = 0
VERSION_MINOR = 3
VERSION_PATCH = 0
VERSION_SUFFIX = ""  # e.g., "alpha", "beta", "rc1"

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}{'-' + VERSION_SUFFIX if VERSION_SUFFIX else ''}"


def get_python_info() -> Dict[str, str]:
    """Return interpreter version, implementation and executable path."""
    return {
        "version": platform.python_version(),
        "implementation": platform.python_implementation(),
        "executable": sys.executable,
    }


def get_platform_info() -> Dict[str, str]:
    return {
        "system": platform.system(),
        "release": platform.release(),
        "machine": platform.machine(),
    }


def _get_package_version(module_name: str) -> Optional[str]:
    """Return `module_name.__version__`, or None when it is not installed."""
    if importlib.util.find_spec(module_name) is None:
        return None
    module = importlib.import_module(module_name)
    version = getattr(module, "__version__", None)
    if version:
        return str(version)
    try:
        return importlib.metadata.version(module_name.replace("_", "-"))
    except importlib.metadata.PackageNotFoundError:
        return None


def get_dependency_versions() -> Dict[str, Optional[str]]:
    return {
        "pydantic": _get_package_version("pydantic"),
        "pydantic_core": _get_package_version("pydantic_core"),
        "typing_extensions": _get_package_version("typing_extensions"),
    }


def get_version_info() -> Dict[str, Any]:
    """Return version, python, platform, and dependency info.

    Example:
        >>> info = get_version_info()
        >>> info["better_validator"]
        '0.3.0'
    """
    return {
        "better_validator": __version__,
        "python": get_python_info(),
        "platform": get_platform_info(),
        "dependencies": get_dependency_versions(),
    }


def format_version_info(info: Optional[Dict[str, Any]] = None) -> str:
    """Format version info as aligned, human-readable lines for bug reports."""
    if info is None:
        info = get_version_info()

    py_info = info["python"]
    py_fields = [
        ("Version", py_info["version"]),
        ("Implementation", py_info["implementation"]),
        ("Executable", py_info["executable"]),
    ]
    plat_info = info["platform"]
    plat_fields = [
        ("System", plat_info["system"]),
        ("Release", plat_info["release"]),
        ("Machine", plat_info["machine"]),
    ]
    dep_items = [
        (pkg, ver if ver else "not installed")
        for pkg, ver in info["dependencies"].items()
    ]

    width = max(len(label) for label, _ in py_fields + plat_fields + dep_items)

    lines = [f"better-validator: {info['better_validator']}", "", "Python:"]
    for label, value in py_fields:
        lines.append(f"  {label:>{width}} : {value}")

    lines.append("")
    lines.append("Platform:")
    for label, value in plat_fields:
        lines.append(f"  {label:>{width}} : {value}")

    lines.append("")
    lines.append("Dependencies:")
    for pkg, ver in dep_items:
        lines.append(f"  {pkg:>{width}} : {ver}")

    return "\n".join(lines)


def print_version_info() -> None:
    print(format_version_info())

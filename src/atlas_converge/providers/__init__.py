# src/atlas_converge/providers/__init__.py
"""
Providers embutidos do Atlas Converge (File, ScriptAction).

Providers de host são externos e registrados por caminho de import.
"""

from .builtin import (  # noqa: F401
    BUILTIN_PROVIDERS,
    FileProvider,
    ScriptActionProvider,
    default_registry,
)

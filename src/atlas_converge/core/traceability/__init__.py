# src/atlas_converge/core/traceability/__init__.py
"""
Pacote de rastreabilidade (traceability) do Atlas Converge — Manifest v1.

API pública exposta:
    - Manifest          → estrutura canônica do Manifest
    - create_manifest   → criação explícita do Manifest
    - add_event         → registro explícito de eventos no Event Log
    - resource_started  → marca início da convergência de um recurso
    - resource_finished → registra o Outcome final de um recurso
    - run_finished      → registra o status agregado da run
    - save_manifest     → persistência do Manifest em JSON
    - load_manifest     → restauração determinística do Manifest

Nenhum evento é emitido implicitamente: o executor chama esta API
explicitamente quando um Manifest é fornecido.
"""

from .manifest import (
    Manifest,
    create_manifest,
    add_event,
    resource_started,
    resource_finished,
    run_finished,
    save_manifest,
    load_manifest,
)

__all__ = [
    "Manifest",
    "create_manifest",
    "add_event",
    "resource_started",
    "resource_finished",
    "run_finished",
    "save_manifest",
    "load_manifest",
]

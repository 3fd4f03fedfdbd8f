# src/atlas_converge/core/resources/__init__.py
"""
# Resources Core — Atlas Converge

Este pacote define os **contratos canônicos** e as **estruturas
fundamentais** de um recurso declarado no Atlas Converge.

## Componentes

- **types**
  - `ResourceInstance`: declaração imutável de estado desejado
  - `OutcomeStatus` / `Outcome`: resultado imutável por recurso
  - `RunStatus`: status agregado da run

- **provider**
  - `Provider` (Protocol): Test/Set obrigatórios
  - `StateReader` (Protocol): Get opcional, usado para diagnóstico de drift

- **context**
  - `RunContext`: contexto imutável (variáveis externas, config, log de eventos)

- **registry**
  - `ResourceRegistry`: tipo de recurso → provider, congelável

## Princípios Fundamentais

- Providers **não conhecem** outros recursos, o executor ou o planner
- Dependências são **explícitas e declarativas**
- Nenhum recurso altera o contexto compartilhado
"""

from .context import RunContext  # noqa: F401
from .provider import Provider, StateReader  # noqa: F401
from .registry import ResourceRegistry, load_provider  # noqa: F401
from .types import (  # noqa: F401
    Outcome,
    OutcomeStatus,
    ResourceInstance,
    RunStatus,
    instances_from_dicts,
)

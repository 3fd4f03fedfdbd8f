# src/atlas_converge/core/resources/context.py
"""
Contexto de execução imutável de uma run de convergência.

Este módulo define o `RunContext`, a estrutura passada a toda chamada de
provider durante a execução de uma run no Atlas Converge.

O RunContext consolida:
    - identidade da execução (run_id, created_at)
    - variáveis externas resolvidas uma única vez antes do planejamento
    - configuração efetiva do engine
    - log estruturado de eventos de execução

Princípios fundamentais:
    - Variáveis e configuração são somente-leitura (nenhum recurso altera
      o contexto compartilhado)
    - Ausência de estado global de processo
    - Logs estruturados sempre incluem `run_id` e `resource`

Limites explícitos:
    - Não executa providers
    - Não resolve variáveis (responsabilidade de `core.variables`)
    - Não persiste eventos automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional


def _freeze(value: Any) -> Any:
    """Cópia recursiva somente-leitura: mappings viram MappingProxyType, listas viram tuplas."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class RunContext:
    """
    Contexto imutável de uma run.

    `variables` e `config` são expostos como MappingProxyType (`config`
    recursivamente, com listas como tuplas); a única
    estrutura que cresce durante a run é o log de eventos (`events`), que
    não participa da semântica de convergência.
    """
    run_id: str
    created_at: datetime
    variables: Mapping[str, str] = field(default_factory=dict)
    config: Mapping[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables or {})))
        object.__setattr__(self, "config", _freeze(dict(self.config or {})))

    def variable(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(name, default)

    def engine_option(self, key: str, default: Any = None) -> Any:
        engine_cfg = self.config.get("engine", {}) or {}
        return engine_cfg.get(key, default)

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, resource: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "resource": resource,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def events_for(self, resource: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("resource") == resource]

# src/atlas_converge/core/resources/types.py
"""
Tipos canônicos de recursos do Atlas Converge.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre declarações, executor, providers e camadas de
rastreabilidade.

Os tipos aqui definidos representam:
    - a instância declarada de um recurso (estado desejado)
    - o resultado final da convergência de um recurso
    - o status agregado de uma run

Componentes principais:
    - ResourceInstance → declaração imutável de um recurso
    - OutcomeStatus    → enum de estados finais (UNCHANGED, CHANGED, FAILED, SKIPPED)
    - Outcome          → resultado imutável por recurso
    - RunStatus        → enum do status agregado (SUCCESS, PARTIAL_FAILURE, FAILED)

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Valores textuais dos enums são canônicos
    - Nenhuma lógica de execução vive neste módulo

Invariantes:
    - ResourceInstance e Outcome nunca são alterados após criados
    - Propriedades de um recurso são expostas como mapping somente-leitura

Limites explícitos:
    - Não executa providers
    - Não planeja execução
    - Não valida dependências (responsabilidade do grafo)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


def _freeze_value(value: Any) -> Any:
    # listas/tuplas/sets declarados viram conjuntos enumerados de strings
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(v) for v in value)
    return value


def _thaw_value(value: Any) -> Any:
    if isinstance(value, frozenset):
        return sorted(value)
    return value


@dataclass(frozen=True)
class ResourceInstance:
    """
    Declaração imutável de um recurso (estado desejado).

    Campos:
        - name: nome único dentro da run
        - type_name: tipo de recurso (resolvido no Resource Registry)
        - properties: propriedades declaradas (somente-leitura)
        - depends_on: nomes dos recursos dos quais este depende, em ordem
          de declaração e sem duplicatas

    Valores de propriedades aceitos: str, int, float, bool, None ou
    conjunto enumerado de strings (frozenset). Coleções declaradas como
    lista são normalizadas para frozenset na construção.

    Invariantes:
        - `name` e `type_name` são strings não vazias
        - `depends_on` é uma tupla sem repetições
        - Nenhuma instância é alterada após criada
    """

    name: str
    type_name: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    depends_on: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("resource name must be a non-empty string")
        if not isinstance(self.type_name, str) or not self.type_name.strip():
            raise ValueError(f"resource '{self.name}' must declare a non-empty type")

        props = {str(k): _freeze_value(v) for k, v in dict(self.properties or {}).items()}
        object.__setattr__(self, "properties", MappingProxyType(props))

        raw_deps = self.depends_on or ()
        if isinstance(raw_deps, str):
            raw_deps = (raw_deps,)
        deps: List[str] = []
        for d in raw_deps:
            if d not in deps:
                deps.append(d)
        object.__setattr__(self, "depends_on", tuple(deps))

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type_name,
            "properties": {k: _thaw_value(v) for k, v in self.properties.items()},
            "depends_on": list(self.depends_on),
        }


class OutcomeStatus(str, Enum):
    """
    Estados finais possíveis da convergência de um recurso.

    Estados definidos:
        - UNCHANGED: Test reportou estado já convergido; nenhum Set executado
        - CHANGED: Set executado e verificado pelo Test posterior
        - FAILED: erro de provider, tipo desconhecido ou verificação pós-apply falhou
        - SKIPPED: não executado (dependência falhou, run interrompida ou timeout)

    Os valores são strings para facilitar serialização em JSON e
    persistência em Manifest.
    """
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def converged(self) -> bool:
        return self in (OutcomeStatus.UNCHANGED, OutcomeStatus.CHANGED)


class RunStatus(str, Enum):
    """Status agregado de uma run."""
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    """
    Resultado imutável da convergência de um recurso.

    Campos:
        - name: nome do recurso
        - type_name: tipo do recurso
        - status: estado final (OutcomeStatus)
        - message: diagnóstico textual opcional
        - error: payload de erro serializável (ConvergeErrorPayload.to_dict())
        - duration_ms: duração da convergência do recurso

    Invariantes:
        - Uma instância nunca é alterada após criada
        - `error` só é preenchido para FAILED/SKIPPED
    """
    name: str
    type_name: str
    status: OutcomeStatus
    message: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type_name,
            "status": self.status.value,
            "message": self.message,
            "error": dict(self.error) if self.error is not None else None,
            "duration_ms": self.duration_ms,
        }


def instances_from_dicts(items: Iterable[Mapping[str, Any]]) -> List[ResourceInstance]:
    """Materializa instâncias a partir de dicts já validados estruturalmente."""
    out: List[ResourceInstance] = []
    for item in items:
        out.append(
            ResourceInstance(
                name=item["name"],
                type_name=item["type"],
                properties=dict(item.get("properties") or {}),
                depends_on=tuple(item.get("depends_on") or ()),
            )
        )
    return out

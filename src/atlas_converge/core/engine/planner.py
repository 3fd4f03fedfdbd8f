# src/atlas_converge/core/engine/planner.py
"""
Topological Scheduler do Atlas Converge.

Este módulo produz o `Plan`: a sequência linear de recursos pronta para
convergência, respeitando integralmente as dependências declaradas.

Decisões arquiteturais:
    - Algoritmo de Kahn iterativo (seleciona repetidamente nós com
      grau de entrada zero)
    - Empates são resolvidos pela ordem de declaração (min-heap pelo
      índice de declaração), sem passe extra de ordenação estável
    - O Plan mantém referência ao grafo: o executor precisa das arestas
      (não apenas da lista achatada) para pular dependentes de falhas

Invariantes:
    - Nenhum recurso aparece antes de suas dependências (transitivas)
    - Todos os recursos aparecem exatamente uma vez
    - A mesma entrada produz sempre o mesmo plano

Limites explícitos:
    - Não executa providers
    - Não decide políticas de falha
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from atlas_converge.core.exceptions import CycleError
from atlas_converge.core.resources.types import ResourceInstance

from .graph import DeclarationGraph


@dataclass(frozen=True)
class Plan:
    """Sequência imutável de recursos em ordem topológica determinística."""

    resources: Tuple[ResourceInstance, ...]
    graph: DeclarationGraph

    def names(self) -> List[str]:
        return [r.name for r in self.resources]

    def __iter__(self) -> Iterator[ResourceInstance]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)


def plan_execution(graph: DeclarationGraph) -> Plan:
    """
    Produz a ordem de execução topológica determinística de um grafo validado.

    Args:
        graph (DeclarationGraph): Grafo de declarações já validado.

    Returns:
        Plan: Plano com recursos em ordem topológica estável.

    Raises:
        CycleError: Se o passe de Kahn não consumir todos os nós (grafo
            construído sem validação).
    """
    incoming: Dict[str, int] = {name: len(graph.dependencies(name)) for name in graph.names()}

    ready: List[Tuple[int, str]] = [
        (graph.declaration_index(name), name) for name, count in incoming.items() if count == 0
    ]
    heapq.heapify(ready)

    order: List[ResourceInstance] = []
    while ready:
        _, name = heapq.heappop(ready)
        order.append(graph.get(name))
        for child in graph.dependents(name):
            incoming[child] -= 1
            if incoming[child] == 0:
                heapq.heappush(ready, (graph.declaration_index(child), child))

    if len(order) != len(graph):
        remaining = [n for n, c in incoming.items() if c > 0]
        raise CycleError(
            message="Cycle detected in resource dependency graph",
            details={"cycle": remaining},
        )

    return Plan(resources=tuple(order), graph=graph)

# src/atlas_converge/core/engine/graph.py
"""
Declaration Graph do Atlas Converge.

Este módulo mantém o conjunto de recursos declarados e suas arestas
`depends_on`, validando a boa formação do grafo antes de qualquer
planejamento ou execução.

O grafo é o dono exclusivo das arestas de dependência: o scheduler o usa
para ordenar recursos e o executor o consulta para calcular o conjunto
de dependentes a pular quando um recurso falha.

Validações (todas `ValidationError`, fatais, antes de qualquer mutação):
    - DuplicateNameError: dois recursos com o mesmo nome
    - UnresolvedDependencyError: `depends_on` referencia recurso inexistente
    - CycleError: o relacionamento de dependência contém um ciclo

Decisões arquiteturais:
    - Ciclos são detectados por DFS iterativa com conjunto "em progresso";
      o caminho fechado do ciclo é reportado para diagnóstico
    - A ordem de declaração é preservada e exposta como índice estável
    - Auto-dependência é um ciclo

Invariantes:
    - Um grafo construído é acíclico e completamente resolvido
    - O grafo é somente-leitura após `build`

Limites explícitos:
    - Não ordena recursos (responsabilidade do planner)
    - Não executa providers
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Sequence, Tuple

from atlas_converge.core.exceptions import (
    CycleError,
    DuplicateNameError,
    UnresolvedDependencyError,
)
from atlas_converge.core.resources.types import ResourceInstance


_WHITE, _GRAY, _BLACK = 0, 1, 2


class DeclarationGraph:
    """Conjunto validado de recursos declarados e suas dependências."""

    def __init__(
        self,
        instances: Sequence[ResourceInstance],
        dependents: Dict[str, Tuple[str, ...]],
    ):
        self._instances: Tuple[ResourceInstance, ...] = tuple(instances)
        self._by_name: Dict[str, ResourceInstance] = {i.name: i for i in self._instances}
        self._index: Dict[str, int] = {i.name: n for n, i in enumerate(self._instances)}
        self._dependents = dependents

    @classmethod
    def build(cls, instances: Iterable[ResourceInstance]) -> "DeclarationGraph":
        """
        Valida e constrói o grafo de declarações.

        Raises:
            DuplicateNameError: Se dois recursos compartilham o mesmo nome.
            UnresolvedDependencyError: Se uma dependência declarada não existe.
            CycleError: Se houver ciclo no grafo de dependências.
        """
        items = list(instances)

        by_name: Dict[str, ResourceInstance] = {}
        for inst in items:
            if inst.name in by_name:
                raise DuplicateNameError(
                    message=f"Duplicate resource name: {inst.name}",
                    details={"name": inst.name},
                    hint="Nomes de recursos devem ser únicos dentro de uma run.",
                )
            by_name[inst.name] = inst

        for inst in items:
            for dep in inst.depends_on:
                if dep not in by_name:
                    raise UnresolvedDependencyError(
                        message=f"Resource '{inst.name}' depends on unknown resource '{dep}'",
                        details={"resource": inst.name, "dependency": dep},
                        hint="Declare o recurso dependido ou remova-o de depends_on.",
                    )

        cycle = _find_cycle(items, by_name)
        if cycle:
            raise CycleError(
                message="Dependency cycle detected: " + " -> ".join(cycle),
                details={"cycle": cycle},
                hint="Remova uma das arestas depends_on que fecham o ciclo.",
            )

        dependents: Dict[str, List[str]] = {inst.name: [] for inst in items}
        for inst in items:
            for dep in inst.depends_on:
                dependents[dep].append(inst.name)

        return cls(items, {k: tuple(v) for k, v in dependents.items()})

    # -----------------------------
    # Consultas
    # -----------------------------
    def names(self) -> List[str]:
        return [i.name for i in self._instances]

    def instances(self) -> Tuple[ResourceInstance, ...]:
        return self._instances

    def get(self, name: str) -> ResourceInstance:
        return self._by_name[name]

    def declaration_index(self, name: str) -> int:
        return self._index[name]

    def dependencies(self, name: str) -> Tuple[str, ...]:
        return self._by_name[name].depends_on

    def dependents(self, name: str) -> Tuple[str, ...]:
        return self._dependents[name]

    def descendants(self, name: str) -> List[str]:
        """Dependentes diretos e transitivos de `name` (BFS, custo proporcional ao afetado)."""
        seen = {name}
        out: List[str] = []
        queue = deque(self._dependents[name])
        while queue:
            child = queue.popleft()
            if child in seen:
                continue
            seen.add(child)
            out.append(child)
            queue.extend(self._dependents[child])
        return out

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._instances)

    def __repr__(self) -> str:
        return f"DeclarationGraph(resources={self.names()!r})"


def _find_cycle(
    items: Sequence[ResourceInstance],
    by_name: Dict[str, ResourceInstance],
) -> List[str]:
    # DFS iterativa: GRAY = em progresso (na pilha atual), BLACK = concluído
    color: Dict[str, int] = {i.name: _WHITE for i in items}

    for root in items:
        if color[root.name] != _WHITE:
            continue

        path: List[str] = [root.name]
        stack: List[Tuple[str, int]] = [(root.name, 0)]
        color[root.name] = _GRAY

        while stack:
            node, pos = stack[-1]
            deps = by_name[node].depends_on
            if pos < len(deps):
                stack[-1] = (node, pos + 1)
                nxt = deps[pos]
                if color[nxt] == _GRAY:
                    start = path.index(nxt)
                    return path[start:] + [nxt]
                if color[nxt] == _WHITE:
                    color[nxt] = _GRAY
                    path.append(nxt)
                    stack.append((nxt, 0))
            else:
                color[node] = _BLACK
                path.pop()
                stack.pop()

    return []

# src/atlas_converge/core/engine/engine.py
"""
Engine do Atlas Converge (fachada de uma run completa).

Encadeia, nesta ordem e sem atalhos:

    1. resolução única das variáveis externas → RunContext imutável
       (MissingVariableError é fatal: nenhum recurso é tocado)
    2. substituição de placeholders `${nome}` nas propriedades
    3. validação do Declaration Graph (nomes, dependências, ciclos)
    4. planejamento topológico determinístico (Plan)
    5. convergência sequencial (ConvergenceExecutor) → RunReport

Erros das etapas 1–4 são fatais e propagados ao chamador antes de qualquer
mutação no host. Falhas de recurso na etapa 5 nunca são propagadas: ficam
registradas no RunReport.

O Manifest é opcional; quando habilitado, é criado com os hashes da
configuração efetiva e das declarações e preenchido pelo executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

import time

from atlas_converge import __version__
from atlas_converge.core.config.hashing import compute_config_hash
from atlas_converge.core.config.loader import DEFAULT_CONFIG, validate_engine_config
from atlas_converge.core.config.merge import deep_merge
from atlas_converge.core.declarations.schema import DeclarationSet
from atlas_converge.core.report import RunReport
from atlas_converge.core.resources.context import RunContext
from atlas_converge.core.resources.registry import ResourceRegistry
from atlas_converge.core.resources.types import ResourceInstance
from atlas_converge.core.traceability.manifest import Manifest, create_manifest
from atlas_converge.core.variables import (
    MappingVariableSource,
    VariableSource,
    bind_variables,
    resolve_context,
)

from .executor import ConvergenceExecutor
from .graph import DeclarationGraph
from .planner import Plan, plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma run (report + artefatos de rastreabilidade)."""

    report: RunReport
    plan: Plan
    ctx: RunContext
    manifest: Optional[Manifest] = None


class Engine:
    """Engine canônico do Atlas Converge (variáveis + grafo + planner + executor)."""

    def __init__(
        self,
        *,
        declarations: Union[DeclarationSet, Sequence[ResourceInstance]],
        registry: ResourceRegistry,
        source: Optional[VariableSource] = None,
        config: Optional[Mapping[str, Any]] = None,
        run_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        trace: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not isinstance(declarations, DeclarationSet):
            declarations = DeclarationSet(variables=(), resources=tuple(declarations))

        self.declarations = declarations
        self.registry = registry
        self.source: VariableSource = source if source is not None else MappingVariableSource({})
        self.config = validate_engine_config(deep_merge(DEFAULT_CONFIG, dict(config or {})))
        self.run_id = run_id
        self.created_at = created_at
        self.trace = trace
        self._clock = clock

    def prepare(self) -> Tuple[RunContext, Plan]:
        """Resolve variáveis, valida o grafo e produz o Plan (sem executar nada)."""
        ctx = resolve_context(
            self.declarations.variables,
            self.source,
            run_id=self.run_id,
            config=self.config,
            created_at=self.created_at,
        )
        bound = bind_variables(self.declarations.resources, ctx.variables)
        graph = DeclarationGraph.build(bound)
        return ctx, plan_execution(graph)

    def _new_manifest(self, ctx: RunContext) -> Manifest:
        return create_manifest(
            run_id=ctx.run_id,
            started_at=ctx.created_at,
            engine_version=__version__,
            config_hash=compute_config_hash(self.config),
            declarations_hash=self.declarations.compute_hash(),
        )

    def run(self) -> RunResult:
        ctx, plan = self.prepare()
        manifest = self._new_manifest(ctx) if self.trace else None

        executor = ConvergenceExecutor(
            registry=self.registry,
            ctx=ctx,
            manifest=manifest,
            clock=self._clock,
        )
        report = executor.run(plan)
        return RunResult(report=report, plan=plan, ctx=ctx, manifest=manifest)

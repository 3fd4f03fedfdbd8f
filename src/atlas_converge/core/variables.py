# src/atlas_converge/core/variables.py
"""
Resolução de variáveis externas (automation variables).

Variáveis externas (ex.: porta RDP, origem de pacotes) são declaradas
junto aos recursos e resolvidas **uma única vez**, antes do planejamento,
a partir de uma fonte externa plugável. O resultado alimenta um
`RunContext` imutável compartilhado por todas as chamadas de provider.

Componentes:
    - VariableSource (Protocol): `resolve_variable(name) -> str`
    - MappingVariableSource: valores em memória
    - EnvironmentVariableSource: `os.environ`, com prefixo opcional
    - ChainedVariableSource: primeira fonte que resolve vence
    - resolve_context(): resolve as variáveis declaradas e cria o RunContext
    - bind_variables(): substitui placeholders `${nome}` nas propriedades

Política de erro:
    - Variável obrigatória não resolvida → MissingVariableError (fatal, a run
      nunca começa)
    - Variável opcional não resolvida → default declarado, ou omitida
"""

from __future__ import annotations

import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from atlas_converge.core.exceptions import MissingVariableError
from atlas_converge.core.resources.context import RunContext
from atlas_converge.core.resources.types import ResourceInstance


_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_.-]*)\}")


class VariableNotFound(LookupError):
    """A fonte consultada não conhece a variável."""


class VariableSource(Protocol):
    def resolve_variable(self, name: str) -> str:
        ...


@dataclass(frozen=True)
class VariableDeclaration:
    """Variável externa declarada no documento de declarações."""
    name: str
    required: bool = True
    default: Optional[str] = None


class MappingVariableSource:
    def __init__(self, values: Mapping[str, Any]):
        self._values = dict(values)

    def resolve_variable(self, name: str) -> str:
        if name not in self._values:
            raise VariableNotFound(name)
        return str(self._values[name])


class EnvironmentVariableSource:
    """Lê variáveis de `os.environ` (ex.: prefix="CONVERGE_" → CONVERGE_portNo)."""

    def __init__(self, prefix: str = "", environ: Optional[Mapping[str, str]] = None):
        self.prefix = prefix
        self._environ = environ

    def resolve_variable(self, name: str) -> str:
        environ = self._environ if self._environ is not None else os.environ
        key = f"{self.prefix}{name}"
        if key not in environ:
            raise VariableNotFound(key)
        return environ[key]


class ChainedVariableSource:
    def __init__(self, *sources: VariableSource):
        self.sources: List[VariableSource] = list(sources)

    def resolve_variable(self, name: str) -> str:
        for source in self.sources:
            try:
                return source.resolve_variable(name)
            except VariableNotFound:
                continue
        raise VariableNotFound(name)


def resolve_variables(
    declarations: Sequence[VariableDeclaration],
    source: VariableSource,
) -> Dict[str, str]:
    """
    Resolve cada variável declarada exatamente uma vez.

    Qualquer exceção levantada pela fonte para uma variável obrigatória é
    convertida em MissingVariableError; para variáveis opcionais, o default
    declarado é usado (ou a variável é omitida).
    """
    resolved: Dict[str, str] = {}
    for decl in declarations:
        try:
            resolved[decl.name] = str(source.resolve_variable(decl.name))
            continue
        except Exception as e:
            failure = e

        if decl.default is not None:
            resolved[decl.name] = str(decl.default)
            continue

        if decl.required:
            raise MissingVariableError(
                message=f"required variable could not be resolved: {decl.name}",
                details={
                    "variable": decl.name,
                    "exc_type": failure.__class__.__name__,
                    "exc_message": str(failure) or None,
                },
                hint="Defina a variável na fonte externa (ex.: --var nome=valor ou ambiente) antes de executar.",
            ) from failure

    return resolved


def resolve_context(
    variables: Sequence[VariableDeclaration],
    source: VariableSource,
    *,
    run_id: Optional[str] = None,
    config: Optional[Mapping[str, Any]] = None,
    created_at: Optional[datetime] = None,
) -> RunContext:
    """Resolve as variáveis declaradas e cria o RunContext imutável da run."""
    return RunContext(
        run_id=run_id or uuid.uuid4().hex,
        created_at=created_at or datetime.now(timezone.utc),
        variables=resolve_variables(variables, source),
        config=dict(config or {}),
    )


def _substitute(value: Any, variables: Mapping[str, str], resource: str) -> Any:
    if not isinstance(value, str):
        return value

    def repl(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in variables:
            raise MissingVariableError(
                message=f"resource '{resource}' references unresolved variable: {name}",
                details={"variable": name, "resource": resource},
                hint="Declare a variável na seção `variables` do documento.",
            )
        return variables[name]

    return _PLACEHOLDER_RE.sub(repl, value)


def bind_variables(
    instances: Iterable[ResourceInstance],
    variables: Mapping[str, str],
) -> List[ResourceInstance]:
    """Devolve novas instâncias com placeholders `${nome}` substituídos."""
    bound: List[ResourceInstance] = []
    for inst in instances:
        props: Dict[str, Any] = {}
        for key, value in inst.properties.items():
            if isinstance(value, frozenset):
                props[key] = frozenset(_substitute(v, variables, inst.name) for v in value)
            else:
                props[key] = _substitute(value, variables, inst.name)
        bound.append(
            ResourceInstance(
                name=inst.name,
                type_name=inst.type_name,
                properties=props,
                depends_on=inst.depends_on,
            )
        )
    return bound

"""
Atlas Converge — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Converge.
Erros registrados em Outcomes são artefatos de domínio e fazem parte do
contrato operacional do sistema, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma decisão implícita é permitida.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConvergeErrorPayload:
    """
    Payload canônico de erro do Atlas Converge.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Validação
VALIDATION_DUPLICATE_NAME = "VALIDATION_DUPLICATE_NAME"
VALIDATION_UNRESOLVED_DEPENDENCY = "VALIDATION_UNRESOLVED_DEPENDENCY"
VALIDATION_CYCLE = "VALIDATION_CYCLE"
VALIDATION_DECLARATION_FORMAT = "VALIDATION_DECLARATION_FORMAT"

# Configuração
CONFIGURATION_MISSING_VARIABLE = "CONFIGURATION_MISSING_VARIABLE"

# Registry
REGISTRY_UNKNOWN_TYPE = "REGISTRY_UNKNOWN_TYPE"

# Provider
PROVIDER_EXECUTION_ERROR = "PROVIDER_EXECUTION_ERROR"
PROVIDER_VERIFICATION_FAILED = "PROVIDER_VERIFICATION_FAILED"

# Executor
EXECUTOR_BLOCKED_BY_DEPENDENCY = "EXECUTOR_BLOCKED_BY_DEPENDENCY"
EXECUTOR_HALTED = "EXECUTOR_HALTED"
EXECUTOR_TIMEOUT = "EXECUTOR_TIMEOUT"

VERIFICATION_FAILED_MESSAGE = "post-apply verification failed"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def unknown_type(
    *,
    resource: str,
    type_name: str,
    registered: List[str],
    hint: str = "Registre um provider para o tipo declarado ou corrija o campo `type` do recurso.",
) -> ConvergeErrorPayload:
    return ConvergeErrorPayload(
        type=REGISTRY_UNKNOWN_TYPE,
        message=f"no provider registered for type: {type_name}",
        details={
            "resource": resource,
            "type_name": type_name,
            "registered": registered,
        },
        hint=hint,
    )


def verification_failed(
    *,
    resource: str,
    type_name: str,
    hint: str = "O provider aplicou a mudança sem erro, mas o Test posterior ainda reporta drift. Verifique o provider.",
) -> ConvergeErrorPayload:
    return ConvergeErrorPayload(
        type=PROVIDER_VERIFICATION_FAILED,
        message=VERIFICATION_FAILED_MESSAGE,
        details={
            "resource": resource,
            "type_name": type_name,
        },
        hint=hint,
    )


def provider_execution_error(
    *,
    resource: str,
    phase: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o provider e o estado do host. Nenhum retry é aplicado automaticamente.",
) -> ConvergeErrorPayload:
    return ConvergeErrorPayload(
        type=PROVIDER_EXECUTION_ERROR,
        message=exc_message or exc_type or "provider failed",
        details={
            "resource": resource,
            "phase": phase,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def blocked_by_dependency(*, resource: str, failed_dependency: str) -> ConvergeErrorPayload:
    return ConvergeErrorPayload(
        type=EXECUTOR_BLOCKED_BY_DEPENDENCY,
        message=f"blocked by failed dependency: {failed_dependency}",
        details={
            "resource": resource,
            "failed_dependency": failed_dependency,
        },
        hint="Corrija a falha do recurso dependido e reexecute a run.",
    )


_FATAL_CODES = (
    ("DuplicateNameError", VALIDATION_DUPLICATE_NAME),
    ("UnresolvedDependencyError", VALIDATION_UNRESOLVED_DEPENDENCY),
    ("CycleError", VALIDATION_CYCLE),
    ("DeclarationFormatError", VALIDATION_DECLARATION_FORMAT),
    ("UnsupportedDeclarationFormatError", VALIDATION_DECLARATION_FORMAT),
    ("MissingVariableError", CONFIGURATION_MISSING_VARIABLE),
)


def fatal_error(exc: Exception) -> ConvergeErrorPayload:
    """Converte um erro fatal pré-execução no diagnóstico único da run."""
    code = exc.__class__.__name__
    for cls_name, mapped in _FATAL_CODES:
        if exc.__class__.__name__ == cls_name:
            code = mapped
            break

    return ConvergeErrorPayload(
        type=code,
        message=str(exc) or exc.__class__.__name__,
        details=dict(getattr(exc, "details", {}) or {}),
        hint=getattr(exc, "hint", None),
    )

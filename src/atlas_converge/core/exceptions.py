"""
Atlas Converge — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Atlas Converge.

Objetivo:
- Permitir que grafo, registry, executor e providers levantem exceções
  semânticas tipadas
- Facilitar o mapeamento determinístico para ConvergeErrorPayload
- Separar erros fatais pré-execução (validação/configuração) de erros
  contidos a um único recurso (registry/provider)

Taxonomia:
- ValidationError     → declarações malformadas (abortam a run, nada é tocado)
- ConfigurationError  → variáveis externas obrigatórias ausentes (abortam a run)
- RegistryError       → tipos duplicados/desconhecidos (contidos ao recurso)
- ProviderError       → falhas de Test/Set ou verificação pós-apply (contidos ao recurso)

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Mensagem deve ser curta e humana.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, eq=False)
class ConvergeException(Exception):
    """Base class para exceções internas do Atlas Converge.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Validação (pré-execução, fatal)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ValidationError(ConvergeException):
    """Conjunto de declarações estruturalmente inválido."""


@dataclass(frozen=True, eq=False)
class DuplicateNameError(ValidationError):
    """Dois recursos declarados compartilham o mesmo nome."""


@dataclass(frozen=True, eq=False)
class UnresolvedDependencyError(ValidationError):
    """Uma entrada de `depends_on` referencia um recurso inexistente."""


@dataclass(frozen=True, eq=False)
class CycleError(ValidationError):
    """
    O grafo de dependências contém um ciclo.

    `details["cycle"]` carrega o caminho fechado do ciclo na ordem em que
    foi percorrido (ex.: ["a", "b", "a"]).
    """

    @property
    def cycle(self) -> List[str]:
        return list(self.details.get("cycle", []) or [])


@dataclass(frozen=True, eq=False)
class DeclarationFormatError(ValidationError):
    """Documento de declarações não respeita a estrutura abstrata esperada."""


@dataclass(frozen=True, eq=False)
class UnsupportedDeclarationFormatError(ValidationError):
    """Extensão de arquivo de declarações não suportada (v1: YAML/JSON)."""


# ---------------------------------------------------------------------------
# Configuração (pré-execução, fatal)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ConfigurationError(ConvergeException):
    """Configuração externa necessária para a run está ausente ou inválida."""


@dataclass(frozen=True, eq=False)
class MissingVariableError(ConfigurationError):
    """Variável externa obrigatória não pôde ser resolvida."""


# ---------------------------------------------------------------------------
# Registry (contido ao recurso)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class RegistryError(ConvergeException):
    """Erro base do Resource Registry."""


@dataclass(frozen=True, eq=False)
class DuplicateTypeError(RegistryError):
    """Tipo de recurso já registrado."""


@dataclass(frozen=True, eq=False)
class UnknownTypeError(RegistryError):
    """Nenhum provider registrado para o tipo declarado."""


@dataclass(frozen=True, eq=False)
class RegistryFrozenError(RegistryError):
    """Tentativa de registro após o snapshot somente-leitura."""


# ---------------------------------------------------------------------------
# Provider (contido ao recurso)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ProviderError(ConvergeException):
    """Falha reportada por um provider durante Test/Set/Get."""


@dataclass(frozen=True, eq=False)
class VerificationFailedError(ProviderError):
    """Set concluiu sem erro, mas o Test posterior ainda reporta drift."""


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ReportClosedError(ConvergeException):
    """RunReport já foi concluído; nenhum outcome pode ser adicionado."""


@dataclass(frozen=True, eq=False)
class DuplicateOutcomeError(ConvergeException):
    """Um segundo Outcome foi registrado para o mesmo recurso."""

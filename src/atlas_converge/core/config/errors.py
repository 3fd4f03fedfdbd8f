# src/atlas_converge/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas Converge.

As exceções aqui definidas representam violações estruturais explícitas
de arquivos de configuração do engine, e não erros de convergência.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Erros de configuração são fatais e ocorrem antes da run
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do engine.

    Limites explícitos:
        - Não representa variável externa ausente (ver `MissingVariableError`)
        - Não representa falha de provider
    """


class DefaultsNotFoundError(ConfigError):
    """Arquivo de configuração base (defaults) não encontrado no caminho informado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"fail_fast": false}}
        - override: {"engine": "strict"}
    """


class InvalidEngineOptionError(ConfigError):
    """Opção da seção `engine` com tipo ou valor inválido."""

# src/atlas_converge/core/resources/provider.py
"""
Contrato canônico de Provider do Atlas Converge.

Este módulo define o protocolo formal que qualquer provider deve
satisfazer para ser registrado no Resource Registry e consultado pelo
Convergence Executor.

Um provider é a implementação plugável que sabe inspecionar (Test/Get)
e alterar (Set) o estado real de um único tipo de recurso (ex.: valor
de registro, regra de firewall, instalação de pacote).

Princípios fundamentais:
    - Providers não conhecem o executor nem o planner
    - Providers enxergam apenas as propriedades do próprio recurso e o
      RunContext imutável com variáveis externas resolvidas
    - Erros são sinalizados levantando exceções
    - Conformidade é garantida por duck typing (@runtime_checkable)

Limites explícitos:
    - Não define ordem de execução
    - Não decide políticas de falha (cascata, halt, timeout)
    - Não registra eventos no Manifest diretamente
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from .context import RunContext
from .types import ResourceInstance


@runtime_checkable
class Provider(Protocol):
    """
    Contrato mínimo de um provider.

    Métodos obrigatórios:
        - test(instance, ctx) -> bool: True quando o estado atual já
          corresponde ao declarado (sem drift)
        - set(instance, ctx) -> None: aplica o estado declarado; tratado
          como atômico pelo executor

    Método opcional (não faz parte do protocolo verificado):
        - get(instance, ctx) -> Mapping: estado atual para diagnóstico de drift

    Um provider pode reportar drift sempre (Test constante em False), por
    exemplo para ações sem estado inspecionável; o executor não trata
    esse caso de forma especial.
    """

    def test(self, instance: ResourceInstance, ctx: RunContext) -> bool:
        ...

    def set(self, instance: ResourceInstance, ctx: RunContext) -> None:
        ...


@runtime_checkable
class StateReader(Protocol):
    """Capacidade opcional de leitura do estado atual (Get)."""

    def get(self, instance: ResourceInstance, ctx: RunContext) -> Mapping[str, Any]:
        ...

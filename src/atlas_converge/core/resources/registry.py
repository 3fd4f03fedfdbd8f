# src/atlas_converge/core/resources/registry.py
"""
Resource Registry do Atlas Converge.

Este módulo define o `ResourceRegistry`, responsável por mapear o nome de
um tipo de recurso para exatamente uma implementação de provider.

O registry é populado na inicialização e congelado (snapshot
somente-leitura) antes que a primeira convergência comece; a partir
desse ponto, nenhum registro adicional é aceito.

Responsabilidades do módulo:
    - Validar unicidade de nomes de tipo
    - Validar conformidade estrutural dos providers (Provider Protocol)
    - Preservar a ordem de registro para inspeção e relatórios
    - Resolver providers por nome de tipo
    - Carregar providers por caminho de import ("pacote.modulo:Atributo")

Invariantes:
    - Cada tipo registrado possui exatamente um provider
    - Um tipo registrado nunca é substituído
    - Um registry congelado nunca muda

Limites explícitos:
    - Não executa providers
    - Não conhece declarações, grafo ou plano
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any, Dict, List

from atlas_converge.core.exceptions import (
    DuplicateTypeError,
    RegistryFrozenError,
    UnknownTypeError,
)

from .provider import Provider


@dataclass
class ResourceRegistry:
    """
    Registro canônico de providers por tipo de recurso.

    Decisões arquiteturais:
        - A duplicidade de tipo é tratada como erro fatal de configuração
        - A ordem de inserção é preservada separadamente
        - `freeze()` devolve um snapshot independente e somente-leitura
    """

    _providers: Dict[str, Provider] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)
    _frozen: bool = field(default=False, init=False)

    def register(self, type_name: str, provider: Provider) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                message=f"registry is frozen; cannot register type: {type_name}",
                details={"type_name": type_name},
            )

        if not isinstance(type_name, str) or not type_name.strip():
            raise ValueError("type name must be a non-empty string")

        if isinstance(provider, type):
            raise TypeError(
                f"provider for '{type_name}' must be an instance, got class {provider.__name__}"
            )
        if not isinstance(provider, Provider):
            raise TypeError(
                f"provider for '{type_name}' must implement test(instance, ctx) and set(instance, ctx)"
            )

        if type_name in self._providers:
            raise DuplicateTypeError(
                message=f"Duplicate resource type: {type_name}",
                details={"type_name": type_name},
                hint="Cada tipo de recurso deve ser registrado uma única vez.",
            )

        self._providers[type_name] = provider
        self._order.append(type_name)

    def register_from_path(self, type_name: str, path: str) -> None:
        """Registra um provider a partir de "pacote.modulo:Atributo".

        Classes são instanciadas sem argumentos; instâncias são usadas como estão.
        """
        provider = load_provider(path)
        self.register(type_name, provider)

    def resolve(self, type_name: str) -> Provider:
        if type_name not in self._providers:
            raise UnknownTypeError(
                message=f"no provider registered for type: {type_name}",
                details={"type_name": type_name, "registered": list(self._order)},
                hint="Registre um provider para o tipo declarado ou corrija o campo `type` do recurso.",
            )
        return self._providers[type_name]

    def types(self) -> List[str]:
        return list(self._order)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "ResourceRegistry":
        if self._frozen:
            return self
        snapshot = ResourceRegistry()
        snapshot._providers = dict(self._providers)
        snapshot._order = list(self._order)
        snapshot._frozen = True
        return snapshot

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._providers

    def __len__(self) -> int:
        return len(self._providers)


def load_provider(path: str) -> Any:
    if not isinstance(path, str) or ":" not in path:
        raise ValueError(f"provider path must look like 'package.module:Attribute', got: {path!r}")

    module_name, _, attr = path.partition(":")
    module = importlib.import_module(module_name)

    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part)

    if isinstance(target, type):
        target = target()
    return target

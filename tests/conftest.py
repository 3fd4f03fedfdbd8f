# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Converge.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração mínima e determinística do engine
- RunContext controlado (run_id e created_at fixos)
- providers fake, em memória, com registro de chamadas
- relógio manual para testes de timeout

O objetivo destas fixtures é permitir testes do core (grafo, planner,
executor, report e traceability) sem depender de:
- estado real do host (registro, firewall, pacotes)
- variáveis de ambiente
- relógio de parede

Decisões arquiteturais:
    - Providers fake utilizam duck typing em vez de herança
    - O estado "do host" é um conjunto de nomes já conformes
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa uma run real
    - Nenhuma fixture realiza I/O
    - Todas as fixtures são isoladas entre testes

Este módulo existe como infraestrutura de teste e não
como validação funcional do engine.
"""

from datetime import datetime, timezone

import pytest


FIXED_CREATED_AT = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def engine_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao `config.defaults.yaml` de um projeto real.

    Fornecido como string para que cada teste decida onde gravá-lo.
    """
    return """\
engine:
  fail_fast: false
  timeout_seconds: 600
  capture_drift: true
"""


@pytest.fixture
def engine_local_yaml() -> str:
    """Overrides locais: apenas o que difere dos defaults."""
    return """\
engine:
  fail_fast: true
  timeout_seconds: 30.5
"""


@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima e válida do engine, já resolvida.

    Invariantes:
        - `fail_fast` desabilitado (ramos independentes continuam)
        - sem timeout
        - captura de drift habilitada
    """
    return {
        "engine": {"fail_fast": False, "timeout_seconds": None, "capture_drift": True},
    }


# =====================================================
# RunContext fixtures
# =====================================================

@pytest.fixture
def make_ctx(dummy_config):
    """
    Factory de RunContext determinístico.

    Permite sobrescrever `config` e `variables` por teste, mantendo
    `run_id` e `created_at` fixos.
    """
    from atlas_converge.core.resources.context import RunContext

    def _make(*, config=None, variables=None, run_id="run-test-001"):
        return RunContext(
            run_id=run_id,
            created_at=FIXED_CREATED_AT,
            variables=dict(variables or {}),
            config=config if config is not None else dummy_config,
        )

    return _make


@pytest.fixture
def dummy_ctx(make_ctx):
    """RunContext padrão dos testes (config mínima, sem variáveis)."""
    return make_ctx()


# =====================================================
# Provider fixtures
# =====================================================

@pytest.fixture
def FakeProvider():
    """
    Fixture factory que fornece um provider fake, duck-typed, em memória.

    O "host" é modelado como o conjunto `compliant` de nomes de recursos
    já conformes:
        - test(): True se o recurso está em `compliant`
        - set(): adiciona o recurso a `compliant`

    Comportamentos configuráveis (por nome de recurso):
        - fail_set: `set` levanta RuntimeError
        - fail_test: `test` levanta RuntimeError
        - never_converges: `set` não tem efeito (post-check reporta drift)
        - on_set: callback chamado em todo `set` (ex.: avançar relógio)

    Todas as chamadas são registradas em `calls` como (fase, nome).

    Returns:
        type: Classe _FakeProvider que pode ser instanciada pelos testes.
    """

    class _FakeProvider:
        def __init__(
            self,
            compliant=(),
            *,
            fail_set=(),
            fail_test=(),
            never_converges=(),
            on_set=None,
            set_error=None,
        ):
            self.compliant = set(compliant)
            self.fail_set = set(fail_set)
            self.fail_test = set(fail_test)
            self.never_converges = set(never_converges)
            self.on_set = on_set
            self.set_error = set_error
            self.calls = []

        def test(self, instance, ctx):
            self.calls.append(("test", instance.name))
            if instance.name in self.fail_test:
                raise RuntimeError(f"test failed for {instance.name}")
            return instance.name in self.compliant

        def set(self, instance, ctx):
            self.calls.append(("set", instance.name))
            if self.on_set is not None:
                self.on_set(instance)
            if instance.name in self.fail_set:
                if self.set_error is not None:
                    raise self.set_error
                raise RuntimeError(f"set failed for {instance.name}")
            if instance.name not in self.never_converges:
                self.compliant.add(instance.name)

        def names(self, phase):
            return [name for p, name in self.calls if p == phase]

    return _FakeProvider


@pytest.fixture
def FakeStateProvider(FakeProvider):
    """Variante do provider fake que também implementa `get` (diagnóstico de drift)."""

    class _FakeStateProvider(FakeProvider):
        def __init__(self, *args, fail_get=False, **kwargs):
            super().__init__(*args, **kwargs)
            self.fail_get = fail_get

        def get(self, instance, ctx):
            self.calls.append(("get", instance.name))
            if self.fail_get:
                raise OSError("cannot read current state")
            return {"name": instance.name, "compliant": instance.name in self.compliant}

    return _FakeStateProvider


@pytest.fixture
def make_registry():
    """Factory de ResourceRegistry a partir de um dict tipo → provider."""
    from atlas_converge.core.resources.registry import ResourceRegistry

    def _make(providers):
        registry = ResourceRegistry()
        for type_name, provider in providers.items():
            registry.register(type_name, provider)
        return registry

    return _make


@pytest.fixture
def make_resource():
    """Factory curta de ResourceInstance: make_resource("R1", "Fake", ["R0"], Key="K")."""
    from atlas_converge.core.resources.types import ResourceInstance

    def _make(name, type_name="Fake", depends_on=(), **properties):
        return ResourceInstance(
            name=name,
            type_name=type_name,
            properties=properties,
            depends_on=tuple(depends_on),
        )

    return _make


class ManualClock:
    """Relógio monotônico controlado manualmente (segundos)."""

    def __init__(self, start: float = 0.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()

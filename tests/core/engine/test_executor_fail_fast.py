# tests/core/engine/test_executor_fail_fast.py
"""
Testes da política fail-fast do Convergence Executor.

Por padrão (`engine.fail_fast=false`), uma falha só afeta os dependentes
do recurso que falhou. Com `engine.fail_fast=true`, todos os recursos
restantes do plano são registrados como SKIPPED após a primeira falha.

Os testes asseguram que:
- a política é controlada exclusivamente por configuração
- recursos já executados mantêm seus Outcomes
- nenhum provider é chamado após a falha
- todo recurso ainda recebe exatamente um Outcome

Invariantes:
    - A primeira falha encerra a convergência de recursos restantes
    - A mensagem de skip nomeia o recurso que interrompeu a run
"""

import pytest

try:
    from atlas_converge.core.engine.executor import run
    from atlas_converge.core.engine.graph import DeclarationGraph
    from atlas_converge.core.engine.planner import plan_execution
    from atlas_converge.core.errors import EXECUTOR_HALTED
    from atlas_converge.core.resources.types import OutcomeStatus, RunStatus
except Exception as e:
    run = None
    DeclarationGraph = None
    plan_execution = None
    OutcomeStatus = None
    RunStatus = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing executor. Implement:
- src/atlas_converge/core/engine/executor.py (run)
Import error: {_IMPORT_ERR}
""")


def _resources(make_resource):
    return [
        make_resource("first"),
        make_resource("broken"),
        make_resource("independent"),
        make_resource("dependent", depends_on=["broken"]),
    ]


def test_fail_fast_skips_every_remaining_resource(FakeProvider, make_registry, make_resource, make_ctx):
    """
    Verifica que, com fail_fast habilitado, a run para após a primeira falha.

    Decisões arquiteturais:
        - `first` já convergiu e mantém CHANGED
        - `independent` não depende de `broken`, mas é pulado mesmo assim
        - `dependent` é pulado pela mesma política (não pela cascata)
    """
    _require_imports()

    ctx = make_ctx(config={"engine": {"fail_fast": True}})
    provider = FakeProvider(fail_set={"broken"})
    plan = plan_execution(DeclarationGraph.build(_resources(make_resource)))
    report = run(plan, make_registry({"Fake": provider}), ctx)

    assert report.get("first").status == OutcomeStatus.CHANGED
    assert report.get("broken").status == OutcomeStatus.FAILED
    for name in ("independent", "dependent"):
        outcome = report.get(name)
        assert outcome.status == OutcomeStatus.SKIPPED
        assert outcome.message == "run halted after failure: broken"
        assert outcome.error["type"] == EXECUTOR_HALTED

    assert {name for _, name in provider.calls} == {"first", "broken"}
    assert len(report) == 4
    assert report.status == RunStatus.PARTIAL_FAILURE


def test_without_fail_fast_independent_branches_continue(
    FakeProvider, make_registry, make_resource, dummy_ctx
):
    """Com a configuração padrão, apenas os dependentes da falha são pulados."""
    _require_imports()

    provider = FakeProvider(fail_set={"broken"})
    plan = plan_execution(DeclarationGraph.build(_resources(make_resource)))
    report = run(plan, make_registry({"Fake": provider}), dummy_ctx)

    assert report.get("independent").status == OutcomeStatus.CHANGED
    assert report.get("dependent").message == "blocked by failed dependency: broken"

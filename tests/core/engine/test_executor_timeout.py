# tests/core/engine/test_executor_timeout.py
"""
Testes do timeout de run (`engine.timeout_seconds`).

O timeout é verificado apenas nas fronteiras entre recursos: um Set em
andamento nunca é interrompido. Quando o limite é excedido, todos os
recursos restantes são registrados como SKIPPED.

Decisões arquiteturais:
    - O relógio é injetado no executor (ManualClock), sem dormir
    - O provider fake avança o relógio durante o Set, simulando trabalho lento
"""

import pytest

try:
    from atlas_converge.core.engine.executor import ConvergenceExecutor, TIMEOUT_MESSAGE
    from atlas_converge.core.engine.graph import DeclarationGraph
    from atlas_converge.core.engine.planner import plan_execution
    from atlas_converge.core.errors import EXECUTOR_TIMEOUT
    from atlas_converge.core.resources.types import OutcomeStatus
except Exception as e:
    ConvergenceExecutor = None
    DeclarationGraph = None
    plan_execution = None
    OutcomeStatus = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing executor. Implement:
- src/atlas_converge/core/engine/executor.py (ConvergenceExecutor)
Import error: {_IMPORT_ERR}
""")


def test_timeout_skips_remaining_resources_without_interrupting_set(
    FakeProvider, make_registry, make_resource, make_ctx, manual_clock
):
    """
    Verifica o timeout entre recursos.

    Cada Set consome 40s; limite de 60s:
        - `a` começa em t=0 e termina em t=40 (CHANGED)
        - `b` começa em t=40 (< 60) e termina em t=80 (CHANGED, não interrompido)
        - `c` e `d` encontram t=80 ≥ 60 → SKIPPED
    """
    _require_imports()

    provider = FakeProvider(on_set=lambda inst: manual_clock.advance(40))
    ctx = make_ctx(config={"engine": {"timeout_seconds": 60}})
    plan = plan_execution(
        DeclarationGraph.build(
            [make_resource("a"), make_resource("b"), make_resource("c"), make_resource("d")]
        )
    )

    report = ConvergenceExecutor(
        registry=make_registry({"Fake": provider}),
        ctx=ctx,
        clock=manual_clock,
    ).run(plan)

    assert report.get("a").status == OutcomeStatus.CHANGED
    assert report.get("b").status == OutcomeStatus.CHANGED
    assert report.get("b").duration_ms == 40000
    for name in ("c", "d"):
        outcome = report.get(name)
        assert outcome.status == OutcomeStatus.SKIPPED
        assert outcome.message == TIMEOUT_MESSAGE == "run timeout exceeded"
        assert outcome.error["type"] == EXECUTOR_TIMEOUT

    assert provider.names("set") == ["a", "b"]


def test_no_timeout_configured_runs_everything(
    FakeProvider, make_registry, make_resource, dummy_ctx, manual_clock
):
    _require_imports()

    provider = FakeProvider(on_set=lambda inst: manual_clock.advance(10_000))
    plan = plan_execution(DeclarationGraph.build([make_resource("a"), make_resource("b")]))

    report = ConvergenceExecutor(
        registry=make_registry({"Fake": provider}),
        ctx=dummy_ctx,
        clock=manual_clock,
    ).run(plan)

    assert [o.status for o in report.outcomes] == [OutcomeStatus.CHANGED, OutcomeStatus.CHANGED]

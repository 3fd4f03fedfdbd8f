# src/atlas_converge/core/engine/executor.py
"""
Convergence Executor do Atlas Converge.

Executa o Plan recurso a recurso, sequencialmente, aplicando o protocolo:

    1. resolver o provider pelo tipo (UnknownTypeError → FAILED só deste recurso)
    2. Test → True: UNCHANGED (nenhuma ação)
    3. Test → False: Set, depois Test de verificação ("post-check")
         - post-check True  → CHANGED
         - post-check False → FAILED ("post-apply verification failed")
    4. Qualquer exceção de Test/Set → FAILED com a mensagem do erro; a run continua

Política de propagação de falhas:
    - Dependentes diretos e transitivos de um recurso FAILED, ainda não
      executados, são registrados como SKIPPED
      ("blocked by failed dependency: <nome>") sem chamar o provider
    - Ramos sem caminho de dependência até a falha continuam executando
    - `engine.fail_fast=true`: após a primeira falha, todos os recursos
      restantes são SKIPPED
    - `engine.timeout_seconds`: verificado apenas entre recursos; um Set em
      andamento nunca é interrompido

Decisões arquiteturais:
    - Execução estritamente sequencial: providers alteram estado global do
      host (registro, firewall, base de segurança) sem isolamento
    - O registry é congelado antes do primeiro recurso
    - Exceções são convertidas em ConvergeErrorPayload (serializável), sem
      stack trace cru no Outcome
    - O Manifest, quando fornecido, é atualizado explicitamente

Limites explícitos:
    - Não valida o grafo (já validado pelo Declaration Graph)
    - Não resolve variáveis externas
    - Não faz retry
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from atlas_converge.core.errors import (
    ConvergeErrorPayload,
    EXECUTOR_HALTED,
    EXECUTOR_TIMEOUT,
    PROVIDER_VERIFICATION_FAILED,
    VERIFICATION_FAILED_MESSAGE,
    blocked_by_dependency,
    provider_execution_error,
    unknown_type,
    verification_failed,
)
from atlas_converge.core.exceptions import (
    ConvergeException,
    UnknownTypeError,
    VerificationFailedError,
)
from atlas_converge.core.report import RunReport
from atlas_converge.core.resources.context import RunContext
from atlas_converge.core.resources.provider import Provider, StateReader
from atlas_converge.core.resources.registry import ResourceRegistry
from atlas_converge.core.resources.types import Outcome, OutcomeStatus, ResourceInstance
from atlas_converge.core.traceability.manifest import (
    Manifest,
    add_event,
    resource_finished,
    resource_started,
    run_finished,
)

from .planner import Plan


TIMEOUT_MESSAGE = "run timeout exceeded"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def exception_to_error(exc: Exception, *, resource: str, phase: str) -> ConvergeErrorPayload:
    """Converte exceções de provider em ConvergeErrorPayload.

    Regras:
    - ConvergeException: já vem com message/details/hint; o nome da classe é o código.
    - VerificationFailedError: código estável PROVIDER_VERIFICATION_FAILED.
    - Outras exceções: encapsular como PROVIDER_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, ConvergeException):
        code = PROVIDER_VERIFICATION_FAILED if isinstance(exc, VerificationFailedError) else exc.__class__.__name__
        details = dict(exc.details or {})
        details.setdefault("resource", resource)
        details.setdefault("phase", phase)
        return ConvergeErrorPayload(
            type=code,
            message=str(exc) or exc.__class__.__name__,
            details=details,
            hint=exc.hint,
        )

    return provider_execution_error(
        resource=resource,
        phase=phase,
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )


class ConvergenceExecutor:
    """Executor canônico do Atlas Converge (Test → Set → Test, em ordem de plano)."""

    def __init__(
        self,
        *,
        registry: ResourceRegistry,
        ctx: RunContext,
        manifest: Optional[Manifest] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.registry = registry
        self.ctx = ctx
        self.manifest = manifest
        self._clock = clock
        self._now = now

    # ------------------------------------------------------------------
    # Políticas (configuração do engine)
    # ------------------------------------------------------------------
    def _fail_fast(self) -> bool:
        return bool(self.ctx.engine_option("fail_fast", False))

    def _timeout(self) -> Optional[float]:
        value = self.ctx.engine_option("timeout_seconds")
        return float(value) if value is not None else None

    def _capture_drift(self) -> bool:
        return bool(self.ctx.engine_option("capture_drift", True))

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------
    def _skipped(self, inst: ResourceInstance, error: ConvergeErrorPayload) -> Outcome:
        return Outcome(
            name=inst.name,
            type_name=inst.type_name,
            status=OutcomeStatus.SKIPPED,
            message=error.message,
            error=error.to_dict(),
        )

    def _failed(self, inst: ResourceInstance, error: ConvergeErrorPayload, started: float) -> Outcome:
        return Outcome(
            name=inst.name,
            type_name=inst.type_name,
            status=OutcomeStatus.FAILED,
            message=error.message,
            error=error.to_dict(),
            duration_ms=self._elapsed_ms(started),
        )

    def _ok(self, inst: ResourceInstance, status: OutcomeStatus, started: float) -> Outcome:
        return Outcome(
            name=inst.name,
            type_name=inst.type_name,
            status=status,
            duration_ms=self._elapsed_ms(started),
        )

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))

    def _record(self, report: RunReport, outcome: Outcome) -> None:
        report.append(outcome)
        self.ctx.log(
            resource=outcome.name,
            level="error" if outcome.status == OutcomeStatus.FAILED else "info",
            message=f"resource {outcome.status.value}",
            status=outcome.status.value,
            detail=outcome.message,
        )
        if self.manifest is not None:
            resource_finished(self.manifest, resource=outcome.name, ts=self._now(), outcome=outcome.to_dict())

    # ------------------------------------------------------------------
    # Convergência de um recurso
    # ------------------------------------------------------------------
    def _record_drift(self, provider: Provider, inst: ResourceInstance, capture_drift: bool) -> None:
        if not capture_drift or not isinstance(provider, StateReader):
            return
        try:
            current = _jsonable(provider.get(inst, self.ctx))
        except Exception as e:
            # Get é apenas diagnóstico: nunca altera o Outcome
            self.ctx.log(
                resource=inst.name,
                level="warning",
                message="drift capture failed",
                exc_type=e.__class__.__name__,
                exc_message=str(e) or None,
            )
            return

        self.ctx.log(resource=inst.name, level="info", message="drift detected", current=current)
        if self.manifest is not None:
            add_event(
                self.manifest,
                event_type="drift_detected",
                ts=self._now(),
                resource=inst.name,
                payload={"current": current, "desired": inst.to_dict()["properties"]},
            )

    def converge_one(
        self,
        inst: ResourceInstance,
        registry: ResourceRegistry,
        *,
        capture_drift: Optional[bool] = None,
    ) -> Outcome:
        if capture_drift is None:
            capture_drift = self._capture_drift()
        started = self._clock()
        self.ctx.log(resource=inst.name, level="info", message="resource started", type=inst.type_name)
        if self.manifest is not None:
            resource_started(self.manifest, resource=inst.name, type_name=inst.type_name, ts=self._now())

        try:
            provider = registry.resolve(inst.type_name)
        except UnknownTypeError:
            error = unknown_type(resource=inst.name, type_name=inst.type_name, registered=registry.types())
            return self._failed(inst, error, started)

        phase = "test"
        try:
            if bool(provider.test(inst, self.ctx)):
                return self._ok(inst, OutcomeStatus.UNCHANGED, started)

            self._record_drift(provider, inst, capture_drift)

            phase = "set"
            self.ctx.log(resource=inst.name, level="info", message="applying desired state")
            provider.set(inst, self.ctx)

            phase = "verify"
            if bool(provider.test(inst, self.ctx)):
                return self._ok(inst, OutcomeStatus.CHANGED, started)

            payload = verification_failed(resource=inst.name, type_name=inst.type_name)
            raise VerificationFailedError(message=payload.message, details=payload.details, hint=payload.hint)

        except Exception as e:
            return self._failed(inst, exception_to_error(e, resource=inst.name, phase=phase), started)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------
    def run(self, plan: Plan) -> RunReport:
        registry = self.registry.freeze()
        report = RunReport(run_id=self.ctx.run_id)

        fail_fast = self._fail_fast()
        timeout = self._timeout()
        capture_drift = self._capture_drift()
        run_started = self._clock()

        blocked: Dict[str, str] = {}
        halted_by: Optional[str] = None
        timed_out = False

        for inst in plan:
            if halted_by is not None:
                outcome = self._skipped(
                    inst,
                    ConvergeErrorPayload(
                        type=EXECUTOR_HALTED,
                        message=f"run halted after failure: {halted_by}",
                        details={"resource": inst.name, "failed_resource": halted_by},
                        hint="Desative engine.fail_fast para continuar ramos independentes.",
                    ),
                )
            elif timed_out or (timeout is not None and self._clock() - run_started >= timeout):
                timed_out = True
                outcome = self._skipped(
                    inst,
                    ConvergeErrorPayload(
                        type=EXECUTOR_TIMEOUT,
                        message=TIMEOUT_MESSAGE,
                        details={"resource": inst.name, "timeout_seconds": timeout},
                        hint="Aumente engine.timeout_seconds ou reexecute para convergir o restante.",
                    ),
                )
            elif inst.name in blocked:
                outcome = self._skipped(
                    inst,
                    blocked_by_dependency(resource=inst.name, failed_dependency=blocked[inst.name]),
                )
            else:
                outcome = self.converge_one(inst, registry, capture_drift=capture_drift)

            self._record(report, outcome)

            if outcome.status == OutcomeStatus.FAILED:
                for name in plan.graph.descendants(inst.name):
                    blocked.setdefault(name, inst.name)
                if fail_fast:
                    halted_by = inst.name

        report.complete()
        if self.manifest is not None:
            run_finished(self.manifest, ts=self._now(), status=report.status.value, counts=report.counts())
        return report


def run(
    plan: Plan,
    registry: ResourceRegistry,
    ctx: RunContext,
    *,
    manifest: Optional[Manifest] = None,
) -> RunReport:
    """Atalho funcional: `ConvergenceExecutor(...).run(plan)`."""
    return ConvergenceExecutor(registry=registry, ctx=ctx, manifest=manifest).run(plan)


__all__ = [
    "ConvergenceExecutor",
    "TIMEOUT_MESSAGE",
    "VERIFICATION_FAILED_MESSAGE",
    "exception_to_error",
    "run",
]

# src/atlas_converge/core/report.py
"""
Run Report do Atlas Converge.

Agregador puro de Outcomes: recebe um Outcome por recurso, na ordem de
execução (ordem do Plan), e deriva o status agregado da run.

Regra de status (`summarize`):
    - SUCCESS: todos os outcomes são UNCHANGED/CHANGED (inclui run vazia)
    - PARTIAL_FAILURE: ao menos um FAILED/SKIPPED coexiste com ao menos
      um UNCHANGED/CHANGED
    - FAILED: todos os recursos falharam ou foram pulados

Invariantes:
    - Um recurso aparece no máximo uma vez
    - Após `complete()`, o report é somente-leitura
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from atlas_converge.core.exceptions import DuplicateOutcomeError, ReportClosedError
from atlas_converge.core.resources.types import Outcome, OutcomeStatus, RunStatus


class RunReport:
    def __init__(self, run_id: Optional[str] = None):
        self.run_id = run_id
        self._outcomes: List[Outcome] = []
        self._names: set[str] = set()
        self._closed = False
        self._status: Optional[RunStatus] = None

    def append(self, outcome: Outcome) -> None:
        if self._closed:
            raise ReportClosedError(
                message="run report is complete; outcomes can no longer be appended",
                details={"resource": outcome.name},
            )
        if outcome.name in self._names:
            raise DuplicateOutcomeError(
                message=f"duplicate outcome for resource: {outcome.name}",
                details={"resource": outcome.name},
            )
        self._names.add(outcome.name)
        self._outcomes.append(outcome)

    def summarize(self) -> RunStatus:
        if self._status is not None:
            return self._status

        converged = sum(1 for o in self._outcomes if o.status.converged)
        if converged == len(self._outcomes):
            return RunStatus.SUCCESS
        if converged > 0:
            return RunStatus.PARTIAL_FAILURE
        return RunStatus.FAILED

    def complete(self) -> "RunReport":
        if not self._closed:
            self._status = self.summarize()
            self._closed = True
        return self

    # -----------------------------
    # Leitura
    # -----------------------------
    @property
    def completed(self) -> bool:
        return self._closed

    @property
    def status(self) -> RunStatus:
        return self.summarize()

    @property
    def outcomes(self) -> Tuple[Outcome, ...]:
        return tuple(self._outcomes)

    def get(self, name: str) -> Outcome:
        for o in self._outcomes:
            if o.name == name:
                return o
        raise KeyError(name)

    def counts(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in OutcomeStatus}
        for o in self._outcomes:
            counts[o.status.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "counts": self.counts(),
            "outcomes": [o.to_dict() for o in self._outcomes],
        }

    def render_lines(self) -> List[str]:
        lines: List[str] = []
        for o in self._outcomes:
            line = f"{o.status.value.upper():<9} {o.name} ({o.type_name})"
            if o.message:
                line += f": {o.message}"
            lines.append(line)
        lines.append(f"status: {self.status.value}")
        return lines

    def __len__(self) -> int:
        return len(self._outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def __repr__(self) -> str:
        return f"RunReport(status={self.status.value!r}, outcomes={len(self._outcomes)})"

"""
src/atlas_converge/report/report_md.py

Gerador canônico de `report.md` (v1) — Atlas Converge

Regras:
- O report.md é derivado EXCLUSIVAMENTE do RunReport concluído e,
  opcionalmente, do Manifest final (dict ou Manifest).
- Não infere, não recalcula, não acessa o host.
- Mesmo RunReport/Manifest => mesmo report.md (outcomes na ordem do plano,
  mapas com chaves ordenadas).

Estrutura mínima obrigatória:
# Convergence Report

## Executive Summary
## Resource Outcomes
## Failures
## Drift
## Traceability
## Execution Metadata
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from atlas_converge.core.report import RunReport
from atlas_converge.core.resources.types import OutcomeStatus
from atlas_converge.core.traceability.manifest import Manifest


REQUIRED_SECTIONS: List[str] = [
    "# Convergence Report",
    "## Executive Summary",
    "## Resource Outcomes",
    "## Failures",
    "## Drift",
    "## Traceability",
    "## Execution Metadata",
]


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _manifest_dict(manifest: Union[Manifest, Dict[str, Any], None]) -> Dict[str, Any]:
    if manifest is None:
        return {}
    if isinstance(manifest, Manifest):
        return manifest.to_dict()
    if not isinstance(manifest, dict):
        raise ValueError("manifest must be a Manifest or a dict")
    return manifest


def generate_report_md(
    report: RunReport,
    manifest: Union[Manifest, Dict[str, Any], None] = None,
) -> str:
    """Gera o conteúdo completo do report.md a partir de um RunReport concluído."""
    if not isinstance(report, RunReport):
        raise ValueError("RunReport is required to generate report.md")
    if not report.completed:
        raise ValueError("RunReport must be complete before generating report.md")

    m = _manifest_dict(manifest)
    run = m.get("run") if isinstance(m.get("run"), dict) else {}
    inputs = m.get("inputs") if isinstance(m.get("inputs"), dict) else {}
    events = m.get("events") if isinstance(m.get("events"), list) else []

    lines: List[str] = []

    lines.append("# Convergence Report\n")

    # Executive Summary
    lines.append("## Executive Summary")
    lines.append(f"- **Run ID**: `{report.run_id or run.get('run_id', '<unknown>')}`")
    lines.append(f"- **Status**: `{report.status.value}`")
    counts = report.counts()
    for status in OutcomeStatus:
        lines.append(f"- **{status.value}**: `{counts[status.value]}`")
    lines.append("")

    # Resource Outcomes (ordem do plano)
    lines.append("## Resource Outcomes")
    if len(report):
        lines.append("| # | Resource | Type | Status | Duration (ms) | Message |")
        lines.append("|---|----------|------|--------|---------------|---------|")
        for i, o in enumerate(report.outcomes, start=1):
            message = (o.message or "").replace("|", "\\|")
            lines.append(
                f"| {i} | {o.name} | {o.type_name} | `{o.status.value}` | {o.duration_ms} | {message} |"
            )
    else:
        lines.append("No resources declared; nothing to converge.")
    lines.append("")

    # Failures
    lines.append("## Failures")
    failed = [o for o in report.outcomes if o.status == OutcomeStatus.FAILED]
    if failed:
        for o in failed:
            lines.append(f"### {o.name}")
            lines.append("```json")
            lines.append(_as_pretty_json(o.error or {"message": o.message}))
            lines.append("```")
    else:
        lines.append("No failed resources.")
    lines.append("")

    # Drift (somente o que foi registrado no Manifest)
    lines.append("## Drift")
    drift = [e for e in events if isinstance(e, dict) and e.get("event_type") == "drift_detected"]
    if drift:
        for e in drift:
            lines.append(f"### {e.get('resource', '<unknown>')}")
            lines.append("```json")
            lines.append(_as_pretty_json(e.get("payload", {})))
            lines.append("```")
    else:
        lines.append("No drift diagnostics recorded.")
    lines.append("")

    # Traceability
    lines.append("## Traceability")
    if m:
        lines.append("- Source of truth: `RunReport` and final `Manifest`.")
        lines.append(f"- Events recorded: `{len(events)}`\n")
    else:
        lines.append("- Source of truth: `RunReport` only (no Manifest supplied).\n")

    # Execution Metadata
    lines.append("## Execution Metadata")
    lines.append("### run")
    lines.append("```json")
    lines.append(_as_pretty_json(run))
    lines.append("```")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines)

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content

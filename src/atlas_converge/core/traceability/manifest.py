# src/atlas_converge/core/traceability/manifest.py
"""
Manifest v1 — rastreabilidade forense de runs de convergência.

O Manifest consolida, de forma determinística e auditável:
    - metadados da run (run_id, started_at, engine_version, status final)
    - hashes das entradas (configuração efetiva e declarações)
    - estado incremental de cada recurso (status, mensagem, duração)
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico (sort_keys)
    - A API aceita o Manifest como objeto ou como dict serializado

Limites explícitos:
    - Não executa convergência
    - Não decide políticas de falha
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps timezone-naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class Manifest:
    """
    Manifest v1 — registro forense de uma run de convergência.

    Campos principais:
        - run: metadados da execução
        - inputs: hashes de configuração e declarações
        - resources: estado incremental por nome de recurso
        - events: Event Log ordenado

    Invariantes:
        - `resources` é sempre um dicionário indexado pelo nome do recurso
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável em JSON
    """
    run: Dict[str, Any]
    inputs: Dict[str, Any]
    resources: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "resources": {k: dict(v) for k, v in self.resources.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        """Reconstrução permissiva: campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            resources={k: dict(v) for k, v in (data.get("resources", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    engine_version: str,
    config_hash: str,
    declarations_hash: str,
) -> Manifest:
    """
    Cria o Manifest inicial de uma run.

    ⚠️ Importante: esta função **não emite eventos implicitamente**; o
    Event Log inicia vazio.
    """
    started_at = _ensure_tzaware_utc(started_at)
    return Manifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "engine_version": engine_version,
        },
        inputs={
            "config_hash": config_hash,
            "declarations_hash": declarations_hash,
        },
        resources={},
        events=[],
    )


def _get_manifest(manifest: Union[Manifest, Dict[str, Any]]) -> Tuple[Manifest, bool]:
    if isinstance(manifest, Manifest):
        return manifest, False
    return Manifest.from_dict(manifest), True


def _sync(original: Union[Manifest, Dict[str, Any]], m: Manifest, is_dict: bool) -> None:
    if is_dict:
        original.clear()  # type: ignore[union-attr]
        original.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[Manifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    resource: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    Cada chamada adiciona exatamente um evento; eventos não são
    reordenados nem deduplicados.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if resource is not None:
        ev["resource"] = resource
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync(manifest, m, is_dict)


def resource_started(
    manifest: Union[Manifest, Dict[str, Any]],
    *,
    resource: str,
    type_name: str,
    ts: datetime,
) -> None:
    """Marca o recurso como `running` e registra o evento `resource_started`."""
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    m.resources.setdefault(resource, {})
    m.resources[resource].update(
        {
            "name": resource,
            "type": type_name,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(m, event_type="resource_started", ts=ts, resource=resource, payload={"type": type_name})
    _sync(manifest, m, is_dict)


def resource_finished(
    manifest: Union[Manifest, Dict[str, Any]],
    *,
    resource: str,
    ts: datetime,
    outcome: Dict[str, Any],
) -> None:
    """
    Registra o Outcome final de um recurso e o evento `resource_finished`.

    Recursos pulados nunca passam por `resource_started`; nesse caso a
    duração é zero.

    Args:
        outcome (Dict[str, Any]): `Outcome.to_dict()` do recurso.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    s = m.resources.setdefault(resource, {"name": resource, "type": outcome.get("type")})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = outcome.get("status", "unchanged")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "message": outcome.get("message"),
        }
    )
    if outcome.get("error") is not None:
        s["error"] = outcome["error"]

    add_event(
        m,
        event_type="resource_finished",
        ts=ts,
        resource=resource,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )
    _sync(manifest, m, is_dict)


def run_finished(
    manifest: Union[Manifest, Dict[str, Any]],
    *,
    ts: datetime,
    status: str,
    counts: Dict[str, int],
) -> None:
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    m.run.update({"finished_at": _iso(ts), "status": status})
    add_event(m, event_type="run_finished", ts=ts, payload={"status": status, "counts": dict(counts)})
    _sync(manifest, m, is_dict)


def save_manifest(manifest: Union[Manifest, Dict[str, Any]], path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (sort_keys, indentado).

    Diretórios intermediários são criados automaticamente.
    """
    data = manifest.to_dict() if isinstance(manifest, Manifest) else manifest
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> Manifest:
    """Restaura um Manifest persistido; exceções de I/O e JSON são propagadas."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return Manifest.from_dict(data)

"""
Ponto de entrada de linha de comando do Atlas Converge.

Subcomandos:
    - plan:  valida as declarações e imprime a ordem de execução (nada é alterado)
    - apply: converge todos os recursos declarados

Códigos de saída:
    - 0: run SUCCESS
    - 1: run concluída com recursos FAILED/SKIPPED
    - 2: declarações inválidas (ValidationError)
    - 3: configuração inválida (variáveis, arquivos de config, providers)
"""

from __future__ import annotations

import argparse
import functools
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from atlas_converge.core.config import ConfigError, load_config
from atlas_converge.core.declarations import load_declarations
from atlas_converge.core.engine.engine import Engine
from atlas_converge.core.errors import fatal_error
from atlas_converge.core.exceptions import ConfigurationError, RegistryError, ValidationError
from atlas_converge.core.resources.registry import ResourceRegistry
from atlas_converge.core.resources.types import RunStatus
from atlas_converge.core.traceability.manifest import save_manifest
from atlas_converge.core.variables import (
    ChainedVariableSource,
    EnvironmentVariableSource,
    MappingVariableSource,
    VariableSource,
)
from atlas_converge.providers import default_registry
from atlas_converge.report import generate_report_md


EXIT_SUCCESS = 0
EXIT_RUN_FAILED = 1
EXIT_VALIDATION = 2
EXIT_CONFIGURATION = 3


def _parse_pairs(values: Optional[List[str]], *, option: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for raw in values or []:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"{option} expects NAME=VALUE, got: {raw!r}")
        pairs[key.strip()] = value
    return pairs


def _build_source(args: argparse.Namespace) -> VariableSource:
    explicit = MappingVariableSource(_parse_pairs(args.var, option="--var"))
    if args.env_prefix is None:
        return explicit
    return ChainedVariableSource(explicit, EnvironmentVariableSource(prefix=args.env_prefix))


def _build_registry(args: argparse.Namespace) -> ResourceRegistry:
    registry = default_registry()
    for type_name, path in _parse_pairs(args.provider, option="--provider").items():
        registry.register_from_path(type_name, path)
    return registry


def _build_engine(args: argparse.Namespace, *, trace: bool) -> Engine:
    config = load_config(defaults_path=args.config, local_path=args.local_config)
    return Engine(
        declarations=load_declarations(args.declarations),
        registry=_build_registry(args),
        source=_build_source(args),
        config=config,
        run_id=args.run_id,
        trace=trace,
    )


def _report_fatal(exc: Exception) -> None:
    payload = fatal_error(exc).to_dict()
    print(f"error: {payload['message']}", file=sys.stderr)
    print(json.dumps(payload, indent=2, sort_keys=True, default=str), file=sys.stderr)


def _guarded(func):
    """Converte erros fatais pré-run em diagnóstico no stderr e código de saída."""

    @functools.wraps(func)
    def wrapper(args: argparse.Namespace) -> int:
        try:
            return func(args)
        except ValidationError as exc:
            _report_fatal(exc)
            return EXIT_VALIDATION
        except (ConfigurationError, ConfigError, RegistryError, ImportError, ValueError) as exc:
            _report_fatal(exc)
            return EXIT_CONFIGURATION

    return wrapper


@_guarded
def cmd_plan(args: argparse.Namespace) -> int:
    _, plan = _build_engine(args, trace=False).prepare()
    if args.json:
        print(json.dumps([r.to_dict() for r in plan], indent=2, sort_keys=True))
        return EXIT_SUCCESS

    for i, inst in enumerate(plan, start=1):
        deps = ", ".join(inst.depends_on)
        suffix = f" <- {deps}" if deps else ""
        print(f"{i}. {inst.name} ({inst.type_name}){suffix}")
    return EXIT_SUCCESS


@_guarded
def cmd_apply(args: argparse.Namespace) -> int:
    trace = args.manifest is not None or args.report_md is not None
    result = _build_engine(args, trace=trace).run()
    report = result.report

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        for line in report.render_lines():
            print(line)

    if args.manifest is not None and result.manifest is not None:
        save_manifest(result.manifest, Path(args.manifest))
    if args.report_md is not None:
        out = Path(args.report_md)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(generate_report_md(report, result.manifest), encoding="utf-8")

    return EXIT_SUCCESS if report.status == RunStatus.SUCCESS else EXIT_RUN_FAILED


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("declarations", help="Declaration document (.yaml, .yml or .json)")
    parser.add_argument("--config", default=None, help="Engine defaults file (must exist)")
    parser.add_argument("--local-config", default=None, help="Optional local override file")
    parser.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="External variable value (repeatable)",
    )
    parser.add_argument(
        "--env-prefix",
        default=None,
        help="Also resolve variables from the environment using this prefix",
    )
    parser.add_argument(
        "--provider",
        action="append",
        metavar="TYPE=module:Attr",
        help="Register an external provider by import path (repeatable)",
    )
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="atlas-converge", description="Desired-state convergence engine")
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Validate declarations and print the execution order")
    _add_common(plan)
    plan.set_defaults(func=cmd_plan)

    apply = sub.add_parser("apply", help="Converge every declared resource")
    _add_common(apply)
    apply.add_argument("--manifest", default=None, help="Write the run manifest (JSON) to this path")
    apply.add_argument("--report-md", default=None, help="Write report.md to this path")
    apply.set_defaults(func=cmd_apply)

    return parser


def main(argv: List[str] | None = None) -> int:
    """Executa o subcomando informado e devolve o código de saída."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

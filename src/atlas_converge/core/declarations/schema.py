"""
Schema canônico — documento de declarações v1.

Estrutura abstrata que qualquer sintaxe de autoria deve produzir:

    variables:            # opcional
      - name: portNo
        required: true
      - name: chocoSource
        required: false
        default: https://community.chocolatey.org/api/v2/
    resources:
      - name: R1
        type: RegistryValue
        properties: {Key: K, Value: 3}
        depends_on: []    # alias aceito: dependsOn

A validação aqui é apenas estrutural (tipos e campos obrigatórios).
Nomes duplicados, dependências não resolvidas e ciclos são validados pelo
Declaration Graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from atlas_converge.core.config.hashing import canonical_hash
from atlas_converge.core.exceptions import DeclarationFormatError
from atlas_converge.core.resources.types import ResourceInstance
from atlas_converge.core.variables import VariableDeclaration


_SCALAR_TYPES = (str, int, float, bool, type(None))


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str, **details: Any) -> None:
    if not cond:
        raise DeclarationFormatError(
            message=msg,
            details=details,
            hint="Corrija o documento de declarações antes de reexecutar.",
        )


@dataclass(frozen=True)
class DeclarationSet:
    """Representação interna explícita do documento de declarações v1."""

    variables: Tuple[VariableDeclaration, ...]
    resources: Tuple[ResourceInstance, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variables": [
                {"name": v.name, "required": v.required, "default": v.default}
                for v in self.variables
            ],
            "resources": [r.to_dict() for r in self.resources],
        }

    def compute_hash(self) -> str:
        return canonical_hash(self.to_dict())


def _parse_variables(raw: Any) -> List[VariableDeclaration]:
    if raw is None:
        return []
    _expect(isinstance(raw, list), "variables must be a list")

    out: List[VariableDeclaration] = []
    seen: set[str] = set()
    for i, item in enumerate(raw):
        if isinstance(item, str):
            item = {"name": item}
        _expect(isinstance(item, dict), f"variables[{i}] must be a mapping or a name", index=i)

        name = item.get("name")
        _expect(_is_non_empty_str(name), f"variables[{i}].name is required", index=i)
        _expect(name not in seen, f"duplicate variable name: {name}", variable=name)
        seen.add(name)

        required = item.get("required", True)
        _expect(isinstance(required, bool), f"variables[{i}].required must be boolean", variable=name)

        default = item.get("default")
        _expect(
            default is None or isinstance(default, (str, int, float, bool)),
            f"variables[{i}].default must be a scalar",
            variable=name,
        )

        out.append(
            VariableDeclaration(
                name=name,
                required=required,
                default=None if default is None else str(default),
            )
        )
    return out


def _parse_properties(raw: Any, resource: str) -> Dict[str, Any]:
    if raw is None:
        return {}
    _expect(isinstance(raw, dict), f"resource '{resource}': properties must be a mapping", resource=resource)

    props: Dict[str, Any] = {}
    for key, value in raw.items():
        _expect(_is_non_empty_str(key), f"resource '{resource}': property names must be strings", resource=resource)
        if isinstance(value, list):
            _expect(
                all(isinstance(v, str) for v in value),
                f"resource '{resource}': property '{key}' must be a set of strings",
                resource=resource,
                property=key,
            )
        else:
            _expect(
                isinstance(value, _SCALAR_TYPES),
                f"resource '{resource}': property '{key}' must be a scalar or a list of strings",
                resource=resource,
                property=key,
            )
        props[key] = value
    return props


def _parse_resource(item: Any, index: int) -> ResourceInstance:
    _expect(isinstance(item, dict), f"resources[{index}] must be a mapping", index=index)

    name = item.get("name")
    _expect(_is_non_empty_str(name), f"resources[{index}].name is required", index=index)

    type_name = item.get("type")
    _expect(_is_non_empty_str(type_name), f"resource '{name}': type is required", resource=name)

    deps = item.get("depends_on", item.get("dependsOn"))
    if deps is None:
        deps = []
    if isinstance(deps, str):
        deps = [deps]
    _expect(isinstance(deps, list), f"resource '{name}': depends_on must be a list", resource=name)
    _expect(
        all(_is_non_empty_str(d) for d in deps),
        f"resource '{name}': depends_on entries must be non-empty strings",
        resource=name,
    )

    return ResourceInstance(
        name=name,
        type_name=type_name,
        properties=_parse_properties(item.get("properties"), name),
        depends_on=tuple(deps),
    )


def parse_declarations(data: Any) -> DeclarationSet:
    """Valida e materializa um documento de declarações v1."""
    _expect(isinstance(data, dict), "declaration document root must be a mapping")

    resources = data.get("resources")
    _expect(isinstance(resources, list), "resources must be a list")

    return DeclarationSet(
        variables=tuple(_parse_variables(data.get("variables"))),
        resources=tuple(_parse_resource(item, i) for i, item in enumerate(resources)),
    )

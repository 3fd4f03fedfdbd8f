# tests/core/test_variables.py
"""
Testes da resolução de variáveis externas.

Este módulo valida:
- fontes plugáveis (mapping, ambiente, encadeada)
- política obrigatória/opcional/default
- criação do RunContext imutável (resolve_context)
- substituição de placeholders `${nome}` nas propriedades (bind_variables)

Decisões arquiteturais:
    - Variável obrigatória ausente é erro de configuração fatal
    - Cada variável é consultada uma única vez por run
"""

from datetime import datetime, timezone

import pytest

try:
    from atlas_converge.core.exceptions import ConfigurationError, MissingVariableError
    from atlas_converge.core.resources.types import ResourceInstance
    from atlas_converge.core.variables import (
        ChainedVariableSource,
        EnvironmentVariableSource,
        MappingVariableSource,
        VariableDeclaration,
        VariableNotFound,
        bind_variables,
        resolve_context,
        resolve_variables,
    )
except Exception as e:  # noqa: BLE001
    resolve_variables = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing variables module. Implement:\n"
            "- src/atlas_converge/core/variables.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


class _CountingSource:
    def __init__(self, values):
        self.values = dict(values)
        self.calls = []

    def resolve_variable(self, name):
        self.calls.append(name)
        if name not in self.values:
            raise VariableNotFound(name)
        return self.values[name]


def test_mapping_source_stringifies_values():
    _require_imports()

    src = MappingVariableSource({"portNo": 3390})

    assert src.resolve_variable("portNo") == "3390"
    with pytest.raises(VariableNotFound):
        src.resolve_variable("missing")


def test_environment_source_uses_prefix():
    _require_imports()

    src = EnvironmentVariableSource(prefix="CONVERGE_", environ={"CONVERGE_portNo": "3390", "portNo": "1"})

    assert src.resolve_variable("portNo") == "3390"
    with pytest.raises(VariableNotFound):
        src.resolve_variable("chocoSource")


def test_chained_source_first_match_wins():
    _require_imports()

    src = ChainedVariableSource(
        MappingVariableSource({"a": "from-map"}),
        EnvironmentVariableSource(environ={"a": "from-env", "b": "env-only"}),
    )

    assert src.resolve_variable("a") == "from-map"
    assert src.resolve_variable("b") == "env-only"
    with pytest.raises(VariableNotFound):
        src.resolve_variable("c")


def test_required_optional_and_default_policy():
    """
    Verifica a política de resolução por variável.

    Invariantes:
        - cada variável é consultada exatamente uma vez
        - opcional sem default é omitida
        - default só é usado quando a fonte não resolve
    """
    _require_imports()

    source = _CountingSource({"portNo": "3390", "chocoSource": "https://internal/feed"})
    decls = [
        VariableDeclaration("portNo"),
        VariableDeclaration("chocoSource", required=False, default="https://public/feed"),
        VariableDeclaration("telemetryLevel", required=False, default="1"),
        VariableDeclaration("proxy", required=False),
    ]

    out = resolve_variables(decls, source)

    assert out == {"portNo": "3390", "chocoSource": "https://internal/feed", "telemetryLevel": "1"}
    assert source.calls == ["portNo", "chocoSource", "telemetryLevel", "proxy"]


def test_missing_required_variable_is_configuration_error():
    _require_imports()

    with pytest.raises(MissingVariableError) as exc:
        resolve_variables([VariableDeclaration("portNo")], MappingVariableSource({}))

    assert isinstance(exc.value, ConfigurationError)
    assert exc.value.details["variable"] == "portNo"


def test_source_failures_count_as_unresolved():
    """Qualquer exceção da fonte para variável obrigatória vira MissingVariableError."""
    _require_imports()

    class _Broken:
        def resolve_variable(self, name):
            raise RuntimeError("vault unavailable")

    with pytest.raises(MissingVariableError) as exc:
        resolve_variables([VariableDeclaration("portNo")], _Broken())

    assert exc.value.details["exc_type"] == "RuntimeError"
    assert exc.value.details["exc_message"] == "vault unavailable"


def test_resolve_context_builds_immutable_context():
    _require_imports()

    created = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ctx = resolve_context(
        [VariableDeclaration("portNo")],
        MappingVariableSource({"portNo": "3390", "ignored": "x"}),
        run_id="run-1",
        config={"engine": {"fail_fast": True}},
        created_at=created,
    )

    assert ctx.run_id == "run-1"
    assert ctx.created_at == created
    assert dict(ctx.variables) == {"portNo": "3390"}
    assert ctx.engine_option("fail_fast") is True
    with pytest.raises(TypeError):
        ctx.variables["portNo"] = "1"  # type: ignore[index]


def test_resolve_context_generates_run_id():
    _require_imports()

    a = resolve_context([], MappingVariableSource({}))
    b = resolve_context([], MappingVariableSource({}))

    assert a.run_id and b.run_id
    assert a.run_id != b.run_id


def test_bind_variables_substitutes_placeholders():
    _require_imports()

    inst = ResourceInstance(
        name="F1",
        type_name="FirewallRule",
        properties={
            "LocalPort": "${portNo}",
            "DisplayName": "RDP (${portNo})",
            "Profile": ["${profile}", "Private"],
            "Enabled": True,
        },
        depends_on=("R1",),
    )

    (bound,) = bind_variables([inst], {"portNo": "3390", "profile": "Domain"})

    assert bound.properties["LocalPort"] == "3390"
    assert bound.properties["DisplayName"] == "RDP (3390)"
    assert bound.properties["Profile"] == frozenset({"Domain", "Private"})
    assert bound.properties["Enabled"] is True
    assert bound.depends_on == ("R1",)
    assert inst.properties["LocalPort"] == "${portNo}"


def test_bind_unknown_placeholder_raises():
    _require_imports()

    inst = ResourceInstance(name="R1", type_name="RegistryValue", properties={"Value": "${portNo}"})

    with pytest.raises(MissingVariableError) as exc:
        bind_variables([inst], {})

    assert exc.value.details == {"variable": "portNo", "resource": "R1"}

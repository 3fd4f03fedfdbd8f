# tests/core/config/test_merge.py
"""
Testes do deep-merge de configuração do engine.

Política validada:
    - dict → merge recursivo
    - list → sobrescrita total
    - None no base ou no override → sobrescrita direta
    - int/float intercambiáveis (bool não)
    - conflito de tipos → ConfigTypeConflictError

Invariantes:
    - Nenhum input é mutado
    - Chaves não sobrescritas são preservadas
"""

import pytest

try:
    from atlas_converge.core.config.errors import ConfigTypeConflictError
    from atlas_converge.core.config.merge import deep_merge
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing merge module. Implement:\n"
            "- src/atlas_converge/core/config/merge.py (deep_merge)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_nested_override_does_not_mutate_inputs():
    """
    Verifica merge recursivo e preservação dos inputs.
    """
    _require_imports()

    base = {"engine": {"fail_fast": False, "capture_drift": True}}
    override = {"engine": {"fail_fast": True}}

    out = deep_merge(base, override)

    assert out == {"engine": {"fail_fast": True, "capture_drift": True}}
    assert base == {"engine": {"fail_fast": False, "capture_drift": True}}
    assert override == {"engine": {"fail_fast": True}}


def test_merge_list_override_total():
    _require_imports()

    out = deep_merge({"allowed": ["a", "b"]}, {"allowed": ["c"]})

    assert out == {"allowed": ["c"]}


def test_none_can_enable_and_disable_options():
    """
    `timeout_seconds: null` nos defaults aceita número no override, e vice-versa.
    """
    _require_imports()

    enabled = deep_merge({"engine": {"timeout_seconds": None}}, {"engine": {"timeout_seconds": 30}})
    disabled = deep_merge(enabled, {"engine": {"timeout_seconds": None}})

    assert enabled["engine"]["timeout_seconds"] == 30
    assert disabled["engine"]["timeout_seconds"] is None


def test_int_and_float_are_interchangeable():
    _require_imports()

    out = deep_merge({"engine": {"timeout_seconds": 600}}, {"engine": {"timeout_seconds": 0.5}})

    assert out["engine"]["timeout_seconds"] == 0.5


@pytest.mark.parametrize(
    "base,override",
    [
        ({"engine": {"fail_fast": False}}, {"engine": "strict"}),
        ({"engine": {"fail_fast": False}}, {"engine": {"fail_fast": "yes"}}),
        ({"engine": {"capture_drift": True}}, {"engine": {"capture_drift": 1}}),
    ],
)
def test_merge_type_conflict_raises(base, override):
    """Conflitos estruturais ou de tipo são sempre explícitos."""
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


def test_root_must_be_dicts():
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["not", "a", "dict"])  # type: ignore[arg-type]

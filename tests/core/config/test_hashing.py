# tests/core/config/test_hashing.py
"""
Testes do hashing canônico de configuração e declarações.

O hash identifica a configuração efetiva (e o conjunto de declarações) no
Manifest, permitindo comparar runs.

Invariantes:
    - Mesma entrada → mesmo hash, independentemente da ordem das chaves
    - SHA-256 do JSON canônico (sort_keys, separadores compactos)
    - Conjuntos são serializados como listas ordenadas
"""

import hashlib
import json

import pytest

try:
    from atlas_converge.core.config.hashing import canonical_hash, compute_config_hash
except Exception as e:  # noqa: BLE001
    compute_config_hash = None
    canonical_hash = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing hashing module. Implement:\n"
            "- src/atlas_converge/core/config/hashing.py (compute_config_hash, canonical_hash)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_hash_is_deterministic_and_key_order_independent():
    _require_imports()

    a = {"engine": {"fail_fast": True, "timeout_seconds": None}}
    b = {"engine": {"timeout_seconds": None, "fail_fast": True}}

    h1 = compute_config_hash(a)
    assert h1 == compute_config_hash(b)
    assert isinstance(h1, str)
    assert len(h1) == 64


def test_hash_matches_sha256_of_canonical_json():
    """
    Verifica a política exata de serialização canônica.
    """
    _require_imports()

    cfg = {"engine": {"fail_fast": False, "capture_drift": True}}
    canonical = json.dumps(cfg, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    expected = hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    assert compute_config_hash(cfg) == expected


def test_hash_changes_on_override():
    _require_imports()

    base = {"engine": {"fail_fast": False}}
    changed = {"engine": {"fail_fast": True}}

    assert compute_config_hash(base) != compute_config_hash(changed)


def test_sets_hash_like_sorted_lists():
    _require_imports()

    assert canonical_hash({"Profile": frozenset({"b", "a"})}) == canonical_hash({"Profile": ["a", "b"]})


def test_non_mapping_is_rejected():
    _require_imports()

    with pytest.raises(TypeError):
        compute_config_hash(["engine"])  # type: ignore[arg-type]

# tests/core/units/test_registry_unique_unit_id.py
"""
Testes do UnitRegistry: ids válidos, únicos e ordem de registro preservada.
"""

import pytest

try:
    from cascade_deploy.core.units.registry import (
        DuplicateUnitIdError,
        InvalidUnitIdError,
        UnitRegistry,
    )
except Exception as e:  # noqa: BLE001
    UnitRegistry = None
    DuplicateUnitIdError = None
    InvalidUnitIdError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing UnitRegistry. Implement:\n"
            "- src/cascade_deploy/core/units/registry.py (UnitRegistry)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_registry_rejects_duplicate_ids(make_unit):
    _require_imports()
    reg = UnitRegistry()
    reg.add(make_unit(10))

    with pytest.raises(DuplicateUnitIdError):
        reg.add(make_unit(10))


def test_registry_rejects_empty_id(make_unit):
    _require_imports()
    with pytest.raises(InvalidUnitIdError):
        UnitRegistry().add(make_unit(""))


def test_registry_preserves_order(make_unit):
    _require_imports()
    reg = UnitRegistry.of([make_unit(24), make_unit(10), make_unit("hud")])

    assert reg.ids() == [24, 10, "hud"]
    assert [u.id for u in reg.list()] == [24, 10, "hud"]
    assert len(reg) == 3
    assert 10 in reg
    assert reg.get("hud").id == "hud"

#!/usr/bin/env python3
"""Validate local room allocator environment readiness."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from housing.repository.config_repository import HouseConfigRepository
from housing.services.matching_service import RoomAssignmentService, hungarian
from housing.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = ["fastapi", "uvicorn", "pydantic", "numpy", "pandas", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Solver on a known matrix
    try:
        solved = hungarian([[1, 10], [10, 1]])
        if solved != [1, 0]:
            raise RuntimeError(f"expected [1, 0], got {solved}")
        ok, line = _print_result("Hungarian solver", True)
    except Exception as exc:
        ok, line = _print_result("Hungarian solver", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    settings = get_settings()
    repository = HouseConfigRepository(settings)

    # CHECK 4: Sample configuration loading
    house = people_config = None
    try:
        house = repository.load_house()
        people_config = repository.load_people()
        ok, line = _print_result(
            "Sample configuration",
            True,
            f": {len(house.rooms)} rooms, {len(people_config.people)} people",
        )
    except Exception as exc:
        ok, line = _print_result("Sample configuration", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 5: End-to-end assignment
    if house is not None and people_config is not None:
        try:
            plan = RoomAssignmentService(settings).assign(house, people_config)
            assigned_rooms = {item.room_id for item in plan.assignments}
            if len(assigned_rooms) != len(people_config.people):
                raise RuntimeError("a room was assigned twice")
            ok, line = _print_result(
                "Sample assignment",
                True,
                f": total_score={plan.total_score:.2f}",
            )
        except Exception as exc:
            ok, line = _print_result("Sample assignment", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Room Allocator Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

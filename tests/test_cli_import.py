"""Regression tests for importing the data layer without the web stack."""

from __future__ import annotations

import importlib
import sys
import types
import unittest

_DATA_LAYER_EXPORTS = {
    "ConstraintError",
    "CostFilter",
    "Database",
    "InMemoryStore",
    "NotFoundError",
    "StoreError",
    "Subscription",
    "SubscriptionError",
    "SubscriptionManager",
    "SubscriptionStore",
    "ValidationError",
    "create_app",
    "resolve_database_path",
}

_STORE_OPERATIONS = ("initialize", "insert", "find_by_id", "update", "delete", "list", "sum_by_filter")
_MANAGER_OPERATIONS = ("create", "get", "update", "delete", "list", "calculate_total_cost")


class DataLayerImportTests(unittest.TestCase):
    def tearDown(self) -> None:
        self._clear_package_modules()

    @staticmethod
    def _clear_package_modules() -> None:
        for name in [m for m in list(sys.modules.keys()) if m == "subtracker" or m.startswith("subtracker.")]:
            sys.modules.pop(name, None)

    def test_import_data_layer_without_fastapi(self) -> None:
        """The manager and both stores must import while FastAPI is unavailable."""

        self._clear_package_modules()

        fastapi_module: types.ModuleType | None = sys.modules.pop("fastapi", None)
        sys.modules["fastapi"] = None  # type: ignore[assignment]
        try:
            package = importlib.import_module("subtracker")
            self.assertEqual(set(package.__all__), _DATA_LAYER_EXPORTS)
            for name in package.__all__:
                self.assertTrue(hasattr(package, name), name)

            for store_class in (package.Database, package.InMemoryStore):
                for operation in _STORE_OPERATIONS:
                    self.assertTrue(callable(getattr(store_class, operation, None)), f"{store_class.__name__}.{operation}")
            for operation in _MANAGER_OPERATIONS:
                self.assertTrue(callable(getattr(package.SubscriptionManager, operation, None)), operation)

            errors = importlib.import_module("subtracker.errors")
            for error_class in (errors.ValidationError, errors.NotFoundError, errors.StoreError):
                self.assertTrue(issubclass(error_class, errors.SubscriptionError))
            self.assertTrue(issubclass(errors.ConstraintError, errors.StoreError))

            self.assertNotIn("subtracker.service", sys.modules)
        finally:
            sys.modules.pop("fastapi", None)
            if fastapi_module is not None:
                sys.modules["fastapi"] = fastapi_module


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

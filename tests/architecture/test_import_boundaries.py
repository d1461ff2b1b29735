"""
Import-boundary enforcement.

1. Kernel purity      -- rental_kernel/** may not import config, engines,
                          services or modules.
2. Engine purity      -- rental_engines/** may not import the database layer,
                          ORM, services, config or modules.
3. Engine no-impure   -- rental_engines/** may not read the wall clock.
4. Service boundary   -- rental_services/** may not import rental_modules.

All scanning is done via AST; these tests are read-only.
"""

import ast
import glob
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[str]:
    return sorted(glob.glob(f"{ROOT / package}/**/*.py", recursive=True))


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
    tree = ast.parse(Path(filepath).read_text(encoding="utf-8"), filename=filepath)
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in _python_files(package):
        for lineno, module in _extract_imports(path):
            if _matches_any(module, forbidden):
                found.append(f"{Path(path).relative_to(ROOT)}:{lineno} imports {module}")
    return found


class TestKernelBoundary:

    def test_kernel_imports_nothing_outward(self):
        forbidden = ("rental_config", "rental_engines", "rental_services", "rental_modules")
        assert _violations("rental_kernel", forbidden) == []


class TestEnginePurity:

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "rental_kernel.db",
        "rental_config",
        "rental_services",
        "rental_modules",
    )

    def test_engines_have_no_io_dependencies(self):
        assert _violations("rental_engines", self.FORBIDDEN_PREFIXES) == []

    def test_engines_never_read_the_wall_clock(self):
        impure = {"datetime.now", "datetime.utcnow", "date.today", "time.time"}
        found = []
        for path in _python_files("rental_engines"):
            tree = ast.parse(Path(path).read_text(encoding="utf-8"))
            for node in ast.walk(tree):
                if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
                    if f"{node.value.id}.{node.attr}" in impure:
                        found.append(f"{path}:{node.lineno}")
        assert found == []


class TestServiceBoundary:

    def test_services_do_not_import_modules(self):
        assert _violations("rental_services", ("rental_modules",)) == []

    def test_config_does_not_import_services_or_modules(self):
        assert _violations("rental_config", ("rental_services", "rental_modules")) == []

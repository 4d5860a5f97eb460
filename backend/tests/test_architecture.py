"""Static layering rules for the `company_api` package.

The rules are checked on the source with `ast`, nothing is imported:
controllers (main) -> services -> repositories -> models.
"""

import ast
from pathlib import Path

import pytest

PKG_ROOT = Path(__file__).resolve().parents[1] / "company_api"
PKG = "company_api"


def _module_name(path: Path) -> str:
    rel = path.relative_to(PKG_ROOT)
    if rel.name == "__init__.py":
        return ".".join((PKG, *rel.parent.parts)).rstrip(".")
    return ".".join((PKG, *rel.parent.parts, rel.stem))


def _parse_modules():
    out = {}
    for p in sorted(PKG_ROOT.rglob("*.py")):
        if "__pycache__" in p.parts:
            continue
        out[_module_name(p)] = ast.parse(p.read_text(encoding="utf-8"), filename=str(p))
    return out


MODULES = _parse_modules()


def _imports(module: str) -> set:
    """Dotted names imported by `module`, relative imports resolved."""
    tree = MODULES[module]
    package = module if module == PKG else module.rsplit(".", 1)[0]
    out = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            out.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                parts = package.split(".")
                base = parts[: len(parts) - (node.level - 1)]
                resolved = ".".join(base + ([node.module] if node.module else []))
            else:
                resolved = node.module or ""
            out.add(resolved)
            # `from . import services` imports the submodule
            for alias in node.names:
                cand = f"{resolved}.{alias.name}"
                if cand in MODULES:
                    out.add(cand)
    return out


def _depends_on(module: str, target: str) -> bool:
    return any(name == target or name.startswith(target + ".") for name in _imports(module))


def _classes(module: str):
    return [n for n in ast.walk(MODULES[module]) if isinstance(n, ast.ClassDef)]


def _is_table(cls: ast.ClassDef) -> bool:
    return any(
        kw.arg == "table" and isinstance(kw.value, ast.Constant) and kw.value.value is True
        for kw in cls.keywords
    )


def test_layer_modules_exist():
    for name in ("models", "repositories", "services", "main", "errors", "schemas"):
        assert f"{PKG}.{name}" in MODULES


@pytest.mark.parametrize(
    "suffix, home",
    [("Repository", "repositories"), ("Service", "services")],
)
def test_classes_live_in_their_layer(suffix, home):
    for module in MODULES:
        for cls in _classes(module):
            if cls.name.endswith(suffix):
                assert module == f"{PKG}.{home}", f"{cls.name} belongs in {home}, found in {module}"


def test_entities_live_in_models():
    for module in MODULES:
        for cls in _classes(module):
            if _is_table(cls):
                assert module == f"{PKG}.models", f"table {cls.name} declared in {module}"


def test_models_import_no_other_layer():
    for layer in ("repositories", "services", "main", "schemas", "database"):
        assert not _depends_on(f"{PKG}.models", f"{PKG}.{layer}")


def test_repositories_do_not_depend_on_services_or_controllers():
    assert not _depends_on(f"{PKG}.repositories", f"{PKG}.services")
    assert not _depends_on(f"{PKG}.repositories", f"{PKG}.main")


def test_services_do_not_depend_on_controllers_or_http():
    assert not _depends_on(f"{PKG}.services", f"{PKG}.main")
    assert not _depends_on(f"{PKG}.services", "fastapi")
    assert not _depends_on(f"{PKG}.services", "starlette")


def test_controllers_use_services_not_repositories():
    assert _depends_on(f"{PKG}.main", f"{PKG}.services")
    assert not _depends_on(f"{PKG}.main", f"{PKG}.repositories")


def test_repository_classes_expose_crud():
    repos = [c for c in _classes(f"{PKG}.repositories") if c.name.endswith("Repository")]
    assert {c.name for c in repos} == {"ProductRepository", "UserRepository"}
    for cls in repos:
        methods = {n.name for n in cls.body if isinstance(n, ast.FunctionDef)}
        assert {"list_all", "get", "save", "delete"} <= methods, cls.name

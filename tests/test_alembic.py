"""
test_alembic.py — Verify Alembic migration setup and structure.

Reads migration sources with ast instead of importing them, since the
project's alembic/ directory shadows the installed package on sys.path.

Called by: pytest
Depends on: alembic/, app.models
"""

import ast
from pathlib import Path

ROOT = Path(__file__).parent.parent
MIGRATION_DIR = ROOT / "alembic" / "versions"


def _migrations() -> list[Path]:
    files = sorted(MIGRATION_DIR.glob("*.py"))
    assert files, "No migration files found"
    return files


def _module_assignments(tree: ast.Module) -> dict:
    values = {}
    for node in tree.body:
        target = None
        if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            target, value = node.target.id, node.value
        elif isinstance(node, ast.Assign) and isinstance(node.targets[0], ast.Name):
            target, value = node.targets[0].id, node.value
        if target and value is not None:
            values[target] = ast.literal_eval(value)
    return values


def _function_source(path: Path, name: str) -> str:
    source = path.read_text()
    tree = ast.parse(source)
    for node in tree.body:
        if isinstance(node, ast.FunctionDef) and node.name == name:
            return ast.get_source_segment(source, node)
    raise AssertionError(f"{path.name} has no {name}()")


def test_initial_migration_is_root():
    tree = ast.parse(_migrations()[0].read_text())
    values = _module_assignments(tree)
    assert values["revision"] == "001_initial"
    assert values["down_revision"] is None


def test_revisions_form_a_chain():
    revisions = [_module_assignments(ast.parse(p.read_text())) for p in _migrations()]
    known = {r["revision"] for r in revisions}
    for r in revisions[1:]:
        assert r["down_revision"] in known


def test_baseline_uses_metadata():
    first = _migrations()[0]
    assert "create_all" in _function_source(first, "upgrade")
    assert "drop_all" in _function_source(first, "downgrade")


def test_env_py_imports_all_models():
    """env.py must import Base so autogenerate sees all tables."""
    content = (ROOT / "alembic" / "env.py").read_text()
    assert "from app.models import Base" in content


def test_every_model_table_in_metadata():
    from app.models import Base

    for table in ("organizations", "teams", "events", "rosters", "roster_change_log", "import_jobs"):
        assert table in Base.metadata.tables


def test_no_create_all_in_main():
    """main.py must NOT use create_all — Alembic manages schema."""
    assert "create_all" not in (ROOT / "app" / "main.py").read_text()

import ast
from pathlib import Path


def _forbidden_imports(package_dir: Path, forbidden_prefixes: tuple[str, ...]) -> list[str]:
    offenders: list[str] = []
    for path in sorted(package_dir.rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name.startswith(forbidden_prefixes):
                        offenders.append(f"{path}: import {alias.name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module is None:
                    continue
                if node.module.startswith(forbidden_prefixes):
                    offenders.append(f"{path}: from {node.module} import ...")
    return offenders


def test_modulekit_source_does_not_import_arcdesk():
    repo_root = Path(__file__).resolve().parents[1]
    assert _forbidden_imports(repo_root / "modulekit", ("arcdesk",)) == []


def test_foundation_does_not_import_modules_or_app():
    repo_root = Path(__file__).resolve().parents[1]
    foundation_dir = repo_root / "arcdesk" / "foundation"

    forbidden = ("arcdesk.modules", "arcdesk.app", "arcdesk.framework", "modulekit")
    assert _forbidden_imports(foundation_dir, forbidden) == []


def test_modules_do_not_import_each_other():
    repo_root = Path(__file__).resolve().parents[1]
    modules_dir = repo_root / "arcdesk" / "modules"

    offenders: list[str] = []
    for module_dir in sorted(p for p in modules_dir.iterdir() if (p / "mod.py").is_file()):
        others = tuple(
            f"arcdesk.modules.{p.name}"
            for p in modules_dir.iterdir()
            if p.is_dir() and p.name != module_dir.name
        )
        offenders.extend(_forbidden_imports(module_dir, others))

    assert offenders == []


def test_importing_modulekit_does_not_pull_in_arcdesk():
    import subprocess
    import sys
    import textwrap

    code = textwrap.dedent(
        """\
        import importlib
        import pkgutil
        import sys

        import modulekit as pkg

        for module in pkgutil.walk_packages(pkg.__path__, pkg.__name__ + "."):
            importlib.import_module(module.name)
        loaded = sorted(name for name in sys.modules if name.startswith("arcdesk"))
        if loaded:
            raise SystemExit(f"Importing modulekit loaded arcdesk modules: {loaded}")
        """
    )

    proc = subprocess.run(
        [sys.executable, "-c", code],
        capture_output=True,
        text=True,
        cwd=str(Path(__file__).resolve().parents[1]),
    )
    assert proc.returncode == 0, proc.stderr or proc.stdout

from __future__ import annotations

import re
from pathlib import Path

import pytest

ROUTE_SAFETY_IMPORT_PATTERN = re.compile(r"\bcredbridge\.infra\.route_safety\b")


def _scan_file(path: Path, *, display_path: Path) -> list[str]:
    try:
        content = path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return []

    return [
        f"{display_path}:{lineno}: {line.strip()}"
        for lineno, line in enumerate(content.splitlines(), start=1)
        if ROUTE_SAFETY_IMPORT_PATTERN.search(line)
    ]


@pytest.mark.unit
def test_repositories_and_services_do_not_import_infra_route_safety() -> None:
    """Repository/Service 层不依赖 request/actor 语义的 route_safety 适配器."""
    repo_root = Path(__file__).resolve().parents[2]

    matches: list[str] = []
    for layer in ("repositories", "services"):
        for path in (repo_root / "credbridge" / layer).rglob("*.py"):
            matches.extend(_scan_file(path, display_path=path.relative_to(repo_root)))

    assert not matches, "发现对 credbridge.infra.route_safety 的依赖:\n" + "\n".join(matches[:50])

import asyncio
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so config / api / qcm_simulator import
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from qcm_simulator.context import build_context  # noqa: E402
from qcm_simulator.storage.catalog import Catalog  # noqa: E402
from qcm_simulator.storage.session_store import SessionStore  # noqa: E402


def make_raw_question(answer_index=0, **overrides):
    raw = {
        "category": "Cardiology",
        "drug": "Aspirin",
        "stem": "Which option is right?",
        "options": ["a", "b", "c", "d", "e", "f"],
        "answerIndex": answer_index,
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def catalog_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{(tmp_path / 'catalog.db').as_posix()}"


@pytest.fixture
def session_dir(tmp_path: Path) -> str:
    return str(tmp_path / "sessions")


@pytest.fixture
def session_store(session_dir: str) -> SessionStore:
    return SessionStore(session_dir)


@pytest.fixture
def run_catalog(catalog_url):
    """Run `scenario(catalog)` on a fresh event loop with a ready catalog."""
    def _run(scenario):
        async def main():
            catalog = Catalog(catalog_url)
            await catalog.init_schema()
            try:
                return await scenario(catalog)
            finally:
                await catalog.dispose()
        return asyncio.run(main())
    return _run


@pytest.fixture
def run_ctx(catalog_url, session_dir):
    """
    Run `scenario(ctx)` with a fresh AppContext over the same on-disk stores.
    Calling it twice in one test behaves like reloading the app.
    """
    def _run(scenario):
        async def main():
            ctx = build_context(catalog_url, session_dir)
            await ctx.catalog.init_schema()
            try:
                return await scenario(ctx)
            finally:
                await ctx.catalog.dispose()
        return asyncio.run(main())
    return _run

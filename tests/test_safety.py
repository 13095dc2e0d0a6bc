"""Guards against the test suite touching a real school's records.

``./data`` holds the YAML config and ``./db`` the SQLite database. Every
test is supposed to run inside ``isolated_env`` (a tmp working directory),
so after the phase suites have run both directories must look exactly as
they did when collection started.

This module sorts after ``f1``..``f6`` and therefore runs last.
"""

import hashlib
from pathlib import Path

import pytest

GUARDED_DIRS = ("data", "db")


def _fingerprint(path: Path) -> str | None:
    """Digest of file names, sizes and mtimes under path (None if absent)."""
    if not path.exists():
        return None

    digest = hashlib.sha256()
    for item in sorted(p for p in path.rglob("*") if p.is_file()):
        stat = item.stat()
        digest.update(item.relative_to(path).as_posix().encode())
        digest.update(f"{stat.st_size}:{int(stat.st_mtime)}".encode())
    return digest.hexdigest()


# Taken at import, i.e. during collection, before any test has run
SNAPSHOT = {name: _fingerprint(Path(name)) for name in GUARDED_DIRS}


@pytest.mark.parametrize("name", GUARDED_DIRS)
def test_real_directory_untouched(name):
    before = SNAPSHOT[name]
    after = _fingerprint(Path(name))

    if before is None and after is not None:
        pytest.fail(f"./{name} was created during the test run; use isolated_env or tmp_path")
    if before != after:
        pytest.fail(f"./{name} was modified during the test run; use isolated_env or tmp_path")


class TestTestIsolation:
    """Static checks over the phase test modules."""

    @pytest.fixture(scope="class")
    def phase_sources(self):
        tests_dir = Path(__file__).parent
        files = sorted(tests_dir.glob("f*/test_*.py"))
        return {p.relative_to(tests_dir).as_posix(): p.read_text() for p in files}

    def test_phase_tests_found(self, phase_sources):
        assert any(name.startswith("f1/") for name in phase_sources)

    def test_phase_tests_do_not_use_default_database(self, phase_sources):
        """init_db() with no argument would open db/preprimary.db."""
        offenders = [name for name, source in phase_sources.items() if "init_db()" in source]
        assert not offenders, f"Call init_db(tmp_path / ...) instead: {offenders}"

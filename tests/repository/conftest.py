"""Fixtures building fake git working copies."""

import pytest


@pytest.fixture
def make_repo(tmp_path):
    """Factory creating a directory with ``.git/config`` holding ``config_text``."""

    def _make_repo(config_text, name="repo"):
        repo = tmp_path / name
        (repo / ".git").mkdir(parents=True)
        if config_text is not None:
            (repo / ".git" / "config").write_text(config_text, encoding="utf-8")
        return repo

    return _make_repo

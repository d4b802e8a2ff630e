"""
Shared fixtures for the typecfg tests.
"""

import pytest

from typecfg import Config, types


@pytest.fixture
def settings_type():
    """A struct with defaults, optional keys and a bounded integer."""
    return types.struct(
        {
            "port": types.integer(min=1, max=65535, default_val=8080),
            "host": types.string(default_val="localhost"),
            "debug": types.boolean(optional=True),
            "tags": types.array(types.string(), optional=True),
        }
    )


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def settings(config_path, settings_type):
    return Config(str(config_path), settings_type)


class MemoryStorage:
    """In-memory Storage, optionally failing on writes or deletes."""

    def __init__(self, files=None, fail_write=False, fail_delete=False):
        self.files = dict(files or {})
        self.fail_write = fail_write
        self.fail_delete = fail_delete

    def exists(self, path):
        return path in self.files

    def read_text(self, path):
        return self.files[path]

    def write_text(self, path, text):
        if self.fail_write:
            raise PermissionError(path)
        self.files[path] = text

    def delete_file(self, path):
        if self.fail_delete:
            raise PermissionError(path)
        del self.files[path]


@pytest.fixture
def memory_storage():
    return MemoryStorage

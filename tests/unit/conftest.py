"""Shared fixtures for building plugin archives."""

import zipfile
from pathlib import Path

import pytest


def app_term(name, vsn="1.0.0", description="", applications=()):
    """Render an .app descriptor term."""
    apps = ", ".join(applications)
    return (
        f"{{application, {name},\n"
        f' [{{description, "{description}"}},\n'
        f'  {{vsn, "{vsn}"}},\n'
        f"  {{modules, []}},\n"
        f"  {{applications, [kernel, stdlib{', ' if apps else ''}{apps}]}}]}}.\n"
    )


def write_ez(path: Path, entries: dict[str, str | bytes]) -> Path:
    """Write a zip archive holding the given entries."""
    with zipfile.ZipFile(path, "w") as zf:
        for entry, content in entries.items():
            zf.writestr(entry, content)
    return path


@pytest.fixture
def make_plugin():
    """Factory writing <dir>/<name>-<vsn>.ez with a generated descriptor."""

    def _make(directory: Path, name: str, vsn: str = "1.0.0", deps=(), description=""):
        directory.mkdir(parents=True, exist_ok=True)
        base = f"{name}-{vsn}"
        return write_ez(
            directory / f"{base}.ez",
            {
                f"{base}/": "",
                f"{base}/ebin/{name}.app": app_term(name, vsn, description, deps),
                f"{base}/ebin/{name}.beam": b"\x00beam",
            },
        )

    return _make


@pytest.fixture
def write_archive():
    """Factory writing an archive with arbitrary entries."""
    return write_ez


def damage_entry(path: Path, entry: str, fill: bytes) -> None:
    """Overwrite the compressed payload of one archive entry."""
    data = bytearray(path.read_bytes())
    with zipfile.ZipFile(path) as zf:
        info = zf.getinfo(entry)
    offset = info.header_offset
    name_len = int.from_bytes(data[offset + 26 : offset + 28], "little")
    extra_len = int.from_bytes(data[offset + 28 : offset + 30], "little")
    start = offset + 30 + name_len + extra_len
    data[start : start + info.compress_size] = fill * info.compress_size
    path.write_bytes(bytes(data))


@pytest.fixture
def make_damaged_plugin():
    """Factory writing a deflated archive whose descriptor data is corrupt."""

    def _make(directory: Path, name: str, fill: bytes = b"\xff") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{name}.ez"
        entry = f"{name}/ebin/{name}.app"
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(entry, app_term(name, description="x" * 200))
        damage_entry(path, entry, fill)
        return path

    return _make

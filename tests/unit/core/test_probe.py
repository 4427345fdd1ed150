"""Unit tests for the filesystem probe layer."""

import asyncio

from esmap.core.probe import FilesystemProbe


def test_list_dir_returns_sorted_names(tmp_path):
    for name in ("b.js", "a.js", "c"):
        (tmp_path / name).write_text("")

    async def run():
        probe = FilesystemProbe()
        try:
            return await probe.list_dir(str(tmp_path))
        finally:
            probe.close()

    assert asyncio.run(run()) == ["a.js", "b.js", "c"]


def test_missing_directory_lists_as_empty(tmp_path):
    async def run():
        probe = FilesystemProbe()
        try:
            return await probe.list_dir(str(tmp_path / "gone"))
        finally:
            probe.close()

    assert asyncio.run(run()) == []


def test_listing_a_file_lists_as_empty(tmp_path):
    target = tmp_path / "file.js"
    target.write_text("")

    async def run():
        probe = FilesystemProbe()
        try:
            return await probe.list_dir(str(target))
        finally:
            probe.close()

    assert asyncio.run(run()) == []


def test_stat_missing_entry_is_none(tmp_path):
    existing = tmp_path / "here.js"
    existing.write_text("x")

    async def run():
        probe = FilesystemProbe()
        try:
            return await probe.stat(str(existing)), await probe.stat(str(tmp_path / "gone.js"))
        finally:
            probe.close()

    found, missing = asyncio.run(run())
    assert found is not None
    assert found.st_size == 1
    assert missing is None


def test_close_empties_both_caches(tmp_path):
    async def run():
        probe = FilesystemProbe()
        await probe.list_dir(str(tmp_path))
        await probe.stat(str(tmp_path))
        assert len(probe.dirs) == 1
        assert len(probe.stats) == 1
        probe.close()
        return len(probe.dirs), len(probe.stats)

    assert asyncio.run(run()) == (0, 0)

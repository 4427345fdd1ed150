"""Unit tests for package manifest parsing and entry resolution."""

import asyncio

import pytest

from esmap.core.exports import ABSENT, FilePath
from esmap.core.manifest import (
    ManifestError,
    PackageManifest,
    manifest_registrations,
    package_normalizer,
)


class TestPackageManifest:
    def test_parse_main_and_exports(self, tmp_path):
        manifest = PackageManifest.parse('{"main": "lib/a.js", "exports": "./b.js"}', tmp_path)
        assert manifest.main == "lib/a.js"
        assert manifest.exports == FilePath("./b.js")

    def test_parse_without_entry_fields(self, tmp_path):
        manifest = PackageManifest.parse('{"name": "pkg"}', tmp_path)
        assert manifest.main is None
        assert manifest.exports is ABSENT

    def test_non_string_main_is_ignored(self, tmp_path):
        manifest = PackageManifest.parse('{"main": 3}', tmp_path)
        assert manifest.main is None

    def test_invalid_json_raises(self, tmp_path):
        with pytest.raises(ManifestError, match="Failed to parse"):
            PackageManifest.parse("{not json", tmp_path / "package.json")

    def test_non_object_root_raises(self, tmp_path):
        with pytest.raises(ManifestError, match="expected an object"):
            PackageManifest.parse('["a"]', tmp_path / "package.json")

    def test_deeply_nested_json_raises(self, tmp_path):
        path = tmp_path / "package.json"
        with pytest.raises(ManifestError, match="Failed to parse") as exc_info:
            PackageManifest.parse("[" * 100000, path)
        assert exc_info.value.path == path

    def test_deeply_nested_exports_raise(self, tmp_path):
        text = '{"exports": ' + '{"import": ' * 200 + '"./x.js"' + "}" * 201
        with pytest.raises(ManifestError, match="nested deeper"):
            PackageManifest.parse(text, tmp_path / "package.json")

    def test_load_reads_file(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text('{"main": "index.mjs"}', encoding="utf-8")
        manifest = asyncio.run(PackageManifest.load(path))
        assert manifest.main == "index.mjs"

    def test_load_missing_file_raises(self, tmp_path):
        path = tmp_path / "package.json"
        with pytest.raises(ManifestError) as exc_info:
            asyncio.run(PackageManifest.load(path))
        assert exc_info.value.path == path


class TestPackageNormalizer:
    def test_joins_onto_directory(self):
        normalize = package_normalizer("pkgdir")
        assert normalize("lib/entry.js") == "./pkgdir/lib/entry.js"
        assert normalize("./lib/entry.js") == "./pkgdir/lib/entry.js"

    def test_collapses_parent_segments_and_backslashes(self):
        normalize = package_normalizer("a/b")
        assert normalize("../shared/x.js") == "./a/shared/x.js"
        assert normalize("lib\\win.js") == "./a/b/lib/win.js"

    def test_leading_slash_stays_inside_directory(self):
        normalize = package_normalizer("pkg")
        assert normalize("/lib/x.js") == "./pkg/lib/x.js"

    def test_trailing_slash_is_kept(self):
        normalize = package_normalizer("pkg")
        assert normalize("dir/") == "./pkg/dir/"
        assert normalize("./lib/../dist/") == "./pkg/dist/"


class TestManifestRegistrations:
    def test_none_manifest_contributes_nothing(self):
        assert manifest_registrations(None, "pkg") == []

    def test_root_directory_contributes_nothing(self):
        manifest = PackageManifest(main="index.js")
        assert manifest_registrations(manifest, "") == []

    def test_main_then_root_export_then_subpaths(self):
        manifest = PackageManifest.from_dict(
            {
                "main": "main.js",
                "exports": {".": "./exp.js", "./feature": {"browser": "./feature.js"}},
            }
        )
        assert manifest_registrations(manifest, "pkg") == [
            ("pkg", "./pkg/main.js"),
            ("pkg", "./pkg/exp.js"),
            ("pkg/feature", "./pkg/feature.js"),
        ]

    def test_conditions_root_export(self):
        manifest = PackageManifest.from_dict(
            {"exports": {"require": "./index.cjs", "import": "./index.mjs"}}
        )
        assert manifest_registrations(manifest, "vendor/lib") == [
            ("vendor/lib", "./vendor/lib/index.mjs"),
        ]

    def test_custom_normalizer(self):
        manifest = PackageManifest(main="x.js")
        result = manifest_registrations(manifest, "pkg", normalize=lambda p: f"/abs/{p}")
        assert result == [("pkg", "/abs/x.js")]

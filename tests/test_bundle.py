from __future__ import annotations

import json
from pathlib import Path

from webext_manifest.bundle import ChunkInfo, OutputBundle, load_vite_manifest


def test_find_chunk_matches_facade_module_and_output_name() -> None:
    chunk = ChunkInfo(
        file_name="assets/content.1a2b.js",
        facade_module_id="/project/src/content.ts",
        is_entry=True,
    )
    bundle = OutputBundle([chunk])

    assert bundle.find_chunk("src/content.ts") is chunk
    assert bundle.find_chunk("./src/content.ts") is chunk
    assert bundle.find_chunk("/src/content.ts") is chunk
    assert bundle.find_chunk("assets/content.1a2b.js") is chunk


def test_find_chunk_respects_path_boundaries() -> None:
    chunk = ChunkInfo(file_name="assets/other-content.js", facade_module_id="/project/src/other-content.ts")
    bundle = OutputBundle([chunk])

    assert bundle.find_chunk("content.ts") is None
    assert bundle.find_chunk("src/missing.ts") is None


def test_load_vite_manifest_translates_import_keys(tmp_path: Path) -> None:
    manifest = {
        "src/content.ts": {
            "file": "assets/content-abc.js",
            "src": "src/content.ts",
            "isEntry": True,
            "imports": ["_shared-def.js"],
            "dynamicImports": ["src/lazy.ts"],
            "css": ["assets/content-abc.css"],
        },
        "_shared-def.js": {"file": "assets/shared-def.js"},
        "src/lazy.ts": {
            "file": "assets/lazy-123.js",
            "src": "src/lazy.ts",
            "isDynamicEntry": True,
        },
        "src/styles.css": {"file": "assets/styles-456.css", "src": "src/styles.css", "isEntry": True},
    }
    path = tmp_path / "dist" / ".vite" / "manifest.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(manifest), encoding="utf-8")

    bundle = load_vite_manifest(path, tmp_path)

    assert len(bundle) == 3
    content = bundle.find_chunk("src/content.ts")
    assert content is not None
    assert content.file_name == "assets/content-abc.js"
    assert content.is_entry
    assert content.imports == ("assets/shared-def.js",)
    assert content.dynamic_imports == ("assets/lazy-123.js",)
    assert content.imported_css == ("assets/content-abc.css",)
    assert content.facade_module_id == (tmp_path.resolve() / "src/content.ts").as_posix()

    lazy = bundle.get("assets/lazy-123.js")
    assert lazy is not None
    assert lazy.is_dynamic_entry and not lazy.is_entry

    asset = bundle.find_asset("src/styles.css")
    assert asset is not None
    assert asset.file_name == "assets/styles-456.css"

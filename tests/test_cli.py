from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from webext_manifest.cli import app


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _project(root: Path) -> Path:
    manifest = {
        "manifest_version": 3,
        "name": "Example",
        "version": "1.0.0",
        "background": {"service_worker": "src/sw.ts"},
        "content_scripts": [{"matches": ["https://example.com/app/*"], "js": ["src/content.ts"]}],
        "web_accessible_resources": [{"resources": ["icons/*.png"], "matches": ["<all_urls>"]}],
    }
    _write(root / "manifest.json", json.dumps(manifest))
    _write(root / "src" / "sw.ts", "import './shared';\n")
    _write(root / "src" / "content.ts", "import('./lazy');\n")
    _write(
        root / "dist" / ".vite" / "manifest.json",
        json.dumps(
            {
                "src/sw.ts": {"file": "assets/sw-1a.js", "src": "src/sw.ts", "isEntry": True},
                "src/content.ts": {
                    "file": "assets/content-2b.js",
                    "src": "src/content.ts",
                    "isEntry": True,
                    "dynamicImports": ["src/lazy.ts"],
                },
                "src/lazy.ts": {
                    "file": "assets/lazy-3c.js",
                    "src": "src/lazy.ts",
                    "isDynamicEntry": True,
                    "css": ["assets/lazy-3c.css"],
                },
            }
        ),
    )
    return _write(root / "webext.yml", "manifest: manifest.json\n")


def test_inputs_prints_bundler_input_map(tmp_path: Path) -> None:
    config_path = _project(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, ["inputs", "--config", str(config_path), "--json"])

    assert result.exit_code == 0, result.output
    inputs = json.loads(result.output)
    assert list(inputs) == ["src/sw", "src/content"]
    assert inputs["src/content"].endswith("/src/content.ts")


def test_build_writes_manifest_and_service_worker_loader(tmp_path: Path) -> None:
    config_path = _project(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, ["build", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    out_dir = tmp_path / "dist"
    manifest = json.loads((out_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["background"] == {"service_worker": "serviceWorker.js", "type": "module"}
    assert manifest["content_scripts"][0]["js"] == ["assets/content-2b.js"]
    assert manifest["web_accessible_resources"] == [
        {"resources": ["icons/*.png"], "matches": ["<all_urls>"]},
        {
            "resources": ["assets/lazy-3c.css", "assets/lazy-3c.js"],
            "matches": ["https://example.com/*"],
            "use_dynamic_url": True,
        },
    ]
    loader = (out_dir / "serviceWorker.js").read_text(encoding="utf-8")
    assert 'import "/assets/sw-1a.js";' in loader


def test_build_fails_without_writing_when_chunk_is_missing(tmp_path: Path) -> None:
    config_path = _project(tmp_path)
    bundle = tmp_path / "empty.json"
    bundle.write_text("{}", encoding="utf-8")
    out_dir = tmp_path / "out"
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["build", "--config", str(config_path), "--bundle-manifest", str(bundle), "--out-dir", str(out_dir)],
    )

    assert result.exit_code == 1
    assert "Build failed" in result.output
    assert not out_dir.exists()


def test_missing_config_is_a_bad_parameter(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["inputs", "--config", str(tmp_path / "missing.yml")])

    assert result.exit_code == 2

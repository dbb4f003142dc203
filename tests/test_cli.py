"""End-to-end tests for the command-line entry point and script."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from image_rando.cli import main

ROOT = Path(__file__).resolve().parent.parent
SCRIPTS_DIR = ROOT / "scripts"


def _make_images(root: Path, count: int, size: int = 10) -> None:
    root.mkdir(parents=True, exist_ok=True)
    for index in range(count):
        (root / f"photo_{index:03d}.jpg").write_bytes(b"\x00" * size)


def _layout(dest: Path) -> dict:
    return {
        folder.name: sorted(p.name for p in folder.iterdir())
        for folder in sorted(dest.iterdir())
    }


def _run_script(command: list[str], env: dict[str, str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        command,
        cwd=ROOT,
        env=env,
        check=False,
        text=True,
        capture_output=True,
    )


def test_main_copies_into_numbered_folders(tmp_path, capsys):
    """Five files with two per folder end up in folders 1, 2 and 3."""
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    _make_images(src, 5)

    code = main(["--src", str(src), "--dst", str(dst), "--max-files", "2", "--seed", "9", "--no-progress"])

    assert code == 0
    assert sorted(_layout(dst)) == ["1", "2", "3"]
    assert [len(names) for names in _layout(dst).values()] == [2, 2, 1]
    out = capsys.readouterr().out
    assert f"Copied 5 photos into 3 folders under {dst.resolve()}" in out
    assert "Total bytes copied: 50" in out
    assert "Seed: 9" in out


def test_main_same_seed_same_layout(tmp_path):
    """Re-running with a reported seed reproduces the folders."""
    src = tmp_path / "src"
    _make_images(src, 12)
    args = ["--src", str(src), "--max-files", "5", "--max-bytes", "40", "--seed", "31337", "--no-progress"]

    assert main(args + ["--dst", str(tmp_path / "a")]) == 0
    assert main(args + ["--dst", str(tmp_path / "b")]) == 0

    assert _layout(tmp_path / "a") == _layout(tmp_path / "b")


def test_main_refuses_non_empty_destination(tmp_path, capsys):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    _make_images(src, 2)
    dst.mkdir()
    (dst / "old.jpg").write_bytes(b"x")

    code = main(["--src", str(src), "--dst", str(dst), "--no-progress"])

    assert code == 1
    assert "destination folder is not empty" in capsys.readouterr().err
    assert sorted(p.name for p in dst.iterdir()) == ["old.jpg"]


def test_main_reports_empty_source(tmp_path, capsys):
    src = tmp_path / "src"
    src.mkdir()
    (src / "notes.txt").write_text("hi")

    code = main(["--src", str(src), "--dst", str(tmp_path / "dst")])

    assert code == 1
    assert "no .jpg, .jpeg files found" in capsys.readouterr().err
    assert not (tmp_path / "dst").exists()


def test_main_rejects_zero_max_files(tmp_path, capsys):
    src = tmp_path / "src"
    _make_images(src, 1)
    code = main(["--src", str(src), "--dst", str(tmp_path / "dst"), "--max-files", "0"])
    assert code == 1
    assert "max_count" in capsys.readouterr().err


def test_main_requires_source(capsys):
    assert main(["--dst", "somewhere"]) == 1
    assert "--src" in capsys.readouterr().err


def test_main_dry_run_copies_nothing(tmp_path, capsys):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    _make_images(src, 4)

    code = main(["--src", str(src), "--dst", str(dst), "--max-bytes", "20", "--seed", "1", "--dry-run"])

    assert code == 0
    assert not dst.exists()
    out = capsys.readouterr().out
    assert "folder 1: 2 files, 20 bytes" in out
    assert "folder 2: 2 files, 20 bytes" in out
    assert "Planned 4 photos into 2 folders" in out


def test_main_reads_config_file(tmp_path, capsys):
    """CLI flags override values from the YAML file."""
    src = tmp_path / "src"
    _make_images(src, 6)
    config = tmp_path / "distribute.yaml"
    config.write_text("source_dir: src\ndest_dir: out\nmax_count: 1\nseed: 4\n", encoding="utf-8")

    code = main(["--config", str(config), "--max-files", "3", "--no-progress"])

    assert code == 0
    assert sorted(_layout(tmp_path / "out")) == ["1", "2"]
    assert "Seed: 4" in capsys.readouterr().out


def test_script_runs_from_checkout(tmp_path):
    """The helper script works against the source tree."""
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    _make_images(src, 3)
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT / "src"), env.get("PYTHONPATH")]))

    result = _run_script(
        [
            sys.executable,
            str(SCRIPTS_DIR / "split_images_into_folders.py"),
            "--src",
            str(src),
            "--dst",
            str(dst),
            "--seed",
            "5",
            "--no-progress",
        ],
        env=env,
    )

    assert result.returncode == 0, result.stderr
    assert "Copied 3 photos into 1 folders" in result.stdout
    assert "Seed used: 5" in result.stderr
    assert sorted(p.name for p in (dst / "1").iterdir()) == ["photo_000.jpg", "photo_001.jpg", "photo_002.jpg"]

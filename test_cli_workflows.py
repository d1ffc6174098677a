from __future__ import annotations

import hashlib
import json
import os
import subprocess
import sys
import tempfile
import unittest
import zipfile
from pathlib import Path


PROCESS = "2023.7654321"


def _build_fixture_tree(root: Path) -> Path:
    folder = root / "cases" / PROCESS / "laudo-01"
    (folder / "midia" / "disco1").mkdir(parents=True)
    (folder / "hashlog.sha256").write_bytes(b"hash log contents\n" * 10)
    (folder / "midia" / "disco1" / "Lista de Arquivos.csv").write_text("nome;tamanho\na.txt;1\n", encoding="utf-8")
    (folder / "midia" / "disco1" / "image.dd").write_bytes(os.urandom(1024))
    return folder


class CLIIntegrationTests(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.base = Path(tmp.name).resolve()
        self.src = self.base / "src"
        self.dest = self.base / "dest"
        self.folder = _build_fixture_tree(self.src)
        self.logical = f"cases/{PROCESS}/laudo-01"

    def run_cli(self, args, *, expect: int | None = 0):
        cmd = [sys.executable, "-m", "laudo.cli", "--root", str(self.src), "--dest", str(self.dest)] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        for key in ("ROOT_PATH", "TARGET_PATH"):
            env.pop(key, None)
        proc = subprocess.run(
            cmd,
            cwd=str(self.base),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def test_package_hash_probe_check(self):
        probe_before = self.run_cli(["probe", self.logical], expect=1)
        self.assertEqual(probe_before.stdout.strip(), "empty")

        pkg = self.run_cli(["package", self.logical, "--json"])
        result = json.loads(pkg.stdout)
        self.assertEqual(result["process"], PROCESS)
        self.assertEqual(result["files"], 2)
        self.assertTrue(result["archive"].endswith("anexo-laudo-laudo-01.zip"))

        hash_proc = self.run_cli(["hash", self.logical])
        self.assertEqual(hash_proc.stdout.strip(), result["root_hash"])

        probe_after = self.run_cli(["probe", self.logical, "--json"])
        self.assertEqual(json.loads(probe_after.stdout)["status"], "hasZip")

        check_ok = self.run_cli(["check", self.logical])
        self.assertIn("OK", check_ok.stdout)

        (self.folder / "hashlog.sha256").write_bytes(b"rewritten\n")
        check_fail = self.run_cli(["check", self.logical], expect=1)
        self.assertIn("FAIL", check_fail.stdout)
        # the archive still reports the value sealed at packaging time
        self.assertEqual(self.run_cli(["hash", self.logical]).stdout.strip(), result["root_hash"])

    def test_store_root_hash_flag(self):
        pkg = json.loads(self.run_cli(["package", self.logical, "--store-root-hash", "--json"]).stdout)
        with zipfile.ZipFile(pkg["archive"]) as zf:
            manifest = zf.read("hashes.txt")
            stored = zf.read("root_hash.txt").decode("utf-8")
        self.assertEqual(stored, hashlib.sha256(manifest).hexdigest())
        self.assertEqual(self.run_cli(["hash", self.logical]).stdout.strip(), stored)

    def test_list(self):
        proc = self.run_cli(["list", self.logical])
        lines = proc.stdout.splitlines()
        self.assertIn(f"file\t{self.logical}/hashlog.sha256", lines)
        self.assertIn(f"dir\t{self.logical}/midia", lines)

    def test_errors_exit_two(self):
        missing = self.run_cli(["hash", self.logical], expect=2)
        self.assertIn("Error:", missing.stderr)

        (self.src / "loose").mkdir()
        (self.src / "loose" / "hashlog.1").write_bytes(b"x")
        no_process = self.run_cli(["package", "loose"], expect=2)
        self.assertIn("Hint:", no_process.stderr)

        empty = self.src / "cases" / PROCESS / "vazio"
        empty.mkdir()
        self.run_cli(["package", f"cases/{PROCESS}/vazio"], expect=2)
        self.assertFalse(self.dest.exists())

        escape = self.run_cli(["list", "../.."], expect=2)
        self.assertIn("Error:", escape.stderr)


if __name__ == "__main__":
    unittest.main()

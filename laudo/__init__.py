"""
laudo — tamper-evident packaging of hash logs for process folders.

Features:

- Depth-bounded discovery of ``hashlog.*`` and ``Lista de Arquivos.csv`` files
  below a process folder (``aaaa.nnnnnnn...``).
- Streaming SHA-256 per file, a line-oriented manifest (``hashes.txt``) and a
  root hash over the manifest's exact bytes.
- Zip archives partitioned by packaging year:
  ``<dest>/<year>/<process>/anexo-laudo-<leaf>.zip``.
- Newest-first lookup across year partitions and root-hash recovery that
  streams archive members without extracting them.
- A FastAPI service and a CLI over the same operations.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "scanner",
    "manifest",
    "writer",
    "locator",
    "reader",
    "service",
]

# Importable programmatic API is available via laudo.service (package_folder,
# retrieve_root_hash, probe_archive, check_folder) which take an explicit Settings.

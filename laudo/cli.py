from __future__ import annotations

import argparse
import json as _json
import logging
import sys
import time
from typing import List

from laudo.config import Settings, load_settings
from laudo.errors import (
    ArchiveNotFoundError,
    LaudoError,
    PathResolutionError,
)
from laudo.locator import PROBE_HAS_ZIP
from laudo.service import check_folder, list_folder, package_folder, probe_archive, retrieve_root_hash


def cmd_list(settings: Settings, path: str = "", *, as_json: bool = False) -> bool:
    """List the immediate children of a folder below the source root.

    Args:
        settings: Resolved runtime settings.
        path: Folder path relative to the source root ("" for the root itself).
        as_json: When True, print the listing as JSON.
    """
    items = list_folder(settings, path)
    if as_json:
        print(_json.dumps([{"name": i.name, "is_dir": i.is_dir, "path": i.relative_path} for i in items]))
        return True
    for i in items:
        print(f"{'dir' if i.is_dir else 'file'}\t{i.relative_path}")
    return True


def cmd_package(settings: Settings, path: str, *, store_root_hash: bool = False, as_json: bool = False) -> bool:
    """Package a folder's hash logs into its year-partitioned archive.

    Args:
        settings: Resolved runtime settings.
        path: Folder path relative to the source root.
        store_root_hash: Also write root_hash.txt so readers can skip re-hashing.
        as_json: When True, print a JSON result instead of the summary lines.
    """
    t0 = time.time()
    result = package_folder(settings, path, store_root_hash=store_root_hash)
    if as_json:
        print(_json.dumps({
            "archive": result.archive_path,
            "root_hash": result.root_hash,
            "process": result.process_id,
            "files": result.file_count,
        }))
        return True
    dt = max(0.000001, time.time() - t0)
    print(f"Archive: {result.archive_path}")
    print(f"Process: {result.process_id}")
    print(f"Root hash: {result.root_hash}")
    print(f"Done: {result.file_count} file(s) in {dt:.1f}s")
    return True


def cmd_hash(settings: Settings, path: str) -> bool:
    """Print the root hash of the newest archive for a folder."""
    print(retrieve_root_hash(settings, path))
    return True


def cmd_probe(settings: Settings, path: str, *, as_json: bool = False) -> bool:
    """Report whether an archive exists for a folder, without opening it.

    Returns:
        True when an archive was found.
    """
    res = probe_archive(settings, path)
    if as_json:
        out = {"status": res.status}
        if res.status == PROBE_HAS_ZIP:
            out.update({"archive": res.archive_name, "year": res.year})
        print(_json.dumps(out))
    elif res.status == PROBE_HAS_ZIP:
        print(f"{res.status}\t{res.year}\t{res.archive_name}")
    else:
        print(res.status)
    return res.status == PROBE_HAS_ZIP


def cmd_check(settings: Settings, path: str) -> bool:
    """Re-hash the live folder and compare with the archived root hash.

    Prints:
        "OK" when both root hashes match, "FAIL" otherwise.
    """
    report = check_folder(settings, path)
    print(f"Archive: {report.archive_path}")
    print(f"  Archived: {report.archived_root_hash}")
    print(f"  Current:  {report.current_root_hash}")
    print("OK" if report.matches else "FAIL")
    return report.matches


def cmd_serve(settings: Settings) -> bool:
    """Serve the HTTP API until interrupted."""
    import uvicorn

    from laudo.api import create_app

    print(f"Serving on http://{settings.host}:{settings.port}")
    print(f"  Source root: {settings.source_root}")
    print(f"  Destination: {settings.destination_base}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="laudo",
        description="Package process hash logs into tamper-evident zip archives",
        epilog=(
            "Settings default to ROOT_PATH, TARGET_PATH, HOST and PORT from the environment "
            "or a .env file in the working directory."
        ),
    )
    ap.add_argument("--root", help="Source root (overrides ROOT_PATH)")
    ap.add_argument("--dest", help="Destination base for archives (overrides TARGET_PATH)")
    ap.add_argument("--env-file", help="Load settings from this dotenv file")
    ap.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_list = sub.add_parser("list", help="List a folder below the source root")
    ap_list.add_argument("path", nargs="?", default="", help="Folder path relative to the source root")
    ap_list.add_argument("--json", action="store_true", help="Emit JSON")

    ap_package = sub.add_parser("package", help="Package a folder into its archive")
    ap_package.add_argument("path", help="Folder path relative to the source root")
    ap_package.add_argument(
        "--store-root-hash",
        action="store_true",
        help="Also store root_hash.txt in the archive (readers then skip re-hashing the manifest)",
    )
    ap_package.add_argument("--json", action="store_true", help="Emit JSON result")

    ap_hash = sub.add_parser("hash", help="Print the root hash of the newest archive for a folder")
    ap_hash.add_argument("path", help="Folder path relative to the source root")

    ap_probe = sub.add_parser("probe", help="Check whether an archive exists for a folder")
    ap_probe.add_argument("path", help="Folder path relative to the source root")
    ap_probe.add_argument("--json", action="store_true", help="Emit JSON result")

    ap_check = sub.add_parser("check", help="Compare the archived root hash with the live folder")
    ap_check.add_argument("path", help="Folder path relative to the source root")

    ap_serve = sub.add_parser("serve", help="Run the HTTP API")
    ap_serve.add_argument("--host", help="Bind address (overrides HOST)")
    ap_serve.add_argument("--port", type=int, help="Listening port (overrides PORT)")

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings(args.env_file).with_overrides(
            source_root=args.root,
            destination_base=args.dest,
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
        )
        if args.cmd == "list":
            cmd_list(settings, args.path, as_json=args.json)
        elif args.cmd == "package":
            cmd_package(settings, args.path, store_root_hash=args.store_root_hash, as_json=args.json)
        elif args.cmd == "hash":
            cmd_hash(settings, args.path)
        elif args.cmd == "probe":
            found = cmd_probe(settings, args.path, as_json=args.json)
            sys.exit(0 if found else 1)
        elif args.cmd == "check":
            ok = cmd_check(settings, args.path)
            sys.exit(0 if ok else 1)
        elif args.cmd == "serve":
            cmd_serve(settings)
        else:
            raise RuntimeError("Unknown command")
    except PathResolutionError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Hint: the path must contain a process folder named like 'aaaa.nnnnnnn'.", file=sys.stderr)
        sys.exit(2)
    except ArchiveNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Hint: run 'laudo package' for this folder first.", file=sys.stderr)
        sys.exit(2)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (LaudoError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()

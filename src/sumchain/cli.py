from __future__ import annotations

import argparse
import sys
from typing import Any


def _dump(obj: Any) -> str:
    from sumchain.assurance.logging import canonical_json

    return canonical_json(obj)


def _emit(obj: Any) -> None:
    sys.stdout.write(_dump(obj) + "\n")
    sys.stdout.flush()


def _safe_cli_log(cfg: Any, *, action: str, outcome: str, details: dict[str, Any]) -> None:
    if not getattr(cfg, "log_enabled", False):
        return
    try:
        from sumchain.assurance.logging import append_jsonl_log_event

        append_jsonl_log_event(cfg=cfg, action=action, outcome=outcome, details=details)
    except Exception:  # pragma: no cover - best-effort logging
        # Command results must not depend on logging availability.
        pass


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sumchain", description="Track a file's generations as a chain of digests")
    sub = parser.add_subparsers(dest="command", required=True)

    add_parser = sub.add_parser("add", help="Digest a file and append it to a chain file")
    add_parser.add_argument("chain", help="Chain file to update (created when missing)")
    add_parser.add_argument("file", help="File whose contents are digested")
    add_parser.add_argument("--copy-to", default=None, help="Also copy the file here while digesting it")
    add_parser.add_argument(
        "--algorithm",
        default=None,
        help="Hash algorithm for a new chain file; must match an existing one",
    )

    sums_parser = sub.add_parser("sums", help="List every sum in a chain file")
    sums_parser.add_argument("chain", help="Chain file to read")

    digest_parser = sub.add_parser("digest", help="Summarize a chain file as a single digest")
    digest_parser.add_argument("chain", help="Chain file to read")

    compare_parser = sub.add_parser("compare", help="Find where two chain files converge or diverge")
    compare_parser.add_argument("chain", help="Chain file to scan with")
    compare_parser.add_argument("other", help="Chain file whose tail is reported")
    compare_parser.add_argument(
        "--mode",
        choices=("first", "last"),
        default="last",
        help="first: other chain from its first shared sum; last: other chain after the shared prefix",
    )

    return parser


def _cmd_add(args: argparse.Namespace, cfg: Any) -> tuple[int, dict[str, Any]]:
    from sumchain.chainfile import load_chain, save_chain
    from sumchain.hashing import hasher_factory

    requested = args.algorithm.strip().lower() if args.algorithm else None
    algorithm, chain = load_chain(args.chain, default_algorithm=requested or cfg.algorithm)
    if requested and requested != algorithm:
        raise ValueError(f"Chain file uses {algorithm}, not {requested}")
    make_hasher = hasher_factory(algorithm)

    with open(args.file, "rb") as stream:
        if args.copy_to:
            with open(args.copy_to, "wb") as sink:
                digest = chain.add_inline(sink, stream, make_hasher(), chunk_size=cfg.chunk_size)
        else:
            digest = chain.add(stream, make_hasher(), chunk_size=cfg.chunk_size)

    save_chain(args.chain, algorithm, chain)
    return 0, {"ok": True, "sum": digest, "count": len(chain)}


def _cmd_compare(args: argparse.Namespace, cfg: Any) -> tuple[int, dict[str, Any]]:
    from sumchain.chainfile import load_chain
    from sumchain.errors import NoMatchError

    algorithm, chain = load_chain(args.chain, default_algorithm=cfg.algorithm)
    other_algorithm, other = load_chain(args.other, default_algorithm=algorithm)
    if algorithm != other_algorithm:
        raise ValueError(f"Cannot compare {algorithm} chain with {other_algorithm} chain")

    try:
        if args.mode == "first":
            result = chain.first_match(other)
        else:
            result = chain.last_match(other)
    except NoMatchError:
        return 2, {"ok": False, "mode": args.mode, "error": "no match"}

    return 0, {"ok": True, "mode": args.mode, "sums": result.all_sums()}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg: Any = None
    try:
        from sumchain.config import load_config

        cfg = load_config()

        if args.command == "add":
            code, payload = _cmd_add(args, cfg)
        elif args.command == "compare":
            code, payload = _cmd_compare(args, cfg)
        elif args.command == "sums":
            from sumchain.chainfile import load_chain

            algorithm, chain = load_chain(args.chain, default_algorithm=cfg.algorithm)
            code, payload = 0, {"ok": True, "algorithm": algorithm, "sums": chain.all_sums()}
        elif args.command == "digest":
            from sumchain.chainfile import load_chain
            from sumchain.hashing import new_hasher

            algorithm, chain = load_chain(args.chain, default_algorithm=cfg.algorithm)
            digest = chain.sum(new_hasher(algorithm))
            code, payload = 0, {"ok": True, "algorithm": algorithm, "sum": digest, "count": len(chain)}
        else:
            raise ValueError(f"Unknown command: {args.command}")

        _safe_cli_log(cfg, action=args.command, outcome="ok" if code == 0 else "error", details=payload)
        _emit(payload)
        return code
    except Exception as exc:  # CLI safety net
        if cfg is not None:
            _safe_cli_log(cfg, action=args.command, outcome="error", details={"error": str(exc)})
        _emit({"ok": False, "error": str(exc)})
        return 1


__all__ = ["main"]

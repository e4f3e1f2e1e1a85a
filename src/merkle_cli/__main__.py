from __future__ import annotations
import json
import os
import pathlib
from typing import List, Optional

import typer
from rich import print
from rich.markup import escape
import requests

from merkle_api.hashing import get_engine, to_hex
from merkle_api.merkle import InvalidIndexError, build, prove
from merkle_api.models import InclusionProofModel
from merkle_api.settings import settings
from merkle_api.signing import ed25519_generate, make_root_head
from merkle_sdk.verify import verify_proof_document, verify_root_head

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _read_blocks(files: List[pathlib.Path], lines: Optional[pathlib.Path]) -> List[bytes]:
    if lines is not None:
        if files:
            raise typer.BadParameter("use either FILES or --lines, not both")
        return lines.read_bytes().splitlines()
    return [p.read_bytes() for p in files]


def _engine(algorithm: Optional[str]):
    try:
        return get_engine(algorithm)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _load_json(path: pathlib.Path):
    try:
        return json.loads(path.read_text())
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        print(f"[red]Cannot read {escape(str(path))}: {escape(str(e))}[/red]")
        raise typer.Exit(code=2)


@app.command()
def root(
    files: List[pathlib.Path] = typer.Argument(None, help="Block files, in order"),
    lines: Optional[pathlib.Path] = typer.Option(None, help="One block per line"),
    algorithm: Optional[str] = typer.Option(None, help="Hash algorithm"),
):
    """Print the root digest of the given blocks."""
    tree = build(_read_blocks(files or [], lines), _engine(algorithm))
    if tree.root_digest is None:
        print("[yellow]No blocks; tree has no root[/yellow]")
        raise typer.Exit(code=1)
    print(to_hex(tree.root_digest))


@app.command("prove")
def prove_cmd(
    index: int = typer.Option(..., help="Leaf index to prove"),
    files: List[pathlib.Path] = typer.Argument(None, help="Block files, in order"),
    lines: Optional[pathlib.Path] = typer.Option(None, help="One block per line"),
    algorithm: Optional[str] = typer.Option(None, help="Hash algorithm"),
    out: Optional[pathlib.Path] = typer.Option(None, help="Write proof JSON here"),
):
    """Emit an inclusion proof document for the block at INDEX."""
    tree = build(_read_blocks(files or [], lines), _engine(algorithm))
    try:
        proof = prove(tree, index)
    except InvalidIndexError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)
    doc = InclusionProofModel.from_proof(
        proof,
        root=tree.root_digest,
        leaf_index=index,
        leaf_count=tree.leaf_count,
        algorithm=tree.algorithm,
    )
    text = json.dumps(doc.model_dump(), indent=2)
    if out is None:
        typer.echo(text)
    else:
        out.write_text(text)
        print(f"[green]Wrote proof to {out}[/green]")


@app.command("verify")
def verify_cmd(
    data: pathlib.Path = typer.Argument(..., help="File holding the leaf block"),
    proof: pathlib.Path = typer.Option(..., help="Proof JSON document"),
    root_hex: Optional[str] = typer.Option(None, help="Trusted root (hex)"),
):
    """Check a block against a proof document."""
    ok = verify_proof_document(
        data.read_bytes(), _load_json(proof), root_hex=root_hex
    )
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def gen_keys(out_dir: str = typer.Option("./keys", help="Directory to write keypair")):
    os.makedirs(out_dir, exist_ok=True)
    sk, pk = ed25519_generate()
    (pathlib.Path(out_dir) / "ed25519_private.key").write_bytes(sk)
    (pathlib.Path(out_dir) / "ed25519_public.key").write_bytes(pk)
    print(f"[green]Wrote keys to {out_dir}[/green]")


@app.command()
def sign_root(
    files: List[pathlib.Path] = typer.Argument(None, help="Block files, in order"),
    lines: Optional[pathlib.Path] = typer.Option(None, help="One block per line"),
    algorithm: Optional[str] = typer.Option(None, help="Hash algorithm"),
    out: pathlib.Path = typer.Option(pathlib.Path("root_head.json")),
):
    """Build a tree and emit an Ed25519-signed root head."""
    tree = build(_read_blocks(files or [], lines), _engine(algorithm))
    if tree.root_digest is None:
        print("[yellow]No blocks; nothing to sign[/yellow]")
        raise typer.Exit(code=1)
    sk = pathlib.Path(settings.signing_key_path).read_bytes()
    pk = pathlib.Path(settings.signing_pubkey_path).read_bytes()
    head = make_root_head(tree, sk, pk)
    out.write_text(json.dumps(head.model_dump(), indent=2))
    print(f"[green]Wrote root head to {out}[/green]")


@app.command()
def verify_head(path: pathlib.Path):
    ok = verify_root_head(_load_json(path))
    print({"signature_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def verify_remote(
    url: str = typer.Option(..., help="POST URL for /merkle/verify"),
    data: pathlib.Path = typer.Argument(..., help="File holding the leaf block"),
    proof: pathlib.Path = typer.Option(..., help="Proof JSON document"),
):
    """Ask a running proof service to check a block."""
    payload = {
        "data_hex": data.read_bytes().hex(),
        "proof": _load_json(proof),
    }
    resp = requests.post(url, json=payload, timeout=30)
    print(f"[cyan]Status[/cyan]: {resp.status_code}")
    try:
        print(resp.json())
    except ValueError:
        print(resp.text)


if __name__ == "__main__":
    app()

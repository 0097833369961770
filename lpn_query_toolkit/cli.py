#!/usr/bin/env python3
"""
Unified CLI for the LPN Query Toolkit.

Examples:
  - Inspect a proof bundle
    lpn-query decode-pis --proof full_proof.bin
    lpn-query decode-pis --calldata process_query.hex

  - Verify a bundle against a query with the on-chain Groth16 verifier
    lpn-query verify-query --proof full_proof.bin --query query.json --chain-id 11155111
    lpn-query verify-query --proof bundle.json --contract 0x... --user 0x... \
        --min-block 5594942 --max-block 5594951 --block-hash 0x... --identifier nft
    lpn-query verify-query --calldata process_query.hex --chain-id 11155111

  - Build public inputs from a field description
    lpn-query encode-pis --fields pis.json
"""

import argparse
from typing import Any, Dict, List, Optional, Tuple

from lpn_query_toolkit.commands.helpers import (
    exit_on_failure,
    handle_command_error,
)
from lpn_query_toolkit.commands.validation import (
    validate_chain_id,
    validate_eth_address,
    validate_identifier,
)
from lpn_query_toolkit.query.abi import decode_process_query_calldata
from lpn_query_toolkit.query.binding import compute_public_inputs_digest
from lpn_query_toolkit.query.bundle import ProofBundle
from lpn_query_toolkit.query.codec import (
    decode_public_inputs,
    encode_public_inputs,
    public_inputs_to_words,
)
from lpn_query_toolkit.query.primitive import is_in_scalar_field
from lpn_query_toolkit.query.service import QueryVerificationService
from lpn_query_toolkit.query.types import (
    PublicInputs,
    Query,
    VerifiedQueryDict,
)
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import NonRetryableException
from lpn_query_toolkit.shared.logging import set_log_level
from lpn_query_toolkit.utils.formatters import (
    console,
    create_groth16_inputs_table,
    create_public_inputs_table,
    format_address,
    format_identifier,
    load_json,
    save_json_output,
)

# Command-line flags that override fields of the --query file
_QUERY_FLAGS = {
    "contract": "contract_address",
    "user": "user_address",
    "client": "client_address",
    "min_block": "min_block_number",
    "max_block": "max_block_number",
    "block_hash": "block_hash",
    "rewards_rate": "rewards_rate",
    "identifier": "identifier",
}


def _load_calldata(path: str) -> Tuple[ProofBundle, Query]:
    """Read hex ``processQuery`` calldata from a text or JSON file."""
    if path.endswith(".json"):
        calldata = load_json(path).get("calldata")
        if not calldata:
            raise ValueError(f"No calldata field in {path}")
    else:
        with open(path) as f:
            calldata = f.read().strip()
    return decode_process_query_calldata(calldata)


def _load_bundle(
    args: argparse.Namespace,
) -> Tuple[ProofBundle, Dict[str, Any]]:
    """Bundle plus the query fields captured with it, if any."""
    if args.calldata:
        bundle, query = _load_calldata(args.calldata)
        return bundle, query.to_dict()
    return ProofBundle.load(args.proof), {}


def _load_query(
    args: argparse.Namespace, captured: Optional[Dict[str, Any]] = None
) -> Query:
    data: Dict[str, Any] = dict(captured or {})
    if args.query:
        data.update(load_json(args.query))
    for flag, field_name in _QUERY_FLAGS.items():
        value = getattr(args, flag, None)
        if value is not None:
            data[field_name] = value

    for field_name in ("contract_address", "user_address", "client_address"):
        if field_name in data:
            data[field_name] = validate_eth_address(
                data[field_name], field_name
            )
    if "identifier" in data:
        data["identifier"] = int(validate_identifier(str(data["identifier"])))
    return Query.from_dict(data)


def cmd_decode_pis(args: argparse.Namespace) -> None:
    bundle, _ = _load_bundle(args)
    public_inputs = bundle.public_input_bytes()
    pis = decode_public_inputs(public_inputs)
    digest = compute_public_inputs_digest(public_inputs)

    inputs = bundle.groth16_inputs
    console.print(
        create_groth16_inputs_table(
            inputs, [is_in_scalar_field(v) for v in inputs]
        )
    )
    console.print(create_public_inputs_table(pis, digest))

    if inputs[2] == digest:
        console.print("[green]✓ Public inputs match the proof digest[/green]")
    else:
        console.print("[red]✗ Public inputs do not match the proof digest[/red]")

    if args.output:
        save_json_output(
            {
                "groth16_inputs": [hex(v) for v in inputs],
                "public_inputs": pis.to_dict(),
                "digest": hex(digest),
            },
            args.output,
        )


def cmd_verify_query(args: argparse.Namespace) -> None:
    chain_id = args.chain_id
    validate_chain_id(chain_id)
    verifier = (
        validate_eth_address(args.verifier, "verifier")
        if args.verifier
        else None
    )

    bundle, captured = _load_bundle(args)
    query = _load_query(args, captured)
    circuit_digest = QueryConstants.get_circuit_digest(args.circuit_digest)

    service = QueryVerificationService.for_chain(
        chain_id, verifier, circuit_digest
    )
    result = service.verify(bundle, query)
    exit_on_failure(result)

    values = result.unwrap()
    console.print(
        f"[green]✓ Verified {format_identifier(query.identifier)} query[/green]"
        f" for {format_address(query.user_address)} on "
        f"{format_address(query.contract_address)}"
    )
    for value in values:
        console.print(f"  {value}")

    out: VerifiedQueryDict = {
        "query": query.to_dict(),
        "identifier": format_identifier(query.identifier),
        "result": [str(v) for v in values],
    }
    blocks = f"{query.min_block_number}_{query.max_block_number}"
    filename = args.output or f"query_result_{blocks}.json"
    save_json_output(dict(out), filename)


def cmd_encode_pis(args: argparse.Namespace) -> None:
    pis = PublicInputs.from_dict(load_json(args.fields))
    public_inputs = encode_public_inputs(pis)
    digest = compute_public_inputs_digest(public_inputs)

    console.print(create_public_inputs_table(pis, digest))

    out = {
        "public_inputs": "0x" + public_inputs.hex(),
        "words": [
            "0x" + w.hex() for w in public_inputs_to_words(public_inputs)
        ],
        "digest": hex(digest),
    }
    filename = args.output or "public_inputs.json"
    save_json_output(out, filename)


def _add_bundle_source(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--proof", type=str, help="Bundle (.bin or .json)")
    source.add_argument(
        "--calldata",
        type=str,
        help="Captured processQuery calldata (hex text or JSON)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lpn-query",
        description="Unified CLI for the LPN Query Toolkit",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # decode-pis
    p_dec = sub.add_parser(
        "decode-pis", help="Decode the public inputs of a proof bundle"
    )
    _add_bundle_source(p_dec)
    p_dec.add_argument("--output", type=str, help="Output filename")
    p_dec.set_defaults(func=cmd_decode_pis)

    # verify-query
    p_vq = sub.add_parser(
        "verify-query", help="Verify a proof bundle against a query"
    )
    _add_bundle_source(p_vq)
    p_vq.add_argument("--query", type=str, help="Query JSON file")
    p_vq.add_argument("--contract", type=str, help="Queried contract")
    p_vq.add_argument("--user", type=str, help="Queried user")
    p_vq.add_argument("--client", type=str, help="Client address")
    p_vq.add_argument("--min-block", type=int, help="Min block number")
    p_vq.add_argument("--max-block", type=int, help="Max block number")
    p_vq.add_argument("--block-hash", type=str, help="Block hash")
    p_vq.add_argument("--rewards-rate", type=str, help="ERC20 rewards rate")
    p_vq.add_argument(
        "--identifier", type=str, help="Query identifier (nft, erc20)"
    )
    p_vq.add_argument("--chain-id", type=int, default=11155111)
    p_vq.add_argument(
        "--circuit-digest",
        type=str,
        help="Wrapping circuit digest (defaults to LPN_CIRCUIT_DIGEST)",
    )
    p_vq.add_argument(
        "--verifier", type=str, help="Groth16 verifier contract address"
    )
    p_vq.add_argument("--output", type=str, help="Output filename")
    p_vq.set_defaults(func=cmd_verify_query)

    # encode-pis
    p_enc = sub.add_parser(
        "encode-pis", help="Encode public inputs from a JSON description"
    )
    p_enc.add_argument(
        "--fields", type=str, required=True, help="Field description JSON"
    )
    p_enc.add_argument("--output", type=str, help="Output filename")
    p_enc.set_defaults(func=cmd_encode_pis)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)
    try:
        args.func(args)
    except (NonRetryableException, ValueError) as e:
        handle_command_error(e)
    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise


if __name__ == "__main__":
    main()

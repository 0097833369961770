"""Shared formatting and file utilities for commands."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from lpn_query_toolkit.query.types import PublicInputs, QueryIdentifier

# Shared console instance
console = Console()


def load_json(file_path: str) -> Dict[str, Any]:
    """
    Load and parse a JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed JSON data as dictionary
    """
    with open(file_path, "r") as file:
        return json.load(file)


def format_address(address: str, length: int = 10) -> str:
    """
    Format an Ethereum address to show first and last characters.

    Args:
        address: Ethereum address
        length: Total visible characters (default: 10)

    Returns:
        Formatted address like "0x1234...5678"
    """
    if not address:
        return "N/A"
    if len(address) <= length:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_identifier(identifier: int) -> str:
    """Render an operation tag as "NFT (67)", or the raw value if unknown."""
    try:
        return f"{QueryIdentifier(identifier).name} ({identifier})"
    except ValueError:
        return f"unknown ({identifier})"


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filepath = output_path / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def create_public_inputs_table(
    pis: PublicInputs, digest: Optional[int] = None
) -> Table:
    """Create a two-column table of decoded public inputs."""
    table = Table(title="Public Inputs", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("identifier", format_identifier(pis.identifier))
    table.add_row("block_number", str(pis.block_number))
    table.add_row("range", str(pis.range))
    table.add_row(
        "blocks", f"{pis.min_block_number} - {pis.max_block_number}"
    )
    table.add_row("contract_address", pis.contract_address)
    table.add_row("user_address", pis.user_address)
    table.add_row("mapping_slot", str(pis.mapping_slot))
    table.add_row("mapping_slot_length", str(pis.mapping_slot_length))
    table.add_row(
        "block_hash", "0x" + pis.block_hash.to_bytes(32, "big").hex()
    )
    if pis.identifier == QueryIdentifier.ERC20:
        table.add_row("rewards_rate", str(pis.rewards_rate))
        table.add_row("erc20_result", str(pis.erc20_result))
    else:
        table.add_row("nft_ids", ", ".join(str(i) for i in pis.nft_ids))
    if digest is not None:
        table.add_row("digest", hex(digest))
    return table


def create_groth16_inputs_table(
    inputs: List[int], in_field: List[bool]
) -> Table:
    """Create a table of the Groth16 public inputs and their field check."""
    table = Table(title="Groth16 Inputs", show_header=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("Value", style="white")
    table.add_column("In field", justify="center")

    for i, (value, ok) in enumerate(zip(inputs, in_field)):
        mark = "[green]✓[/green]" if ok else "[red]✗[/red]"
        table.add_row(str(i), hex(value), mark)
    return table

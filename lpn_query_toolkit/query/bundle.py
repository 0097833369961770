"""
Proof bundle wire format.

A bundle is a sequence of 32-byte words:

    words[0:8]    Groth16 proof (field elements, big-endian)
    words[8:11]   Groth16 public inputs (field elements, big-endian)
    words[11:]    recursive-proof public inputs, PI_TOTAL_LEN raw bytes

The same bytes are what the prover writes to ``full_proof.bin`` and what
the on-chain verifier receives as ``bytes32[] data``.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

from hexbytes import HexBytes

from lpn_query_toolkit.query.codec import (
    public_inputs_to_words,
    words_to_public_inputs,
)
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import MalformedBundle

WORD_LEN = QueryConstants.WORD_LEN
NUM_PROOF_WORDS = QueryConstants.NUM_PROOF_WORDS
NUM_INPUT_WORDS = QueryConstants.NUM_INPUT_WORDS
NUM_GROTH16_WORDS = QueryConstants.NUM_GROTH16_WORDS

WordLike = Union[bytes, str, int]


def _to_word(value: WordLike, index: int, is_last: bool) -> bytes:
    if isinstance(value, int):
        if not 0 <= value < 1 << 256:
            raise MalformedBundle(f"Word {index} is not a uint256")
        return value.to_bytes(WORD_LEN, "big")
    try:
        word = bytes(HexBytes(value))
    except (TypeError, ValueError) as e:
        raise MalformedBundle(f"Word {index} is not valid hex: {e}") from e
    if len(word) == WORD_LEN:
        return word
    # bytes32 arguments are right-padded, so a short final chunk is too
    if is_last and 0 < len(word) < WORD_LEN:
        return word + b"\x00" * (WORD_LEN - len(word))
    raise MalformedBundle(
        f"Word {index} is {len(word)} bytes, expected {WORD_LEN}"
    )


def _parse_element(value: Union[int, str]) -> int:
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            raise MalformedBundle(
                f"Invalid field element: {value!r}"
            ) from None
    return value


@dataclass(frozen=True)
class ProofBundle:
    """An immutable, length-checked proof bundle."""

    words: Tuple[bytes, ...]

    def __post_init__(self):
        expected = QueryConstants.MIN_BUNDLE_WORDS
        if len(self.words) != expected:
            raise MalformedBundle(
                f"Bundle must have {expected} words, got {len(self.words)}"
            )
        for i, word in enumerate(self.words):
            if len(word) != WORD_LEN:
                raise MalformedBundle(
                    f"Word {i} is {len(word)} bytes, expected {WORD_LEN}"
                )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_words(cls, words: Sequence[WordLike]) -> "ProofBundle":
        """Build a bundle from 32-byte words given as bytes, hex or ints."""
        last = len(words) - 1
        return cls(
            tuple(_to_word(w, i, i == last) for i, w in enumerate(words))
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "ProofBundle":
        """Chunk a ``full_proof.bin`` blob into words."""
        data = bytes(data)
        words = [data[i : i + WORD_LEN] for i in range(0, len(data), WORD_LEN)]
        return cls.from_words(words)

    @classmethod
    def from_hex(cls, value: str) -> "ProofBundle":
        return cls.from_bytes(bytes(HexBytes(value)))

    @classmethod
    def build(
        cls,
        proof: Sequence[int],
        inputs: Sequence[int],
        public_inputs: bytes,
    ) -> "ProofBundle":
        """Assemble a bundle from its three parts."""
        if len(proof) != NUM_PROOF_WORDS:
            raise MalformedBundle(
                f"Groth16 proof needs {NUM_PROOF_WORDS} elements, "
                f"got {len(proof)}"
            )
        if len(inputs) != NUM_INPUT_WORDS:
            raise MalformedBundle(
                f"Groth16 inputs need {NUM_INPUT_WORDS} elements, "
                f"got {len(inputs)}"
            )
        if len(public_inputs) != QueryConstants.PI_TOTAL_LEN:
            raise MalformedBundle(
                f"Public inputs must be {QueryConstants.PI_TOTAL_LEN} bytes, "
                f"got {len(public_inputs)}"
            )
        head = [_to_word(v, i, False) for i, v in enumerate(proof)]
        head += [
            _to_word(v, NUM_PROOF_WORDS + i, False)
            for i, v in enumerate(inputs)
        ]
        return cls(tuple(head + public_inputs_to_words(bytes(public_inputs))))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofBundle":
        """Accept ``{"words": [...]}``, ``{"proof": "0x..."}`` or the split
        ``{"groth16_proof", "groth16_inputs", "public_inputs"}`` form."""
        if "words" in data:
            return cls.from_words(data["words"])
        if "proof" in data:
            return cls.from_hex(data["proof"])
        try:
            return cls.build(
                [_parse_element(v) for v in data["groth16_proof"]],
                [_parse_element(v) for v in data["groth16_inputs"]],
                bytes(HexBytes(data["public_inputs"])),
            )
        except KeyError as e:
            raise MalformedBundle(
                f"Missing bundle field: {e.args[0]}"
            ) from None

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ProofBundle":
        """Load a bundle from a ``.json`` description or a raw binary file."""
        path = Path(path)
        if path.suffix == ".json":
            with open(path) as f:
                return cls.from_dict(json.load(f))
        return cls.from_bytes(path.read_bytes())

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def groth16_proof(self) -> List[int]:
        return [
            int.from_bytes(w, "big") for w in self.words[:NUM_PROOF_WORDS]
        ]

    @property
    def groth16_inputs(self) -> List[int]:
        return [
            int.from_bytes(w, "big")
            for w in self.words[NUM_PROOF_WORDS:NUM_GROTH16_WORDS]
        ]

    def public_input_bytes(self) -> bytes:
        return words_to_public_inputs(self.words[NUM_GROTH16_WORDS:])

    def to_bytes(self) -> bytes:
        """The ``full_proof.bin`` serialization (no trailing padding)."""
        head = b"".join(self.words[:NUM_GROTH16_WORDS])
        return head + self.public_input_bytes()

    def to_hex_words(self) -> List[str]:
        return ["0x" + w.hex() for w in self.words]

    def with_byte(self, index: int, value: int) -> "ProofBundle":
        """Copy of the bundle with the byte at ``index`` replaced."""
        data = bytearray(b"".join(self.words))
        data[index] = value
        return ProofBundle.from_bytes(bytes(data))


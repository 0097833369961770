"""
Unit tests for the proof bundle wire format.
"""

import json

import pytest

from lpn_query_toolkit.query.bundle import ProofBundle
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import MalformedBundle

FULL_PROOF_LEN = (
    QueryConstants.NUM_GROTH16_WORDS * QueryConstants.WORD_LEN
    + QueryConstants.PI_TOTAL_LEN
)


class TestProofBundle:
    """Tests for bundle construction and views."""

    def test_word_count(self, nft_bundle):
        assert len(nft_bundle.words) == QueryConstants.MIN_BUNDLE_WORDS
        assert all(len(w) == 32 for w in nft_bundle.words)

    def test_groth16_views(self, nft_bundle, circuit_digest):
        assert len(nft_bundle.groth16_proof) == 8
        inputs = nft_bundle.groth16_inputs
        assert len(inputs) == 3
        assert inputs[0] == circuit_digest

    def test_public_input_bytes_length(self, nft_bundle):
        assert len(nft_bundle.public_input_bytes()) == 368

    def test_full_proof_bin_length(self, nft_bundle):
        assert len(nft_bundle.to_bytes()) == FULL_PROOF_LEN == 720

    def test_from_bytes_short_last_chunk(self, nft_bundle):
        # full_proof.bin ends with a 16-byte chunk
        bundle = ProofBundle.from_bytes(nft_bundle.to_bytes())
        assert bundle == nft_bundle

    def test_from_hex_words(self, nft_bundle):
        assert ProofBundle.from_words(nft_bundle.to_hex_words()) == nft_bundle

    def test_from_int_words(self, nft_bundle):
        words = [int.from_bytes(w, "big") for w in nft_bundle.words]
        assert ProofBundle.from_words(words) == nft_bundle

    def test_too_few_words(self, nft_bundle):
        with pytest.raises(MalformedBundle):
            ProofBundle.from_words(list(nft_bundle.words)[:22])

    def test_too_many_words(self, nft_bundle):
        with pytest.raises(MalformedBundle):
            ProofBundle.from_words(list(nft_bundle.words) + [bytes(32)])

    def test_short_word_in_middle(self, nft_bundle):
        words = list(nft_bundle.words)
        words[0] = words[0][:16]
        with pytest.raises(MalformedBundle):
            ProofBundle.from_words(words)

    def test_invalid_hex(self, nft_bundle):
        words = nft_bundle.to_hex_words()
        words[5] = "0xzz"
        with pytest.raises(MalformedBundle):
            ProofBundle.from_words(words)

    def test_build_checks_lengths(self, nft_bundle):
        with pytest.raises(MalformedBundle):
            ProofBundle.build([0] * 7, [0] * 3, bytes(368))
        with pytest.raises(MalformedBundle):
            ProofBundle.build([0] * 8, [0] * 2, bytes(368))
        with pytest.raises(MalformedBundle):
            ProofBundle.build([0] * 8, [0] * 3, bytes(367))

    def test_with_byte(self, nft_bundle):
        bundle = nft_bundle.with_byte(0, 0xAA)
        assert bundle.words[0][0] == 0xAA
        assert bundle.words[1:] == nft_bundle.words[1:]


class TestFromDict:
    """Tests for the JSON bundle forms."""

    def test_words_form(self, nft_bundle):
        data = {"words": nft_bundle.to_hex_words()}
        assert ProofBundle.from_dict(data) == nft_bundle

    def test_proof_form(self, nft_bundle):
        data = {"proof": "0x" + nft_bundle.to_bytes().hex()}
        assert ProofBundle.from_dict(data) == nft_bundle

    def test_split_form(self, nft_bundle):
        data = {
            "groth16_proof": [hex(v) for v in nft_bundle.groth16_proof],
            "groth16_inputs": nft_bundle.groth16_inputs,
            "public_inputs": "0x" + nft_bundle.public_input_bytes().hex(),
        }
        assert ProofBundle.from_dict(data) == nft_bundle

    def test_missing_field(self):
        with pytest.raises(MalformedBundle, match="groth16_inputs"):
            ProofBundle.from_dict(
                {"groth16_proof": [0] * 8, "public_inputs": "0x"}
            )

    def test_invalid_element(self):
        with pytest.raises(MalformedBundle):
            ProofBundle.from_dict(
                {
                    "groth16_proof": ["nope"] * 8,
                    "groth16_inputs": [0] * 3,
                    "public_inputs": "0x" + "00" * 368,
                }
            )


class TestLoad:
    """Tests for loading bundles from disk."""

    def test_load_binary(self, nft_bundle, tmp_path):
        path = tmp_path / "full_proof.bin"
        path.write_bytes(nft_bundle.to_bytes())
        assert ProofBundle.load(path) == nft_bundle

    def test_load_json(self, nft_bundle, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps({"words": nft_bundle.to_hex_words()}))
        assert ProofBundle.load(str(path)) == nft_bundle

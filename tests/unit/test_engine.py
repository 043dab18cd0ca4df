"""Tests for scryptpass.engine module."""

import asyncio
import base64
from concurrent.futures import ThreadPoolExecutor

import pytest

from scryptpass import engine
from scryptpass.engine import (
    Hasher,
    compute_hash,
    compute_hash_async,
    looks_good,
    needs_rehash,
    parse_record,
    verify,
    verify_async,
)
from scryptpass.exceptions import (
    ConfigError,
    DerivationError,
    MalformedRecord,
    ParameterMismatch,
    ResourceExceeded,
)
from scryptpass.options import get_store, reconfigure
from scryptpass.record import encode


def run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _flip_char(record: str, index: int) -> str:
    key_text, rest = record.split("$", 1)
    replacement = "A" if key_text[index] != "A" else "B"
    return key_text[:index] + replacement + key_text[index + 1:] + "$" + rest


class TestComputeHash:
    """Tests for compute_hash function."""

    def test_default_record_layout(self):
        record = compute_hash("supersecret")
        key_text, salt_text, cost, block_size, parallelization = record.split("$")

        assert (cost, block_size, parallelization) == ("16384", "8", "1")
        assert len(base64.b64decode(key_text)) == 32
        assert len(key_text) == 44
        assert len(base64.b64decode(salt_text)) == 16
        assert 24 <= len(salt_text) <= 44

    def test_fresh_salt_each_call(self, fast_options):
        first = compute_hash("same_password", fast_options)
        second = compute_hash("same_password", fast_options)
        assert first.split("$")[1] != second.split("$")[1]
        assert first != second

    def test_lengths_follow_options(self, fast_options):
        record = compute_hash("pw", {**fast_options, "hash_length": 64, "salt_length": 32})
        parsed = parse_record(record)
        assert parsed.hash_length == 64
        assert parsed.salt_length == 32

    def test_alias_equivalence(self):
        by_alias = compute_hash("pw", {"N": 8192})
        by_name = compute_hash("pw", {"cost": 8192})

        assert by_alias.split("$")[2] == "8192"
        assert by_name.split("$")[2] == "8192"
        assert verify("pw", by_alias, {"cost": 8192})
        assert verify("pw", by_name, {"N": 8192})

    def test_pepper_not_stored(self, fast_options):
        record = compute_hash("pw", {**fast_options, "pepper": "pepper123"})
        assert "pepper123" not in record
        assert len(record.split("$")) == 5

    def test_phc_format(self, fast_options):
        record = compute_hash("pw", {**fast_options, "record_format": "phc"})
        assert record.startswith("$scrypt$n=1024,r=8,p=1$")
        assert verify("pw", record)

    def test_accepts_bytes_password(self, fast_options):
        record = compute_hash("pässword".encode("utf-8"), fast_options)
        assert verify("pässword", record)

    def test_rejects_other_password_types(self, fast_options):
        with pytest.raises(TypeError):
            compute_hash(12345, fast_options)

    def test_resource_exceeded_surfaces(self):
        with pytest.raises(ResourceExceeded):
            compute_hash("pw", {"cost": 65536})

    def test_out_of_range_cost_is_derivation_error(self):
        with pytest.raises(DerivationError) as exc_info:
            compute_hash("pw", {"N": 65536, "r": 1})
        assert not isinstance(exc_info.value, ResourceExceeded)

    def test_oversized_hash_length_is_derivation_error(self):
        with pytest.raises(DerivationError) as exc_info:
            compute_hash("pw", {"cost": 1024, "hash_length": 2 ** 62})
        assert not isinstance(exc_info.value, ResourceExceeded)

    def test_lone_surrogate_password(self, fast_options):
        record = compute_hash("\ud800", fast_options)
        assert verify("\ud800", record) is True
        assert verify("\ud801", record) is False
        assert verify("\ud800", compute_hash("pw", fast_options)) is False

    def test_lone_surrogate_pepper(self, fast_options):
        record = compute_hash(b"pw", {**fast_options, "pepper": "\udfff"})
        assert verify("pw", record, {"pepper": "\udfff"}) is True
        assert verify("pw", record, {"pepper": ""}) is False

    def test_invalid_option_surfaces(self):
        with pytest.raises(ConfigError):
            compute_hash("pw", {"cost": 0})

    def test_uses_process_wide_options(self):
        reconfigure({"cost": 2048, "r": 4})
        assert compute_hash("pw").split("$")[2:] == ["2048", "4", "1"]


class TestVerify:
    """Tests for verify function."""

    def test_scenario_with_defaults(self):
        record = compute_hash("supersecret")
        assert verify("supersecret", record) is True
        assert verify("wrongpassword", record) is False

    def test_invalid_hash_returns_false(self):
        assert verify("supersecret", "invalidhash") is False

    def test_non_string_record_returns_false(self):
        assert verify("supersecret", None) is False

    def test_tampered_key_returns_false(self, fast_options):
        record = compute_hash("pw", fast_options)
        for index in (0, 10, 20, 30, 41):
            assert verify("pw", _flip_char(record, index)) is False

    def test_pepper_isolation(self, fast_options):
        record = compute_hash("pw", {**fast_options, "pepper": "A"})
        assert verify("pw", record, {"pepper": "B"}) is False
        assert verify("pw", record, {"pepper": "A"}) is True
        assert verify("pw", record) is False

    def test_process_wide_pepper(self, fast_options):
        reconfigure({"pepper": "pepper123"})
        record = compute_hash("supersecret", fast_options)
        assert verify("supersecret", record) is True
        reconfigure({"pepper": None})
        assert verify("supersecret", record) is False

    def test_uses_record_parameters_not_current(self, fast_options):
        record = compute_hash("pw", fast_options)
        reconfigure({"cost": 2048, "block_size": 4})
        assert verify("pw", record) is True

    def test_strict_policy_rejects_drifted_record(self, fast_options):
        record = compute_hash("pw", {**fast_options, "block_size": 16})
        assert verify("pw", record, {**fast_options, "strict": True}) is False
        assert verify("pw", record, {**fast_options, "permissive": True}) is True

    def test_derivation_failure_returns_false(self):
        # Cost 1000 is well-formed but scrypt rejects it
        record = encode(b"k" * 32, b"s" * 16, 1000, 8, 1)
        assert verify("pw", record) is False

    def test_max_memory_exceeded_returns_false(self, fast_options):
        record = compute_hash("pw", fast_options)
        assert verify("pw", record, {"max_memory": 1024}) is False

    def test_hash_length_override_does_not_affect_rederivation(self, fast_options):
        record = compute_hash("pw", fast_options)
        assert verify("pw", record, {"hash_length": 64, "salt_length": 8}) is True


class TestNeedsRehash:
    """Tests for needs_rehash function."""

    def test_current_record_does_not_need_rehash(self):
        record = compute_hash("supersecret")
        assert needs_rehash(record) is False

    def test_malformed_record_needs_rehash(self):
        assert needs_rehash("invalidhash") is True

    def test_drift_needs_rehash_regardless_of_strict(self, fast_options):
        record = compute_hash("pw", {**fast_options, "block_size": 16})
        assert needs_rehash(record, {**fast_options, "strict": False}) is True
        assert needs_rehash(record, {**fast_options, "strict": True}) is True

    def test_after_reconfigure(self, fast_options):
        reconfigure(fast_options)
        record = compute_hash("pw")
        assert needs_rehash(record) is False
        reconfigure({"N": 2048})
        assert needs_rehash(record) is True
        reconfigure({"N": 1024})
        assert needs_rehash(record) is False

    def test_format_change_needs_rehash(self, fast_options):
        record = compute_hash("pw", fast_options)
        assert needs_rehash(record, {**fast_options, "record_format": "phc"}) is True


class TestParseAndLooksGood:
    """Tests for parse_record and looks_good."""

    def test_parse_raises_mismatch_when_strict(self, fast_options):
        record = compute_hash("pw", {**fast_options, "block_size": 16})
        with pytest.raises(ParameterMismatch) as exc_info:
            parse_record(record, {**fast_options, "block_size": 8, "strict": True})
        assert exc_info.value.name == "block_size"

    def test_parse_accepts_drift_when_permissive(self, fast_options):
        record = compute_hash("pw", {**fast_options, "block_size": 16})
        parsed = parse_record(record, {**fast_options, "block_size": 8, "strict": False})
        assert parsed.block_size == 16

    def test_parse_invalid_hash(self):
        with pytest.raises(MalformedRecord):
            parse_record("invalidhash")

    def test_looks_good_follows_caller_policy(self, fast_options):
        record = compute_hash("pw", {**fast_options, "block_size": 16})
        assert looks_good(record) is True
        assert looks_good(record, {"strict": True}) is False
        assert looks_good("invalidhash") is False


class TestHasher:
    """Tests for Hasher bound to a private store."""

    def test_private_store_isolated_from_process_wide(self, store, fast_options):
        hasher = Hasher(store=store)
        store.update({**fast_options, "pepper": "private"})

        record = hasher.compute_hash("pw")
        assert hasher.verify("pw", record) is True
        assert verify("pw", record) is False

    def test_default_hasher_uses_process_wide_store(self):
        assert engine.get_hasher().store is get_store()

    def test_options_resolves_overrides(self, store):
        hasher = Hasher(store=store)
        assert hasher.options({"N": 4096}).cost == 4096


class TestAsync:
    """Tests for the executor-backed async wrappers."""

    def test_round_trip(self, fast_options):
        record = run(compute_hash_async("pw", fast_options))
        assert run(verify_async("pw", record)) is True
        assert run(verify_async("nope", record)) is False

    def test_concurrent_verifications(self, fast_options):
        record = compute_hash("pw", fast_options)

        async def check_all():
            return await asyncio.gather(
                verify_async("pw", record),
                verify_async("wrong", record),
                verify_async("pw", "invalidhash"),
            )

        assert run(check_all()) == [True, False, False]

    def test_custom_executor(self, store, fast_options):
        store.update(fast_options)
        with ThreadPoolExecutor(max_workers=2) as pool:
            hasher = Hasher(store=store, executor=pool)
            record = run(hasher.compute_hash_async("pw"))
            assert run(hasher.verify_async("pw", record)) is True

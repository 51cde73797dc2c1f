import pytest

from periphery_deployment.errors import (
    ConfigurationError,
    DuplicateBindingError,
    UnknownReferenceError,
)
from periphery_deployment.resolver import AddressResolver
from tests.conftest import OTHER_OWNER, SIGNER_ADDRESS


def test_record_and_resolve():
    resolver = AddressResolver()
    address = resolver.record("TickLens", SIGNER_ADDRESS.lower())

    assert address == SIGNER_ADDRESS
    assert resolver.resolve("TickLens") == SIGNER_ADDRESS
    assert "TickLens" in resolver
    assert len(resolver) == 1
    assert list(resolver) == ["TickLens"]


def test_name_is_bound_at_most_once():
    resolver = AddressResolver()
    resolver.record("TickLens", SIGNER_ADDRESS)

    with pytest.raises(DuplicateBindingError):
        resolver.record("TickLens", OTHER_OWNER)

    # first binding is never mutated
    assert resolver.resolve("TickLens") == SIGNER_ADDRESS


def test_unknown_reference():
    resolver = AddressResolver()
    with pytest.raises(UnknownReferenceError, match="QuoterV2"):
        resolver.resolve("QuoterV2")


def test_invalid_address_is_rejected():
    resolver = AddressResolver()
    with pytest.raises(ConfigurationError):
        resolver.record("TickLens", "0x1234")
    assert "TickLens" not in resolver


def test_bindings_is_a_copy():
    resolver = AddressResolver()
    resolver.record("TickLens", SIGNER_ADDRESS)

    bindings = resolver.bindings
    bindings["QuoterV2"] = OTHER_OWNER

    assert "QuoterV2" not in resolver
    assert resolver.bindings == {"TickLens": SIGNER_ADDRESS}

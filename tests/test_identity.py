"""
Tests for the identity module.
"""
import re
import pytest
from hypothesis import given, settings, strategies as st

from did_credentials import Credentials, ConfigurationError, Resolver, SimpleSigner
from did_credentials.identity import (
    resolve_identity, create_identity, normalize_did, validate_network, is_mnid, decode_mnid
)
from did_credentials.models import NetworkEntry
from did_credentials.signer.ec_constants import SECP256K1_MAX
from did_credentials.resolver import EthrResolver, WebResolver
from conftest import PRIVATE_KEY, ADDRESS, DID, MNID, LEGACY_DID, stub_ethr

PRIVATE_NETWORKS = {
    "0x94365e3b": {
        "rpcUrl": "https://private.chain/rpc",
        "registry": "0x3b2631d8e15b145fd2bf99fc5f98346aecdc394c",
    }
}


class TestResolveIdentity:
    """Derivation of the canonical DID from constructor input"""

    def test_private_key_only(self):
        identity = resolve_identity(private_key=PRIVATE_KEY, resolver=stub_ethr)
        assert identity.did == DID
        assert isinstance(identity.signer, SimpleSigner)
        assert identity.can_sign

    def test_private_key_with_prefix(self):
        identity = resolve_identity(private_key="0x" + PRIVATE_KEY, resolver=stub_ethr)
        assert identity.did == DID

    def test_did_is_kept(self):
        identity = resolve_identity(did="did:web:example.com", resolver=stub_ethr)
        assert identity.did == "did:web:example.com"
        assert not identity.can_sign

    def test_bare_address_as_did(self):
        identity = resolve_identity(did=ADDRESS, resolver=stub_ethr)
        assert identity.did == DID

    def test_bare_mnid_as_did(self):
        identity = resolve_identity(did=MNID, resolver=stub_ethr)
        assert identity.did == LEGACY_DID
        assert identity.is_legacy

    def test_address_ethr(self):
        identity = resolve_identity(address=ADDRESS, resolver=stub_ethr)
        assert identity.did == DID

    def test_address_mnid(self):
        identity = resolve_identity(address=MNID, resolver=stub_ethr)
        assert identity.did == LEGACY_DID

    def test_address_garbage(self):
        with pytest.raises(ConfigurationError):
            resolve_identity(address="not-an-address", resolver=stub_ethr)

    def test_corrupted_mnid_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_identity(address=MNID[:-1] + "Y", resolver=stub_ethr)
        with pytest.raises(ConfigurationError):
            normalize_did(MNID[:-1] + "Y")

    def test_did_and_address_conflict(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_identity(did=DID, address=ADDRESS, resolver=stub_ethr)
        assert "either did or address" in str(exc_info.value)

    def test_address_private_key_mismatch(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_identity(address="0x" + "ab" * 20, private_key=PRIVATE_KEY, resolver=stub_ethr)
        assert "does not match" in str(exc_info.value)

    def test_address_matching_private_key(self):
        identity = resolve_identity(address=ADDRESS.upper().replace("0X", "0x"), private_key=PRIVATE_KEY,
                                    resolver=stub_ethr)
        assert identity.can_sign

    def test_invalid_private_key(self):
        with pytest.raises(ConfigurationError):
            resolve_identity(private_key="zz" * 32, resolver=stub_ethr)
        with pytest.raises(ConfigurationError):
            resolve_identity(private_key="00" * 32, resolver=stub_ethr)
        with pytest.raises(ConfigurationError):
            resolve_identity(private_key="ab" * 16, resolver=stub_ethr)

    def test_signer_wins_over_private_key(self):
        signer = SimpleSigner("0x" + "22" * 32)
        identity = resolve_identity(did=DID, private_key=PRIVATE_KEY, signer=signer, resolver=stub_ethr)
        assert identity.signer is signer
        assert identity.did == DID

    def test_custom_resolver_is_used_as_is(self):
        custom = Resolver({"ethr": stub_ethr})
        identity = resolve_identity(private_key=PRIVATE_KEY, resolver=custom)
        assert identity.resolver is custom

    def test_default_resolver(self):
        identity = resolve_identity(private_key=PRIVATE_KEY)
        assert isinstance(identity.resolver, Resolver)
        assert identity.resolver.methods == ["ethr", "web"]
        assert isinstance(identity.resolver.registry["ethr"], EthrResolver)
        assert isinstance(identity.resolver.registry["web"], WebResolver)

    def test_no_input(self):
        identity = resolve_identity(resolver=stub_ethr)
        assert identity.did is None
        assert identity.signer is None
        assert not identity.can_sign


class TestNetworks:
    """Validation of private network entries"""

    def test_valid_networks(self):
        identity = resolve_identity(private_key=PRIVATE_KEY, networks=PRIVATE_NETWORKS)
        entry = identity.networks["0x94365e3b"]
        assert isinstance(entry, NetworkEntry)
        assert entry.rpc_url == "https://private.chain/rpc"
        assert entry.registry_address == "0x3b2631d8e15b145fd2bf99fc5f98346aecdc394c"

    def test_missing_registry(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_identity(networks={"0x94365e3b": {"rpcUrl": "https://private.chain/rpc"}})
        assert "0x94365e3b" in str(exc_info.value)

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            validate_network("0x1", "https://private.chain/rpc")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_identity(networks={"0x1": {}})

    def test_add_network_reaches_default_resolver(self):
        credentials = Credentials(private_key=PRIVATE_KEY)
        credentials.add_network("0x94365e3b", PRIVATE_NETWORKS["0x94365e3b"])

        assert "0x94365e3b" in credentials.networks
        ethr = credentials.resolver.registry["ethr"]
        assert ethr.networks["0x94365e3b"].rpc_url == "https://private.chain/rpc"

    def test_add_network_invalid(self):
        credentials = Credentials(private_key=PRIVATE_KEY)
        with pytest.raises(ConfigurationError):
            credentials.add_network("0x94365e3b", {"registry": "0x3b2631d8e15b145fd2bf99fc5f98346aecdc394c"})
        assert "0x94365e3b" not in credentials.networks


def test_normalize_did():
    assert normalize_did(DID) == DID
    assert normalize_did(ADDRESS) == DID
    assert normalize_did(MNID) == LEGACY_DID
    with pytest.raises(ConfigurationError):
        normalize_did("did:ethr:")
    with pytest.raises(ConfigurationError):
        normalize_did("hello")


def test_mnid_detection():
    assert is_mnid(MNID)
    assert not is_mnid(ADDRESS)
    assert not is_mnid("0OIl")  # not base58
    assert not is_mnid(MNID[:-1] + "Y")  # checksum mismatch
    decoded = decode_mnid(MNID)
    assert decoded["network"].startswith("0x")
    assert re.match(r"^0x[0-9a-f]{40}$", decoded["address"])
    with pytest.raises(ValueError):
        decode_mnid(ADDRESS)


def test_create_identity():
    """Fresh identities are did:ethr with a raw hex key"""
    identity = create_identity()
    assert re.match(r"^did:ethr:0x[0-9a-fA-F]{40}$", identity["did"])
    assert re.match(r"^[0-9a-fA-F]{64}$", identity["privateKey"])

    # The key controls the DID
    credentials = Credentials(private_key=identity["privateKey"])
    assert credentials.did == identity["did"]


def test_create_identity_static():
    identity = Credentials.create_identity()
    assert identity["did"] != Credentials.create_identity()["did"]


@settings(max_examples=30, deadline=None)
@given(raw=st.binary(min_size=20, max_size=20))
def test_address_did_property(raw):
    """Any 0x address maps to the did:ethr DID with the same address"""
    address = "0x" + raw.hex()
    identity = resolve_identity(address=address, resolver=stub_ethr)
    assert identity.did == f"did:ethr:{address}"
    assert not identity.is_legacy


@settings(max_examples=20, deadline=None)
@given(key=st.integers(min_value=1, max_value=SECP256K1_MAX))
def test_private_key_did_property(key):
    """The DID derived from a key always names the key's own address"""
    identity = resolve_identity(private_key=key.to_bytes(32, "big").hex(), resolver=stub_ethr)
    assert re.match(r"^did:ethr:0x[0-9a-f]{40}$", identity.did)
    assert identity.did == f"did:ethr:{identity.signer.address}"

"""
Pytest fixtures for the did-credentials tests.
"""
import pytest

from did_credentials import Credentials, Resolver, SimpleSigner
from did_credentials.config import NetworkConfig
from did_credentials.resolver import build_ethr_document

# Fixed clock, all tokens are issued "now"
NOW = 1485321133

PRIVATE_KEY = "74894f8853f90e6e3d6dfdd343eb0eb70cca06e552ed8af80adadcc573b35da3"
ADDRESS = "0xbc3ae59bc76f894822622cdef7a2018dbe353840"
DID = f"did:ethr:{ADDRESS}"
MNID = "2nQtiQG6Cgm1GYTBaaKAgr76uY7iSexUkqX"
LEGACY_DID = f"did:uport:{MNID}"

# Counterparty key
USER_PRIVATE_KEY = "278a5de700e29faae8e40e366ec5012b5ec63d36ec77e8a2417154cc1d25383f"
OTHER_PRIVATE_KEY = "0x" + "11" * 32

TYPED_DATA = {
    "types": {
        "EIP712Domain": [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
            {"name": "salt", "type": "bytes32"},
        ],
        "Greeting": [
            {"name": "text", "type": "string"},
            {"name": "subject", "type": "string"},
        ],
    },
    "domain": {
        "name": "My dapp",
        "version": "1.0",
        "chainId": 1,
        "verifyingContract": "0xdeadbeef",
        "salt": "0x999999999910101010101010",
    },
    "primaryType": "Greeting",
    "message": {
        "text": "Hello",
        "subject": "World",
    },
}

STATUS_ABI = [
    {
        "constant": False,
        "inputs": [{"name": "status", "type": "string"}],
        "name": "updateStatus",
        "outputs": [],
        "payable": False,
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "addr", "type": "address"}],
        "name": "getStatus",
        "outputs": [{"name": "", "type": "string"}],
        "payable": False,
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [{"indexed": False, "name": "status", "type": "string"}],
        "name": "StatusUpdated",
        "type": "event",
    },
]
CONTRACT_ADDRESS = "0x70A804cCE17149deB6030039798701a38667ca3B"

VC_PAYLOAD = {
    "sub": "did:ethr:0x435df3eda57154cf8cf7926079881f2912f54db4",
    "nbf": NOW - 60,
    "vc": {
        "@context": ["https://www.w3.org/2018/credentials/v1"],
        "type": ["VerifiableCredential"],
        "credentialSubject": {
            "degree": {
                "type": "BachelorDegree",
                "name": "Baccalauréat en musiques numériques",
            }
        },
    },
}


def fixed_clock():
    return NOW


def stub_ethr(did):
    """did:ethr documents owned by the DID's own address, no registry lookups"""
    return build_ethr_document(did, did.split(":")[-1])


def stub_uport(did):
    return {
        "@context": "https://w3id.org/did/v1",
        "id": did,
        "publicKey": [{
            "id": f"{did}#keys-1",
            "type": "Secp256k1VerificationKey2018",
            "owner": did,
            "publicKeyHex": SimpleSigner(PRIVATE_KEY).public_key_hex,
        }],
    }


@pytest.fixture(autouse=True)
def _reset_network_cache():
    NetworkConfig._networks_cache = None
    yield
    NetworkConfig._networks_cache = None


@pytest.fixture
def resolver():
    return Resolver({"ethr": stub_ethr, "uport": stub_uport})


@pytest.fixture
def credentials(resolver):
    """The app: issues requests and verifies responses"""
    return Credentials(private_key=PRIVATE_KEY, resolver=resolver, clock=fixed_clock)


@pytest.fixture
def user(resolver):
    """The counterparty answering the app's requests"""
    return Credentials(private_key=USER_PRIVATE_KEY, resolver=resolver, clock=fixed_clock)


@pytest.fixture
def other_app(resolver):
    return Credentials(private_key=OTHER_PRIVATE_KEY, resolver=resolver, clock=fixed_clock)


@pytest.fixture
def legacy(resolver):
    """An app configured with a legacy did:uport identity"""
    return Credentials(did=LEGACY_DID, private_key=PRIVATE_KEY, resolver=resolver, clock=fixed_clock)


@pytest.fixture
def verifier_only(resolver):
    return Credentials(resolver=resolver, clock=fixed_clock)

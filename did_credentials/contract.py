"""
ABI driven transaction requests.

``Contract(abi, encoder).at(address)`` exposes one method per ABI function.
Calling it builds a transaction object whose ``fn`` field is a human
readable call such as ``updateStatus(string "hello")`` and hands it to the
encoder, which signs it as a transaction request. No call data is encoded.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Sequence

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

# Transaction fields passed through from a trailing transaction object
TX_FIELDS = ("from", "value", "gas", "gasPrice")

# Request options accepted either as keyword arguments or in the trailing object
OPTION_ALIASES = {
    "networkId": "network_id",
    "network_id": "network_id",
    "callbackUrl": "callback_url",
    "callback_url": "callback_url",
    "label": "label",
    "expiresIn": "expires_in",
    "expires_in": "expires_in",
}


def format_argument(arg_type: str, value: Any) -> str:
    """Render one argument as ``type value`` with JSON quoting"""
    if isinstance(value, bytes):
        rendered = json.dumps("0x" + value.hex())
    else:
        rendered = json.dumps(value, ensure_ascii=False)
    return f"{arg_type} {rendered}"


def format_function_call(name: str, inputs: Sequence[Mapping[str, Any]], args: Sequence[Any]) -> str:
    """
    Build a human readable function call.

    Example:
        ``format_function_call("updateStatus", [{"type": "string"}], ["hello"])``
        returns ``updateStatus(string "hello")``
    """
    rendered = ", ".join(format_argument(inp["type"], arg) for inp, arg in zip(inputs, args))
    return f"{name}({rendered})"


class DeployedContract:
    """A contract ABI bound to an address"""

    def __init__(self, abi: List[Dict[str, Any]], address: str, encoder: Callable[..., str]):
        self.abi = abi
        self.address = address
        self._encoder = encoder
        self.functions = {
            entry["name"]: entry
            for entry in abi
            if entry.get("type", "function") == "function" and entry.get("name")
        }

    def __getattr__(self, name: str):
        functions = self.__dict__.get("functions", {})
        if name in functions:
            entry = functions[name]
            return lambda *args, **options: self._call(entry, args, options)
        raise AttributeError(f"Contract has no function '{name}'")

    def __dir__(self):
        return list(super().__dir__()) + list(self.functions)

    def _call(self, entry: Dict[str, Any], args: Sequence[Any], options: Dict[str, Any]) -> str:
        inputs = entry.get("inputs") or []
        args = list(args)
        trailing: Dict[str, Any] = {}
        if len(args) == len(inputs) + 1 and isinstance(args[-1], Mapping):
            trailing = dict(args.pop())
        if len(args) != len(inputs):
            raise ValidationError(
                f"{entry['name']} expects {len(inputs)} arguments, got {len(args)}",
                field=entry["name"]
            )

        tx = {key: trailing[key] for key in TX_FIELDS if key in trailing}
        tx["to"] = self.address
        tx["fn"] = format_function_call(entry["name"], inputs, args)

        request_options = {}
        for key, value in {**trailing, **options}.items():
            if key in OPTION_ALIASES:
                request_options[OPTION_ALIASES[key]] = value
            elif key not in TX_FIELDS:
                logger.warning(f"Ignoring unsupported transaction option: {key}")

        logger.debug(f"Building transaction request {tx['fn']} for {self.address}")
        return self._encoder(tx, **request_options)


class Contract:
    """Factory binding an ABI to deployed addresses"""

    def __init__(self, abi: List[Dict[str, Any]], encoder: Callable[..., str]):
        """
        Initialize the contract.

        Args:
            abi: Contract ABI as a list of entries
            encoder: Called as ``encoder(tx, network_id=..., callback_url=..., label=..., expires_in=...)``

        Raises:
            ValidationError: If abi is not a list of ABI entries
        """
        if not isinstance(abi, list) or not all(isinstance(e, Mapping) for e in abi):
            raise ValidationError("Contract ABI must be a list of entries", field="abi")
        self.abi = abi
        self._encoder = encoder

    def at(self, address: str) -> DeployedContract:
        return DeployedContract(self.abi, address, self._encoder)

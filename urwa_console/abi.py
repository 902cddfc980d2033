"""
Bundled interface description for the uRWA20 confidential token contract.
"""


def _event(name):
    return {
        "anonymous": False,
        "inputs": [{"indexed": False, "internalType": "bytes", "name": "encryptedData", "type": "bytes"}],
        "name": name,
        "type": "event",
    }


def _fn(name, inputs, outputs, mutability):
    return {
        "inputs": [{"internalType": t, "name": n, "type": t} for t, n in inputs],
        "name": name,
        "outputs": [{"internalType": t, "name": n, "type": t} for t, n in outputs],
        "stateMutability": mutability,
        "type": "function",
    }


URWA20_ABI = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    _fn("name", [], [("string", "")], "view"),
    _fn("symbol", [], [("string", "")], "view"),
    _fn("decimals", [], [("uint8", "")], "view"),
    _fn("totalSupply", [], [("uint256", "")], "view"),
    _fn("domain", [], [("string", "")], "view"),
    {
        "inputs": [
            {"internalType": "string", "name": "siweMsg", "type": "string"},
            {
                "components": [
                    {"internalType": "bytes32", "name": "r", "type": "bytes32"},
                    {"internalType": "bytes32", "name": "s", "type": "bytes32"},
                    {"internalType": "uint256", "name": "v", "type": "uint256"},
                ],
                "internalType": "struct SignatureRSV",
                "name": "sig",
                "type": "tuple",
            },
        ],
        "name": "login",
        "outputs": [{"internalType": "bytes", "name": "", "type": "bytes"}],
        "stateMutability": "view",
        "type": "function",
    },
    _fn("balanceOf", [("address", "account"), ("bytes", "token")], [("uint256", "")], "view"),
    _fn("checkAuditorPermission", [("address", "auditor"), ("address", "target")], [("bool", "")], "view"),
    _fn("auditorPermissions", [("address", "")], [("uint256", "expiryTime"), ("bool", "hasFullAccess")], "view"),
    _fn(
        "viewLastDecryptedData",
        [("bytes", "token")],
        [("address", "from"), ("address", "to"), ("uint256", "amount"), ("string", "action")],
        "view",
    ),
    _fn("transfer", [("address", "to"), ("uint256", "amount")], [("bool", "")], "nonpayable"),
    _fn("approve", [("address", "spender"), ("uint256", "amount")], [("bool", "")], "nonpayable"),
    _fn("processDecryption", [("bytes", "encryptedData")], [], "nonpayable"),
    _fn("clearLastDecryptedData", [], [], "nonpayable"),
    _fn(
        "grantAuditorPermission",
        [("address", "auditor"), ("uint256", "duration"), ("bool", "fullAccess"), ("address[]", "addresses")],
        [],
        "nonpayable",
    ),
    _fn("revokeAuditorPermission", [("address", "auditor")], [], "nonpayable"),
    _event("EncryptedTransfer"),
    _event("EncryptedApproval"),
    _event("EncryptedForcedTransfer"),
    _event("EncryptedFrozen"),
    _event("EncryptedWhitelisted"),
    {"inputs": [], "name": "Unauthorized", "type": "error"},
]

"""
Tests for the JSON-RPC chain server client, with the HTTP session replaced
"""
import pytest
import requests

from bulletin_wallet.chain import RPCChainClient, ChainRPCError, BlockStamp
from bulletin_wallet.core import ChainUnavailable
from conftest import getrand_tx


class FakeResponse:
    def __init__(self, body=None, status_code: int = 200):
        self.body = body
        self.status_code = status_code

    def json(self):
        if self.body is None:
            raise ValueError("No JSON body")
        return self.body


class FakeSession:
    """
    Answers each JSON-RPC method from a table and records the requests
    """

    def __init__(self, answers: dict):
        self.answers = answers
        self.requests = []
        self.auth = None

    def post(self, url, json=None, timeout=None):
        self.requests.append(json)
        answer = self.answers[json["method"]]
        if isinstance(answer, Exception):
            raise answer
        return answer


def result(value) -> FakeResponse:
    return FakeResponse({"result": value, "error": None, "id": 1})


def test_block_stamp():
    session = FakeSession({"getblockcount": result(812), "getblockhash": result("ab" * 32)})
    client = RPCChainClient("http://127.0.0.1:18332", session=session)

    assert client.block_stamp() == BlockStamp(812, "ab" * 32)
    assert session.requests[1]["params"] == [812]
    assert session.requests[0]["id"] != session.requests[1]["id"]


def test_send_raw_transaction():
    tx = getrand_tx()
    session = FakeSession({"sendrawtransaction": result(tx.txid_hex)})
    client = RPCChainClient("http://127.0.0.1:18332", "user", "pass", session=session)

    assert client.send_raw_transaction(tx) == tx.txid_hex
    assert session.requests[0]["params"] == [tx.to_hex()]
    assert session.auth == ("user", "pass")


def test_rpc_error():
    error = FakeResponse({"result": None, "error": {"code": -25, "message": "Missing inputs"}, "id": 1}, 500)
    client = RPCChainClient("http://127.0.0.1:18332", session=FakeSession({"sendrawtransaction": error}))

    with pytest.raises(ChainRPCError) as exc_info:
        client.send_raw_transaction(getrand_tx())
    assert exc_info.value.code == -25


def test_unreachable():
    session = FakeSession({"getblockcount": requests.ConnectionError("refused")})
    client = RPCChainClient("http://127.0.0.1:18332", session=session)

    with pytest.raises(ChainUnavailable):
        client.block_stamp()
    assert not client.is_connected()


def test_non_json_response():
    session = FakeSession({"getblockcount": FakeResponse(None, 401)})
    client = RPCChainClient("http://127.0.0.1:18332", session=session)

    with pytest.raises(ChainUnavailable):
        client.block_stamp()

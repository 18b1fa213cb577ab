"""Tests for the GraphQL and staking contract clients, with fake transports."""

import pytest
import requests
from web3.exceptions import ContractLogicError

from lordsboard.staking.graphql import DataSourceError, MarketplaceClient
from lordsboard.staking.rpc import (
    STAKING_DURATION_SELECTOR,
    StakingContractClient,
    encode_token_call,
)


class FakeResponse:
    def __init__(self, body, status=200):
        self.body = body
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f"{self.status} error")

    def json(self):
        return self.body


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def post(self, url, json=None, timeout=None):
        self.requests.append((url, json))
        return self.response

    def close(self):
        pass


class TestMarketplaceClient:
    def test_fetch_tokens(self):
        tokens = [{"tokenId": "1", "owner": "0xa", "name": "Lord #1", "attributes": {}}]
        session = FakeSession(FakeResponse({"data": {"erc721Tokens": {"results": tokens}}}))
        client = MarketplaceClient({"graphql": {"endpoint": "http://indexer"}}, session=session)

        assert client.fetch_tokens(size=10, start=20) == tokens
        url, payload = session.requests[0]
        assert url == "http://indexer"
        assert payload["variables"]["from"] == 20
        assert payload["variables"]["size"] == 10

    @pytest.mark.parametrize("response", [
        FakeResponse({}, status=500),
        FakeResponse({"errors": [{"message": "bad query"}]}),
        FakeResponse({"data": None}),
    ])
    def test_failures_raise(self, response):
        client = MarketplaceClient({}, session=FakeSession(response))
        with pytest.raises(DataSourceError):
            client.fetch_tokens()


class FakeEth:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def call(self, transaction, block):
        self.calls.append(transaction)
        if self.error is not None:
            raise self.error
        return self.result


class FakeWeb3:
    def __init__(self, eth):
        self.eth = eth


class TestStakingContractClient:
    def test_encode_token_call(self):
        data = encode_token_call(STAKING_DURATION_SELECTOR, "255")
        assert data == STAKING_DURATION_SELECTOR + "0" * 62 + "ff"
        assert encode_token_call(STAKING_DURATION_SELECTOR, "0xff") == data

    def test_duration_decoded(self):
        eth = FakeEth(result=(42).to_bytes(32, "big"))
        client = StakingContractClient({}, w3=FakeWeb3(eth))

        assert client.get_staking_duration("7") == 42
        assert eth.calls[0]["data"].startswith(STAKING_DURATION_SELECTOR)

    def test_not_locked_means_unstaked(self):
        eth = FakeEth(error=ContractLogicError("execution reverted: Token not locked"))
        client = StakingContractClient({}, w3=FakeWeb3(eth))
        assert client.get_staking_duration("7") is None

    def test_other_errors_raise(self):
        eth = FakeEth(error=ContractLogicError("execution reverted: paused"))
        client = StakingContractClient({}, w3=FakeWeb3(eth))
        with pytest.raises(DataSourceError):
            client.get_staking_duration("7")


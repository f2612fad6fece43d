import mongomock
import pytest
from pymongo.errors import OperationFailure

import config
from dompet.workspace import FinanceWorkspace


USER = "user-1"


@pytest.fixture(autouse=True)
def mongo():
    client = mongomock.MongoClient()
    config.set_mongo_client(client)
    yield client
    config.set_mongo_client(None)


@pytest.fixture
def workspace():
    return FinanceWorkspace(USER).load()


@pytest.fixture
def wallets(workspace):
    a = workspace.wallets.create({"name": "Cash", "type": "cash", "color": "#10B981", "balance": 1000})
    b = workspace.wallets.create({"name": "BCA", "type": "bank", "color": "#3B82F6", "balance": 500})
    return a["_id"], b["_id"]


def balance(workspace, wallet_id):
    return workspace.wallets.get(wallet_id)["balance"]


def remote_balance(wallet_id):
    from dompet.repositories.base import to_object_id
    return config.get_collection("wallets").find_one({"_id": to_object_id(wallet_id)})["balance"]


def failing(message="connection reset by peer"):
    def raiser(*args, **kwargs):
        raise OperationFailure(message)
    return raiser


def fail_on_call(monkeypatch, collection, method, call_numbers, message="connection reset by peer"):
    """Make collection.<method> raise on the given 1-based call numbers only"""
    original = getattr(collection, method)
    calls = {"n": 0}

    def wrapper(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] in call_numbers:
            raise OperationFailure(message)
        return original(*args, **kwargs)

    monkeypatch.setattr(collection, method, wrapper)
    return calls

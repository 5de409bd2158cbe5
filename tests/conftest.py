import json

import pytest

from tools.completion_client import CompletionServiceError


class FakeCompletionClient:
    """Stands in for the OpenAI client; records every prompt it receives."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete(self, prompt, image=None, mime_type="image/jpeg"):
        self.calls.append({"prompt": prompt, "image": image, "mime_type": mime_type})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def ai_payload():
    return {
        "molecules": [
            {"name": "Acetic Acid", "smiles": "CC(=O)O", "description": "Carboxylic acid", "drawable": True},
            {"name": "Ethanol", "smiles": "CCO", "description": "Alcohol", "drawable": True},
        ],
        "reactions": [
            {
                "name": "Fischer Esterification",
                "steps": ["Protonation", "Attack", "Proton transfer", "Elimination"],
                "reactants": ["CC(=O)O", "CCO"],
                "products": ["CC(=O)OCC", "O"],
                "intermediates": ["CC(=[OH+])O", "CC(O)(O)OCC", "CC(=O)OCC"],
            }
        ],
        "question": "How is ethyl acetate made?",
        "analysisType": "ai",
    }


@pytest.fixture
def ai_reply(ai_payload):
    return "Here is the analysis:\n```json\n" + json.dumps(ai_payload) + "\n```\nLet me know {if} you need more."


@pytest.fixture
def fake_client_factory():
    return FakeCompletionClient


@pytest.fixture
def failing_client():
    return FakeCompletionClient(error=CompletionServiceError("APIConnectionError: connection refused"))

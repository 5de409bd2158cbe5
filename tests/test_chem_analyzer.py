import json

import pytest

from api_config import Settings
from chem_analyzer import (
    IMAGE_QUESTION_NO_API,
    IMAGE_QUESTION_PARSE_FAILED,
    IMAGE_QUESTION_UNAVAILABLE,
    ChemistryAnalyzer,
)
from models import AnalysisType
from tools.catalog import ESTERIFICATION_STEPS


class TestDemoMode:
    @pytest.mark.parametrize("question", ["Draw the structure of benzene", "What is SN2?", "x"])
    def test_no_credential_returns_fallback_no_api(self, question):
        result = ChemistryAnalyzer(None).analyze_question(question)
        assert result.analysis_type == AnalysisType.FALLBACK_NO_API
        assert result.molecules
        assert result.question == question

    def test_benzene_scenario(self):
        result = ChemistryAnalyzer(None).analyze_question("Draw the structure of benzene")
        assert [(m.name, m.smiles, m.drawable) for m in result.molecules] == [
            ("Benzene", "c1ccccc1", True),
            ("Ethanol", "CCO", True),
        ]
        payload = result.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert payload["analysisType"] == "fallback_no_api"
        assert payload["reactions"][0]["intermediates"]

    def test_no_outbound_call_from_settings(self, monkeypatch):
        def explode(*args, **kwargs):
            raise AssertionError("completion client must not be built without a key")

        monkeypatch.setattr("chem_analyzer.OpenAICompletionClient", explode)
        analyzer = ChemistryAnalyzer.from_settings(Settings(openai_api_key=None))
        assert analyzer.demo_mode
        assert analyzer.analyze_image(b"png").question == IMAGE_QUESTION_NO_API


class TestAIPath:
    def test_valid_reply_passes_through(self, fake_client_factory, ai_reply, ai_payload):
        client = fake_client_factory(reply=ai_reply)
        result = ChemistryAnalyzer(client).analyze_question("How is ethyl acetate made?")

        assert len(client.calls) == 1
        assert "How is ethyl acetate made?" in client.calls[0]["prompt"]
        assert result.analysis_type == AnalysisType.AI
        assert result.reactions[0].intermediates == ai_payload["reactions"][0]["intermediates"]
        assert result.reactions[0].reactants == ai_payload["reactions"][0]["reactants"]

    def test_invalid_intermediates_are_kept(self, fake_client_factory, ai_payload):
        ai_payload["reactions"][0]["intermediates"] = ["Protonation of carboxylic acid"]
        client = fake_client_factory(reply=json.dumps(ai_payload))
        result = ChemistryAnalyzer(client).analyze_question("q")
        assert result.reactions[0].intermediates == ["Protonation of carboxylic acid"]

    def test_image_request_sends_bytes(self, fake_client_factory, ai_reply):
        client = fake_client_factory(reply=ai_reply)
        result = ChemistryAnalyzer(client).analyze_image(b"\x89PNG", "image/png")
        assert client.calls[0]["image"] == b"\x89PNG"
        assert client.calls[0]["mime_type"] == "image/png"
        assert result.analysis_type == AnalysisType.AI


class TestParseFallback:
    @pytest.mark.parametrize("reply", ["", "Sorry, I cannot help with that.", '{"molecules": [}'])
    def test_unparsable_reply(self, fake_client_factory, reply):
        client = fake_client_factory(reply=reply)
        result = ChemistryAnalyzer(client).analyze_question("Explain SN1")

        assert result.analysis_type == AnalysisType.AI_FALLBACK
        assert len(result.molecules) == 1
        assert result.molecules[0].name == "Unknown Compound"
        assert len(result.reactions) == 1
        assert result.reactions[0].steps == ["Reaction mechanism analysis incomplete"]
        assert result.question == "Explain SN1"

    def test_unparsable_image_reply(self, fake_client_factory):
        result = ChemistryAnalyzer(fake_client_factory(reply="no json")).analyze_image(b"img")
        assert result.analysis_type == AnalysisType.AI_FALLBACK
        assert result.question == IMAGE_QUESTION_PARSE_FAILED


class TestServiceFailure:
    def test_text_failure_returns_fixed_payload(self, failing_client):
        result = ChemistryAnalyzer(failing_client).analyze_question("Explain esterification")

        assert result.analysis_type == AnalysisType.FALLBACK
        assert [(m.name, m.smiles) for m in result.molecules] == [("Benzene", "c1ccccc1")]
        assert len(result.reactions) == 1
        assert result.reactions[0].name == "Esterification"
        assert result.reactions[0].steps == ESTERIFICATION_STEPS
        assert len(result.reactions[0].steps) == 4
        assert len(failing_client.calls) == 1

    def test_failures_give_equal_payloads(self, failing_client):
        first = ChemistryAnalyzer(failing_client).analyze_question("q")
        second = ChemistryAnalyzer(failing_client).analyze_question("q")
        assert first == second

    def test_image_failure(self, failing_client):
        result = ChemistryAnalyzer(failing_client).analyze_image(b"img")
        assert result.analysis_type == AnalysisType.FALLBACK
        assert result.question == IMAGE_QUESTION_UNAVAILABLE

import pytest
from fastapi.testclient import TestClient

from api_config import MAX_IMAGE_BYTES
from api_main import app, get_analyzer, get_lookup
from chem_analyzer import ChemistryAnalyzer
from models import CompoundRecord
from tools.compound_lookup import CompoundLookupError


class StubLookup:
    def __init__(self, record=None):
        self.record = record
        self.names = []

    def lookup(self, name):
        self.names.append(name)
        if self.record is None:
            raise CompoundLookupError(name, "no CID found")
        return self.record


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_analyzer(analyzer):
    app.dependency_overrides[get_analyzer] = lambda: analyzer


class TestAnalyzeText:
    def test_demo_mode(self, client):
        use_analyzer(ChemistryAnalyzer(None))
        response = client.post("/api/analyze-chemistry-text", json={"question": "Draw the structure of benzene"})

        assert response.status_code == 200
        body = response.json()
        assert body["analysisType"] == "fallback_no_api"
        assert [m["name"] for m in body["molecules"]] == ["Benzene", "Ethanol"]
        assert body["molecules"][0] == {
            "name": "Benzene",
            "smiles": "c1ccccc1",
            "description": "Aromatic hydrocarbon - common organic compound",
            "drawable": True,
        }
        assert body["question"] == "Draw the structure of benzene"

    @pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "   "}])
    def test_missing_question(self, client, fake_client_factory, payload):
        fake = fake_client_factory(reply="{}")
        use_analyzer(ChemistryAnalyzer(fake))
        response = client.post("/api/analyze-chemistry-text", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "No question provided"}
        assert fake.calls == []

    def test_ai_reply(self, client, fake_client_factory, ai_reply, ai_payload):
        use_analyzer(ChemistryAnalyzer(fake_client_factory(reply=ai_reply)))
        body = client.post("/api/analyze-chemistry-text", json={"question": "ethyl acetate?"}).json()

        assert body["analysisType"] == "ai"
        assert body["reactions"][0]["intermediates"] == ai_payload["reactions"][0]["intermediates"]

    def test_absent_optional_lists_are_omitted(self, client, fake_client_factory):
        use_analyzer(ChemistryAnalyzer(fake_client_factory(reply="nothing useful")))
        body = client.post("/api/analyze-chemistry-text", json={"question": "q"}).json()

        assert body["analysisType"] == "ai_fallback"
        assert "intermediates" not in body["reactions"][0]
        assert "analysis" not in body

    def test_service_failure(self, client, failing_client):
        use_analyzer(ChemistryAnalyzer(failing_client))
        response = client.post("/api/analyze-chemistry-text", json={"question": "q"})

        assert response.status_code == 200
        assert response.json()["analysisType"] == "fallback"


class TestAnalyzeImage:
    def test_upload(self, client, fake_client_factory, ai_reply):
        fake = fake_client_factory(reply=ai_reply)
        use_analyzer(ChemistryAnalyzer(fake))
        response = client.post(
            "/api/analyze-chemistry",
            files={"image": ("question.png", b"\x89PNG\r\n", "image/png")},
        )

        assert response.status_code == 200
        assert response.json()["analysisType"] == "ai"
        assert fake.calls[0]["image"] == b"\x89PNG\r\n"
        assert fake.calls[0]["mime_type"] == "image/png"

    def test_non_image_content_type_defaults_to_jpeg(self, client, fake_client_factory, ai_reply):
        fake = fake_client_factory(reply=ai_reply)
        use_analyzer(ChemistryAnalyzer(fake))
        client.post("/api/analyze-chemistry",
                    files={"image": ("blob", b"data", "application/octet-stream")})
        assert fake.calls[0]["mime_type"] == "image/jpeg"

    def test_missing_image(self, client):
        use_analyzer(ChemistryAnalyzer(None))
        response = client.post("/api/analyze-chemistry", data={"other": "x"})
        assert response.status_code == 400
        assert response.json() == {"error": "No image provided"}

    def test_empty_image(self, client):
        use_analyzer(ChemistryAnalyzer(None))
        response = client.post("/api/analyze-chemistry", files={"image": ("empty.jpg", b"", "image/jpeg")})
        assert response.status_code == 400

    def test_oversized_image_is_rejected(self, client, fake_client_factory, ai_reply):
        fake = fake_client_factory(reply=ai_reply)
        use_analyzer(ChemistryAnalyzer(fake))
        big = b"\xff" * (MAX_IMAGE_BYTES + 1)
        response = client.post("/api/analyze-chemistry", files={"image": ("big.jpg", big, "image/jpeg")})
        assert response.status_code == 400
        assert response.json() == {"error": "Image must be smaller than 10MB"}
        assert fake.calls == []

    def test_image_at_size_limit_is_accepted(self, client, fake_client_factory, ai_reply):
        fake = fake_client_factory(reply=ai_reply)
        use_analyzer(ChemistryAnalyzer(fake))
        data = b"\xff" * MAX_IMAGE_BYTES
        response = client.post("/api/analyze-chemistry", files={"image": ("edge.jpg", data, "image/jpeg")})
        assert response.status_code == 200
        assert len(fake.calls[0]["image"]) == MAX_IMAGE_BYTES

    def test_demo_mode(self, client):
        use_analyzer(ChemistryAnalyzer(None))
        response = client.post("/api/analyze-chemistry", files={"image": ("q.jpg", b"jpeg", "image/jpeg")})
        assert response.json()["analysisType"] == "fallback_no_api"


class TestCompound:
    def test_found(self, client):
        stub = StubLookup(CompoundRecord(cid=702, formula="C2H6O", weight=46.07,
                                         canonical_smiles="CCO", iupac_name="ethanol"))
        app.dependency_overrides[get_lookup] = lambda: stub

        response = client.get("/api/compound", params={"name": "Ethanol"})
        assert response.status_code == 200
        assert response.json()["weight"] == 46.07
        assert stub.names == ["Ethanol"]

    def test_lookup_failure(self, client):
        app.dependency_overrides[get_lookup] = lambda: StubLookup()
        response = client.get("/api/compound", params={"name": "unobtainium"})
        assert response.status_code == 502
        assert response.json() == {"error": "Could not fetch molecular data from PubChem"}


class TestStructure:
    def test_png(self, client):
        response = client.get("/api/structure.png", params={"smiles": "c1ccccc1"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_bad_smiles(self, client):
        response = client.get("/api/structure.png", params={"smiles": "Protonation of acid"})
        assert response.status_code == 422
        assert "error" in response.json()


def test_health(client):
    use_analyzer(ChemistryAnalyzer(None))
    assert client.get("/health").json() == {"status": "ok", "mode": "demo"}


def test_reaction_png(client):
    response = client.get("/api/reaction.png",
                          params={"reactants": ["CC(=O)O", "CCO"], "products": ["CC(=O)OCC", "O"]})
    assert response.status_code == 200
    assert response.content.startswith(b"\x89PNG")

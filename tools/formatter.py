"""Prompt construction for the chemistry extraction request."""
import logging
from typing import Protocol, Optional

logger = logging.getLogger(__name__)

OUTPUT_SCHEMA = """{
  "molecules": [
    {
      "name": "molecule name",
      "smiles": "SMILES notation",
      "description": "brief description",
      "drawable": true
    }
  ],
  "reactions": [
    {
      "name": "reaction name",
      "steps": ["step 1", "step 2", "step 3"],
      "reactants": ["SMILES1", "SMILES2"],
      "products": ["SMILES3", "SMILES4"],
      "intermediates": ["CC(=O)[OH2+]", "CC(O)(O)OCC", "CC(=O)OCC"]
    }
  ],
  "question": "%(question_hint)s",
  "analysisType": "ai"
}"""

INTERMEDIATES_RULES = """CRITICAL: The intermediates array must contain ONLY valid SMILES notation strings, NOT text descriptions.
Examples of valid SMILES: "CC(=O)O", "c1ccccc1", "CCO", "CCBr", "CC[O-]"
Examples of INVALID entries: "Protonation of carboxylic acid", "Nucleophilic attack", "text descriptions"
Each intermediate must be a valid chemical structure in SMILES format that can be drawn by PubChem."""


class CompletionClient(Protocol):
    def complete(self, prompt: str, image: Optional[bytes] = None, mime_type: str = "image/jpeg") -> str:
        ...


def build_question_prompt(question: str) -> str:
    schema = OUTPUT_SCHEMA % {"question_hint": "original question"}
    return f"""Analyze this chemistry question and extract the following information in JSON format:

Question: "{question}"

1. Identify any molecules mentioned in the question
2. Identify any chemical reactions or mechanisms
3. Provide SMILES notation for any molecules identified
4. If the question asks to draw something, provide the molecular structures needed
5. For each reaction step, provide the SMILES notation of the intermediate molecule formed

Return the response in this exact JSON format:
{schema}

If the question asks to draw specific molecules, make sure to include them in the molecules array with proper SMILES notation.
You may add an optional "analysis" string with a short explanation of the chemistry involved.

{INTERMEDIATES_RULES}"""


def build_image_prompt() -> str:
    schema = OUTPUT_SCHEMA % {"question_hint": "main chemistry question from the image"}
    return f"""Analyze this chemistry image and extract the following information in JSON format:

1. Identify any molecules mentioned or shown in the image
2. Identify any chemical reactions or mechanisms
3. Extract the main chemistry question or problem
4. Provide SMILES notation for any molecules identified
5. For each reaction step, provide the SMILES notation of the intermediate molecule formed

Return the response in this exact JSON format:
{schema}

If no specific molecules or reactions are clearly visible, provide general chemistry information related to what might be in the image.
You may add an optional "analysis" string with a short explanation of the chemistry involved.

{INTERMEDIATES_RULES}"""


class ChemistryRequestFormatter:
    """Sends one extraction request per call and hands back the raw reply text."""

    def __init__(self, client: CompletionClient):
        self.client = client

    def request_question(self, question: str) -> str:
        reply = self.client.complete(build_question_prompt(question))
        logger.debug("[Formatter] Raw text reply: %s", reply)
        return reply or ""

    def request_image(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        reply = self.client.complete(build_image_prompt(), image=image, mime_type=mime_type)
        logger.debug("[Formatter] Raw vision reply: %s", reply)
        return reply or ""

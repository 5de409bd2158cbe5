import logging
from typing import Optional

from api_config import Settings
from models import AnalysisResult, AnalysisType, Molecule, Reaction
from tools.catalog import BENZENE, ESTERIFICATION, ESTERIFICATION_STEPS, ETHANOL
from tools.completion_client import CompletionServiceError, OpenAICompletionClient
from tools.formatter import ChemistryRequestFormatter, CompletionClient
from tools.response_parser import ResponseParseError, find_unparsable_intermediates, parse_reply

logger = logging.getLogger(__name__)

IMAGE_QUESTION_NO_API = "Chemistry question from uploaded image (AI analysis requires API key)"
IMAGE_QUESTION_PARSE_FAILED = "Chemistry question from uploaded image"
IMAGE_QUESTION_UNAVAILABLE = "Chemistry question from uploaded image (AI analysis unavailable)"


# --- Placeholder results ---

def no_api_result(question: str) -> AnalysisResult:
    return AnalysisResult(
        molecules=[
            BENZENE.model_copy(update={"description": "Aromatic hydrocarbon - common organic compound"}),
            ETHANOL.model_copy(update={"description": "Simple alcohol - commonly used solvent"}),
        ],
        reactions=[
            ESTERIFICATION.model_copy(
                update={"intermediates": ["CC(=O)[OH2+]", "CC(O)(O)OCC", "CC(=O)OCC"]}
            )
        ],
        question=question,
        analysis_type=AnalysisType.FALLBACK_NO_API,
    )


def parse_failed_result(question: str, description: str) -> AnalysisResult:
    return AnalysisResult(
        molecules=[Molecule(name="Unknown Compound", smiles="C", description=description)],
        reactions=[
            Reaction(
                name="Chemical Reaction",
                steps=["Reaction mechanism analysis incomplete"],
                reactants=["C"],
                products=["C"],
            )
        ],
        question=question,
        analysis_type=AnalysisType.AI_FALLBACK,
    )


def service_failed_result(question: str) -> AnalysisResult:
    return AnalysisResult(
        molecules=[BENZENE.model_copy(update={"description": "Aromatic hydrocarbon (fallback analysis)"})],
        reactions=[
            Reaction(
                name="Esterification",
                steps=list(ESTERIFICATION_STEPS),
                reactants=["CC(=O)O", "CCO"],
                products=["CC(=O)OCC", "O"],
            )
        ],
        question=question or "Chemistry question",
        analysis_type=AnalysisType.FALLBACK,
    )


class ChemistryAnalyzer:
    """Runs one extraction request and falls back to placeholder content on any failure.

    With no completion client the analyzer is in demo mode and never calls out.
    """

    def __init__(self, client: Optional[CompletionClient] = None):
        self.formatter = ChemistryRequestFormatter(client) if client is not None else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChemistryAnalyzer":
        if not settings.has_api_key:
            logger.warning("[Analyzer] OPENAI_API_KEY not configured, running in demo mode.")
            return cls(None)
        client = OpenAICompletionClient(
            api_key=settings.openai_api_key,
            text_model=settings.text_model,
            vision_model=settings.vision_model,
            timeout=settings.completion_timeout,
        )
        return cls(client)

    @property
    def demo_mode(self) -> bool:
        return self.formatter is None

    def analyze_question(self, question: str) -> AnalysisResult:
        if self.demo_mode:
            logger.info("[Analyzer] No API key, returning demo analysis for text question.")
            return no_api_result(question)

        try:
            reply = self.formatter.request_question(question)
        except CompletionServiceError as e:
            logger.error("[Analyzer] Completion service failed for text question: %s", e)
            return service_failed_result(question)

        return self._decode(
            reply,
            question,
            lambda: parse_failed_result(question, "Compound mentioned in the question (analysis incomplete)"),
        )

    def analyze_image(self, image: bytes, mime_type: str = "image/jpeg") -> AnalysisResult:
        if self.demo_mode:
            logger.info("[Analyzer] No API key, returning demo analysis for image.")
            return no_api_result(IMAGE_QUESTION_NO_API)

        try:
            reply = self.formatter.request_image(image, mime_type)
        except CompletionServiceError as e:
            logger.error("[Analyzer] Completion service failed for image: %s", e)
            return service_failed_result(IMAGE_QUESTION_UNAVAILABLE)

        return self._decode(
            reply,
            IMAGE_QUESTION_PARSE_FAILED,
            lambda: parse_failed_result(
                IMAGE_QUESTION_PARSE_FAILED, "Compound identified in the image (analysis incomplete)"
            ),
        )

    def _decode(self, reply: str, question: str, on_failure) -> AnalysisResult:
        try:
            result = parse_reply(reply, question)
        except ResponseParseError as e:
            logger.warning("[Analyzer] Could not parse completion reply: %s", e)
            return on_failure()

        flagged = find_unparsable_intermediates(result)
        if flagged:
            logger.warning("[Analyzer] Reply lists %d intermediate(s) that are not valid SMILES: %s",
                           len(flagged), flagged)
        logger.info("[Analyzer] Parsed %d molecule(s), %d reaction(s).",
                    len(result.molecules), len(result.reactions))
        return result

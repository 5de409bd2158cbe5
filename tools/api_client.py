import logging
import random
from typing import List, Optional

import requests
from pydantic import ValidationError

from models import AnalysisResult, CompoundRecord
from tools.catalog import basic_image_analysis, basic_question_analysis
from tools.compound_lookup import CompoundLookupError

logger = logging.getLogger(__name__)


class AnalysisClient:
    """Calls the ChemSight API from the UI.

    Analysis calls never raise: if the API is unreachable or answers with an
    error status, the caller gets the offline catalog analysis instead.
    """

    def __init__(self, base_url: str, timeout: float = 90.0,
                 session: Optional[requests.Session] = None, rng: Optional[random.Random] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rng = rng or random.Random()

    def analyze_question(self, question: str) -> AnalysisResult:
        try:
            response = self.session.post(
                f"{self.base_url}/api/analyze-chemistry-text",
                json={"question": question},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return AnalysisResult.model_validate(response.json())
        except (requests.exceptions.RequestException, ValueError, ValidationError) as e:
            logger.warning("[AnalysisClient] Text analysis request failed, using basic analysis: %s", e)
            return basic_question_analysis(question, self.rng)

    def analyze_image(self, image: bytes, filename: str = "chemistry_question.jpg",
                      mime_type: str = "image/jpeg") -> AnalysisResult:
        try:
            response = self.session.post(
                f"{self.base_url}/api/analyze-chemistry",
                files={"image": (filename, image, mime_type)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return AnalysisResult.model_validate(response.json())
        except (requests.exceptions.RequestException, ValueError, ValidationError) as e:
            logger.warning("[AnalysisClient] Image analysis request failed, using basic analysis: %s", e)
            return basic_image_analysis(self.rng)

    def lookup_compound(self, name: str) -> CompoundRecord:
        try:
            response = self.session.get(
                f"{self.base_url}/api/compound",
                params={"name": name},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return CompoundRecord.model_validate(response.json())
        except (requests.exceptions.RequestException, ValueError, ValidationError) as e:
            logger.warning("[AnalysisClient] Compound lookup failed for '%s': %s", name, e)
            raise CompoundLookupError(name, str(e)) from e

    def structure_png(self, smiles: str) -> Optional[bytes]:
        try:
            response = self.session.get(
                f"{self.base_url}/api/structure.png",
                params={"smiles": smiles},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.info("[AnalysisClient] No local drawing for %s: %s", smiles, e)
            return None
        return response.content

    def reaction_png(self, reactants: List[str], products: List[str]) -> Optional[bytes]:
        try:
            response = self.session.get(
                f"{self.base_url}/api/reaction.png",
                params={"reactants": reactants, "products": products},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.info("[AnalysisClient] No reaction drawing for %s>>%s: %s", reactants, products, e)
            return None
        return response.content

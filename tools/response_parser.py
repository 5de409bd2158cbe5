"""Turns a free-text completion reply into an AnalysisResult.

Parsing happens in two stages so each can be exercised on its own:
``locate_json_span`` finds the candidate object in the reply, and
``decode_analysis`` decodes and validates it.
"""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError
from rdkit import Chem, RDLogger

from models import AnalysisResult, AnalysisType

logger = logging.getLogger(__name__)

RDLogger.DisableLog('rdApp.*')


class ResponseParseError(ValueError):
    """The reply did not hold a decodable analysis object."""


def locate_json_span(text: str) -> Optional[str]:
    """Returns the first top-level balanced ``{...}`` substring of ``text``, or None.

    Braces inside JSON string literals do not count towards nesting.
    """
    if not text:
        return None
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def decode_analysis(span: str, question: str = "") -> AnalysisResult:
    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Malformed JSON in reply: {e}") from e
    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")

    # The service is asked to tag its own output; provenance is fixed here regardless.
    data.pop("analysisType", None)
    data.pop("analysis_type", None)
    if not data.get("question"):
        data["question"] = question

    try:
        result = AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(f"Reply does not match the analysis schema: {e.error_count()} error(s)") from e
    return result.model_copy(update={"analysis_type": AnalysisType.AI})


def parse_reply(text: str, question: str = "") -> AnalysisResult:
    span = locate_json_span(text)
    if span is None:
        raise ResponseParseError("No JSON object found in reply")
    return decode_analysis(span, question)


def find_unparsable_intermediates(result: AnalysisResult) -> List[str]:
    """Intermediates RDKit cannot read as SMILES. Reported only, never removed."""
    flagged = []
    for reaction in result.reactions:
        for entry in reaction.intermediates or []:
            if not entry or Chem.MolFromSmiles(entry) is None:
                flagged.append(entry)
    return flagged

import logging
import math
import urllib.parse
from typing import Any, Optional

import pubchempy as pcp

from models import CompoundRecord

logger = logging.getLogger(__name__)

LOOKUP_ERROR_MESSAGE = "Could not fetch molecular data from PubChem"
PROPERTIES = ["MolecularFormula", "MolecularWeight", "CanonicalSMILES", "IUPACName"]

PUBCHEM_REST = "https://pubchem.ncbi.nlm.nih.gov/rest/pug"


class CompoundLookupError(Exception):
    def __init__(self, name: str, reason: str = ""):
        super().__init__(LOOKUP_ERROR_MESSAGE)
        self.name = name
        self.reason = reason


def coerce_weight(value: Any) -> Optional[float]:
    """PubChem reports MolecularWeight as text; unparsable or non-finite values become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        weight = float(value)
    elif isinstance(value, str):
        try:
            weight = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return weight if math.isfinite(weight) else None


# --- External links ---

def structure_image_url(smiles: str) -> str:
    return f"{PUBCHEM_REST}/compound/smiles/{urllib.parse.quote(smiles, safe='')}/PNG"


def pubchem_compound_url(cid: int) -> str:
    return f"https://pubchem.ncbi.nlm.nih.gov/compound/{cid}"


def molview_url(smiles: str) -> str:
    return f"https://molview.org/?q={urllib.parse.quote(smiles, safe='')}"


def chemspider_url(smiles: str) -> str:
    return f"https://www.chemspider.com/Search.aspx?q={urllib.parse.quote(smiles, safe='')}"


class PubChemLookup:
    """Name -> CID -> properties, as two sequential PubChem requests."""

    def lookup(self, name: str) -> CompoundRecord:
        name = (name or "").strip()
        if not name:
            raise CompoundLookupError(name, "empty compound name")

        logger.info("[PubChem] Looking up '%s'", name)
        try:
            cids = pcp.get_cids(name, "name")
            cid = next((c for c in cids or [] if c), None)
            if cid is None:
                raise CompoundLookupError(name, "no CID found")
            rows = pcp.get_properties(PROPERTIES, cid, "cid")
        except pcp.PubChemPyError as e:
            logger.warning("[PubChem] Lookup failed for '%s': %s", name, e)
            raise CompoundLookupError(name, str(e)) from e
        except OSError as e:
            logger.warning("[PubChem] Network error for '%s': %s", name, e)
            raise CompoundLookupError(name, str(e)) from e

        if not rows:
            raise CompoundLookupError(name, f"no properties for CID {cid}")
        props = rows[0]
        smiles = props.get("CanonicalSMILES") or props.get("ConnectivitySMILES") or props.get("SMILES")
        record = CompoundRecord(
            cid=int(cid),
            formula=props.get("MolecularFormula") or "N/A",
            weight=coerce_weight(props.get("MolecularWeight")),
            canonical_smiles=smiles or "N/A",
            iupac_name=props.get("IUPACName") or "N/A",
        )
        logger.info("[PubChem] Found '%s': CID %s", name, record.cid)
        return record

import logging
from typing import List

from rdkit import Chem, RDLogger
from rdkit.Chem import AllChem
from rdkit.Chem.Draw import rdMolDraw2D

logger = logging.getLogger(__name__)

RDLogger.DisableLog('rdApp.*')


class StructureRenderError(ValueError):
    pass


class ChemVisualizer:
    """Draws molecules and reactions to PNG bytes with RDKit."""

    def __init__(self, width: int = 400, height: int = 300):
        self.width = width
        self.height = height

    def render_molecule(self, smiles: str) -> bytes:
        mol = Chem.MolFromSmiles(smiles) if smiles else None
        if mol is None:
            raise StructureRenderError(f"Failed to parse molecule SMILES: '{smiles}'")

        AllChem.Compute2DCoords(mol)
        drawer = rdMolDraw2D.MolDraw2DCairo(self.width, self.height)
        dopts = drawer.drawOptions()
        dopts.bondLineWidth = 1.5
        dopts.padding = 0.1
        drawer.DrawMolecule(mol)
        drawer.FinishDrawing()
        logger.debug("[ChemVisualizer] Rendered molecule %s", smiles)
        return drawer.GetDrawingText()

    def render_reaction(self, reactants: List[str], products: List[str]) -> bytes:
        if not reactants or not products:
            raise StructureRenderError("A reaction needs at least one reactant and one product")
        rxn_smiles = f"{'.'.join(reactants)}>>{'.'.join(products)}"
        try:
            rxn = AllChem.ReactionFromSmarts(rxn_smiles, useSmiles=True)
        except ValueError as e:
            raise StructureRenderError(f"Could not parse reaction SMILES '{rxn_smiles}': {e}") from e
        if rxn is None or rxn.GetNumReactantTemplates() == 0 or rxn.GetNumProductTemplates() == 0:
            raise StructureRenderError(f"Could not parse reaction SMILES '{rxn_smiles}'")

        num_components = rxn.GetNumReactantTemplates() + rxn.GetNumProductTemplates()
        width = max(400, 200 * num_components)
        drawer = rdMolDraw2D.MolDraw2DCairo(width, 250)
        dopts = drawer.drawOptions()
        dopts.includeAtomTags = False
        dopts.bondLineWidth = 1.5
        dopts.padding = 0.1
        drawer.DrawReaction(rxn)
        drawer.FinishDrawing()
        logger.debug("[ChemVisualizer] Rendered reaction %s", rxn_smiles)
        return drawer.GetDrawingText()

"""Fixed compound and reaction tables used when no AI analysis is available."""
import random
from typing import List, Optional

from models import AnalysisResult, AnalysisType, Molecule, Reaction

BENZENE = Molecule(
    name="Benzene",
    smiles="c1ccccc1",
    description="Aromatic hydrocarbon with 6 carbon atoms in a ring structure",
)
ETHANOL = Molecule(
    name="Ethanol",
    smiles="CCO",
    description="Simple alcohol with 2 carbon atoms and hydroxyl group",
)
METHANOL = Molecule(
    name="Methanol",
    smiles="CO",
    description="Simple alcohol with 1 carbon atom",
)
ACETIC_ACID = Molecule(
    name="Acetic Acid",
    smiles="CC(=O)O",
    description="Carboxylic acid with 2 carbon atoms and carboxyl group",
)
PROPANE = Molecule(
    name="Propane",
    smiles="CCC",
    description="Alkane with 3 carbon atoms",
)

COMMON_MOLECULES: List[Molecule] = [BENZENE, ETHANOL, METHANOL, ACETIC_ACID, PROPANE]

ESTERIFICATION_STEPS = [
    "Protonation of carboxylic acid",
    "Nucleophilic attack by alcohol",
    "Proton transfer",
    "Loss of water molecule",
]

ESTERIFICATION = Reaction(
    name="Esterification",
    steps=ESTERIFICATION_STEPS,
    reactants=["CC(=O)O", "CCO"],
    products=["CC(=O)OCC", "O"],
)
SN2_SUBSTITUTION = Reaction(
    name="SN2 Substitution",
    steps=[
        "Nucleophile approaches from back side",
        "Bond formation and breaking simultaneously",
        "Inversion of configuration",
    ],
    reactants=["CBr", "[OH-]"],
    products=["CO", "[Br-]"],
)
SN1_SUBSTITUTION = Reaction(
    name="SN1 Substitution",
    steps=[
        "Formation of carbocation intermediate",
        "Nucleophile attack on carbocation",
        "Formation of substitution product",
    ],
    reactants=["CC(C)(C)Br", "O"],
    products=["CC(C)(C)O", "Br"],
)

COMMON_REACTIONS: List[Reaction] = [ESTERIFICATION, SN2_SUBSTITUTION, SN1_SUBSTITUTION]

SAMPLE_IMAGE_QUESTIONS = [
    "Draw the mechanism for the esterification of benzoic acid with ethanol",
    "Show the SN2 reaction mechanism for the substitution of bromomethane with hydroxide",
    "Draw the structure of benzene and explain its aromaticity",
    "Show the mechanism for the hydrolysis of an ester",
    "Draw the Lewis structure for ethanol and identify the functional groups",
]

# Checked in order; the first keyword found wins, so "methanol" precedes its substring "ethanol".
_KEYWORD_MOLECULES = [
    (("benzene",), BENZENE),
    (("methanol",), METHANOL),
    (("ethanol",), ETHANOL),
    (("acetic", "acetate"), ACETIC_ACID),
    (("propane",), PROPANE),
]


def match_question_molecule(question: str) -> Molecule:
    question_lower = question.lower()
    for keywords, molecule in _KEYWORD_MOLECULES:
        if any(keyword in question_lower for keyword in keywords):
            return molecule
    return BENZENE


def pick_reactions(rng: random.Random) -> List[Reaction]:
    return rng.sample(COMMON_REACTIONS, rng.randint(1, 2))


def basic_question_analysis(question: str, rng: Optional[random.Random] = None) -> AnalysisResult:
    """Keyword-matched offline analysis of a text question."""
    rng = rng or random.Random()
    return AnalysisResult(
        molecules=[match_question_molecule(question)],
        reactions=pick_reactions(rng),
        question=question,
        analysis_type=AnalysisType.BASIC,
    )


def basic_image_analysis(rng: Optional[random.Random] = None) -> AnalysisResult:
    """Offline stand-in for an uploaded image; nothing is read from the image itself."""
    rng = rng or random.Random()
    molecules = rng.sample(COMMON_MOLECULES, rng.randint(1, 3))
    reactions = pick_reactions(rng)
    return AnalysisResult(
        molecules=molecules,
        reactions=reactions,
        question=rng.choice(SAMPLE_IMAGE_QUESTIONS),
        analysis_type=AnalysisType.BASIC,
    )

from typing import Optional

import streamlit as st

from api_config import configure_logging, load_settings
from models import AnalysisResult, AnalysisType
from tools.api_client import AnalysisClient
from tools.compound_lookup import (
    CompoundLookupError,
    chemspider_url,
    molview_url,
    pubchem_compound_url,
    structure_image_url,
)
from viewer_state import (
    MoleculeViewerState,
    ReactionViewerState,
    analysis_hint,
    analysis_label,
    image_filename,
    molecule_label,
    upload_error,
)

settings = load_settings()
configure_logging(settings.log_level)

# --- Streamlit UI Configuration ---
st.set_page_config(page_title="ChemSight", page_icon="🧪", layout="wide")

st.markdown("""
<style>
    .step-card {
        border-left: 4px solid #2e7d32;
        background-color: #f0f7f0;
        padding: 10px 15px;
        border-radius: 6px;
        margin-bottom: 10px;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_client() -> AnalysisClient:
    return AnalysisClient(settings.api_base_url)


client = get_client()

# --- Session State Initialization ---
if "analysis_result" not in st.session_state:
    st.session_state.analysis_result = None
if "uploaded_image" not in st.session_state:
    st.session_state.uploaded_image = None
if "molecule_view" not in st.session_state:
    st.session_state.molecule_view = MoleculeViewerState()
if "reaction_view" not in st.session_state:
    st.session_state.reaction_view = ReactionViewerState()


def run_lookup(view: MoleculeViewerState, token: int):
    try:
        record = client.lookup_compound(view.query)
    except CompoundLookupError as e:
        view.apply_lookup(token, error=str(e))
        return
    view.apply_lookup(token, record=record)


def show_result(result: AnalysisResult):
    st.session_state.analysis_result = result
    st.session_state.reaction_view.load(result)
    view = st.session_state.molecule_view
    token = view.load(result)
    if token is not None:
        run_lookup(view, token)


def structure_image(smiles: str, width: int = 200) -> Optional[bytes]:
    # Local RDKit drawing first; PubChem's renderer takes over for SMILES RDKit rejects.
    png = client.structure_png(smiles)
    if png:
        st.image(png, width=width)
    else:
        st.image(structure_image_url(smiles), width=width)
    return png


# --- Title ---
st.title("🧪 ChemSight")
st.caption("Ask a chemistry question or upload an image to see molecules and reaction mechanisms")
st.markdown("---")

# --- Input Section ---
st.subheader("Ask a Chemistry Question")
with st.form("question_form", clear_on_submit=False):
    question = st.text_input(
        "Question",
        placeholder="e.g., Draw the structure of benzene, Show me the SN2 mechanism...",
        label_visibility="collapsed",
    )
    submitted = st.form_submit_button("Ask")

if submitted and question.strip():
    st.session_state.uploaded_image = None
    with st.spinner("Analyzing your chemistry question..."):
        show_result(client.analyze_question(question.strip()))

st.markdown("<p style='text-align:center;color:gray'>OR</p>", unsafe_allow_html=True)

st.subheader("Upload Chemistry Image")
uploaded = st.file_uploader("Image", type=["png", "jpg", "jpeg", "gif", "bmp", "webp"], label_visibility="collapsed")
if uploaded is not None and upload_error(uploaded.size):
    st.error(upload_error(uploaded.size))
elif uploaded is not None and st.button("Analyze Image"):
    image_bytes = uploaded.getvalue()
    st.session_state.uploaded_image = image_bytes
    with st.spinner("Our AI is identifying molecules and reaction mechanisms..."):
        show_result(client.analyze_image(image_bytes, uploaded.name, uploaded.type or "image/jpeg"))

if st.session_state.uploaded_image:
    st.image(st.session_state.uploaded_image, caption="Uploaded image", width=400)

result: AnalysisResult = st.session_state.analysis_result

# --- Analysis Results ---
if result is not None:
    st.markdown("---")
    header_col, label_col = st.columns([4, 1])
    with header_col:
        st.header("Analysis Results")
    with label_col:
        label = analysis_label(result.analysis_type)
        if result.analysis_type == AnalysisType.AI:
            st.success(label)
        elif result.analysis_type in (AnalysisType.AI_FALLBACK, AnalysisType.FALLBACK_NO_API):
            st.warning(label)
        else:
            st.info(label)

    st.info(f"**Chemistry Question:** {result.question}")
    hint = analysis_hint(result.analysis_type)
    if hint:
        st.caption(hint)
    if result.analysis:
        with st.expander("AI Analysis & Explanation", expanded=True):
            st.markdown(result.analysis)

    # --- Molecules Section ---
    molecule_view: MoleculeViewerState = st.session_state.molecule_view
    if molecule_view.molecules:
        st.subheader("Identified Molecules")
        names = [molecule_label(m) for m in molecule_view.molecules]
        choice = st.radio("Molecule", range(len(names)), format_func=lambda i: names[i],
                          index=molecule_view.selected_index or 0, horizontal=True)
        if choice != molecule_view.selected_index:
            run_lookup(molecule_view, molecule_view.select(choice))

        molecule = molecule_view.selected
        left, right = st.columns([1, 1])
        with left:
            png = structure_image(molecule.smiles, width=300)
            if png:
                st.download_button("Download image", png, file_name=image_filename(molecule), mime="image/png")
            st.markdown(f"**{molecule.name}**  \n`{molecule.smiles}`")
            if molecule.description:
                st.write(molecule.description)
        with right:
            st.markdown(f"**PubChem data** for _{molecule_view.query}_")
            if molecule_view.error:
                st.error(molecule_view.error)
            elif molecule_view.record:
                record = molecule_view.record
                st.markdown(
                    f"- **CID:** {record.cid}\n"
                    f"- **Formula:** {record.formula}\n"
                    f"- **Molecular weight:** {f'{record.weight:.2f} g/mol' if record.weight is not None else 'N/A'}\n"
                    f"- **IUPAC name:** {record.iupac_name}\n"
                    f"- **Canonical SMILES:** `{record.canonical_smiles}`"
                )
            links = [f"[MolView]({molview_url(molecule.smiles)})",
                     f"[ChemSpider]({chemspider_url(molecule.smiles)})"]
            if molecule_view.record:
                links.insert(0, f"[PubChem]({pubchem_compound_url(molecule_view.record.cid)})")
            st.markdown(" · ".join(links))

            search = st.text_input("Search PubChem for another compound", key="compound_search")
            if st.button("Search") and search.strip():
                run_lookup(molecule_view, molecule_view.search(search))
                st.rerun()

    # --- Reactions Section ---
    reaction_view: ReactionViewerState = st.session_state.reaction_view
    if reaction_view.reactions:
        st.subheader("Reaction Mechanisms")
        names = [r.name for r in reaction_view.reactions]
        choice = st.radio("Reaction", range(len(names)), format_func=lambda i: names[i],
                          index=reaction_view.selected_index or 0, horizontal=True)
        if choice != reaction_view.selected_index:
            reaction_view.select(choice)

        reaction = reaction_view.selected
        if reaction.reactants or reaction.products:
            reactant_col, arrow_col, product_col = st.columns([3, 1, 3])
            with reactant_col:
                st.markdown("**Reactants**")
                for smiles in reaction.reactants or []:
                    structure_image(smiles, width=150)
                    st.caption(smiles)
            with arrow_col:
                st.markdown("<h2 style='text-align:center'>→</h2>", unsafe_allow_html=True)
            with product_col:
                st.markdown("**Products**")
                for smiles in reaction.products or []:
                    structure_image(smiles, width=150)
                    st.caption(smiles)

            if reaction.reactants and reaction.products:
                overview = client.reaction_png(reaction.reactants, reaction.products)
                if overview:
                    with st.expander("Reaction overview"):
                        st.image(overview)

        if reaction.steps:
            st.markdown(f"**Step {reaction_view.current_step + 1} of {len(reaction.steps)}**")
            st.markdown(f"<div class='step-card'>{reaction_view.current_step_text}</div>",
                        unsafe_allow_html=True)
            intermediates = reaction.intermediates or []
            if reaction_view.current_step < len(intermediates):
                structure_image(intermediates[reaction_view.current_step], width=200)
                st.caption(intermediates[reaction_view.current_step])

            prev_col, next_col, reset_col = st.columns(3)
            if prev_col.button("◀ Previous", disabled=reaction_view.current_step == 0):
                reaction_view.retreat()
                st.rerun()
            if next_col.button("Next ▶", disabled=reaction_view.current_step == reaction_view.last_step):
                reaction_view.advance()
                st.rerun()
            if reset_col.button("Reset"):
                reaction_view.reset()
                st.rerun()

            with st.expander("All steps"):
                for index, step in enumerate(reaction.steps):
                    if st.button(f"{index + 1}. {step}", key=f"step_{index}"):
                        reaction_view.jump(index)
                        st.rerun()

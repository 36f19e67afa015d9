from .pathway import Pathway, Metabolite, MetaboliteType, Gene, Edge, get_ehrlich_pathway
from .accessibility import AccessibilityTables


def get_ehrlich_tables() -> AccessibilityTables:
    """
    ATAC-seq derived accessibility for the Ehrlich pathway genes.
    Activated values are the predicted state after dCas9-VPR targeting;
    repressed values the predicted state after dCas9-KRAB targeting.
    """
    return AccessibilityTables(
        baseline={
            "BAT2": 0.65,
            "ARO10": 0.72,
            "ADH6": 0.68,
            "ATF1": 0.06,  # closed promoter, the pathway bottleneck
            "EXPORT": 0.30,
        },
        activated={
            "BAT2": 0.88,
            "ARO10": 0.91,
            "ADH6": 0.85,
            "ATF1": 0.70,
            "EXPORT": 0.30,  # passive export cannot be targeted
        },
        repressed={
            "BAT2": 0.30,
            "ARO10": 0.35,
            "ADH6": 0.32,
            "ATF1": 0.02,
            "EXPORT": 0.30,
        },
        passive_genes=frozenset({"EXPORT"}),
    )


def get_ehrlich_preset():
    """Returns the canonical (pathway, tables) pair."""
    return get_ehrlich_pathway(), get_ehrlich_tables()


def get_phenylethyl_acetate_pathway() -> Pathway:
    """
    Phenylalanine branch of the Ehrlich pathway, ending in the rose-scented
    2-phenylethyl acetate ester. ATF1 again gates the product branch.
    """
    return Pathway(
        metabolites=[
            Metabolite("phe", "L-Phenylalanine", MetaboliteType.INPUT, short="Phe"),
            Metabolite("ppy", "phenylpyruvate", MetaboliteType.INTERMEDIATE, short="PPY"),
            Metabolite("paald", "phenylacetaldehyde", MetaboliteType.INTERMEDIATE, short="PAAld"),
            Metabolite("peoh", "2-phenylethanol", MetaboliteType.BRANCH, short="2-PE"),
            Metabolite("peac", "2-phenylethyl acetate", MetaboliteType.PRODUCT, short="2-PEAc"),
            Metabolite("waste", "fusel alcohol export", MetaboliteType.WASTE, short="waste"),
        ],
        genes=[
            Gene("ARO9", "aromatic aminotransferase II", "YHR137W", "2.6.1.58"),
            Gene("ARO10", "phenylpyruvate decarboxylase", "YDR380W", "4.1.1.43"),
            Gene("ADH5", "alcohol dehydrogenase", "YBR145W", "1.1.1.1"),
            Gene("ATF1", "alcohol acetyltransferase", "YOR377W", "2.3.1.84"),
            Gene("EXPORT", "passive export", passive=True),
        ],
        edges=[
            Edge("phe", "ppy", "ARO9"),
            Edge("ppy", "paald", "ARO10"),
            Edge("paald", "peoh", "ADH5"),
            Edge("peoh", "peac", "ATF1"),
            Edge("peoh", "waste", "EXPORT"),
        ],
        name="Ehrlich_Phenylethyl_Acetate",
    )


def get_phenylethyl_acetate_tables() -> AccessibilityTables:
    return AccessibilityTables(
        baseline={"ARO9": 0.58, "ARO10": 0.72, "ADH5": 0.61, "ATF1": 0.06, "EXPORT": 0.30},
        activated={"ARO9": 0.84, "ARO10": 0.91, "ADH5": 0.80, "ATF1": 0.70, "EXPORT": 0.30},
        repressed={"ARO9": 0.25, "ARO10": 0.35, "ADH5": 0.28, "ATF1": 0.02, "EXPORT": 0.30},
        passive_genes=frozenset({"EXPORT"}),
    )


def get_phenylethyl_acetate_preset():
    return get_phenylethyl_acetate_pathway(), get_phenylethyl_acetate_tables()


PRESETS = {
    "ehrlich": get_ehrlich_preset,
    "phenylethyl": get_phenylethyl_acetate_preset,
}


def get_preset(name: str):
    """Look up a (pathway, tables) preset by name."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {sorted(PRESETS)}")
    return PRESETS[name]()

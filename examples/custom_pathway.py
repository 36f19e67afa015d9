"""
Example: Custom Pathway

This example demonstrates how to:
1. Define a custom pathway with a branch point from a plain dictionary.
2. Provide accessibility tables for its genes.
3. Run the workbench on it and render the diagram.
"""

from atacflux.accessibility import AccessibilityTables
from atacflux.pathway import Pathway
from atacflux.visualization import create_pathway_figure
from atacflux.workbench import Workbench


def main():
    print("Defining a custom two-step pathway with a product/waste branch...")

    pathway = Pathway.from_dict({
        "name": "Toy Ester Pathway",
        "metabolites": {
            "sub": {"name": "Substrate", "type": "input", "short": "Sub"},
            "alc": {"name": "Alcohol", "type": "branch", "short": "Alc"},
            "est": {"name": "Ester", "type": "product", "short": "Est"},
            "out": {"name": "Secreted", "type": "waste", "short": "Out"},
        },
        "genes": {
            "ADH1": {"name": "alcohol dehydrogenase"},
            "AAT1": {"name": "alcohol acetyltransferase"},
            "PUMP": {"name": "passive export", "passive": True},
        },
        "edges": [
            {"from": "sub", "to": "alc", "gene": "ADH1"},
            {"from": "alc", "to": "est", "gene": "AAT1"},
            {"from": "alc", "to": "out", "gene": "PUMP"},
        ],
    })

    tables = AccessibilityTables.from_dict({
        "baseline": {"ADH1": 0.8, "AAT1": 0.2, "PUMP": 0.4},
        "activated": {"ADH1": 0.95, "AAT1": 0.8, "PUMP": 0.4},
        "repressed": {"ADH1": 0.3, "AAT1": 0.05, "PUMP": 0.4},
        "passive": ["PUMP"],
    })

    wb = Workbench(pathway=pathway, tables=tables)

    for state in ({}, {"AAT1": "activate"}, {"ADH1": "repress", "AAT1": "activate"}):
        run = wb.run(state)
        print(f"{run.state.describe():<32} capture={run.metrics.format_percent():>6}  fold={run.metrics.format_fold()}")

    run = wb.run({"AAT1": "activate"})
    fig = create_pathway_figure(pathway, run.result, run.accessibility)
    # fig.show() # Uncomment to see the diagram
    print(f"\nFigure has {len(fig.data)} traces.")


if __name__ == "__main__":
    main()

"""
Example: Intervention Screen

Enumerates every single and double CRISPRa/CRISPRi intervention on the
Ehrlich pathway, solves each one in parallel and prints the best candidates.
"""

from atacflux.config import WorkbenchConfig
from atacflux.workbench import Workbench


def main():
    config = WorkbenchConfig(n_jobs=2, log_level="WARNING")
    wb = Workbench(config=config)

    print("Screening all intervention sets on up to two genes...")
    frame = wb.screen_interventions(max_genes=2)

    print(f"\nEvaluated {len(frame) - 1} intervention sets.")
    print("\nTop 5 by product flux:")
    print(frame.head(5)[["interventions", "product_flux", "capture_rate", "fold_change"]].to_string(index=False))

    print("\nWorst 3:")
    print(frame.tail(3)[["interventions", "product_flux", "bottleneck_gene"]].to_string(index=False))


if __name__ == "__main__":
    main()

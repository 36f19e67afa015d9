from atacflux.workbench import Workbench
import matplotlib.pyplot as plt
import numpy as np

def main():
    """
    This example demonstrates how to use the AtacFlux Workbench to compare the
    baseline Ehrlich pathway against a dCas9-VPR activation of ATF1.
    """
    print("Initializing AtacFlux Workbench...")

    # 1. Initialize the Workbench
    # This loads the Ehrlich pathway preset and solves the baseline
    wb = Workbench()

    # 2. Solve with ATF1 activated
    baseline = wb.run()
    activated = wb.run({"ATF1": "activate"})

    # 3. Compare terminal flux
    labels = ["product", "waste"]
    product, waste = wb.pathway.product_node, wb.pathway.waste_node
    before = [baseline.result.flux_at(product), baseline.result.flux_at(waste)]
    after = [activated.result.flux_at(product), activated.result.flux_at(waste)]

    x = np.arange(len(labels))
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.bar(x - 0.2, before, width=0.4, label='Baseline', color='slategray')
    ax.bar(x + 0.2, after, width=0.4, label='ATF1 activated', color='forestgreen')
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel('Flux (fraction of input)')
    ax.set_title('Ehrlich Pathway Terminal Flux')
    ax.legend()
    ax.grid(True, axis='y', linestyle='--', alpha=0.7)

    plt.tight_layout()
    # plt.show() # Uncomment to see the plot

    print("\nSolve Summary:")
    print(f"Baseline Capture:  {baseline.metrics.format_percent()}")
    print(f"Activated Capture: {activated.metrics.format_percent()}")
    print(f"Fold Change:       {activated.metrics.format_fold()}")
    print(f"Bottleneck Gene:   {activated.metrics.bottleneck_gene}")

if __name__ == "__main__":
    main()

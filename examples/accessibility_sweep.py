from atacflux.workbench import Workbench
import matplotlib.pyplot as plt

def main():
    """
    This example sweeps ATF1 promoter accessibility from fully closed to fully
    open and shows how the branch point partitions isoamyl alcohol.
    """
    print("Starting ATF1 Accessibility Sweep...")

    wb = Workbench()
    frame = wb.sweep_accessibility("ATF1")

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(11, 4))

    ax1.plot(frame['accessibility'], frame['product_flux'], 'o-', label='Isoamyl acetate', color='forestgreen')
    ax1.plot(frame['accessibility'], frame['waste_flux'], 'o-', label='Exported', color='firebrick')
    ax1.set_xlabel('ATF1 accessibility')
    ax1.set_ylabel('Flux')
    ax1.legend()
    ax1.grid(True, linestyle='--', alpha=0.5)

    ax2.plot(frame['accessibility'], frame['capture_rate'].astype(float) * 100, 'o-', color='royalblue')
    ax2.set_xlabel('ATF1 accessibility')
    ax2.set_ylabel('Capture rate (%)')
    ax2.grid(True, linestyle='--', alpha=0.5)

    plt.tight_layout()

    print("\nResults Summary (Accessibility -> Product Flux):")
    for _, row in frame.iloc[::5].iterrows():
        print(f"  {row['accessibility']:.2f} -> {row['product_flux']:.4f}")

    # plt.show() # Uncomment to see the plot

if __name__ == "__main__":
    main()

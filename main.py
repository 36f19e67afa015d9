from atacflux.workbench import Workbench
from atacflux.visualization import create_pathway_figure, create_sweep_figure
from atacflux.config import WorkbenchConfig
import os
import json
import logging
import argparse


def main(config: WorkbenchConfig = None, activate=None, repress=None, sweep_gene=None,
         screen=0, json_export=None, web_schema=None, write_figure=True):
    print("==========================================================")
    print("   AtacFlux: Chromatin-Gated Pathway Flux Workbench       ")
    print("==========================================================")

    if config is None:
        config = WorkbenchConfig()

    logging.basicConfig(level=config.logging_level, format="%(levelname)s %(name)s: %(message)s")

    if web_schema:
        schema = config.to_web_schema()
        with open(web_schema, "w") as f:
            json.dump(schema, f, indent=4)
        print(f"[*] Web configuration schema exported to: {web_schema}")
        return

    try:
        workbench = Workbench(config=config)
        pathway = workbench.pathway

        state = workbench.initial_state()
        for gene in activate or []:
            state = state.with_intervention(gene, "activate")
        for gene in repress or []:
            state = state.with_intervention(gene, "repress")

        print(f"[*] Pathway: {pathway.name} ({len(pathway.metabolites)} metabolites, {len(pathway.edges)} edges)")
        print(f"[*] Interventions: {state.describe()}")
        print(f"[*] Input flux: {config.input_flux}")

        run = workbench.run(state)
        metrics = run.metrics

        print("\n--- Flux Summary ---")
        for gene in pathway.edge_genes:
            print(f"{gene:<8} accessibility: {run.accessibility[gene]:.2f}")
        print(f"Product Flux:       {metrics.product_flux:.4f}")
        print(f"Waste Flux:         {metrics.waste_flux:.4f}")
        print(f"Capture Rate:       {metrics.format_percent()}")
        print(f"Fold Change:        {metrics.format_fold()}")
        print(f"Bottleneck Gene:    {metrics.bottleneck_gene}")
        if run.result.is_degenerate:
            print(f"[!] Degenerate branch at {', '.join(run.result.degenerate_nodes)}: even split applied")
        print("--------------------\n")

        if json_export:
            workbench.export_results_json(run, json_export)
            print(f"[*] Results exported to JSON: {json_export}")

        os.makedirs(config.output_dir, exist_ok=True)

        if sweep_gene:
            frame = workbench.sweep_accessibility(sweep_gene, state=state)
            print(f"[+] Swept {sweep_gene} over {len(frame)} accessibility values")
            if write_figure:
                sweep_file = os.path.join(config.output_dir, f"atacflux_sweep_{sweep_gene}.html")
                create_sweep_figure(frame, gene=sweep_gene).write_html(sweep_file)
                print(f"[*] Sweep plot saved to: {os.path.abspath(sweep_file)}")

        if screen:
            frame = workbench.screen_interventions(max_genes=screen)
            print(f"[+] Screened {len(frame) - 1} intervention sets. Top 5 by product flux:")
            for _, row in frame.head(5).iterrows():
                print(f"    - {row['interventions']:<35} product={row['product_flux']:.4f}")

        if write_figure:
            print("[*] Rendering pathway diagram...")
            fig = create_pathway_figure(pathway, run.result, run.accessibility,
                                        title=f"<b>{pathway.name}</b><br>{state.describe()}")
            output_file = config.get_figure_filename(state.describe().replace(", ", "_").replace("=", "-"))
            fig.write_html(output_file)
            print(f"Diagram saved to: {os.path.abspath(output_file)}")

        print("[SUCCESS] Solve complete.")
        print("==========================================================")
        return run

    except Exception as e:
        print(f"[ERROR] Solve failed: {str(e)}")
        raise


def parse_args():
    parser = argparse.ArgumentParser(
        description="AtacFlux: Chromatin-Gated Pathway Flux Workbench"
    )
    parser.add_argument("--config", type=str, help="Path to JSON configuration file")
    parser.add_argument("--preset", type=str, help="Pathway preset (e.g., 'ehrlich', 'phenylethyl')")
    parser.add_argument("--input-flux", type=float, help="Flux entering the pathway")
    parser.add_argument(
        "--activate", nargs="*", default=[], metavar="GENE", help="Genes to activate (dCas9-VPR)"
    )
    parser.add_argument(
        "--repress", nargs="*", default=[], metavar="GENE", help="Genes to repress (dCas9-KRAB)"
    )
    parser.add_argument("--sweep", type=str, metavar="GENE", help="Sweep one gene's accessibility from 0 to 1")
    parser.add_argument(
        "--screen", type=int, default=0, metavar="N", help="Screen all interventions on up to N genes"
    )
    parser.add_argument(
        "--export-json", type=str, help="Export results to JSON file"
    )
    parser.add_argument(
        "--web-config", "--web-schema", dest="web_schema", type=str, help="Export web configuration schema to JSON file"
    )
    parser.add_argument(
        "--no-figure", action="store_true", help="Skip writing HTML figures"
    )

    return parser.parse_args()


def cli():
    args = parse_args()

    if args.config:
        config = WorkbenchConfig.from_json_file(args.config)
    else:
        config_kwargs = {}
        if args.preset is not None:
            config_kwargs["preset"] = args.preset
        if args.input_flux is not None:
            config_kwargs["input_flux"] = args.input_flux

        config = WorkbenchConfig(**config_kwargs)

    main(
        config,
        activate=args.activate,
        repress=args.repress,
        sweep_gene=args.sweep,
        screen=args.screen,
        json_export=args.export_json,
        web_schema=args.web_schema,
        write_figure=not args.no_figure,
    )


if __name__ == "__main__":
    cli()

#!/usr/bin/env python3
"""
Run simwire - simulate raw wire digits from a YAML job file.

The job file holds the simwire options plus geometry, clocks and detector
sections. Charge comes from an .npz file with one (n, 3) array per event
(`event0`, `event1`, ...): channel, tdc, charge.

Usage:
    python scripts/run_simwire.py path/to/job.yaml charges.npz -o digits.npz

    # Also write the INIT diagnostics histograms and plots
    python scripts/run_simwire.py job.yaml charges.npz -o digits.npz --diagnostics diag.npz --plot diag.png

    # Override the seed from the command line
    python scripts/run_simwire.py job.yaml charges.npz -o digits.npz --seed 1234
"""

import argparse
from dataclasses import replace
from pathlib import Path

from wiresim.core.dataIO import load_config, job_from_config, load_deposit_events, save_raw_digits, save_diagnostics
from wiresim.workflows.initialization import initialize
from wiresim.workflows.assembly import charges_from_deposits
from wiresim.pipelines.simwire import process_events


def main():
    parser = argparse.ArgumentParser(
        description='Simulate raw wire digits',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('config', type=Path, help='Path to YAML job file')
    parser.add_argument('charges', type=Path, help='Path to .npz charge deposits')
    parser.add_argument('-o', '--output', type=Path, required=True,
                        help='Output .npz file for raw digits')
    parser.add_argument('--diagnostics', type=Path, default=None,
                        help='Write INIT histograms to this .npz file')
    parser.add_argument('--plot', type=Path, default=None,
                        help='Save a plot of the INIT histograms')
    parser.add_argument('--seed', type=int, default=None,
                        help='Override the configured random seed')
    parser.add_argument('--print-every', type=int, default=10,
                        help='Progress line every N events')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress progress output')
    args = parser.parse_args()

    simwire, geometry, clocks, detprop = job_from_config(load_config(args.config))
    if args.seed is not None:
        simwire = replace(simwire, seed=args.seed)

    verbose = not args.quiet
    context = initialize(simwire, geometry, clocks, detprop, verbose=verbose)

    if args.diagnostics is not None:
        save_diagnostics(args.diagnostics, context.diagnostics)
    if args.plot is not None:
        from wiresim.plotting import plot_diagnostics
        plot_diagnostics(context, save_path=args.plot)

    label = simwire.drift_e_module_label
    events = ({label: charges_from_deposits(map(tuple, deposits), n_ticks=context.n_ticks)}
              for deposits in load_deposit_events(args.charges))
    digits = list(process_events(context, events, print_every=args.print_every, verbose=verbose))

    save_raw_digits(args.output, digits)
    if verbose:
        print(f"✓ Wrote {len(digits)} event(s) to {args.output}")


if __name__ == '__main__':
    main()
